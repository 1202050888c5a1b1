from rakish.testing import _rakish_api_fixture, _rakish_app_fixture  # noqa: F401
