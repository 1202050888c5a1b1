"""Run a build with `python -m rakish.core`."""

from rakish.core.cli.main import main

if __name__ == "__main__":
    main()
