import logging
import os
import re
import textwrap
from pathlib import Path

import pytest

from rakish.core.application import Application
from rakish.core.exceptions import RakefileNotFound
from rakish.testing import write_rakefile

RAKEFILE = """
import os
from pathlib import Path

from rakish.api import desc, task

desc("Write the output file")
@task("default", ["prepare"])
def default(ctx):
    Path("output.txt").write_text(os.environ.get("GREETING", "hello"))

@task("prepare")
def prepare(ctx):
    Path("prepared.txt").write_text("")

@task("fail")
def fail(ctx):
    raise RuntimeError("the task failed")
"""


def test__Application__good_run(rakish_app: Application) -> None:
    ran = []
    rakish_app.intern("default").enhance(action=lambda ctx: ran.append(ctx))
    rakish_app.run(["-f", "-s"])
    assert ran == [rakish_app.context]


def test__Application__runs_rakefile(rakish_app: Application, tmp_path: Path) -> None:
    write_rakefile(tmp_path, RAKEFILE)
    rakish_app.run(["-s"])
    assert (tmp_path / "output.txt").read_text() == "hello"
    assert (tmp_path / "prepared.txt").exists()


def test__Application__environment_assignment_is_visible_to_actions(
    rakish_app: Application, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("GREETING", raising=False)
    write_rakefile(tmp_path, RAKEFILE)
    rakish_app.run(["-s", "GREETING=hi there"])
    assert (tmp_path / "output.txt").read_text() == "hi there"
    assert rakish_app.top_level_tasks == ["default"]


def test__Application__load_rakefile(rakish_app: Application, tmp_path: Path) -> None:
    write_rakefile(tmp_path, RAKEFILE, name="rakefile")
    rakish_app.handle_options(["-s"])
    rakish_app.load_rakefile()
    assert rakish_app.rakefile == "rakefile"
    assert Path.cwd() == tmp_path
    assert rakish_app.lookup("default") is not None


def test__Application__load_rakefile_from_subdir(
    rakish_app: Application, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    write_rakefile(tmp_path, RAKEFILE)
    subdir = tmp_path / "subdir"
    subdir.mkdir()
    monkeypatch.chdir(subdir)

    rakish_app.load_rakefile()

    assert rakish_app.rakefile == "Rakefile.py"
    assert Path.cwd() == tmp_path
    assert capsys.readouterr().out == f"(in {tmp_path})\n"


def test__Application__load_rakefile_not_found(rakish_app: Application) -> None:
    rakish_app.handle_options(["-s", "-f", "NEVER_FOUND"])
    with pytest.raises(RakefileNotFound) as excinfo:
        rakish_app.load_rakefile()
    assert re.search("no rakefile found", str(excinfo.value), re.I)
    assert rakish_app.rakefile is None


def test__Application__not_caring_about_finding_rakefile(rakish_app: Application, tmp_path: Path) -> None:
    rakish_app.handle_options(["-f"])
    rakish_app.load_rakefile()
    assert rakish_app.rakefile == ""
    assert Path.cwd() == tmp_path


def test__Application__display_tasks(rakish_app: Application, capsys: pytest.CaptureFixture[str]) -> None:
    rakish_app.options.show_task_pattern = re.compile("")
    rakish_app.set_pending_comment("COMMENT")
    rakish_app.define_task("t")
    rakish_app.define_task("undocumented")
    rakish_app.display_tasks_and_comments()

    out = capsys.readouterr().out
    assert re.search(r"^rakish t\s+# COMMENT$", out, re.M)
    assert re.search(r"^rakish undocumented$", out, re.M)


def test__Application__display_task_run(rakish_app: Application, capsys: pytest.CaptureFixture[str]) -> None:
    ran = []
    rakish_app.set_pending_comment("COMMENT")
    rakish_app.define_task("default", action=lambda ctx: ran.append(True))
    rakish_app.run(["-f", "-s", "--tasks"])

    out = capsys.readouterr().out
    assert rakish_app.options.show_tasks
    assert not ran
    assert re.search(r"rakish default", out)
    assert re.search(r"# COMMENT", out)


def test__Application__display_tasks_with_pattern(rakish_app: Application, capsys: pytest.CaptureFixture[str]) -> None:
    rakish_app.define_task("compile")
    rakish_app.define_task("clean")
    rakish_app.run(["-f", "-s", "-T", "^comp"])
    assert capsys.readouterr().out == "rakish compile\n"


def test__Application__display_prereqs(rakish_app: Application, capsys: pytest.CaptureFixture[str]) -> None:
    ran = []
    rakish_app.set_pending_comment("COMMENT")
    task = rakish_app.define_task("default", action=lambda ctx: ran.append(True))
    task.enhance(["a", "b"])
    rakish_app.define_task("a")
    rakish_app.define_task("b")
    rakish_app.run(["-f", "-s", "--prereqs"])

    out = capsys.readouterr().out
    assert rakish_app.options.show_prereqs
    assert not ran
    assert re.search(r"rakish default\n( *(a|b)\n){2}", out)
    assert out == "rakish default\n    a\n    b\n"


def test__Application__display_prereqs_of_requested_tasks(
    rakish_app: Application, capsys: pytest.CaptureFixture[str]
) -> None:
    rakish_app.define_task("a", ["b"])
    rakish_app.define_task("b", ["a"])
    rakish_app.run(["-f", "-s", "-P", "a", "b"])
    assert capsys.readouterr().out == "rakish a\n    b\n        a\nrakish b\n    a\n        b\n"


def test__Application__bad_run(rakish_app: Application, capsys: pytest.CaptureFixture[str]) -> None:
    def fail(ctx: object) -> None:
        raise RuntimeError("something went wrong")

    rakish_app.intern("default").enhance(action=fail)
    with pytest.raises(SystemExit) as excinfo:
        rakish_app.run(["-f", "-s"])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "rakish aborted!" in err
    assert "something went wrong" in err
    assert "See full trace" in err
    assert "Traceback" not in err


def test__Application__bad_run_with_trace(rakish_app: Application, capsys: pytest.CaptureFixture[str]) -> None:
    def fail(ctx: object) -> None:
        raise RuntimeError("something went wrong")

    rakish_app.intern("default").enhance(action=fail)
    with pytest.raises(SystemExit) as excinfo:
        rakish_app.run(["-f", "-s", "-t"])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "See full trace" not in err
    assert "Traceback" in err
    assert "RuntimeError: something went wrong" in err


def test__Application__bad_run_points_into_rakefile(
    rakish_app: Application, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    write_rakefile(tmp_path, RAKEFILE)
    with pytest.raises(SystemExit) as excinfo:
        rakish_app.run(["-s", "fail"])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "the task failed" in err
    line = RAKEFILE.splitlines().index('    raise RuntimeError("the task failed")') + 1
    assert f"{tmp_path / 'Rakefile.py'}:{line}" in err


def test__Application__run_with_bad_options(rakish_app: Application, capsys: pytest.CaptureFixture[str]) -> None:
    ran = []
    rakish_app.intern("default").enhance(action=lambda ctx: ran.append(True))
    with pytest.raises(SystemExit) as excinfo:
        rakish_app.run(["-f", "-s", "--xyzzy"])

    assert excinfo.value.code == 1
    assert "--xyzzy" in capsys.readouterr().err
    assert not ran


def test__Application__run_without_rakefile(rakish_app: Application, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        rakish_app.run(["-N"])
    assert excinfo.value.code == 1
    assert "No Rakefile found (looking for: rakefile, Rakefile, rakefile.py, Rakefile.py)" in capsys.readouterr().err


def test__Application__run_unknown_task(rakish_app: Application, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        rakish_app.run(["-f", "-s", "nope"])
    assert excinfo.value.code == 1
    assert "Don't know how to build task 'nope'" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [["--help"], ["--usage"], ["--version"]])
def test__Application__informational_options_exit_successfully(
    rakish_app: Application, argv: list, capsys: pytest.CaptureFixture[str]
) -> None:
    ran = []
    rakish_app.intern("default").enhance(action=lambda ctx: ran.append(True))
    with pytest.raises(SystemExit) as excinfo:
        rakish_app.run(argv)
    assert excinfo.value.code == 0
    assert "rakish" in capsys.readouterr().out
    assert not ran


def test__Application__dry_run_does_not_execute(
    rakish_app: Application, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    write_rakefile(tmp_path, RAKEFILE)
    rakish_app.run(["-s", "--dry-run"])
    assert not (tmp_path / "output.txt").exists()
    err = capsys.readouterr().err
    assert "** Execute (dry run) prepare" in err
    assert "** Execute (dry run) default" in err


def test__Application__rakelib_files_are_imported(rakish_app: Application, tmp_path: Path) -> None:
    write_rakefile(tmp_path, "from rakish.api import task\ntask('default', ['extra'])\n")
    write_rakefile(
        tmp_path / "rakelib",
        "from pathlib import Path\nfrom rakish.api import task\n"
        "@task('extra')\ndef extra(ctx):\n    Path('extra.txt').write_text('')\n",
        name="extra.py",
    )
    write_rakefile(tmp_path / "rakelib", "ignored", name="notes.txt")

    rakish_app.run(["-s"])

    assert (tmp_path / "extra.txt").exists()


def test__Application__custom_rakelib_dirs(rakish_app: Application, tmp_path: Path) -> None:
    write_rakefile(tmp_path, "")
    write_rakefile(tmp_path / "one", "from rakish.api import task\ntask('one')\n", name="one.py")
    write_rakefile(tmp_path / "two", "from rakish.api import task\ntask('two')\n", name="two.py")
    write_rakefile(tmp_path / "rakelib", "from rakish.api import task\ntask('default_lib')\n", name="lib.py")

    rakish_app.handle_options(["-s", "-R", "one:two"])
    rakish_app.load_rakefile()

    assert [task.name for task in rakish_app.tasks] == ["one", "two"]


def test__Application__imported_file_is_generated_before_it_is_loaded(rakish_app: Application, tmp_path: Path) -> None:
    rakefile = textwrap.dedent(
        """
        from pathlib import Path
        from rakish.api import imports, task

        @task("generated.py")
        def generate(ctx):
            Path("generated.py").write_text("from rakish.api import task\\ntask('from_generated')\\n")

        imports("generated.py")
        """
    )
    write_rakefile(tmp_path, rakefile)

    rakish_app.handle_options(["-s"])
    rakish_app.load_rakefile()

    assert rakish_app.lookup("from_generated") is not None


def test__Application__classic_namespace_globals(rakish_app: Application, tmp_path: Path) -> None:
    rakefile = textwrap.dedent(
        """
        from rakish.api import task

        task("default", action=lambda ctx: ctx.classic_globals.update(seen=(trace, silent, dryrun)))
        """
    )
    write_rakefile(tmp_path, rakefile)

    rakish_app.run(["-C", "-s", "-t"])

    assert rakish_app.context.classic_globals["seen"] == (True, True, None)


def test__Application__rakefile_can_import_modules_beside_it(rakish_app: Application, tmp_path: Path) -> None:
    write_rakefile(tmp_path, "NAME = 'helper_task'\n", name="rakish_test_helpers.py")
    write_rakefile(tmp_path, "from rakish.api import task\nfrom rakish_test_helpers import NAME\ntask(NAME)\n")

    rakish_app.handle_options(["-s"])
    rakish_app.load_rakefile()

    assert rakish_app.lookup("helper_task") is not None


def test__Application__warns_about_dependency_cycles(
    rakish_app: Application, caplog: pytest.LogCaptureFixture
) -> None:
    ran = []
    rakish_app.define_task("default", ["other"], lambda ctx: ran.append("default"))
    rakish_app.define_task("other", ["default"], lambda ctx: ran.append("other"))

    with caplog.at_level(logging.WARNING, logger="rakish"):
        rakish_app.run(["-f", "-s"])

    assert ran == ["other", "default"]
    assert "dependency cycle" in caplog.text


def test__Application__instances_are_isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    first, second = Application(), Application()
    first.handle_options(["-n"])
    first.define_task("default")

    assert second.lookup("default") is None
    assert not second.context.nowrite
    assert not second.context.verbose
    assert os.getcwd() == str(tmp_path)


def test__Application__cycle_warning_names_a_limited_number_of_groups(
    rakish_app: Application, caplog: pytest.LogCaptureFixture
) -> None:
    pairs = [(f"left{i}", f"right{i}") for i in range(7)]
    rakish_app.define_task("default", [left for left, _right in pairs])
    for left, right in pairs:
        rakish_app.define_task(left, [right])
        rakish_app.define_task(right, [left])
    rakish_app.define_task("unrelated", ["unrelated"])

    with caplog.at_level(logging.WARNING, logger="rakish"):
        rakish_app.run(["-f", "-s"])

    assert "found 7 groups of tasks with dependency cycles" in caplog.text
    assert "and 2 more" in caplog.text
    assert "unrelated" not in caplog.text
    assert all(rakish_app.lookup(name).invoked for pair in pairs for name in pair)  # type: ignore[union-attr]


def test__Application__dense_cycles_do_not_stall_the_run(
    rakish_app: Application, caplog: pytest.LogCaptureFixture
) -> None:
    names = [f"t{i}" for i in range(16)]
    for name in names:
        rakish_app.define_task(name, [other for other in names if other != name])

    with caplog.at_level(logging.WARNING, logger="rakish"):
        rakish_app.run(["-f", "-s", "t0"])

    assert "found 1 group of tasks with dependency cycles" in caplog.text
    assert len(caplog.records) == 1
    assert all(task.invoked for task in rakish_app.tasks)


def test__Application__trace_log_level_is_restored_after_run(rakish_app: Application) -> None:
    rakish_logger = logging.getLogger("rakish")
    rakish_logger.setLevel(logging.INFO)
    rakish_app.define_task("default")

    rakish_app.run(["-f", "-s", "-t"])

    assert rakish_logger.level == logging.INFO


def test__Application__run_existing_file_as_task(
    rakish_app: Application, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "input.txt").write_text("data")
    rakish_app.run(["-f", "-s", "input.txt"])
    assert "aborted" not in capsys.readouterr().err
