from pathlib import Path

from rakish.api import desc, imports, task

# The task named after an imported file is invoked before the file is loaded.
@task("generated.py")
def generate(ctx):
    Path("generated.py").write_text(
        "from rakish.api import desc, task\n"
        "desc('Defined by a generated build script')\n"
        "task('generated', action=lambda ctx: print('generated task ran'))\n"
    )


imports("generated.py")

desc("Run the generated task and build the docs")
task("default", ["generated", "docs"])
