from rakish.api import desc, task

desc("Build the documentation (loaded from rakelib/)")
@task("docs")
def docs(ctx):
    print("building docs")
