import os
from pathlib import Path

from greetings import write_greeting

from rakish.api import desc, sh, task

desc("Write hello.txt (set NAME=... to change who is greeted)")
@task("greeting")
def greeting(ctx):
    write_greeting(ctx, Path("hello.txt"), os.environ.get("NAME", "World"))


desc("Print the greeting")
@task("default", ["greeting"])
def default(ctx):
    sh("cat", "hello.txt")


desc("Remove generated files")
@task("clean")
def clean(ctx):
    sh("rm", "-f", "hello.txt")
