from pathlib import Path

from rakish.core.context import ExecutionContext


def write_greeting(ctx: ExecutionContext, path: Path, name: str) -> None:
    if ctx.verbose:
        ctx.narrate(f"writing {path}")
    if not ctx.nowrite:
        path.write_text(f"Hello, {name}!\n")
