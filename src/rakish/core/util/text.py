from __future__ import annotations

from typing import Iterable, Sized


def pluralize(word: str, count: int | Sized) -> str:
    if not isinstance(count, int):
        count = len(count)
    return word if count == 1 else f"{word}s"


def format_cycle(names: Iterable[str]) -> str:
    return " -> ".join(names)
