from __future__ import annotations

from typing import Callable, Optional, TypeVar

T = TypeVar("T")


def first_valid(
    build: Callable[[], Optional[T]],
    accept: Callable[[T], bool],
    attempts: int,
    fallback: Optional[Callable[[], T]] = None,
) -> Optional[T]:
    """
    Call ``build`` up to ``attempts`` times and return the first candidate
    ``accept`` likes. When the budget is spent return ``fallback()`` (or None).
    """
    for _ in range(max(0, attempts)):
        candidate = build()
        if candidate is not None and accept(candidate):
            return candidate
    return fallback() if fallback is not None else None
