from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from numberpath.models.task import Task, TaskSignature

logger = logging.getLogger(__name__)


def task_signature(task: Union[Task, dict]) -> TaskSignature:
    if isinstance(task, Task):
        return TaskSignature(
            number1=task.number1,
            number2=task.number2,
            operation=task.operation,
            placeholder_position=task.placeholder_position,
        )
    return TaskSignature(
        number1=task["number1"],
        number2=task["number2"],
        operation=task["operation"],
        placeholder_position=task.get("placeholder_position") or "end",
    )


def signatures_identical(a: Optional[TaskSignature], b: Optional[TaskSignature]) -> bool:
    if a is None or b is None:
        return False
    return a == b


def generate_unique(
    gen_fn: Callable[[], Task],
    previous: Optional[TaskSignature],
    max_attempts: int = 50,
) -> Task:
    """
    Draw from ``gen_fn`` until the candidate differs from ``previous``.
    After ``max_attempts`` draws the last candidate is returned anyway.
    """
    candidate = gen_fn()
    for _ in range(max(0, max_attempts - 1)):
        if not signatures_identical(task_signature(candidate), previous):
            return candidate
        candidate = gen_fn()

    if signatures_identical(task_signature(candidate), previous):
        logger.warning(
            "[task_dedup.generate_unique] no distinct task after %d attempts, repeating %s",
            max_attempts, previous,
        )
    return candidate
