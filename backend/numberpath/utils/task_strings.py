"""Canonical string form of a task, used as the per-task mastery key.

    end      "7+5"
    start    "_+5=12"
    middle   "7+_=12"

The result shown in placeholder forms is always the displayed result of the
equation, never the hidden value.
"""
from __future__ import annotations

import re
from typing import Optional

from numberpath.models.task import Task
from numberpath.utils.answer_computer import compute, hidden_value

_END_RE = re.compile(r"^\s*(\d+)\s*([+\-−])\s*(\d+)\s*(?:=\s*[_?]?\s*)?$")
_START_RE = re.compile(r"^\s*[_?]\s*([+\-−])\s*(\d+)\s*=\s*(\d+)\s*$")
_MIDDLE_RE = re.compile(r"^\s*(\d+)\s*([+\-−])\s*[_?]\s*=\s*(\d+)\s*$")


def task_string(task: Task) -> str:
    op = task.operation
    result = compute(op, task.number1, task.number2)
    if task.placeholder_position == "start":
        return f"_{op}{task.number2}={result}"
    if task.placeholder_position == "middle":
        return f"{task.number1}{op}_={result}"
    return f"{task.number1}{op}{task.number2}"


def _norm_op(op: str) -> str:
    return "-" if op in ("-", "−") else "+"


def parse_task_string(s: str) -> Optional[dict]:
    """
    Inverse of ``task_string``. Returns operand fields with the hidden value
    in ``correct_answer``, or None when the string is not a task.
    """
    if not s:
        return None

    m = _START_RE.match(s)
    if m:
        op, n2, result = _norm_op(m.group(1)), int(m.group(2)), int(m.group(3))
        n1 = result - n2 if op == "+" else result + n2
        position = "start"
    else:
        m = _MIDDLE_RE.match(s)
        if m:
            n1, op, result = int(m.group(1)), _norm_op(m.group(2)), int(m.group(3))
            n2 = result - n1 if op == "+" else n1 - result
            position = "middle"
        else:
            m = _END_RE.match(s)
            if not m:
                return None
            n1, op, n2 = int(m.group(1)), _norm_op(m.group(2)), int(m.group(3))
            position = "end"

    return {
        "operation": op,
        "number1": n1,
        "number2": n2,
        "placeholder_position": position,
        "correct_answer": hidden_value(op, n1, n2, position),
    }
