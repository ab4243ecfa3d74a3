"""
Tests for the deduplicator: signatures, None-safety and the bounded
generate_unique loop.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import itertools
import logging

from numberpath.models.task import Task, TaskSignature
from numberpath.services.task_dedup import generate_unique, signatures_identical, task_signature


def _task(n1=7, n2=5, op="+", position="end") -> Task:
    return Task(operation=op, number1=n1, number2=n2, correct_answer=0, placeholder_position=position)


class TestSignatures:
    def test_signature_fields(self):
        sig = task_signature(_task(position="start"))
        assert sig == TaskSignature(number1=7, number2=5, operation="+", placeholder_position="start")

    def test_placeholder_position_matters(self):
        assert not signatures_identical(task_signature(_task()), task_signature(_task(position="middle")))

    def test_identical(self):
        assert signatures_identical(task_signature(_task()), task_signature(_task()))

    def test_none_is_never_identical(self):
        sig = task_signature(_task())
        assert signatures_identical(None, sig) is False
        assert signatures_identical(sig, None) is False
        assert signatures_identical(None, None) is False

    def test_dict_signature(self):
        raw = {"operation": "+", "number1": 7, "number2": 5}
        assert task_signature(raw) == task_signature(_task())


class TestGenerateUnique:
    def test_returns_first_distinct(self):
        seq = itertools.cycle([_task(), _task(), _task(n1=8), _task(n1=9)])
        out = generate_unique(lambda: next(seq), task_signature(_task()))
        assert out.number1 == 8

    def test_exhausted_budget_returns_repeat(self, caplog):
        calls = []

        def only_one_task():
            calls.append(1)
            return _task()

        previous = task_signature(_task())
        with caplog.at_level(logging.WARNING):
            out = generate_unique(only_one_task, previous, max_attempts=50)
        assert task_signature(out) == previous
        assert len(calls) == 50
        assert "no distinct task after 50 attempts" in caplog.text

    def test_small_budget(self):
        calls = []

        def only_one_task():
            calls.append(1)
            return _task()

        generate_unique(only_one_task, task_signature(_task()), max_attempts=1)
        assert len(calls) == 1

    def test_no_previous_accepts_first(self):
        calls = []

        def gen():
            calls.append(1)
            return _task(n1=3)

        out = generate_unique(gen, None)
        assert out.number1 == 3
        assert len(calls) == 1
