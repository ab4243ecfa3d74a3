"""
Tests for the progression store seam and the telemetry helpers.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import json
import logging

import pytest
from unittest.mock import MagicMock, patch

from numberpath.models.progression import LearningProgression
from numberpath.services import progression_store
from numberpath.services.progression_store import InMemoryProgressionStore, get_progression_store
from numberpath.services.telemetry import emit_event, emit_level_change, instrument


class TestInMemoryStore:
    def test_get_missing(self):
        assert InMemoryProgressionStore().get("nobody") is None

    def test_get_or_create_does_not_persist(self):
        store = InMemoryProgressionStore()
        assert store.get_or_create("ana").total_tasks_solved == 0
        assert store.get("ana") is None

    def test_upsert_copies(self):
        store = InMemoryProgressionStore()
        lp = LearningProgression(total_tasks_solved=3)
        store.upsert("ana", lp)
        lp.total_tasks_solved = 99
        assert store.get("ana").total_tasks_solved == 3
        assert store.updated_at("ana") is not None

    def test_reset(self):
        store = InMemoryProgressionStore()
        store.upsert("ana", LearningProgression())
        store.reset("ana")
        store.reset("ana")
        assert store.get("ana") is None
        assert store.updated_at("ana") is None


class TestStoreFactory:
    def test_memory_singleton(self, monkeypatch):
        monkeypatch.setattr(progression_store, "_STORE", None)
        assert get_progression_store() is get_progression_store()

    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setattr(progression_store, "_STORE", None)
        settings = MagicMock(progression_store="postgres")
        with patch("numberpath.services.progression_store.get_settings", return_value=settings):
            with pytest.raises(ValueError):
                get_progression_store()


class TestTelemetry:
    def test_emit_event_single_line_json(self, caplog):
        with caplog.at_level(logging.INFO, logger="numberpath.telemetry"):
            emit_event("attempt", route="/x", version="v1", learner_id="ana", ok=False,
                       error_type="doubling_error")
        line = caplog.records[-1].getMessage()
        payload = json.loads(line.split("telemetry=", 1)[1])
        assert payload["event"] == "attempt"
        assert payload["learner_id"] == "ana"
        assert payload["error_type"] == "doubling_error"

    def test_instrument_records_failure(self):
        @instrument(route="/boom", version="v1")
        def boom(learner_id=None):
            raise RuntimeError("nope")

        with patch("numberpath.services.telemetry.emit_event") as mock_emit:
            with pytest.raises(RuntimeError):
                boom(learner_id="ana")
        _, kwargs = mock_emit.call_args
        assert kwargs["ok"] is False
        assert kwargs["error_type"] == "RuntimeError"
        assert kwargs["learner_id"] == "ana"

    def test_instrument_async(self):
        @instrument(route="/ok", version="v1")
        async def ok():
            return 42

        with patch("numberpath.services.telemetry.emit_event") as mock_emit:
            assert asyncio.run(ok()) == 42
        assert mock_emit.call_args.kwargs["ok"] is True

    def test_session_fields(self, caplog):
        with caplog.at_level(logging.INFO, logger="numberpath.telemetry"):
            emit_event("session", route="/s", version="v1", learner_id="ana", level=12.0, number_range=20, count=10)
        payload = json.loads(caplog.records[-1].getMessage().split("telemetry=", 1)[1])
        assert (payload["level"], payload["number_range"], payload["count"]) == (12.0, 20, 10)

    def test_level_change_only_when_moved(self):
        with patch("numberpath.services.telemetry.emit_event") as mock_emit:
            emit_level_change("ana", None, 1, route="/a", version="v1")
            emit_level_change("ana", 4, 4, route="/a", version="v1")
            assert not mock_emit.called
            emit_level_change("ana", 4, 5, route="/a", version="v1")
        args, kwargs = mock_emit.call_args
        assert args == ("level_change",)
        assert kwargs["level"] == 5 and kwargs["count"] == 1
