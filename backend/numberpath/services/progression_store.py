from __future__ import annotations

import copy
import time
from typing import Optional

from numberpath.core.config import get_settings
from numberpath.models.progression import LearningProgression


class ProgressionStore:
    def get(self, learner_id: str) -> Optional[LearningProgression]:
        raise NotImplementedError

    def upsert(self, learner_id: str, progression: LearningProgression) -> LearningProgression:
        raise NotImplementedError

    def reset(self, learner_id: str) -> None:
        raise NotImplementedError

    def get_or_create(self, learner_id: str) -> LearningProgression:
        return self.get(learner_id) or LearningProgression()


class InMemoryProgressionStore(ProgressionStore):
    def __init__(self):
        self._data: dict[str, LearningProgression] = {}
        self._updated_at: dict[str, float] = {}

    def get(self, learner_id: str) -> Optional[LearningProgression]:
        found = self._data.get(learner_id)
        return copy.deepcopy(found) if found is not None else None

    def upsert(self, learner_id: str, progression: LearningProgression) -> LearningProgression:
        self._data[learner_id] = copy.deepcopy(progression)
        self._updated_at[learner_id] = time.time()
        return progression

    def reset(self, learner_id: str) -> None:
        self._data.pop(learner_id, None)
        self._updated_at.pop(learner_id, None)

    def updated_at(self, learner_id: str) -> Optional[float]:
        return self._updated_at.get(learner_id)


_STORE: Optional[ProgressionStore] = None


def get_progression_store() -> ProgressionStore:
    global _STORE
    if _STORE is None:
        backend = get_settings().progression_store
        if backend != "memory":
            raise ValueError(f"Unsupported progression store: {backend!r}")
        _STORE = InMemoryProgressionStore()
    return _STORE
