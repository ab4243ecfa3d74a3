from numberpath.services.progression_store import ProgressionStore, get_progression_store


def get_store() -> ProgressionStore:
    """FastAPI dependency; tests swap it through ``app.dependency_overrides``."""
    return get_progression_store()
