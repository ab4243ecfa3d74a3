from pydantic import model_validator
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_name: str = "NumberPath"
    debug: bool = False

    # CORS
    frontend_url: str = "http://localhost:5173"

    # Session assembly
    session_size: int = 10
    error_repetition_ratio: float = 0.3
    generation_max_attempts: int = 50
    batch_attempt_factor: int = 10
    slate_size: int = 10
    unique_max_attempts: int = 50

    # Competency priority scores (only the relative order is meaningful)
    score_error_base: int = 1000
    score_error_per_item: int = 50
    score_in_progress_base: int = 500
    score_new_base: int = 300
    score_mastered_base: int = 50
    score_placeholder_boost: int = 50

    # Mastery thresholds
    task_mastery_threshold: int = 3
    task_wrong_penalty: int = 2
    recent_errors_cap: int = 10
    competency_mastered_tasks: int = 5
    competency_mastered_correct: int = 10
    competency_mastered_rate: float = 0.8

    # Session level advancement (levels 1-100, one step at a time)
    level_up_streak: int = 5
    level_up_rate: float = 0.8
    level_down_errors: int = 3
    level_step: int = 1

    # Persistence backing the HTTP layer
    progression_store: str = "memory"

    @model_validator(mode="after")
    def _check_score_order(self):
        if not (
            self.score_error_base
            > self.score_in_progress_base
            > self.score_new_base
            > self.score_mastered_base
        ):
            raise ValueError(
                "priority scores must keep error > in_progress > new > mastered"
            )
        return self

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "NUMBERPATH_"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
