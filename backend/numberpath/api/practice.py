"""Practice API: session batches, answer submission and progress."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional

from numberpath.api.models_practice import (
    AttemptRequest,
    AttemptResponse,
    ClassifyRequest,
    CompetencyOut,
    ProgressResponse,
    ResetResponse,
    SessionRequest,
    SessionResponse,
)
from numberpath.core.deps import get_store
from numberpath.models.errors import ErrorAnalysis
from numberpath.models.progression import apply_update
from numberpath.services.competency_scheduler import calculate_overall_level, level_difficulty_params
from numberpath.services.error_classifier import classify_error
from numberpath.services.progress_tracker import competency_summary, record_result
from numberpath.services.progression_store import ProgressionStore
from numberpath.services.representation_progression import (
    apply_decision,
    evaluate,
    solo_mastery_summary,
    update_mastery,
)
from numberpath.services.session_builder import get_session_builder, resolve_session_level
from numberpath.services.telemetry import emit_event, emit_level_change, instrument
from numberpath.skills.catalog import COMPETENCY_CATALOG
from numberpath.skills.registry import SKILL_REGISTRY
from numberpath.utils.answer_computer import check_student_answer, hidden_value

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/practice", tags=["practice"])


@router.get("/competencies", response_model=list[CompetencyOut])
@instrument(route="/api/practice/competencies", version="v1")
def list_competencies():
    return [c.to_dict() for c in COMPETENCY_CATALOG]


@router.post("/classify", response_model=Optional[ErrorAnalysis])
@instrument(route="/api/practice/classify", version="v1")
def classify(req: ClassifyRequest):
    if req.operation == "-" and req.number2 > req.number1:
        raise HTTPException(status_code=400, detail="Subtraction would go below zero")
    return classify_error(
        req.operation, req.number1, req.number2,
        req.correct_answer, req.student_answer, req.placeholder_position,
    )


@router.post("/{learner_id}/session", response_model=SessionResponse)
@instrument(route="/api/practice/session", version="v1")
def create_session(learner_id: str, req: SessionRequest, store: ProgressionStore = Depends(get_store)):
    progression = store.get_or_create(learner_id)
    level = resolve_session_level(progression, req.current_level)
    tasks = get_session_builder().generate_session_batch(
        progression,
        count=req.count,
        current_level=level,
        previous_signature=req.previous_task,
    )
    number_range = level_difficulty_params(level).number_range
    emit_event("session", route="/api/practice/session", version="v1",
               learner_id=learner_id, level=level, number_range=number_range,
               count=len(tasks), ok=True)
    return {
        "learner_id": learner_id,
        "level": level,
        "number_range": number_range,
        "tasks": tasks,
    }


@router.post("/{learner_id}/attempts", response_model=AttemptResponse)
@instrument(route="/api/practice/attempts", version="v1")
def submit_attempt(learner_id: str, req: AttemptRequest, store: ProgressionStore = Depends(get_store)):
    task = req.task
    if task.operation == "-" and task.number2 > task.number1:
        raise HTTPException(status_code=400, detail="Subtraction would go below zero")

    expected = hidden_value(task.operation, task.number1, task.number2, task.placeholder_position)
    if task.correct_answer != expected:
        logger.warning(
            "[practice.submit_attempt] client sent correct_answer=%s for %s %s %s, using %s",
            task.correct_answer, task.number1, task.operation, task.number2, expected,
        )
        task = task.model_copy(update={"correct_answer": expected})

    is_correct = check_student_answer(
        task.operation, task.number1, task.number2, req.student_answer, task.placeholder_position,
    )
    analysis = None
    if not is_correct:
        analysis = classify_error(
            task.operation, task.number1, task.number2,
            expected, req.student_answer, task.placeholder_position,
        )

    progression = store.get_or_create(learner_id)
    previous_performance = list(progression.recent_performance)
    previous_level = progression.current_level
    update = record_result(progression, task, req.student_answer, is_correct)
    progression = apply_update(progression, update)

    active = list(req.active_channels or progression.representation.active)
    rep_state = update_mastery(progression.representation, active, is_correct)
    decision = evaluate(rep_state, previous_performance, is_correct, active)
    progression = progression.model_copy(update={"representation": apply_decision(rep_state, decision)})
    store.upsert(learner_id, progression)
    emit_level_change(learner_id, previous_level, progression.current_level,
                      route="/api/practice/attempts", version="v1")

    contract = SKILL_REGISTRY.get(task.competency_id or "")
    explanation = contract.explain(task) if contract is not None else None

    emit_event(
        "attempt",
        route="/api/practice/attempts",
        version="v1",
        learner_id=learner_id,
        competency_id=task.competency_id,
        error_type=analysis.error_type if analysis else None,
        level=progression.current_level,
        ok=is_correct,
    )

    return {
        "is_correct": is_correct,
        "expected": expected,
        "task_string": update.task_string,
        "competencies": update.competencies,
        "error_analysis": analysis,
        "explanation": explanation,
        "representation": decision,
        "current_streak": progression.current_streak,
        "total_tasks_solved": progression.total_tasks_solved,
    }


@router.get("/{learner_id}/progress", response_model=ProgressResponse)
@instrument(route="/api/practice/progress", version="v1")
def get_progress(learner_id: str, store: ProgressionStore = Depends(get_store)):
    progression = store.get(learner_id)
    if progression is None:
        raise HTTPException(status_code=404, detail="Learner has no recorded progress")
    return {
        "learner_id": learner_id,
        "overall_level": calculate_overall_level(progression),
        "current_level": progression.current_level,
        "total_tasks_solved": progression.total_tasks_solved,
        "total_correct": progression.total_correct,
        "summary": competency_summary(progression),
        "representation": solo_mastery_summary(progression.representation),
    }


@router.delete("/{learner_id}", response_model=ResetResponse)
@instrument(route="/api/practice/reset", version="v1")
def reset_progress(learner_id: str, store: ProgressionStore = Depends(get_store)):
    store.reset(learner_id)
    return {"ok": True}
