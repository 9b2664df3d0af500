"""REST API routes for learner progression."""

from datetime import datetime

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from lecture_quest.config import get_settings
from lecture_quest.models.context import SessionContext
from lecture_quest.progression.calculator import use_power_up, xp_progress
from lecture_quest.progression.engine import (
    QuizSubmission,
    generate_daily_plan,
    record_confidence,
    record_quiz,
    reset_learner,
    sync_achievements,
)
from lecture_quest.progression.ranker import rank_due
from lecture_quest.storage.learner_state import (
    load_state,
    locked_state,
    reset_state,
    validate_user_id,
)
from lecture_quest.storage.review_log import (
    append_review_events,
    clear_review_events,
    read_review_events,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/api")


class QuizRequest(QuizSubmission):
    context: SessionContext | None = None


class ConfidenceRequest(BaseModel):
    lecture_id: str
    rating: int = Field(ge=1, le=5)
    context: SessionContext | None = None


def check_user_id(user_id: str) -> str:
    try:
        return validate_user_id(user_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid user ID format")


def _session(context: SessionContext | None) -> SessionContext:
    return context or SessionContext.at(datetime.now())


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/learners/{user_id}/profile")
async def get_profile(user_id: str) -> dict:
    """Return the learner's XP, level, streak and power-ups."""
    user_id = check_user_id(user_id)
    state = load_state(get_settings().data_dir, user_id)
    profile = state.profile.model_dump(mode="json", exclude={"achievements"})
    return {"user_id": user_id, **profile, "progress": xp_progress(state.profile.total_xp)}


@router.post("/learners/{user_id}/reset")
async def reset_profile(user_id: str) -> dict:
    """Delete every trace of the learner's progress."""
    user_id = check_user_id(user_id)
    settings = get_settings()
    reset_state(settings.data_dir, user_id)
    clear_review_events(settings.data_dir, user_id)
    state = reset_learner(user_id)
    return {"user_id": user_id, "profile": state.profile.model_dump(mode="json")}


@router.get("/learners/{user_id}/achievements")
async def list_achievements(user_id: str) -> dict:
    user_id = check_user_id(user_id)
    state = load_state(get_settings().data_dir, user_id)
    achievements = sync_achievements(state.profile).achievements
    return {
        "unlocked": sum(1 for a in achievements if a.unlocked),
        "total": len(achievements),
        "achievements": [a.model_dump(mode="json") for a in achievements],
    }


@router.get("/learners/{user_id}/daily-quiz/status")
async def daily_quiz_status(user_id: str) -> dict:
    """Report the open daily plan (if any) and how many topics are due."""
    user_id = check_user_id(user_id)
    settings = get_settings()
    state = load_state(settings.data_dir, user_id)
    plan = state.active_plan
    due = rank_due(state.ledger, datetime.now().date(), settings.daily_quiz_limit)
    return {
        "has_active_plan": plan is not None,
        "plan": plan.model_dump(mode="json") if plan else None,
        "due_count": len(due),
    }


@router.post("/learners/{user_id}/daily-quiz")
async def create_daily_quiz(user_id: str) -> dict:
    """Return the open daily plan or generate a new one."""
    user_id = check_user_id(user_id)
    settings = get_settings()
    try:
        with locked_state(settings.data_dir, user_id) as handle:
            handle.state, plan = generate_daily_plan(
                handle.state, datetime.now().date(), settings.daily_quiz_limit
            )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return plan.model_dump(mode="json")


@router.post("/learners/{user_id}/quizzes")
async def submit_quiz(user_id: str, request: QuizRequest) -> dict:
    """Record a lecture quiz or daily quiz and return the rewards."""
    user_id = check_user_id(user_id)
    settings = get_settings()
    submission = QuizSubmission(**request.model_dump(exclude={"context"}))
    try:
        with locked_state(settings.data_dir, user_id) as handle:
            outcome = record_quiz(handle.state, submission, _session(request.context))
            handle.state = outcome.state
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    append_review_events(settings.data_dir, user_id, outcome.review_events)

    profile = outcome.state.profile
    return {
        "xp_earned": outcome.xp_earned,
        "quiz_xp": outcome.quiz_xp,
        "achievement_xp": outcome.achievement_xp,
        "total_xp": profile.total_xp,
        "level": profile.level,
        "level_ups": outcome.level_ups,
        "rewards": outcome.rewards,
        "current_streak": profile.current_streak,
        "newly_unlocked": [a.model_dump(mode="json") for a in outcome.newly_unlocked],
    }


@router.post("/learners/{user_id}/confidence")
async def submit_confidence(user_id: str, request: ConfidenceRequest) -> dict:
    user_id = check_user_id(user_id)
    settings = get_settings()
    try:
        with locked_state(settings.data_dir, user_id) as handle:
            outcome = record_confidence(
                handle.state, request.lecture_id, request.rating, _session(request.context)
            )
            handle.state = outcome.state
    except KeyError:
        raise HTTPException(status_code=404, detail="Lecture not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "xp_earned": outcome.award.amount,
        "total_xp": outcome.state.profile.total_xp,
        "average_confidence": outcome.state.profile.average_confidence,
        "newly_unlocked": [a.model_dump(mode="json") for a in outcome.newly_unlocked],
    }


@router.get("/learners/{user_id}/reviews")
async def list_reviews(user_id: str, topic: str | None = None) -> dict:
    """Return the learner's logged topic reviews."""
    user_id = check_user_id(user_id)
    events = read_review_events(get_settings().data_dir, user_id, topic)
    return {"events": [event.model_dump(mode="json") for event in events]}


@router.post("/learners/{user_id}/power-ups/{kind}/use")
async def spend_power_up(user_id: str, kind: str) -> dict:
    """Spend one hint or second-chance charge."""
    user_id = check_user_id(user_id)
    try:
        with locked_state(get_settings().data_dir, user_id) as handle:
            profile = use_power_up(handle.state.profile, kind)
            handle.state = handle.state.model_copy(update={"profile": profile})
        logger.info("power_up_used", user_id=user_id, kind=kind)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return handle.state.profile.power_ups.model_dump()
