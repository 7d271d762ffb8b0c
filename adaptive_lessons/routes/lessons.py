import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field

from adaptive_lessons.db.performance_store import PerformanceStore, get_performance_store
from adaptive_lessons.exceptions import LessonGenerationError
from adaptive_lessons.models.lesson import CamelModel, GeneratedLesson, Level, Skill
from adaptive_lessons.models.performance import UserPerformance
from adaptive_lessons.services.lesson_generator import generate_lesson
from adaptive_lessons.services.performance_analyzer import compute_performance, next_lesson_index
from adaptive_lessons.services.sequence_pipeline import SequencePolicy, generate_lessons, load_next_lessons

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["lessons"])

MAX_BATCH = 10


class GenerateLessonRequest(CamelModel):
    skill: Skill
    level: Level
    lesson_number: int = Field(default=1, ge=1)
    use_history: bool = True


class LessonSequenceRequest(CamelModel):
    skill: Skill
    level: Level
    start_index: int = Field(default=1, ge=1)
    count: int = Field(default=3, ge=1, le=MAX_BATCH)
    mode: SequencePolicy = SequencePolicy.BEST_EFFORT
    use_history: bool = True


class NextLessonsRequest(CamelModel):
    skill: Skill
    level: Level
    completed_ids: list[str] = Field(default_factory=list)
    count: int = Field(default=3, ge=1, le=MAX_BATCH)


class NextIndexResponse(CamelModel):
    next_index: int


async def _performance_for(store: PerformanceStore, skill: Skill, use_history: bool) -> UserPerformance | None:
    if not use_history:
        return None
    return compute_performance(await store.get_results(), skill.value)


@router.post("/lessons/generate", response_model=GeneratedLesson)
async def generate_single_lesson(
    body: GenerateLessonRequest,
    store: PerformanceStore = Depends(get_performance_store),
):
    performance = await _performance_for(store, body.skill, body.use_history)
    try:
        return await generate_lesson(body.skill, body.level, body.lesson_number, performance)
    except LessonGenerationError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/lessons/sequence", response_model=list[GeneratedLesson])
async def generate_lesson_sequence(
    body: LessonSequenceRequest,
    store: PerformanceStore = Depends(get_performance_store),
):
    performance = await _performance_for(store, body.skill, body.use_history)
    try:
        return await generate_lessons(
            body.skill, body.level, body.start_index, body.count, performance, policy=body.mode,
        )
    except LessonGenerationError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/lessons/next", response_model=list[GeneratedLesson])
async def generate_next_lessons(
    body: NextLessonsRequest,
    store: PerformanceStore = Depends(get_performance_store),
):
    try:
        return await load_next_lessons(store, body.completed_ids, body.skill, body.level, body.count)
    except LessonGenerationError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get("/lessons/next-index", response_model=NextIndexResponse)
async def get_next_lesson_index(
    skill: Skill,
    level: Level,
    completed: list[str] = Query(default=[]),
):
    # accepts ?completed=a&completed=b as well as ?completed=a,b
    completed_ids = [lesson_id for item in completed for lesson_id in item.split(",") if lesson_id]
    return NextIndexResponse(next_index=next_lesson_index(completed_ids, skill, level))
