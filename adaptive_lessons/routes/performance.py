from fastapi import APIRouter, Depends

from adaptive_lessons.db.performance_store import PerformanceStore, get_performance_store
from adaptive_lessons.models.lesson import CamelModel, Skill
from adaptive_lessons.models.performance import LessonResult, UserPerformance
from adaptive_lessons.services.difficulty_engine import DifficultyAdjustment, get_difficulty_adjustment
from adaptive_lessons.services.performance_analyzer import compute_performance

router = APIRouter(prefix="/api", tags=["performance"])


class PerformanceReport(CamelModel):
    performance: UserPerformance
    difficulty: DifficultyAdjustment
    instruction: str


class StoredResultResponse(CamelModel):
    stored_results: int


@router.get("/performance", response_model=PerformanceReport)
async def get_performance(
    skill: Skill | None = None,
    store: PerformanceStore = Depends(get_performance_store),
):
    results = await store.get_results()
    performance = compute_performance(results, skill.value if skill else None)
    adjustment = get_difficulty_adjustment(performance)
    return PerformanceReport(
        performance=performance,
        difficulty=adjustment,
        instruction=adjustment.instruction,
    )


@router.post("/performance/results", response_model=StoredResultResponse, status_code=201)
async def submit_result(
    result: LessonResult,
    store: PerformanceStore = Depends(get_performance_store),
):
    stored = await store.append_result(result)
    return StoredResultResponse(stored_results=stored)
