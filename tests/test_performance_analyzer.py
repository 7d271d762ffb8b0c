"""Tests for the performance analytics over the lesson-result log."""

from datetime import timedelta

import pytest

from adaptive_lessons.models.performance import QuestionResult, Trend
from adaptive_lessons.services.performance_analyzer import (
    classify_trend,
    compute_performance,
    next_lesson_index,
)
from tests.factories import BASE_TIME, make_result


class TestEmptyLog:
    def test_empty_log_returns_zero_summary(self):
        performance = compute_performance([])

        assert performance.completed_lessons == 0
        assert performance.average_score == 0
        assert performance.weak_areas == []
        assert performance.strong_areas == []
        assert performance.recent_scores == []
        assert performance.skill_performance == {}

    def test_skill_filter_with_no_matches_returns_zero_summary(self):
        results = [make_result(80, skill="grammar")]

        performance = compute_performance(results, "listening")

        assert performance.completed_lessons == 0
        assert performance.average_score == 0
        assert performance.recent_scores == []
        assert performance.skill_performance == {}


class TestScores:
    def test_average_and_recent_scores(self):
        results = [make_result(s, 50, index=i) for i, s in enumerate([25, 50, 40])]

        performance = compute_performance(results)

        assert performance.completed_lessons == 3
        assert performance.recent_scores == [50.0, 100.0, 80.0]
        assert performance.average_score == pytest.approx(230 / 3)

    def test_recent_scores_keep_last_ten_in_log_order(self):
        results = [make_result(i * 5, index=i) for i in range(15)]

        performance = compute_performance(results)

        assert performance.recent_scores == [float(i * 5) for i in range(5, 15)]
        assert performance.completed_lessons == 15

    def test_skill_filter_restricts_averages(self):
        results = [
            make_result(90, skill="reading", index=0),
            make_result(30, skill="grammar", index=1),
            make_result(70, skill="reading", index=2),
        ]

        performance = compute_performance(results, "reading")

        assert performance.completed_lessons == 2
        assert performance.average_score == pytest.approx(80)
        assert performance.recent_scores == [90.0, 70.0]

    def test_average_stays_within_bounds(self):
        results = [make_result(s, index=i) for i, s in enumerate([0, 100, 100, 0, 55.5])]

        performance = compute_performance(results)

        assert 0 <= performance.average_score <= 100


class TestAreas:
    def test_weak_areas_ascending_truncated_to_three(self):
        questions = [
            ("articles", False), ("articles", True),              # 50
            ("tenses", False), ("tenses", False),                 # 0
            ("prepositions", True), ("prepositions", False),
            ("prepositions", False),                              # 33.3
            ("phrasal verbs", True), ("phrasal verbs", True),
            ("phrasal verbs", False),                             # 66.7
            ("spelling", True),                                   # 100
        ]
        results = [make_result(50, questions=questions)]

        performance = compute_performance(results)

        assert performance.weak_areas == ["tenses", "prepositions", "articles"]
        assert performance.strong_areas == ["spelling"]

    def test_strong_areas_descending_truncated_to_three(self):
        questions = (
            [("a", True)] * 9 + [("a", False)]           # 90
            + [("b", True)] * 2                          # 100
            + [("c", True)] * 17 + [("c", False)] * 3    # 85
            + [("d", True)] * 19 + [("d", False)]        # 95
        )
        results = [make_result(90, questions=questions)]

        performance = compute_performance(results)

        assert performance.strong_areas == ["b", "d", "a"]
        assert performance.weak_areas == []

    def test_thresholds_are_exclusive_and_inclusive(self):
        questions = (
            [("seventy", True)] * 7 + [("seventy", False)] * 3              # exactly 70
            + [("eighty-five", True)] * 17 + [("eighty-five", False)] * 3   # exactly 85
        )
        performance = compute_performance([make_result(80, questions=questions)])

        assert "seventy" not in performance.weak_areas
        assert "seventy" not in performance.strong_areas
        assert performance.strong_areas == ["eighty-five"]

    def test_single_observation_is_eligible(self):
        performance = compute_performance([make_result(0, questions=[("idioms", False)])])

        assert performance.weak_areas == ["idioms"]

    def test_topic_falls_back_to_question_type(self):
        result = make_result(50).model_copy(update={
            "question_results": [
                QuestionResult(question_id="q1", type="fill-blank", correct=False, score=0, max_score=10),
                QuestionResult(question_id="q2", type="fill-blank", correct=False, score=0, max_score=10),
            ]
        })

        performance = compute_performance([result])

        assert performance.weak_areas == ["fill-blank"]

    def test_weak_and_strong_never_overlap(self):
        questions = [(f"t{i}", i % 3 != 0) for i in range(12)] + [("t1", False), ("t2", True)]
        results = [make_result(60, questions=questions, index=i) for i in range(3)]

        performance = compute_performance(results)

        assert not set(performance.weak_areas) & set(performance.strong_areas)


class TestSkillBreakdown:
    def test_breakdown_ignores_skill_filter(self):
        results = [
            make_result(80, skill="reading", index=0, questions=[("main idea", True)]),
            make_result(40, skill="grammar", index=1, questions=[("articles", False)]),
            make_result(60, skill="reading", index=2, questions=[("main idea", False)]),
        ]

        performance = compute_performance(results, "grammar")

        assert set(performance.skill_performance) == {"reading", "grammar"}
        reading = performance.skill_performance["reading"]
        assert reading.completed_lessons == 2
        assert reading.average_score == pytest.approx(70)
        assert reading.last_lesson_date == BASE_TIME + timedelta(days=2)
        assert reading.topic_scores == {"main idea": [100.0, 0.0]}

    def test_last_lesson_date_is_max_not_last(self):
        results = [
            make_result(80, skill="writing", index=5),
            make_result(80, skill="writing", index=1),
        ]

        performance = compute_performance(results)

        assert performance.skill_performance["writing"].last_lesson_date == BASE_TIME + timedelta(days=5)

    def test_unknown_skill_tags_are_not_broken_down(self):
        results = [make_result(80, skill="pronunciation")]

        performance = compute_performance(results)

        assert performance.completed_lessons == 1
        assert performance.skill_performance == {}


class TestTrend:
    @pytest.mark.parametrize(
        "scores, expected",
        [
            ([50, 50, 50, 90, 90, 90], Trend.IMPROVING),
            ([90, 90, 90, 50, 50, 50], Trend.DECLINING),
            ([70, 71, 69, 70, 70, 71], Trend.STABLE),
            ([40, 90], Trend.STABLE),
            ([], Trend.STABLE),
            ([10, 20, 30], Trend.STABLE),
            ([10, 90, 90, 90], Trend.IMPROVING),
            ([60, 60, 60, 70, 70, 70], Trend.STABLE),
        ],
    )
    def test_classify_trend(self, scores, expected):
        assert classify_trend(scores) is expected

    def test_only_last_six_scores_matter(self):
        scores = [0, 0, 0, 0, 80, 80, 80, 80, 80, 80]
        assert classify_trend(scores) is Trend.STABLE

    def test_performance_exposes_trend(self):
        results = [make_result(s, index=i) for i, s in enumerate([50, 50, 50, 90, 90, 90])]

        assert compute_performance(results).trend is Trend.IMPROVING


class TestNextLessonIndex:
    def test_counts_matching_series(self):
        completed = ["reading-beginner-1", "reading-beginner-2", "listening-beginner-1"]

        assert next_lesson_index(completed, "reading", "beginner") == 3

    def test_empty_history_starts_at_one(self):
        assert next_lesson_index([], "grammar", "advanced") == 1

    def test_timestamped_ids_still_count(self):
        completed = ["grammar-advanced-1-1767225600000", "grammar-intermediate-1"]

        assert next_lesson_index(completed, "grammar", "advanced") == 2
