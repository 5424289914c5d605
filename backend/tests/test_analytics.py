"""Tests for roadmap analytics."""
import pytest

from roadmapper.engine.analytics import build_timeline, recompute, summarize_roadmaps
from roadmapper.schemas.roadmap import (
    AllocationStrategy,
    BusinessJustification,
    RoadmapAnalytics,
    RoadmapDocument,
    RoadmapItem,
    Timeframe,
)


def _item(status="proposed", risk="medium", impact=None, quarter=None, title="Item") -> RoadmapItem:
    return RoadmapItem(
        title=title,
        status=status,
        timeframe=Timeframe(quarter=quarter),
        business_justification=BusinessJustification(risk_level=risk, customer_impact=impact),
    )


class TestRecompute:
    def test_empty_roadmap(self):
        assert recompute([]) == RoadmapAnalytics(
            total_items=0,
            completion_rate=0,
            risk_score=5,
            customer_satisfaction_potential=5,
        )

    def test_formulas(self):
        items = [
            _item(status="completed", risk="low", impact=None),
            _item(risk="medium", impact=9),
            _item(risk="high", impact=7),
            _item(risk="high", impact=10),
        ]
        analytics = recompute(items)
        assert analytics.total_items == 4
        assert analytics.completion_rate == 25.0
        # (2 + 5 + 8 + 8) / 4 = 5.75
        assert analytics.risk_score == 6
        # (5 + 9 + 7 + 10) / 4 = 7.75
        assert analytics.customer_satisfaction_potential == 8

    def test_half_rounds_up(self):
        analytics = recompute([_item(risk="low"), _item(risk="medium")])
        assert analytics.risk_score == 4

    def test_completion_rate_not_rounded(self):
        analytics = recompute([_item(status="completed"), _item(), _item()])
        assert analytics.completion_rate == pytest.approx(100 / 3)
        assert analytics.completion_rate != 33.33

    def test_idempotent(self):
        items = [_item(status="completed", risk="high", impact=3), _item(impact=6.5)]
        assert recompute(items) == recompute(items)
        assert recompute(items).model_dump() == recompute(list(items)).model_dump()


class TestTimeline:
    def test_groups_by_quarter_in_first_seen_order(self):
        roadmap = RoadmapDocument(
            project_id="p1",
            name="Plan",
            items=[
                _item(quarter="Q3 2026", status="completed", title="a"),
                _item(quarter="Q2 2026", status="in-progress", title="b"),
                _item(quarter="Q3 2026", title="c"),
                _item(title="d"),
            ],
        )
        timeline = build_timeline(roadmap)
        assert list(timeline) == ["Q3 2026", "Q2 2026"]
        assert "d" not in [e.title for period in timeline.values() for e in period.items]
        q3 = timeline["Q3 2026"]
        assert [e.title for e in q3.items] == ["a", "c"]
        assert q3.summary.total_items == 2
        assert q3.summary.completed_items == 1
        assert q3.summary.proposed_items == 1
        assert timeline["Q2 2026"].summary.in_progress_items == 1


class TestSummarizeRoadmaps:
    def test_no_roadmaps(self):
        summary = summarize_roadmaps([])
        assert summary.total_roadmaps == 0
        assert summary.allocation_trends.strategic == 0

    def test_averages(self):
        first = RoadmapDocument(
            project_id="p1",
            name="A",
            type="balanced",
            allocation_strategy=AllocationStrategy(strategic=60, customer_driven=30, maintenance=10),
            analytics=RoadmapAnalytics(total_items=2, completion_rate=50, risk_score=4, customer_satisfaction_potential=6),
        )
        second = RoadmapDocument(
            project_id="p1",
            name="B",
            type="customer-only",
            time_horizon="year",
            allocation_strategy=AllocationStrategy(strategic=20, customer_driven=70, maintenance=10),
            analytics=RoadmapAnalytics(total_items=1, completion_rate=0, risk_score=5, customer_satisfaction_potential=9),
        )
        summary = summarize_roadmaps([first, second])
        assert summary.total_roadmaps == 2
        assert summary.by_type == {"balanced": 1, "customer-only": 1}
        assert summary.by_time_horizon == {"quarter": 1, "year": 1}
        assert summary.average_completion_rate == 25
        assert summary.average_risk_score == 4.5
        assert summary.average_customer_satisfaction_potential == 7.5
        assert summary.allocation_trends.strategic == 40
        assert summary.allocation_trends.customer_driven == 50
