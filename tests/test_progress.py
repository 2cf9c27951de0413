"""
Unit tests for progress and trend tracking.
"""

import os
import sys
import itertools
from datetime import datetime, timedelta

import pytest

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analysis import (
    ProgressEntry,
    ProgressTracker,
    RecommendationPriority,
    compute_metrics,
    aggregate,
    score_category
)
from analysis.progress_tracker import dominant_category


def make_entry(day, resource_id, overall=None, composition=None, color=None, technique=None,
               status='completed', feedback=None, typography=None):
    scores = None
    if composition is not None:
        scores = {'composition': composition, 'color': color, 'technique': technique}

    return ProgressEntry(
        timestamp=datetime(2024, 1, 1) + timedelta(days=day),
        resource_id=resource_id,
        completion_status=status,
        overall_score=overall,
        category_scores=scores,
        typography=typography,
        feedback=feedback
    )


@pytest.fixture
def history():
    return [
        make_entry(0, 'r1', overall=0.5, composition=0.6, color=0.4, technique=0.5),
        make_entry(2, 'r2', overall=0.7, composition=0.5, color=0.9, technique=0.7),
        make_entry(1, 'r3', status='in_progress')
    ]


class TestComputeMetrics:
    """Tests for learning metric computation."""

    def test_empty_history(self):
        metrics = compute_metrics([])

        assert metrics.completed_resources == 0
        assert metrics.total_resources == 0
        assert metrics.average_score == 0.0
        assert metrics.learning_trend == []
        assert metrics.strongest_areas == []
        assert metrics.areas_for_improvement == []
        assert metrics.recommendations == []

    def test_counts(self, history):
        metrics = compute_metrics(history)

        assert metrics.total_resources == 3
        assert metrics.completed_resources == 2

    def test_counts_are_per_resource(self):
        history = [
            make_entry(0, 'r1', overall=0.5, composition=0.5, color=0.5, technique=0.5),
            make_entry(1, 'r1', feedback={'rating': 4})
        ]

        metrics = compute_metrics(history)

        assert metrics.total_resources == 1
        assert metrics.completed_resources == 1

    def test_average_excludes_entries_without_results(self, history):
        metrics = compute_metrics(history)

        assert metrics.average_score == pytest.approx(0.6)

    def test_strongest_and_weakest_areas(self, history):
        # Means: composition 0.55, color 0.65, technique 0.6
        metrics = compute_metrics(history)

        assert metrics.strongest_areas == ['color', 'technique', 'composition']
        assert metrics.areas_for_improvement == ['composition', 'technique', 'color']

    def test_area_ties_keep_category_order(self):
        history = [make_entry(0, 'r1', overall=0.5, composition=0.5, color=0.5, technique=0.5)]

        metrics = compute_metrics(history)

        assert metrics.strongest_areas == ['composition', 'color', 'technique']
        assert metrics.areas_for_improvement == ['composition', 'color', 'technique']

    def test_learning_trend_sorted_by_timestamp(self, history):
        metrics = compute_metrics(history)

        assert [point.score for point in metrics.learning_trend] == [0.5, 0.7]
        assert [point.category for point in metrics.learning_trend] == ['composition', 'color']
        assert metrics.learning_trend[0].date < metrics.learning_trend[1].date

    def test_invariant_under_reordering(self, history):
        expected = compute_metrics(history).to_dict()

        for permutation in itertools.permutations(history):
            assert compute_metrics(list(permutation)).to_dict() == expected

    def test_reordering_with_shared_timestamp_and_resource(self):
        history = [
            make_entry(0, 'r', overall=0.9, composition=0.9, color=0.9, technique=0.9),
            make_entry(0, 'r', overall=0.2, composition=0.2, color=0.2, technique=0.2),
            make_entry(0, 'r', feedback={'rating': 4}),
            make_entry(0, 'r', feedback={'rating': 2})
        ]
        expected = compute_metrics(history).to_dict()

        assert [point['score'] for point in expected['learning_trend']] == [0.2, 0.9]

        for permutation in itertools.permutations(history):
            assert compute_metrics(list(permutation)).to_dict() == expected

    def test_skill_levels(self, history):
        skills = compute_metrics(history).skill_levels

        assert skills['Visual Hierarchy'] == pytest.approx(0.575)
        assert skills['Color Harmony'] == pytest.approx(0.65)
        assert skills['Composition'] == pytest.approx(0.58)
        assert skills['Illustration Techniques'] == pytest.approx(0.6)
        assert skills['Typography'] == 0.0

    def test_typography_only_counts_entries_that_have_it(self):
        history = [
            make_entry(0, 'r1', overall=0.5, composition=0.5, color=0.5, technique=0.5, typography=0.8),
            make_entry(1, 'r2', overall=0.5, composition=0.5, color=0.5, technique=0.5)
        ]

        assert compute_metrics(history).skill_levels['Typography'] == pytest.approx(0.8)

    def test_recommendations(self, history):
        metrics = compute_metrics(history)
        recommendations = metrics.recommendations

        high = [r for r in recommendations if r.priority == RecommendationPriority.HIGH]
        medium = [r for r in recommendations if r.priority == RecommendationPriority.MEDIUM]

        assert [r.area for r in high] == metrics.areas_for_improvement
        assert {r.area for r in medium} == {
            'Visual Hierarchy', 'Color Harmony', 'Composition', 'Illustration Techniques'
        }
        # High-priority area recommendations come first
        assert recommendations[:3] == high

    def test_recent_feedback_newest_first(self):
        history = [
            make_entry(day, f'r{day}', feedback={'rating': day % 5 + 1})
            for day in range(7)
        ]

        recent = compute_metrics(history).recent_feedback

        assert len(recent) == 5
        assert [item['resource_id'] for item in recent] == ['r6', 'r5', 'r4', 'r3', 'r2']

    def test_tracker_does_not_mutate_history(self, history):
        snapshot = list(history)
        ProgressTracker().compute_metrics(history)

        assert history == snapshot


class TestDominantCategory:

    def test_argmax(self):
        assert dominant_category({'composition': 0.2, 'color': 0.3, 'technique': 0.9}) == 'technique'

    def test_ties_prefer_declaration_order(self):
        assert dominant_category({'composition': 0.5, 'color': 0.5, 'technique': 0.5}) == 'composition'
        assert dominant_category({'composition': 0.3, 'color': 0.8, 'technique': 0.8}) == 'color'


class TestProgressEntry:

    def test_from_results(self):
        categories = {
            'composition': score_category('composition', {'balance': 0.6}),
            'color': score_category('color', {'harmony': 0.4}),
            'technique': score_category('technique', {'precision': 0.8})
        }
        overall = aggregate(categories['composition'], categories['color'], categories['technique'])

        entry = ProgressEntry.from_results('poster-1', categories, overall, timestamp=datetime(2024, 5, 1))

        assert entry.has_results
        assert entry.overall_score == overall.score
        assert entry.category_scores == {'composition': 0.6, 'color': 0.4, 'technique': 0.8}
        assert entry.typography is None

    def test_entry_without_results(self):
        entry = make_entry(0, 'r1')

        assert not entry.has_results
        assert entry.to_dict()['category_scores'] is None


if __name__ == '__main__':
    pytest.main([__file__])
