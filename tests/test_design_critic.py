"""
Tests for the DesignCritic orchestrator with injected fake collaborators.
"""

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analysis import (
    DesignCritic,
    InvalidInput,
    LearningLevel,
    ModelUnavailable,
    PersistenceError,
    RecommendationPriority
)
from storage import InMemoryHistoryStore
from conftest import FailingBackend, StaticBackend, GOOD_METRICS, WEAK_METRICS


@pytest.fixture
def image():
    return np.zeros((64, 64, 3), dtype=np.uint8)


@pytest.fixture
def store():
    return InMemoryHistoryStore()


class TestAnalyze:
    """Tests for a single critique."""

    def test_good_design(self, good_backend, image):
        results = DesignCritic(good_backend).analyze(image)

        assert results.categories['composition'].score == pytest.approx(0.8)
        assert results.categories['color'].score == pytest.approx(0.8)
        assert results.categories['technique'].score == pytest.approx(0.8)
        assert results.overall.score == pytest.approx(0.8)
        assert results.level == LearningLevel.ADVANCED
        assert results.recommendations == []
        assert good_backend.calls == 1

    def test_weak_design(self, weak_backend, image):
        results = DesignCritic(weak_backend).analyze(image)

        assert results.level == LearningLevel.BEGINNER
        assert [r.area for r in results.recommendations] == ['composition', 'color', 'technique']
        assert results.recommendations[0].priority == RecommendationPriority.HIGH
        assert results.overall.improvements

    def test_to_dict(self, good_backend, image):
        payload = DesignCritic(good_backend).analyze(image).to_dict()

        assert set(payload) >= {'composition', 'color', 'technique', 'overall', 'level', 'recommendations'}
        assert payload['level'] == 'advanced'

    def test_progress_entry_is_stored(self, good_backend, store, image):
        critic = DesignCritic(good_backend, store)

        results = critic.analyze(image, user_id='learner-1', resource_id='poster-1')
        history = store.read('learner-1')

        assert len(history) == 1
        assert history[0].resource_id == 'poster-1'
        assert history[0].overall_score == results.overall.score
        assert store.read('someone-else') == []

    def test_no_entry_without_user(self, good_backend, store, image):
        DesignCritic(good_backend, store).analyze(image)

        assert store.read('learner-1') == []


class TestFailures:
    """Errors propagate as typed exceptions and never produce default scores."""

    def test_backend_failure(self, store, image):
        critic = DesignCritic(FailingBackend(), store)

        with pytest.raises(ModelUnavailable) as excinfo:
            critic.analyze(image, user_id='learner-1')

        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert store.read('learner-1') == []

    def test_missing_category(self, image):
        backend = StaticBackend({'composition': GOOD_METRICS['composition'], 'color': GOOD_METRICS['color']})

        with pytest.raises(ModelUnavailable) as excinfo:
            DesignCritic(backend).analyze(image)

        assert excinfo.value.errors == ['technique']

    def test_empty_result(self, image):
        with pytest.raises(ModelUnavailable):
            DesignCritic(StaticBackend({})).analyze(image)

    def test_out_of_range_metrics(self, image):
        metrics = dict(GOOD_METRICS, color={'harmony': 1.7})

        with pytest.raises(InvalidInput):
            DesignCritic(StaticBackend(metrics)).analyze(image)

    def test_metrics_without_store(self, good_backend):
        with pytest.raises(PersistenceError):
            DesignCritic(good_backend).learning_metrics('learner-1')


class TestLearningMetrics:

    def test_metrics_from_stored_history(self, store, image):
        DesignCritic(StaticBackend(WEAK_METRICS), store).analyze(image, 'learner-1', 'sketch-1')
        DesignCritic(StaticBackend(GOOD_METRICS), store).analyze(image, 'learner-1', 'sketch-2')

        metrics = DesignCritic(StaticBackend(GOOD_METRICS), store).learning_metrics('learner-1')

        assert metrics.total_resources == 2
        assert metrics.completed_resources == 2
        assert len(metrics.learning_trend) == 2
        assert metrics.learning_trend[-1].score == pytest.approx(0.8)
        assert 0.0 < metrics.average_score < 0.8


if __name__ == '__main__':
    pytest.main([__file__])
