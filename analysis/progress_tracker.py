#!/usr/bin/env python3
"""
Progress and Trend Tracking

Computes longitudinal learning metrics from a user's full history of
progress entries. Every call recomputes everything from scratch; callers
should treat the result as replacing any earlier metrics.

"""

import json
import math
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config import CATEGORIES
from .recommendation_engine import Recommendation, RecommendationEngine
from .scoring_algorithms import CategoryResult, OverallResult

logger = logging.getLogger(__name__)

COMPLETION_STATUSES = ('not_started', 'in_progress', 'completed')

MAX_RANKED_AREAS = 3
MAX_RECENT_FEEDBACK = 5


@dataclass(frozen=True)
class ProgressEntry:
    """
    One stored analysis outcome for a user.

    Entries without ``overall_score`` or ``category_scores`` carry no results
    and are left out of every score statistic.
    """

    timestamp: datetime
    resource_id: str
    completion_status: str = 'completed'
    overall_score: Optional[float] = None
    category_scores: Optional[Mapping[str, float]] = None
    typography: Optional[float] = None
    feedback: Optional[Dict[str, Any]] = None

    @property
    def has_results(self) -> bool:
        return self.overall_score is not None and self.category_scores is not None

    @classmethod
    def from_results(cls, resource_id: str,
                     categories: Mapping[str, CategoryResult],
                     overall: OverallResult,
                     timestamp: Optional[datetime] = None,
                     completion_status: str = 'completed') -> 'ProgressEntry':
        """Build an entry from the results of a single analysis."""

        composition = categories['composition']

        return cls(
            timestamp=timestamp or datetime.now(),
            resource_id=resource_id,
            completion_status=completion_status,
            overall_score=overall.score,
            category_scores={c: categories[c].score for c in CATEGORIES},
            typography=composition.metrics.get('typography')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'resource_id': self.resource_id,
            'completion_status': self.completion_status,
            'overall_score': self.overall_score,
            'category_scores': dict(self.category_scores) if self.category_scores is not None else None,
            'typography': self.typography,
            'feedback': self.feedback
        }


@dataclass(frozen=True)
class TrendPoint:
    """Overall score of one entry together with its dominant category."""

    date: datetime
    score: float
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date.isoformat(), 'score': self.score, 'category': self.category}


@dataclass
class LearningMetrics:
    """Learning metrics derived from a complete progress history."""

    completed_resources: int = 0
    total_resources: int = 0
    average_score: float = 0.0
    strongest_areas: List[str] = field(default_factory=list)
    areas_for_improvement: List[str] = field(default_factory=list)
    learning_trend: List[TrendPoint] = field(default_factory=list)
    recent_feedback: List[Dict[str, Any]] = field(default_factory=list)
    skill_levels: Dict[str, float] = field(default_factory=dict)
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary format."""

        return {
            'completed_resources': self.completed_resources,
            'total_resources': self.total_resources,
            'average_score': self.average_score,
            'strongest_areas': list(self.strongest_areas),
            'areas_for_improvement': list(self.areas_for_improvement),
            'learning_trend': [point.to_dict() for point in self.learning_trend],
            'recent_feedback': list(self.recent_feedback),
            'skill_levels': dict(self.skill_levels),
            'recommendations': [r.to_dict() for r in self.recommendations]
        }


class ProgressTracker:
    """
    Learning metrics calculator.

    Stateless apart from the recommendation engine it uses for the
    ``recommendations`` field.
    """

    def __init__(self, recommendation_engine: Optional[RecommendationEngine] = None):
        self.recommendation_engine = recommendation_engine or RecommendationEngine()

    def compute_metrics(self, history: Iterable[ProgressEntry]) -> LearningMetrics:
        """
        Compute learning metrics from a user's full history.

        Args:
            history: Progress entries in any order

        Returns:
            LearningMetrics; an empty history yields zero counts and an empty
            trend
        """

        entries = list(history)
        scored = [entry for entry in entries if entry.has_results]

        # Several entries may refer to the same resource; counts are per resource
        resources = {entry.resource_id for entry in entries}
        completed = {entry.resource_id for entry in entries if entry.completion_status == 'completed'}

        average_score = _mean([entry.overall_score for entry in scored])

        if scored:
            category_scores = self._calculate_category_scores(scored)
            strongest = _rank(category_scores, descending=True)
            weakest = _rank(category_scores, descending=False)
        else:
            strongest, weakest = [], []

        skill_levels = self._calculate_skill_levels(scored)

        metrics = LearningMetrics(
            completed_resources=len(completed),
            total_resources=len(resources),
            average_score=average_score,
            strongest_areas=strongest,
            areas_for_improvement=weakest,
            learning_trend=self._calculate_learning_trend(scored),
            recent_feedback=self._get_recent_feedback(entries),
            skill_levels=skill_levels
        )

        metrics.recommendations = self.recommendation_engine.recommend_from_metrics(
            metrics.areas_for_improvement, metrics.skill_levels
        )

        logger.debug(f"Computed metrics over {len(entries)} entries ({len(scored)} with results)")

        return metrics

    def _calculate_category_scores(self, scored: List[ProgressEntry]) -> Dict[str, float]:
        return {
            category: _mean([entry.category_scores[category] for entry in scored])
            for category in CATEGORIES
        }

    def _calculate_skill_levels(self, scored: List[ProgressEntry]) -> Dict[str, float]:
        """Average each derived skill over the entries that have results."""

        skills = {
            'Visual Hierarchy': [],
            'Color Harmony': [],
            'Composition': [],
            'Illustration Techniques': [],
            'Typography': []
        }

        for entry in scored:
            scores = entry.category_scores

            skills['Visual Hierarchy'].append((scores['composition'] + scores['technique']) / 2)
            skills['Color Harmony'].append(scores['color'])
            skills['Composition'].append(scores['composition'] * 0.7 + scores['color'] * 0.3)
            skills['Illustration Techniques'].append(scores['technique'])

            if entry.typography is not None:
                skills['Typography'].append(entry.typography)

        return {skill: _mean(values) for skill, values in skills.items()}

    def _calculate_learning_trend(self, scored: List[ProgressEntry]) -> List[TrendPoint]:
        ordered = sorted(scored, key=_trend_key)

        return [
            TrendPoint(
                date=entry.timestamp,
                score=entry.overall_score,
                category=dominant_category(entry.category_scores)
            )
            for entry in ordered
        ]

    def _get_recent_feedback(self, entries: List[ProgressEntry]) -> List[Dict[str, Any]]:
        with_feedback = [entry for entry in entries if entry.feedback]
        with_feedback.sort(key=_feedback_key, reverse=True)

        return [
            {
                'resource_id': entry.resource_id,
                'feedback': entry.feedback,
                'date': entry.timestamp.isoformat()
            }
            for entry in with_feedback[:MAX_RECENT_FEEDBACK]
        ]


def dominant_category(category_scores: Mapping[str, float]) -> str:
    """Return the highest-scoring category; ties go to the earlier category."""

    best = CATEGORIES[0]
    for category in CATEGORIES[1:]:
        if category_scores[category] > category_scores[best]:
            best = category
    return best


def _trend_key(entry: ProgressEntry):
    # Scores break ties between entries sharing a timestamp and resource
    return (
        entry.timestamp,
        entry.resource_id,
        entry.overall_score,
        tuple(entry.category_scores[c] for c in CATEGORIES)
    )


def _feedback_key(entry: ProgressEntry):
    return (
        entry.timestamp,
        entry.resource_id,
        json.dumps(entry.feedback, sort_keys=True, default=str)
    )


def _rank(scores: Dict[str, float], descending: bool) -> List[str]:
    # sorted() is stable, so equal scores keep category declaration order
    ordered = sorted(scores, key=lambda c: -scores[c] if descending else scores[c])
    return ordered[:MAX_RANKED_AREAS]


def _mean(values: List[float]) -> float:
    # fsum keeps the mean independent of input order
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def compute_metrics(history: Iterable[ProgressEntry]) -> LearningMetrics:
    """Compute learning metrics with the default recommendation rules."""
    return ProgressTracker().compute_metrics(history)
