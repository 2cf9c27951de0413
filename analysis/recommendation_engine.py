#!/usr/bin/env python3
"""
Recommendation Engine for Design Improvement

This module turns category results and learning metrics into prioritized,
templated recommendations. Priority is always a property of the rule that
fired, never of the caller.

"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .config import merge_config
from .scoring_algorithms import CategoryResult, validate_score

logger = logging.getLogger(__name__)


class RecommendationPriority(Enum):
    """Priority levels for recommendations."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Recommendation:
    """A single improvement recommendation tied to an area."""

    area: str
    suggestion: str
    priority: RecommendationPriority

    def to_dict(self) -> Dict[str, Any]:
        """Convert recommendation to dictionary format."""
        return {
            'area': self.area,
            'suggestion': self.suggestion,
            'priority': self.priority.value
        }


AREA_SUGGESTIONS = {
    'composition': "Work through composition exercises and revisit the basic design principles",
    'color': "Practice color theory and color harmony",
    'technique': "Strengthen your fundamental illustration techniques"
}

SKILL_SUGGESTIONS = {
    'Visual Hierarchy': "Work on the ordering and arrangement of visual elements by importance",
    'Color Harmony': "Practice building palettes and combining colors",
    'Composition': "Apply balance and proportion principles in composition studies",
    'Illustration Techniques': "Try out a range of different illustration techniques",
    'Typography': "Develop your font selection and typographic hierarchy"
}

DEFAULT_AREA_SUGGESTION = "Do focused exercises for this area"
DEFAULT_SKILL_SUGGESTION = "Do focused practice for this skill"

CategoryInput = Union[CategoryResult, Mapping[str, float]]


class RecommendationEngine:
    """
    Main recommendation generation engine.

    Evaluates threshold rules against sub-metrics of a single analysis, and
    derives longer-term recommendations from learning metrics.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize recommendation engine.

        Args:
            config: Partial configuration; ``recommendation_rules`` and
                ``level_cutoffs`` are read from it
        """
        self.config = merge_config(config)
        self.rules = self.config['recommendation_rules']
        self.level_cutoffs = self.config['level_cutoffs']

        logger.info(f"RecommendationEngine initialized with {len(self.rules)} rules")

    def recommend(self, category_results: Mapping[str, CategoryInput]) -> List[Recommendation]:
        """
        Generate recommendations for one analysis.

        Rules are evaluated in configuration order (composition, color,
        technique) and each fires independently when its metric is strictly
        below its threshold. Rules whose category or metric is absent are
        skipped.

        Args:
            category_results: Mapping of category name to a CategoryResult or
                to a raw sub-metric mapping

        Returns:
            Recommendations in rule order
        """

        recommendations = []

        for rule in self.rules:
            metrics = _metrics_of(rule['category'], category_results.get(rule['category']))
            if metrics is None or rule['metric'] not in metrics:
                logger.debug(f"Skipping rule {rule['category']}.{rule['metric']}: metric not available")
                continue

            if metrics[rule['metric']] < rule['threshold']:
                recommendations.append(Recommendation(
                    area=rule['category'],
                    suggestion=rule['suggestion'],
                    priority=RecommendationPriority(rule['priority'])
                ))

        return recommendations

    def recommend_from_metrics(self, areas_for_improvement: Sequence[str],
                               skill_levels: Mapping[str, float]) -> List[Recommendation]:
        """
        Generate learning recommendations from aggregated progress.

        Args:
            areas_for_improvement: Weakest categories, weakest first
            skill_levels: Skill name to level in [0, 1]

        Returns:
            High-priority area recommendations followed by medium-priority
            recommendations for skills still between the level cutoffs
        """

        recommendations = [
            Recommendation(
                area=area,
                suggestion=AREA_SUGGESTIONS.get(area, DEFAULT_AREA_SUGGESTION),
                priority=RecommendationPriority.HIGH
            )
            for area in areas_for_improvement
        ]

        lower = self.level_cutoffs['intermediate']
        upper = self.level_cutoffs['advanced']

        for skill, level in skill_levels.items():
            if lower < level < upper:
                recommendations.append(Recommendation(
                    area=skill,
                    suggestion=SKILL_SUGGESTIONS.get(skill, DEFAULT_SKILL_SUGGESTION),
                    priority=RecommendationPriority.MEDIUM
                ))

        return recommendations


def _metrics_of(category: str, value: Optional[CategoryInput]) -> Optional[Mapping[str, float]]:
    if value is None:
        return None
    if isinstance(value, CategoryResult):
        return value.metrics

    # Raw mappings have not been through the scorer yet
    return {name: validate_score(v, f"{category}.{name}") for name, v in value.items()}


_default_engine: Optional[RecommendationEngine] = None


def _get_default_engine() -> RecommendationEngine:
    global _default_engine
    if _default_engine is None:
        _default_engine = RecommendationEngine()
    return _default_engine


def recommend(category_results: Mapping[str, CategoryInput]) -> List[Recommendation]:
    """Generate recommendations with the default rules."""
    return _get_default_engine().recommend(category_results)


def recommend_from_metrics(areas_for_improvement: Sequence[str],
                           skill_levels: Mapping[str, float]) -> List[Recommendation]:
    return _get_default_engine().recommend_from_metrics(areas_for_improvement, skill_levels)
