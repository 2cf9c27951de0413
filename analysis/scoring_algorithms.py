#!/usr/bin/env python3
"""
Design Critique Scoring Algorithms

This module reduces raw model sub-metrics into category scores, combines the
three category scores into an overall score and maps that score onto a
learning level.

"""

import math
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import numpy as np

from .config import CATEGORIES, merge_config
from .exceptions import InvalidInput

logger = logging.getLogger(__name__)


class LearningLevel(Enum):
    """Coarse skill classification derived from the overall score."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# Practice suggestions for weak sub-metrics, keyed by category then metric
SUGGESTION_TEMPLATES = {
    'composition': {
        'balance': "Distribute visual weight more evenly across the canvas",
        'harmony': "Make shapes and elements share a common visual language",
        'rhythm': "Repeat elements at regular intervals to build visual rhythm",
        'emphasis': "Give the focal element more contrast, size or isolation",
        'unity': "Align type and color choices so the design reads as one piece",
        'proportion': "Revisit the relative sizes of elements to clarify hierarchy",
        'movement': "Use lines and directional shapes to guide the eye through the layout"
    },
    'color': {
        'palette': "Narrow the palette to a few deliberate colors",
        'contrast': "Increase value contrast between foreground and background",
        'saturation': "Balance saturated accents against calmer, muted areas",
        'temperature': "Keep warm and cool colors in a consistent relationship",
        'harmony': "Build the palette from a color-wheel scheme such as complementary or analogous"
    },
    'technique': {
        'precision': "Practice straight-line and contour drills to improve line control",
        'consistency': "Keep stroke weight and rendering style consistent across the piece",
        'complexity': "Match the level of detail to the purpose of the design",
        'detail': "Refine edges and small details in the focal area",
        'texture': "Experiment with texture to add surface interest",
        'style': "Study reference work to develop a more confident personal style"
    }
}


@dataclass(frozen=True)
class CategoryResult:
    """
    Score for one category of a single analysis.

    ``metrics`` keeps the raw sub-metric values the score was reduced from so
    that recommendation thresholds can be evaluated later.
    """

    category: str
    score: float
    findings: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()
    metrics: Mapping[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary format."""

        return {
            'category': self.category,
            'score': self.score,
            'findings': list(self.findings),
            'suggestions': list(self.suggestions),
            'metrics': dict(self.metrics)
        }


@dataclass(frozen=True)
class OverallResult:
    """Weighted combination of the three category results."""

    score: float
    summary: str
    improvements: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'summary': self.summary,
            'improvements': list(self.improvements)
        }


ScoreLike = Union[CategoryResult, float, int]


def validate_score(value: Any, name: str = "score") -> float:
    """
    Check that a value is a finite number in [0, 1].

    Args:
        value: Candidate score
        name: Label used in the error message

    Returns:
        The value as a float

    Raises:
        InvalidInput: If the value is not numeric or falls outside [0, 1]
    """

    if isinstance(value, bool) or not isinstance(value, (int, float, np.floating, np.integer)):
        raise InvalidInput(f"{name} must be a number, got {type(value).__name__}")

    value = float(value)

    if math.isnan(value) or not (0.0 <= value <= 1.0):
        raise InvalidInput(f"{name} must be within [0, 1], got {value}")

    return value


class CritiqueScorer:
    """
    Main design critique scoring engine.

    Provides category scoring, overall aggregation and level classification
    using configurable weights and cutoffs.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize critique scorer.

        Args:
            config: Partial configuration dictionary, merged into the defaults

        Raises:
            InvalidInput: If the category weights do not cover every category
                or do not sum to 1
        """

        self.config = merge_config(config)

        self.category_weights = self.config['category_weights']
        self.level_cutoffs = self.config['level_cutoffs']
        self.finding_thresholds = self.config['findings']
        self.improvement_threshold = self.config['improvement_threshold']

        self._validate_weights()

        logger.info("CritiqueScorer initialized")

    def _validate_weights(self):
        missing = [c for c in CATEGORIES if c not in self.category_weights]
        if missing:
            raise InvalidInput(f"Missing category weights: {missing}")

        for category in CATEGORIES:
            if self.category_weights[category] < 0:
                raise InvalidInput(f"Weight for '{category}' must be non-negative")

        total = sum(self.category_weights[c] for c in CATEGORIES)
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise InvalidInput(f"Category weights must sum to 1, got {total:.4f}")

    def score(self, category: str, metrics: Mapping[str, float]) -> CategoryResult:
        """
        Reduce a set of sub-metrics into a single category result.

        Args:
            category: Category name (composition, color or technique)
            metrics: Mapping of sub-metric names to values in [0, 1]

        Returns:
            CategoryResult whose score is the mean of the sub-metrics

        Raises:
            InvalidInput: If the metric set is empty or any value is out of range
        """

        if not metrics:
            raise InvalidInput(f"No metrics supplied for category '{category}'")

        values = {
            name: validate_score(value, f"{category}.{name}")
            for name, value in metrics.items()
        }

        category_score = float(np.mean(list(values.values())))

        findings = self._interpret_metrics(values)
        suggestions = self._suggest_for_metrics(category, values)

        logger.debug(f"{category} scored {category_score:.3f} from {len(values)} metrics")

        return CategoryResult(
            category=category,
            score=category_score,
            findings=tuple(findings),
            suggestions=tuple(suggestions),
            metrics=values
        )

    def _interpret_metrics(self, values: Dict[str, float]) -> list:
        """Describe notably strong and weak sub-metrics, in input order."""

        strong = self.finding_thresholds['strong_threshold']
        weak = self.finding_thresholds['weak_threshold']

        findings = []
        for name, value in values.items():
            label = name.replace('_', ' ')
            if value >= strong:
                findings.append(f"Strong {label} ({value:.2f})")
            elif value < weak:
                findings.append(f"Weak {label} ({value:.2f})")

        return findings

    def _suggest_for_metrics(self, category: str, values: Dict[str, float]) -> list:
        templates = SUGGESTION_TEMPLATES.get(category, {})
        threshold = self.finding_thresholds['suggestion_threshold']

        return [
            templates[name] for name, value in values.items()
            if value < threshold and name in templates
        ]

    def aggregate(self, composition: ScoreLike, color: ScoreLike,
                  technique: ScoreLike) -> OverallResult:
        """
        Combine the three category scores into the overall result.

        Args:
            composition: Composition CategoryResult or score
            color: Color CategoryResult or score
            technique: Technique CategoryResult or score

        Returns:
            OverallResult with the weighted score, a summary and improvements
        """

        inputs = {'composition': composition, 'color': color, 'technique': technique}
        scores = {
            category: validate_score(_score_of(value), f"{category} score")
            for category, value in inputs.items()
        }

        weighted = sum(scores[c] * self.category_weights[c] for c in CATEGORIES)

        # Clamp to [0, 1] against float drift
        overall_score = max(0.0, min(1.0, weighted))

        level = self.classify_level(overall_score)
        summary = self._summarize(overall_score, scores, level)

        improvements = []
        for category in CATEGORIES:
            value = inputs[category]
            if scores[category] < self.improvement_threshold and isinstance(value, CategoryResult):
                improvements.extend(value.suggestions)

        return OverallResult(
            score=overall_score,
            summary=summary,
            improvements=tuple(improvements)
        )

    def _summarize(self, overall_score: float, scores: Dict[str, float],
                   level: LearningLevel) -> str:
        strongest = CATEGORIES[0]
        weakest = CATEGORIES[0]

        for category in CATEGORIES[1:]:
            if scores[category] > scores[strongest]:
                strongest = category
            if scores[category] < scores[weakest]:
                weakest = category

        return (
            f"Overall score {overall_score:.2f} ({level.value}). "
            f"Strongest area: {strongest} ({scores[strongest]:.2f}); "
            f"needs most work: {weakest} ({scores[weakest]:.2f})."
        )

    def classify_level(self, overall_score: float) -> LearningLevel:
        """
        Map an overall score to a learning level.

        Lower bounds are inclusive: 0.4 is intermediate, 0.7 is advanced.
        """

        overall_score = validate_score(overall_score, "overall score")

        if overall_score < self.level_cutoffs['intermediate']:
            return LearningLevel.BEGINNER

        if overall_score < self.level_cutoffs['advanced']:
            return LearningLevel.INTERMEDIATE

        return LearningLevel.ADVANCED


def _score_of(value: ScoreLike) -> Any:
    if isinstance(value, CategoryResult):
        return value.score
    return value


_default_scorer: Optional[CritiqueScorer] = None


def _get_default_scorer() -> CritiqueScorer:
    global _default_scorer
    if _default_scorer is None:
        _default_scorer = CritiqueScorer()
    return _default_scorer


def score_category(category: str, metrics: Mapping[str, float]) -> CategoryResult:
    """Score one category with the default configuration."""
    return _get_default_scorer().score(category, metrics)


def aggregate(composition: ScoreLike, color: ScoreLike, technique: ScoreLike) -> OverallResult:
    """Aggregate category scores with the default 0.4 / 0.3 / 0.3 weights."""
    return _get_default_scorer().aggregate(composition, color, technique)


def classify_level(overall_score: float) -> LearningLevel:
    return _get_default_scorer().classify_level(overall_score)
