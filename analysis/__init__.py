"""
Design Critique Module

This module contains the scoring core of the Design Critique Assistant:
category scoring, overall aggregation, learning-level classification,
recommendations, progress tracking and feedback analysis.
"""

from .exceptions import (
    DesignCritiqueError,
    InvalidInput,
    ModelUnavailable,
    PersistenceError
)
from .scoring_algorithms import (
    CategoryResult,
    OverallResult,
    LearningLevel,
    CritiqueScorer,
    score_category,
    aggregate,
    classify_level
)
from .recommendation_engine import (
    Recommendation,
    RecommendationPriority,
    RecommendationEngine,
    recommend,
    recommend_from_metrics
)
from .progress_tracker import (
    ProgressEntry,
    TrendPoint,
    LearningMetrics,
    ProgressTracker,
    compute_metrics
)
from .feedback_analyzer import FeedbackAnalyzer
from .interfaces import ModelBackend, HistoryStore
from .design_critic import DesignCritic, CritiqueResults

__all__ = [
    'DesignCritiqueError',
    'InvalidInput',
    'ModelUnavailable',
    'PersistenceError',
    'CategoryResult',
    'OverallResult',
    'LearningLevel',
    'CritiqueScorer',
    'score_category',
    'aggregate',
    'classify_level',
    'Recommendation',
    'RecommendationPriority',
    'RecommendationEngine',
    'recommend',
    'recommend_from_metrics',
    'ProgressEntry',
    'TrendPoint',
    'LearningMetrics',
    'ProgressTracker',
    'compute_metrics',
    'FeedbackAnalyzer',
    'ModelBackend',
    'HistoryStore',
    'DesignCritic',
    'CritiqueResults'
]

__version__ = "1.0.0"
