#!/usr/bin/env python3
"""
Main Design Critic

This module provides the DesignCritic class that orchestrates a single design
critique: model inference, category scoring, overall aggregation, level
classification, recommendations and recording of the learner's progress.

"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import CATEGORIES, merge_config
from .exceptions import ModelUnavailable, PersistenceError
from .interfaces import HistoryStore, ModelBackend
from .progress_tracker import LearningMetrics, ProgressEntry, ProgressTracker
from .recommendation_engine import Recommendation, RecommendationEngine
from .scoring_algorithms import CategoryResult, CritiqueScorer, LearningLevel, OverallResult

logger = logging.getLogger(__name__)


@dataclass
class CritiqueResults:
    """

    Complete critique of one uploaded design.

    Contains the three category results, the overall result, the learning
    level and the recommendations derived from them.

    """

    categories: Dict[str, CategoryResult]
    overall: OverallResult
    level: LearningLevel
    recommendations: List[Recommendation]
    processing_time: float
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        """ Convert results to dictionary format. """

        return {
            'composition': self.categories['composition'].to_dict(),
            'color': self.categories['color'].to_dict(),
            'technique': self.categories['technique'].to_dict(),
            'overall': self.overall.to_dict(),
            'level': self.level.value,
            'recommendations': [r.to_dict() for r in self.recommendations],
            'processing_time': self.processing_time,
            'timestamp': self.timestamp.isoformat()
        }


class DesignCritic:
    """

    Critique orchestrator.

    Coordinates the model backend, the scoring core and the history store.
    All collaborators are passed in; nothing is shared between instances.

    """

    def __init__(self, backend: ModelBackend,
                 store: Optional[HistoryStore] = None,
                 config: Optional[Dict[str, Any]] = None):
        """
        Initialize the design critic.

        Args:
            backend: Model inference backend
            store: History store for progress entries (optional)
            config: Partial scoring configuration
        """

        self.backend = backend
        self.store = store
        self.config = merge_config(config)

        self.scorer = CritiqueScorer(self.config)
        self.recommendation_engine = RecommendationEngine(self.config)
        self.progress_tracker = ProgressTracker(self.recommendation_engine)

        logger.info(f"DesignCritic initialized with {type(backend).__name__}")

    def analyze(self, image: Any,
                user_id: Optional[str] = None,
                resource_id: Optional[str] = None) -> CritiqueResults:

        """
        Critique a single design.

        Args:
            image: Decoded image (H, W, C) in BGR format
            user_id: Owner of the analysis; when given together with a store,
                a progress entry is appended
            resource_id: Identifier of the analysed resource

        Returns:
            CritiqueResults for the image

        Raises:
            ModelUnavailable: If the backend fails or omits a category
            InvalidInput: If the backend returns out-of-range metrics
            PersistenceError: If the progress entry cannot be stored
        """

        start_time = datetime.now()

        # Step 1: Model inference
        logger.debug("Running model inference...")
        raw_metrics = self._predict(image)

        # Step 2: Category scores
        logger.debug("Scoring categories...")
        categories = {
            category: self.scorer.score(category, raw_metrics[category])
            for category in CATEGORIES
        }

        # Step 3: Overall score and level
        overall = self.scorer.aggregate(
            categories['composition'], categories['color'], categories['technique']
        )
        level = self.scorer.classify_level(overall.score)

        # Step 4: Recommendations
        recommendations = self.recommendation_engine.recommend(categories)

        processing_time = (datetime.now() - start_time).total_seconds()

        results = CritiqueResults(
            categories=categories,
            overall=overall,
            level=level,
            recommendations=recommendations,
            processing_time=processing_time,
            timestamp=start_time
        )

        # Step 5: Progress entry
        if user_id is not None and self.store is not None:
            entry = ProgressEntry.from_results(
                resource_id or start_time.strftime('%Y%m%d%H%M%S%f'),
                categories, overall, timestamp=start_time
            )
            self.store.append(user_id, entry)
            logger.debug(f"Progress entry stored for user {user_id}")

        logger.info(f"Critique completed in {processing_time:.3f}s - Score: {overall.score:.3f} ({level.value})")

        return results

    def _predict(self, image: Any) -> Dict[str, Dict[str, float]]:
        try:
            raw_metrics = self.backend.predict(image)

        except ModelUnavailable:
            raise

        except Exception as e:
            logger.error(f"Model inference failed: {str(e)}")
            raise ModelUnavailable(f"Model inference failed: {str(e)}") from e

        if not raw_metrics:
            raise ModelUnavailable("Model backend returned no result")

        missing = [c for c in CATEGORIES if not raw_metrics.get(c)]
        if missing:
            logger.error(f"Model output missing categories: {missing}")
            raise ModelUnavailable(f"Model output missing categories: {missing}", missing)

        return raw_metrics

    def learning_metrics(self, user_id: str) -> LearningMetrics:
        """
        Recompute learning metrics for a user from the full stored history.

        Raises:
            PersistenceError: If no store is configured or reading fails
        """

        history = self.history(user_id)
        return self.progress_tracker.compute_metrics(history)

    def history(self, user_id: str) -> List[ProgressEntry]:
        if self.store is None:
            raise PersistenceError("No history store configured")

        return self.store.read(user_id)
