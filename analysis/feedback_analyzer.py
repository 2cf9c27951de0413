"""
Feedback analysis for submitted learner feedback.

Scores the sentiment of a feedback submission, derives tags from the
category scores of the analysed design, and expands short strength and
improvement notes into fuller text.
"""

import random
import logging
from typing import Any, Dict, List, Mapping, Optional

from .config import CATEGORIES
from .exceptions import InvalidInput
from .scoring_algorithms import validate_score

logger = logging.getLogger(__name__)

POSITIVE_WORDS = {'good', 'nice', 'great', 'excellent', 'helpful', 'useful'}
NEGATIVE_WORDS = {'bad', 'hard', 'confusing', 'insufficient', 'weak', 'pointless'}

DIFFICULTY_LEVELS = ('too_easy', 'appropriate', 'too_difficult')

STRENGTH_EXPANSIONS = {
    'color': "Use of color and color harmony",
    'composition': "Composition and visual hierarchy",
    'technique': "Technical execution and precision",
    'creativity': "Creative approach and originality"
}

IMPROVEMENT_SUGGESTIONS = {
    'color': [
        "Work through color theory studies",
        "Try color harmony exercises",
        "Read up on color psychology"
    ],
    'composition': [
        "Review the basic design principles",
        "Do visual hierarchy exercises",
        "Practice balance and proportion studies"
    ],
    'technique': [
        "Do fundamental technique drills",
        "Experiment with different tools",
        "Refine your application techniques"
    ]
}

TAGS = {
    'composition': ('strong-composition', 'composition-development'),
    'color': ('effective-color-use', 'color-development'),
    'technique': ('technical-mastery', 'technique-development')
}


class FeedbackAnalyzer:
    """Sentiment scoring and enrichment of learner feedback."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.weights = {
            'rating': 0.4,
            'comments': 0.3,
            'learning_context': 0.3
        }

    def sentiment_score(self, feedback: Mapping[str, Any]) -> float:
        """
        Compute a sentiment score for a feedback submission.

        Args:
            feedback: Dictionary with ``rating`` (1-5) and optional
                ``comments`` and ``learning_context``

        Returns:
            Weighted sentiment score
        """

        rating = feedback.get('rating')
        if isinstance(rating, bool) or not isinstance(rating, (int, float)) or not (1 <= rating <= 5):
            raise InvalidInput(f"rating must be a number between 1 and 5, got {rating!r}")

        score = (rating / 5) * self.weights['rating']

        if feedback.get('comments'):
            score += self.comment_sentiment(feedback['comments']) * self.weights['comments']

        if feedback.get('learning_context'):
            score += self.learning_context_score(feedback['learning_context']) * self.weights['learning_context']

        return score

    def sentiment(self, feedback: Mapping[str, Any]) -> str:
        score = self.sentiment_score(feedback)

        if score > 0.6:
            return 'positive'
        if score < 0.4:
            return 'negative'
        return 'neutral'

    def comment_sentiment(self, comment: str) -> float:
        # Neutral start, nudged by keyword hits
        score = 0.5

        for word in comment.lower().split():
            word = word.strip('.,!?;:')
            if word in POSITIVE_WORDS:
                score += 0.1
            if word in NEGATIVE_WORDS:
                score -= 0.1

        return max(0.0, min(1.0, score))

    def learning_context_score(self, context: Mapping[str, Any]) -> float:
        """Score how well the material suited the learner."""

        score = 0.5

        difficulty = context.get('difficulty')
        if difficulty is not None and difficulty not in DIFFICULTY_LEVELS:
            raise InvalidInput(f"difficulty must be one of {DIFFICULTY_LEVELS}, got {difficulty!r}")

        if difficulty == 'appropriate':
            score += 0.2
        elif difficulty == 'too_difficult':
            score -= 0.2

        comprehension = validate_score(context.get('comprehension', 0.5), 'learning_context.comprehension')
        score += (comprehension - 0.5) * 0.2

        issues = context.get('technical_issues') or []
        if not isinstance(issues, (list, tuple)):
            raise InvalidInput(f"technical_issues must be a list, got {type(issues).__name__}")
        if issues:
            score -= 0.1 * min(len(issues), 3)

        return max(0.0, min(1.0, score))

    def generate_tags(self, category_scores: Mapping[str, float]) -> List[str]:
        """Tag categories that stand out as strong or in need of work."""

        tags = []
        for category in CATEGORIES:
            if category not in category_scores:
                continue

            strong_tag, weak_tag = TAGS[category]
            if category_scores[category] > 0.7:
                tags.append(strong_tag)
            if category_scores[category] < 0.4:
                tags.append(weak_tag)

        return tags

    def expand_strength(self, strength: str) -> str:
        lowered = strength.lower()
        for key, expansion in STRENGTH_EXPANSIONS.items():
            if key in lowered:
                return expansion
        return strength

    def add_improvement_suggestion(self, improvement: str) -> str:
        lowered = improvement.lower()
        for category, suggestions in IMPROVEMENT_SUGGESTIONS.items():
            if category in lowered:
                return f"{improvement} - Suggestion: {self.rng.choice(suggestions)}"
        return improvement

    def enrich(self, feedback: Mapping[str, Any],
               category_scores: Optional[Mapping[str, float]] = None) -> Dict[str, Any]:
        """
        Return an enriched copy of a feedback submission.

        Args:
            feedback: Original feedback dictionary
            category_scores: Scores of the analysed design, used for tagging

        Returns:
            Copy with expanded strengths, annotated improvements, tags and
            sentiment
        """

        enriched = dict(feedback)

        if feedback.get('strengths'):
            enriched['strengths'] = [self.expand_strength(s) for s in feedback['strengths']]

        if feedback.get('improvements'):
            enriched['improvements'] = [self.add_improvement_suggestion(i) for i in feedback['improvements']]

        tags = list(feedback.get('tags') or [])
        if category_scores:
            tags.extend(self.generate_tags(category_scores))
        enriched['tags'] = tags

        enriched['sentiment_score'] = self.sentiment_score(feedback)
        enriched['sentiment'] = self.sentiment(feedback)

        logger.debug(f"Feedback enriched with sentiment {enriched['sentiment']}")

        return enriched
