"""
Capabilities the critique core depends on.

Both are injected into DesignCritic so the scoring pipeline can run without
a live model or database.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .progress_tracker import ProgressEntry


class ModelBackend(ABC):
    """Model inference service producing raw sub-metric vectors."""

    @abstractmethod
    def predict(self, image: Any) -> Dict[str, Dict[str, float]]:
        """
        Run inference on a single image.

        Args:
            image: Decoded image (H, W, C) in BGR format

        Returns:
            Mapping of category name to sub-metric values in [0, 1]
        """

    @property
    def is_loaded(self) -> bool:
        return True


class HistoryStore(ABC):
    """Append-only store of progress entries keyed by user."""

    @abstractmethod
    def append(self, user_id: str, entry: ProgressEntry) -> None:
        """Persist one entry for a user."""

    @abstractmethod
    def read(self, user_id: str) -> List[ProgressEntry]:
        """Return every entry for a user, oldest first."""
