"""
Validation utilities for the Design Critique Assistant

This module provides validation functions for uploads, user identifiers and
feedback submissions received by the API.
"""

import os
import re
from typing import Any, Dict, List, Tuple
from pathlib import Path
import logging

from analysis.progress_tracker import COMPLETION_STATUSES

logger = logging.getLogger(__name__)

# Supported image formats
SUPPORTED_IMAGE_FORMATS = {
    '.jpg', '.jpeg', '.png', '.gif'
}

SUPPORTED_CONTENT_TYPES = {
    'image/jpeg', 'image/png', 'image/gif'
}

# Maximum file size (in bytes) - 10MB
MAX_FILE_SIZE = 10 * 1024 * 1024

USER_ID_PATTERN = re.compile(r'^[A-Za-z0-9_.@-]{1,255}$')

def validate_image_format(filename: str) -> bool:
    """
    Validate if the image format is supported.

    Args:
        filename: Name of the image file

    Returns:
        bool: True if format is supported, False otherwise
    """
    if not filename:
        return False

    file_extension = Path(filename).suffix.lower()
    return file_extension in SUPPORTED_IMAGE_FORMATS

def validate_content_type(content_type: str) -> bool:
    """Missing content types are accepted; the extension check still applies."""
    if not content_type or content_type == 'application/octet-stream':
        return True
    return content_type.lower() in SUPPORTED_CONTENT_TYPES

def validate_file_size(file_size: int) -> bool:
    """
    Validate if the file size is within acceptable limits.

    Args:
        file_size: Size of the file in bytes

    Returns:
        bool: True if size is acceptable, False otherwise
    """
    return 0 < file_size <= MAX_FILE_SIZE

def validate_user_id(user_id: str) -> bool:
    return bool(user_id) and USER_ID_PATTERN.match(user_id) is not None

def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent security issues.

    Args:
        filename: Original filename

    Returns:
        str: Sanitized filename
    """
    # Remove any path components
    filename = os.path.basename(filename)

    # Remove or replace dangerous characters
    filename = re.sub(r'[^\w\s.-]', '', filename)

    # Limit length
    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:250] + ext

    return filename

def validate_feedback(feedback: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Validate a feedback submission.

    Args:
        feedback: Feedback dictionary

    Returns:
        tuple: (is_valid, list_of_errors)
    """
    errors = []

    rating = feedback.get('rating')
    if isinstance(rating, bool) or not isinstance(rating, (int, float)) or not (1 <= rating <= 5):
        errors.append("rating must be a number between 1 and 5")

    comments = feedback.get('comments')
    if comments is not None and (not isinstance(comments, str) or len(comments) > 5000):
        errors.append("comments must be a string of at most 5000 characters")

    for field in ('strengths', 'improvements', 'tags'):
        values = feedback.get(field)
        if values is not None and not (isinstance(values, list) and all(isinstance(v, str) for v in values)):
            errors.append(f"{field} must be a list of strings")

    status = feedback.get('completion_status', 'completed')
    if status not in COMPLETION_STATUSES:
        errors.append(f"completion_status must be one of {COMPLETION_STATUSES}")

    context = feedback.get('learning_context')
    if context is not None:
        comprehension = context.get('comprehension', 0.5)
        if isinstance(comprehension, bool) or not isinstance(comprehension, (int, float)) or not (0 <= comprehension <= 1):
            errors.append("learning_context.comprehension must be a number between 0 and 1")

    return len(errors) == 0, errors
