"""
Utilities Module for the Design Critique Assistant

Provides request validation helpers for the API layer.
"""

from .validation_api import (
    validate_image_format,
    validate_content_type,
    validate_file_size,
    validate_user_id,
    validate_feedback,
    sanitize_filename,
    SUPPORTED_IMAGE_FORMATS,
    MAX_FILE_SIZE
)

__all__ = [
    'validate_image_format',
    'validate_content_type',
    'validate_file_size',
    'validate_user_id',
    'validate_feedback',
    'sanitize_filename',
    'SUPPORTED_IMAGE_FORMATS',
    'MAX_FILE_SIZE'
]
