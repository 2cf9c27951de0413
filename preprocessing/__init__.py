"""
Preprocessing Module for the Design Critique Assistant
"""

from .image_preprocessor import ImagePreprocessor, create_preprocessing_pipeline

__all__ = ['ImagePreprocessor', 'create_preprocessing_pipeline']
