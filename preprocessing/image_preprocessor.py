"""
Image Preprocessing Module for the Design Critique Assistant

Decodes uploaded designs, resizes them to the model input size and applies
ImageNet normalization so they can be fed to the critique network.
"""

import io
import logging
from typing import Dict, Optional, Tuple

import cv2
import numpy as np
import torch
from PIL import Image
from torchvision import transforms

from analysis.exceptions import InvalidInput

logger = logging.getLogger(__name__)


class ImagePreprocessor:
    """
    Image preprocessing for design critique.

    Features:
    - Decoding from raw upload bytes or file paths
    - Adaptive resizing with aspect ratio preservation
    - Optional noise reduction
    - ImageNet normalization into a PyTorch tensor
    """

    def __init__(self, target_size: Tuple[int, int] = (224, 224),
                 preserve_aspect_ratio: bool = True,
                 noise_reduction: bool = False):
        """
        Initialize the ImagePreprocessor.
        Args:
            target_size: Target dimensions for processed images (width, height)
            preserve_aspect_ratio: Whether to maintain original aspect ratio
            noise_reduction: Whether to apply noise reduction before resizing
        """
        self.target_size = target_size
        self.preserve_aspect_ratio = preserve_aspect_ratio
        self.noise_reduction = noise_reduction

        # ImageNet statistics expected by the pretrained backbone
        self.normalize_transform = transforms.Compose([
            transforms.ToTensor(),
            transforms.Normalize(mean = [0.485, 0.456, 0.406],
                                 std = [0.229, 0.224, 0.225])
        ])

        logger.info(f"ImagePreprocessor initialized with target_size = {target_size}")

    def decode_image(self, data: bytes) -> np.ndarray:
        """
        Decode raw image bytes into a BGR array.

        Args:
            data: Encoded image bytes (JPEG, PNG, GIF, ...)

        Returns:
            Decoded image as numpy array in BGR format

        Raises:
            InvalidInput: If the bytes cannot be decoded
        """

        if not data:
            raise InvalidInput("Empty image data")

        image = cv2.imdecode(np.frombuffer(data, dtype = np.uint8), cv2.IMREAD_COLOR)

        if image is None:
            # Fallback to PIL for formats OpenCV cannot decode (e.g. GIF)
            try:
                pil_image = Image.open(io.BytesIO(data)).convert('RGB')
            except Exception as e:
                logger.error(f"Image decoding failed: {str(e)}")
                raise InvalidInput(f"Failed to decode image: {str(e)}") from e

            image = cv2.cvtColor(np.array(pil_image), cv2.COLOR_RGB2BGR)

        logger.debug(f"Decoded image with shape {image.shape}")
        return image

    def load_image(self, image_path: str) -> np.ndarray:
        """Load an image file from disk in BGR format."""

        with open(image_path, 'rb') as f:
            return self.decode_image(f.read())

    def resize_image(self, image: np.ndarray) -> np.ndarray:
        """
        Resize image to target dimensions with optional aspect ratio preservation

        Args:
            image: Input image as numpy array

        Returns:
            Resized image
        """

        h, w = image.shape[: 2]
        target_w, target_h = self.target_size

        if self.preserve_aspect_ratio:
            scale = min(target_w / w, target_h / h)
            new_w = max(1, int(w * scale))
            new_h = max(1, int(h * scale))

            resized = cv2.resize(image, (new_w, new_h), interpolation = cv2.INTER_AREA)

            # Center the resized image on a black canvas
            canvas = np.zeros((target_h, target_w, 3), dtype = image.dtype)

            y_offset = (target_h - new_h) // 2
            x_offset = (target_w - new_w) // 2

            canvas[y_offset: y_offset + new_h, x_offset: x_offset + new_w] = resized

            return canvas

        return cv2.resize(image, self.target_size, interpolation = cv2.INTER_AREA)

    def apply_noise_reduction(self, image: np.ndarray) -> np.ndarray:
        if not self.noise_reduction:
            return image

        return cv2.fastNlMeansDenoisingColored(image, None, 10, 10, 7, 21)

    def to_tensor(self, image: np.ndarray) -> torch.Tensor:
        """
        Convert a BGR image into a normalized model input tensor.

        Args:
            image: Input image (H, W, 3) in BGR format, or grayscale (H, W)

        Returns:
            Tensor of shape (3, target_h, target_w)
        """

        if image.ndim == 2:
            image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        elif image.shape[2] == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

        image = self.apply_noise_reduction(image)
        image = self.resize_image(image)

        image_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        pil_image = Image.fromarray(image_rgb.astype(np.uint8))

        return self.normalize_transform(pil_image)


def create_preprocessing_pipeline(config: Optional[Dict] = None) -> ImagePreprocessor:
    """
    Factory function to create a configured preprocessing pipeline.

    Args:
        config: Configuration dictionary with preprocessing parameters

    Returns:
        Configured ImagePreprocessor instance
    """

    if config is None:
        config = {}

    return ImagePreprocessor(
        target_size = config.get('target_size', (224, 224)),
        preserve_aspect_ratio = config.get('preserve_aspect_ratio', True),
        noise_reduction = config.get('noise_reduction', False)
    )
