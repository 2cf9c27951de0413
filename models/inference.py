"""
Torch inference backend.

Adapts DesignCritiqueNet to the ModelBackend interface used by the critique
core: one decoded image in, named sub-metric values out.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import torch

from analysis.config import CATEGORY_METRICS
from analysis.exceptions import ModelUnavailable
from analysis.interfaces import ModelBackend
from preprocessing import ImagePreprocessor, create_preprocessing_pipeline
from .design_net import DesignCritiqueNet

logger = logging.getLogger(__name__)


class TorchModelBackend(ModelBackend):
    """
    Model backend running DesignCritiqueNet on a single device.

    Args:
        model: Preconstructed network; built from ``backbone`` when omitted
        preprocessor: Image preprocessor producing model input tensors
        device: PyTorch device for inference
        weights_path: Optional state dict to load into the network
        backbone: timm backbone name used when building the network
        pretrained: Whether to fetch ImageNet weights for a new backbone
    """

    def __init__(self, model: Optional[DesignCritiqueNet] = None,
                 preprocessor: Optional[ImagePreprocessor] = None,
                 device: Optional[torch.device] = None,
                 weights_path: Optional[str] = None,
                 backbone: str = 'resnet50',
                 pretrained: bool = True):

        self.device = device or torch.device('cuda' if torch.cuda.is_available() else 'cpu')
        self.preprocessor = preprocessor or create_preprocessing_pipeline()

        try:
            self.model = model or DesignCritiqueNet(backbone=backbone, pretrained=pretrained)

            if weights_path:
                state_dict = torch.load(Path(weights_path), map_location=self.device)
                self.model.load_state_dict(state_dict)
                logger.info(f"Loaded critique weights from {weights_path}")

        except Exception as e:
            logger.error(f"Model initialization failed: {str(e)}")
            raise ModelUnavailable(f"Could not initialize critique model: {str(e)}") from e

        self.model.to(self.device)
        self.model.eval()

        logger.info(f"TorchModelBackend initialized on {self.device}")

    @property
    def is_loaded(self) -> bool:
        return self.model is not None

    def predict(self, image: Any) -> Dict[str, Dict[str, float]]:
        """
        Predict sub-metrics for one image.

        Args:
            image: Decoded image (H, W, C) in BGR format

        Returns:
            Mapping of category name to sub-metric values
        """

        tensor = self.preprocessor.to_tensor(np.asarray(image)).unsqueeze(0).to(self.device)

        with torch.no_grad():
            outputs = self.model(tensor)

        return {
            category: {
                name: float(value)
                for name, value in zip(CATEGORY_METRICS[category], outputs[category][0].cpu().tolist())
            }
            for category in CATEGORY_METRICS
        }
