"""
Design Critique Network

This module wraps a pretrained timm image backbone with three task-specific
heads that predict the composition, color and technique sub-metrics of a
graphic design. Every head output passes through a sigmoid, so all predicted
sub-metrics fall in [0, 1].
"""

import torch
import torch.nn as nn
import timm

from analysis.config import CATEGORIES, CATEGORY_METRICS


class DesignCritiqueNet(nn.Module):
    """
    Backbone network with one regression head per critique category.

    The backbone is used as a pooled feature extractor; the heads map the
    pooled features to the sub-metrics listed in ``CATEGORY_METRICS``.
    """

    def __init__(self, backbone='resnet50', pretrained=True, dropout=0.1):
        """
        Initialize the critique network.

        Args:
            backbone: timm model name used as feature extractor (default: 'resnet50')
            pretrained: Whether to load ImageNet weights for the backbone
            dropout: Dropout rate inside the heads
        """
        super(DesignCritiqueNet, self).__init__()

        # num_classes=0 strips the classifier and returns pooled features
        self.backbone = timm.create_model(backbone, pretrained=pretrained, num_classes=0)
        feature_dim = self.backbone.num_features

        self.heads = nn.ModuleDict({
            category: CritiqueHead(feature_dim, len(CATEGORY_METRICS[category]), dropout)
            for category in CATEGORIES
        })

    def forward(self, x):
        """
        Forward pass through the network.

        Args:
            x: Input tensor of shape (batch_size, 3, height, width)

        Returns:
            dict: Category name to tensor of shape (batch_size, num_metrics)
        """
        features = self.backbone(x)

        return {category: head(features) for category, head in self.heads.items()}


class CritiqueHead(nn.Module):
    """
    Sigmoid regression head for one critique category.
    """

    def __init__(self, input_dim, num_metrics, dropout=0.1):
        super(CritiqueHead, self).__init__()

        hidden_dim = max(num_metrics, input_dim // 2)

        self.mlp = nn.Sequential(
            nn.Linear(input_dim, hidden_dim),
            nn.ReLU(),
            nn.Dropout(dropout),
            nn.Linear(hidden_dim, num_metrics)
        )

    def forward(self, x):
        return torch.sigmoid(self.mlp(x)).float()
