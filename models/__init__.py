"""
Model Module for the Design Critique Assistant

Provides the critique network and the torch-backed inference backend.
"""

from .design_net import DesignCritiqueNet, CritiqueHead
from .inference import TorchModelBackend

__all__ = ['DesignCritiqueNet', 'CritiqueHead', 'TorchModelBackend']
