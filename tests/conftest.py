"""
Shared fixtures for the design critique tests.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analysis import ModelBackend


GOOD_METRICS = {
    'composition': {'balance': 0.8, 'harmony': 0.7, 'rhythm': 0.9, 'unity': 0.8},
    'color': {'palette': 0.7, 'contrast': 0.8, 'harmony': 0.9},
    'technique': {'precision': 0.9, 'consistency': 0.8, 'detail': 0.7}
}

WEAK_METRICS = {
    'composition': {'balance': 0.3, 'harmony': 0.4, 'rhythm': 0.2, 'unity': 0.3},
    'color': {'palette': 0.4, 'contrast': 0.5, 'harmony': 0.3},
    'technique': {'precision': 0.5, 'consistency': 0.4, 'detail': 0.3}
}


class StaticBackend(ModelBackend):
    """Backend returning canned metrics and counting calls."""

    def __init__(self, metrics):
        self.metrics = metrics
        self.calls = 0

    def predict(self, image):
        self.calls += 1
        return self.metrics


class FailingBackend(ModelBackend):

    def predict(self, image):
        raise RuntimeError("inference server unreachable")


@pytest.fixture
def good_backend():
    return StaticBackend(GOOD_METRICS)


@pytest.fixture
def weak_backend():
    return StaticBackend(WEAK_METRICS)
