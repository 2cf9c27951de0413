"""
Unit tests for the critique network, the torch backend and image preprocessing.
"""

import io
import os
import sys

import cv2
import numpy as np
import pytest
import torch
from PIL import Image

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analysis import DesignCritic, InvalidInput
from analysis.config import CATEGORY_METRICS
from models import DesignCritiqueNet, TorchModelBackend
from preprocessing import ImagePreprocessor, create_preprocessing_pipeline


def create_test_image(size=(120, 200)):
    """Create a test design with a few basic shapes."""
    image = np.zeros((size[0], size[1], 3), dtype=np.uint8)

    cv2.rectangle(image, (20, 20), (90, 90), (40, 120, 220), -1)
    cv2.circle(image, (150, 60), 30, (200, 200, 200), -1)
    cv2.line(image, (0, size[0] - 1), (size[1] - 1, 0), (255, 255, 255), 2)

    return image


@pytest.fixture(scope='module')
def model():
    net = DesignCritiqueNet(backbone='resnet18', pretrained=False)
    net.eval()
    return net


class TestDesignCritiqueNet:
    """Tests for the multi-head critique network."""

    def test_forward_pass(self, model):
        with torch.no_grad():
            output = model(torch.randn(2, 3, 224, 224))

        assert set(output) == {'composition', 'color', 'technique'}
        assert output['composition'].shape == (2, 7)
        assert output['color'].shape == (2, 5)
        assert output['technique'].shape == (2, 6)

    def test_outputs_in_unit_range(self, model):
        with torch.no_grad():
            output = model(torch.randn(1, 3, 224, 224) * 10)

        for values in output.values():
            assert torch.all(values >= 0) and torch.all(values <= 1)


class TestTorchModelBackend:

    @pytest.fixture
    def backend(self, model):
        return TorchModelBackend(model=model, device=torch.device('cpu'))

    def test_predict_named_metrics(self, backend):
        prediction = backend.predict(create_test_image())

        for category, names in CATEGORY_METRICS.items():
            assert list(prediction[category]) == list(names)
            assert all(0.0 <= v <= 1.0 for v in prediction[category].values())

    def test_backend_drives_critic(self, backend):
        results = DesignCritic(backend).analyze(create_test_image())

        assert 0.0 <= results.overall.score <= 1.0
        assert backend.is_loaded

    def test_bad_weights_path(self, model, tmp_path):
        from analysis import ModelUnavailable

        with pytest.raises(ModelUnavailable):
            TorchModelBackend(model=model, weights_path=str(tmp_path / 'missing.pt'))


class TestImagePreprocessor:
    """Tests for decoding and tensor conversion."""

    @pytest.fixture
    def preprocessor(self):
        return ImagePreprocessor(target_size=(224, 224))

    def test_to_tensor_shape(self, preprocessor):
        tensor = preprocessor.to_tensor(create_test_image())

        assert tensor.shape == (3, 224, 224)
        assert tensor.dtype == torch.float32

    def test_grayscale_and_alpha(self, preprocessor):
        gray = np.full((50, 80), 128, dtype=np.uint8)
        bgra = np.zeros((50, 80, 4), dtype=np.uint8)

        assert preprocessor.to_tensor(gray).shape == (3, 224, 224)
        assert preprocessor.to_tensor(bgra).shape == (3, 224, 224)

    def test_aspect_ratio_letterbox(self, preprocessor):
        resized = preprocessor.resize_image(np.full((100, 200, 3), 255, dtype=np.uint8))

        assert resized.shape == (224, 224, 3)
        # Wide input leaves black bands above and below
        assert resized[0].max() == 0
        assert resized[112].min() == 255

    def test_decode_png(self, preprocessor):
        ok, encoded = cv2.imencode('.png', create_test_image())
        assert ok

        image = preprocessor.decode_image(encoded.tobytes())

        assert image.shape == (120, 200, 3)

    def test_decode_gif(self, preprocessor):
        buffer = io.BytesIO()
        Image.new('RGB', (40, 30), (255, 0, 0)).save(buffer, format='GIF')

        image = preprocessor.decode_image(buffer.getvalue())

        assert image.shape == (30, 40, 3)

    def test_decode_garbage(self, preprocessor):
        with pytest.raises(InvalidInput):
            preprocessor.decode_image(b'definitely not an image')

        with pytest.raises(InvalidInput):
            preprocessor.decode_image(b'')

    def test_factory(self):
        preprocessor = create_preprocessing_pipeline({'target_size': (128, 96), 'preserve_aspect_ratio': False})

        assert preprocessor.to_tensor(create_test_image()).shape == (3, 96, 128)


if __name__ == '__main__':
    pytest.main([__file__])
