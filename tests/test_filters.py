import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import cv2
import numpy as np
import pytest

from face_enhancer import filters
from face_enhancer.utils import to_uint8_bgr


@pytest.fixture
def textured():
    rng = np.random.default_rng(7)
    img = rng.integers(0, 256, (64, 64, 3), dtype=np.uint8)
    return cv2.GaussianBlur(img, (0, 0), 2.0)


def test_gamma_lut_endpoints_and_direction():
    lut = filters.gamma_lut(2.0)
    assert lut.shape == (256,)
    assert lut[0] == 0 and lut[255] == 255
    assert lut[64] > 64
    assert filters.gamma_lut(0.5)[64] < 64


def test_gamma_one_is_identity(textured):
    assert np.array_equal(filters.gamma_correct(textured, 1.0), textured)
    assert np.array_equal(filters.gamma_correct(textured, 1.0 + 1e-8), textured)

    as_float = textured.astype(np.float32) / 255.0
    assert np.array_equal(filters.gamma_correct(as_float, 1.0), to_uint8_bgr(as_float))


def test_gamma_brightens(textured):
    out = filters.gamma_correct(textured, 2.2)
    assert out.dtype == np.uint8
    assert out.mean() > textured.mean()


def test_clahe_disabled_is_noop(textured):
    assert np.array_equal(filters.clahe_luma(textured, 0), textured)
    assert np.array_equal(filters.clahe_luma(textured, -1.0), textured)
    gray = textured[:, :, 0]
    assert np.array_equal(filters.clahe_luma(gray, 0), to_uint8_bgr(gray))


def test_clahe_stretches_low_contrast_image():
    rng = np.random.default_rng(3)
    gray = rng.integers(110, 131, (128, 128), dtype=np.uint8)
    img = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)
    out = filters.clahe_luma(img, 2.0)
    assert out.shape == img.shape
    assert out.std() > img.std()


def test_unsharp_zero_amount_is_identity(textured):
    assert np.array_equal(filters.unsharp_mask(textured, 1.0, 0.0), textured)


def test_unsharp_overshoots_at_edges():
    img = np.full((32, 32, 3), 100, np.uint8)
    img[:, 16:] = 150
    out = filters.unsharp_mask(img, 1.0, 1.0)
    assert out.max() > 150
    assert out.min() < 100


def test_bilateral_and_detail_keep_shape(textured):
    smooth = filters.bilateral(textured, 7, 55, 55)
    assert smooth.shape == textured.shape and smooth.dtype == np.uint8
    detail = filters.detail_enhance(textured, 8.0, 0.08)
    assert detail.shape == textured.shape and detail.dtype == np.uint8


def test_filters_accept_float_input(textured):
    as_float = textured.astype(np.float64)
    out = filters.bilateral(as_float, 5, 40, 40)
    assert out.dtype == np.uint8 and out.shape == textured.shape
