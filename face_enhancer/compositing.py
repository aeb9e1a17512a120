"""Blend a restored region back into the base frame without a visible seam."""
from __future__ import annotations

import cv2
import numpy as np

from .errors import CompositeError
from .utils import Box, to_uint8_bgr

# ellipse half-axes relative to the mask size; taller than wide for a face
MASK_AXIS_X = 0.48
MASK_AXIS_Y = 0.58
MASK_BLUR_SIGMA = 5.0

# below this seamlessClone fails inside OpenCV with unhelpful messages
MIN_REGION_SIDE = 8


def feather_mask(size) -> np.ndarray:
    """Soft elliptical blend mask.

    Args:
        size (tuple): (width, height) of the region

    Returns:
        numpy.ndarray: uint8 mask, 255 at the center falling off to 0
    """
    w, h = size
    mask = np.zeros((h, w), np.uint8)
    cv2.ellipse(mask, (w // 2, h // 2), (int(w * MASK_AXIS_X), int(h * MASK_AXIS_Y)),
                0, 0, 360, 255, -1, cv2.LINE_AA)
    return cv2.GaussianBlur(mask, (0, 0), MASK_BLUR_SIGMA)


def composite(base: np.ndarray, restored: np.ndarray, roi: Box) -> np.ndarray:
    """Downsample ``restored`` to ``roi`` and blend it into ``base``.

    Uses Lanczos for the downsample and ``cv2.MIXED_CLONE`` for the blend.

    Raises:
        CompositeError: on a degenerate roi, an empty mask or a failing blend
    """
    if roi.w < MIN_REGION_SIDE or roi.h < MIN_REGION_SIDE:
        raise CompositeError(f"Region {tuple(roi)} is too small to blend")

    base = to_uint8_bgr(base)
    down = cv2.resize(to_uint8_bgr(restored), (roi.w, roi.h), interpolation=cv2.INTER_LANCZOS4)
    mask = feather_mask((roi.w, roi.h))
    if not mask.any():
        raise CompositeError(f"Feather mask for region {tuple(roi)} is empty")

    try:
        return cv2.seamlessClone(down, base, mask, roi.center, cv2.MIXED_CLONE)
    except cv2.error as exc:
        raise CompositeError(f"Seamless blend failed for region {tuple(roi)}: {exc}") from exc
