from __future__ import annotations

import numpy as np

from .utils import Box, clamp_box, crop

# padding per side, as a fraction of the face box, to keep hair, ears and chin
PAD_X = 0.35
PAD_Y = 0.45


def padded_roi(face: Box, shape) -> Box:
    px, py = int(face.w * PAD_X), int(face.h * PAD_Y)
    return clamp_box(Box(face.x - px, face.y - py, face.w + 2 * px, face.h + 2 * py), shape)


def extract_region(image: np.ndarray, face: Box) -> tuple[Box, np.ndarray]:
    """Pad ``face`` and cut it out of ``image``.

    The padding shrinks where the box touches an image edge.

    Returns:
        tuple: (roi, crop) where crop is a copy of ``image`` inside roi
    """
    roi = padded_roi(face, image.shape)
    return roi, crop(image, roi)
