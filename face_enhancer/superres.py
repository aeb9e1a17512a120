"""Super-resolution upsampling with a plain cubic-resize fallback."""
from __future__ import annotations

import logging
import os

import cv2
import numpy as np

from .utils import to_uint8_bgr

logger = logging.getLogger(__name__)

SR_ALGORITHMS = ("espcn", "fsrcnn", "lapsrn")
DEFAULT_SR_ALGORITHM = "edsr"


def algorithm_for_model(model_path: str) -> str:
    """Guess the dnn_superres algorithm name from the model filename."""
    name = os.path.basename(model_path).lower()
    for algo in SR_ALGORITHMS:
        if algo in name:
            return algo
    return DEFAULT_SR_ALGORITHM


def try_super_resolve(image: np.ndarray, model_path: str | None, scale: int) -> np.ndarray | None:
    """Run the SR network once. Returns None when the model is missing,
    cannot be loaded, fails at inference or yields the wrong size."""
    if not model_path or not os.path.isfile(model_path):
        logger.info("SR model not found (%s), using cubic resize", model_path)
        return None
    if not hasattr(cv2, "dnn_superres"):
        logger.warning("cv2.dnn_superres unavailable, install opencv-contrib-python")
        return None

    try:
        sr = cv2.dnn_superres.DnnSuperResImpl_create()
        sr.readModel(model_path)
        sr.setModel(algorithm_for_model(model_path), int(scale))
        up = sr.upsample(image)
    except cv2.error as exc:
        logger.warning("SR inference failed with %s: %s", model_path, exc)
        return None

    h, w = image.shape[:2]
    if up is None or up.shape[:2] != (h * scale, w * scale):
        logger.warning("SR model %s returned an unexpected size, using cubic resize", model_path)
        return None
    return up


def upsample(image: np.ndarray, model_path: str | None, scale: int) -> np.ndarray:
    """Upsample by ``scale``; never fails, falls back to ``INTER_CUBIC``."""
    src = to_uint8_bgr(image)
    up = try_super_resolve(src, model_path, scale)
    if up is None:
        up = cv2.resize(src, None, fx=scale, fy=scale, interpolation=cv2.INTER_CUBIC)
    return to_uint8_bgr(up)
