"""Restoration chain: super-resolution, gamma, bilateral smoothing, detail
enhancement, local contrast and unsharp masking, in that order.

The face crop gets the full strength settings. The whole frame runs with a
lower SR cap and slightly softer smoothing, detail and sharpening because it
is coarser and more expensive.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

import numpy as np

from . import filters, superres
from .config import EnhanceParams

logger = logging.getLogger(__name__)


class RestoreMode(enum.Enum):
    FACE_CROP = "face"
    WHOLE_FRAME = "frame"


FACE_SCALE_CAP = 8
FRAME_SCALE_CAP = 4
FRAME_SIGMA_FLOOR = 40.0


@dataclass(frozen=True)
class StageSettings:
    scale: int
    gamma: float
    bilateral_d: int
    bilateral_sigma_color: float
    bilateral_sigma_space: float
    detail_sigma_s: float
    detail_sigma_r: float
    clip: float
    sharpen_sigma: float
    sharpen_amount: float


def stage_settings(params: EnhanceParams, mode: RestoreMode, scale: int) -> StageSettings:
    """Resolve the per-stage numbers for ``mode`` from ``params``."""
    if mode is RestoreMode.FACE_CROP:
        return StageSettings(
            scale=min(scale, FACE_SCALE_CAP),
            gamma=params.gamma,
            bilateral_d=params.bilateral_d,
            bilateral_sigma_color=params.bilateral_sigma_color,
            bilateral_sigma_space=params.bilateral_sigma_space,
            detail_sigma_s=params.detail_sigma_s,
            detail_sigma_r=params.detail_sigma_r,
            clip=params.clip,
            sharpen_sigma=1.0,
            sharpen_amount=params.sharp,
        )
    return StageSettings(
        scale=min(scale, FRAME_SCALE_CAP),
        gamma=params.gamma,
        bilateral_d=max(1, params.bilateral_d - 1),
        bilateral_sigma_color=max(FRAME_SIGMA_FLOOR, params.bilateral_sigma_color - 10),
        bilateral_sigma_space=max(FRAME_SIGMA_FLOOR, params.bilateral_sigma_space - 10),
        detail_sigma_s=params.detail_sigma_s * 0.9,
        detail_sigma_r=params.detail_sigma_r * 0.9,
        clip=params.clip,
        sharpen_sigma=0.9,
        sharpen_amount=params.sharp * 0.85,
    )


def restore(image: np.ndarray, params: EnhanceParams, mode: RestoreMode,
            scale: int = 4, sr_model: str | None = None) -> np.ndarray:
    """Run the full chain on ``image``.

    Args:
        image (numpy.ndarray): face crop or whole frame, any depth/channel count
        params (EnhanceParams): tuned parameters
        mode (RestoreMode): selects the per-stage settings
        scale (int): requested upscale factor, capped per mode
        sr_model (str | None): path of the super-resolution model

    Returns:
        numpy.ndarray: BGR uint8 image, ``scale`` times larger than the input
    """
    s = stage_settings(params, mode, scale)
    logger.debug("restore %s: %s", mode.value, s)

    out = superres.upsample(image, sr_model, s.scale)
    out = filters.gamma_correct(out, s.gamma)
    out = filters.bilateral(out, s.bilateral_d, s.bilateral_sigma_color, s.bilateral_sigma_space)
    out = filters.detail_enhance(out, s.detail_sigma_s, s.detail_sigma_r)
    out = filters.clahe_luma(out, s.clip)
    out = filters.unsharp_mask(out, s.sharpen_sigma, s.sharpen_amount)
    return out
