"""Single-step image filters used by the restoration chain and the final pass.

Every filter accepts any pixel buffer and coerces it to 3-channel uint8 BGR
first, so the result is always 3-channel uint8 BGR.
"""

import cv2
import numpy as np

from .utils import to_uint8_bgr

GAMMA_TOLERANCE = 1e-6
CLAHE_TILES = (8, 8)


def gamma_lut(gamma):
    """Build the 256-entry power-law table ``255 * (i / 255) ** (1 / gamma)``."""
    levels = np.arange(256, dtype=np.float64) / 255.0
    return np.clip(np.rint(255.0 * np.power(levels, 1.0 / gamma)), 0, 255).astype(np.uint8)


def gamma_correct(image, gamma):
    """Apply gamma correction through a lookup table.

    Args:
        image (numpy.ndarray): input image
        gamma (float): gamma value, values within 1e-6 of 1.0 leave the image untouched

    Returns:
        numpy.ndarray: corrected BGR image
    """
    src = to_uint8_bgr(image)
    if abs(gamma - 1.0) < GAMMA_TOLERANCE:
        return src
    return cv2.LUT(src, gamma_lut(gamma))


def bilateral(image, d, sigma_color, sigma_space):
    return cv2.bilateralFilter(to_uint8_bgr(image), int(d), float(sigma_color), float(sigma_space))


def detail_enhance(image, sigma_s, sigma_r):
    """Boost texture with ``cv2.detailEnhance``.

    ``sigma_s`` is clamped to [0, 200] and ``sigma_r`` to [0, 1], the ranges
    OpenCV accepts.
    """
    sigma_s = float(np.clip(sigma_s, 0.0, 200.0))
    sigma_r = float(np.clip(sigma_r, 0.0, 1.0))
    return cv2.detailEnhance(to_uint8_bgr(image), sigma_s=sigma_s, sigma_r=sigma_r)


def clahe_luma(image, clip):
    """Adaptive histogram equalization on the luma channel only.

    The image is converted to YCrCb, CLAHE with an 8x8 tile grid runs on Y and
    the chroma channels are kept as they are.

    Args:
        image (numpy.ndarray): input image
        clip (float): CLAHE clip limit, <= 0 disables the step

    Returns:
        numpy.ndarray: BGR image
    """
    bgr = to_uint8_bgr(image)
    if clip <= 0:
        return bgr
    ycrcb = cv2.cvtColor(bgr, cv2.COLOR_BGR2YCrCb)
    y, cr, cb = cv2.split(ycrcb)
    clahe = cv2.createCLAHE(clipLimit=float(clip), tileGridSize=CLAHE_TILES)
    y = clahe.apply(y)
    return cv2.cvtColor(cv2.merge([y, cr, cb]), cv2.COLOR_YCrCb2BGR)


def unsharp_mask(image, sigma, amount):
    """``image * (1 + amount) - gaussian(image, sigma) * amount``, saturated to uint8."""
    src = to_uint8_bgr(image)
    blurred = cv2.GaussianBlur(src, (0, 0), sigma, sigma)
    return cv2.addWeighted(src, 1.0 + amount, blurred, -amount, 0)
