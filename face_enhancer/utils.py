from __future__ import annotations

from typing import NamedTuple

import cv2
import numpy as np
from skimage.util import img_as_ubyte


class Box(NamedTuple):
    """Axis-aligned rectangle in pixel coordinates. Zero area means "not found"."""

    x: int
    y: int
    w: int
    h: int

    @property
    def area(self) -> int:
        return max(0, self.w) * max(0, self.h)

    @property
    def empty(self) -> bool:
        return self.w <= 0 or self.h <= 0

    @property
    def center(self) -> tuple[int, int]:
        return self.x + self.w // 2, self.y + self.h // 2


EMPTY_BOX = Box(0, 0, 0, 0)


def clamp_box(box: Box, shape) -> Box:
    """Intersect ``box`` with the image rectangle described by ``shape``."""
    height, width = shape[:2]
    x0, y0 = max(box.x, 0), max(box.y, 0)
    x1, y1 = min(box.x + box.w, width), min(box.y + box.h, height)
    if x1 <= x0 or y1 <= y0:
        return EMPTY_BOX
    return Box(int(x0), int(y0), int(x1 - x0), int(y1 - y0))


def crop(image: np.ndarray, box: Box) -> np.ndarray:
    return image[box.y:box.y + box.h, box.x:box.x + box.w].copy()


def read_image_any_path(path: str, flags: int = cv2.IMREAD_COLOR) -> np.ndarray | None:
    """Read image from path supporting non-ASCII characters.

    Returns BGR np.ndarray or None if failed.
    """
    try:
        data = np.fromfile(path, dtype=np.uint8)
        if data.size == 0:
            return None
        return cv2.imdecode(data, flags)
    except (OSError, cv2.error):
        return None


def to_uint8_bgr(image: np.ndarray) -> np.ndarray:
    """Convert input image to 3-channel uint8 BGR consistently.

    - Accepts GRAY, BGR or BGRA, any integer depth or float
    - Floats whose maximum is <= 1.0 are treated as [0, 1], others as [0, 255]
    - uint16 is rescaled by bit depth; other integer types by their observed
      maximum when it exceeds 255, negatives clip to 0
    - Already conformant images are returned unchanged
    """
    if image is None:
        raise ValueError("image is None")

    arr = np.asarray(image)
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]
    if arr.ndim not in (2, 3) or (arr.ndim == 3 and arr.shape[2] not in (3, 4)):
        raise ValueError(f"Unsupported image shape {arr.shape}, expected 1, 3 or 4 channels")

    if arr.dtype != np.uint8:
        if arr.dtype.kind == "f":
            max_v = float(np.max(arr)) if arr.size else 0.0
            if max_v <= 1.0:
                arr = img_as_ubyte(np.clip(arr, 0.0, 1.0))
            else:
                arr = np.clip(np.rint(arr), 0, 255).astype(np.uint8)
        elif arr.dtype == np.uint16 or arr.dtype == np.bool_:
            arr = img_as_ubyte(arr)
        else:
            arr = np.clip(arr, 0, None)
            max_v = int(np.max(arr)) if arr.size else 0
            if max_v > 255:
                arr = np.rint(arr.astype(np.float64) * (255.0 / max_v))
            arr = arr.astype(np.uint8)

    if arr.ndim == 2:
        return cv2.cvtColor(arr, cv2.COLOR_GRAY2BGR)
    if arr.shape[2] == 4:
        return cv2.cvtColor(arr, cv2.COLOR_BGRA2BGR)
    return arr


def save_image_any_path(path: str, image: np.ndarray) -> bool:
    """Write image to path supporting non-ASCII characters."""
    try:
        ext = path.split(".")[-1].lower()
        result, encoded = cv2.imencode(f".{ext}", image)
        if not result:
            return False
        encoded.tofile(path)
        return True
    except (OSError, cv2.error):
        return False
