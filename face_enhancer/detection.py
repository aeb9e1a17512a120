"""
Face locator: SSD face detector through cv2.dnn first, Haar cascade second.

Both tiers report the largest box they find. A tier that cannot be loaded is
simply skipped, and when both come back empty the caller gets ``EMPTY_BOX``.
"""
from __future__ import annotations

import logging
import os
from typing import Iterable, NamedTuple

import cv2
import numpy as np

from .utils import EMPTY_BOX, Box, clamp_box

logger = logging.getLogger(__name__)

DNN_INPUT_SIZE = (300, 300)
DNN_MEAN = (104.0, 177.0, 123.0)

CASCADE_SCALE_FACTOR = 1.1
CASCADE_MIN_NEIGHBORS = 3
CASCADE_MIN_SIZE = (30, 30)


class Detection(NamedTuple):
    confidence: float
    # relative (0-1) corners
    x1: float
    y1: float
    x2: float
    y2: float

    def to_box(self, shape) -> Box:
        h, w = shape[:2]
        x1, y1 = int(self.x1 * w), int(self.y1 * h)
        x2, y2 = int(self.x2 * w), int(self.y2 * h)
        return clamp_box(Box(x1, y1, x2 - x1, y2 - y1), shape)


def largest_box(boxes: Iterable[Box]) -> Box:
    """Largest non-empty box; the first one wins ties."""
    best = EMPTY_BOX
    for box in boxes:
        if not box.empty and box.area > best.area:
            best = box
    return best


def load_face_net(proto: str | None, weights: str | None):
    """Load the Caffe SSD detector, or None when it is not usable."""
    if not proto or not weights or not (os.path.isfile(proto) and os.path.isfile(weights)):
        logger.info("Face detector model not configured or missing")
        return None
    if not hasattr(cv2.dnn, "readNetFromCaffe"):
        logger.warning("cv2.dnn.readNetFromCaffe unavailable in OpenCV %s", cv2.__version__)
        return None
    try:
        net = cv2.dnn.readNetFromCaffe(proto, weights)
    except cv2.error as exc:
        logger.warning("Failed to load face detector (%s, %s): %s", proto, weights, exc)
        return None
    if net.empty():
        return None
    return net


def load_cascade(path: str | None):
    if not path or not os.path.isfile(path):
        return None
    cascade = cv2.CascadeClassifier()
    try:
        loaded = cascade.load(path)
    except cv2.error as exc:
        logger.warning("Failed to load cascade %s: %s", path, exc)
        return None
    return cascade if loaded and not cascade.empty() else None


def parse_detections(raw: np.ndarray) -> list[Detection]:
    """Flatten SSD output of shape (1, 1, N, 7) into ``Detection`` rows."""
    rows = np.asarray(raw, dtype=np.float32).reshape(-1, 7)
    return [Detection(float(r[2]), float(r[3]), float(r[4]), float(r[5]), float(r[6])) for r in rows]


def detect_dnn(image: np.ndarray, net, confidence: float = 0.5) -> Box:
    """Largest face above ``confidence`` according to the SSD detector."""
    blob = cv2.dnn.blobFromImage(image, 1.0, DNN_INPUT_SIZE, DNN_MEAN, swapRB=False, crop=False)
    net.setInput(blob)
    try:
        raw = net.forward()
    except cv2.error as exc:
        logger.warning("Face detector inference failed: %s", exc)
        return EMPTY_BOX
    boxes = (d.to_box(image.shape) for d in parse_detections(raw) if d.confidence >= confidence)
    return largest_box(boxes)


def detect_cascade(image: np.ndarray, cascade) -> Box:
    """Largest face from a multi-scale cascade scan on the equalized gray image."""
    gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    gray = cv2.equalizeHist(gray)
    rects = cascade.detectMultiScale(gray,
                                     scaleFactor=CASCADE_SCALE_FACTOR,
                                     minNeighbors=CASCADE_MIN_NEIGHBORS,
                                     flags=cv2.CASCADE_SCALE_IMAGE,
                                     minSize=CASCADE_MIN_SIZE)
    boxes = (clamp_box(Box(*map(int, r)), image.shape) for r in rects)
    return largest_box(boxes)


def locate_face(image: np.ndarray, net=None, cascade=None, confidence: float = 0.5) -> Box:
    """Two-tier lookup. Either detector may be None (unavailable).

    Returns:
        Box: clamped face box, ``EMPTY_BOX`` when no tier finds one
    """
    box = EMPTY_BOX
    if net is not None:
        box = detect_dnn(image, net, confidence)
        if not box.empty:
            logger.info("Face found by detector: %s", box)
            return box
    if cascade is not None:
        box = detect_cascade(image, cascade)
        if not box.empty:
            logger.info("Face found by cascade: %s", box)
            return box
    logger.info("No face found")
    return EMPTY_BOX
