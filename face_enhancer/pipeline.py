"""
Single-image enhancement run, modelled as a linear state machine:

    START -> LOADED -> FACE_FOUND | NO_FACE -> RESTORED -> [COMPOSITED]
          -> FINAL_PASSED -> SAVED

Only a run that went through FACE_FOUND (with face-only mode on) may enter
COMPOSITED. Any other transition raises ``StageError``.
"""
from __future__ import annotations

import enum
import logging
from typing import Optional

import cv2
import numpy as np

from . import compositing, detection, filters, region
from .config import EnhanceParams, RunConfig
from .errors import InputError, OutputError, StageError
from .restoration import RestoreMode, restore
from .utils import Box, read_image_any_path, save_image_any_path, to_uint8_bgr

logger = logging.getLogger(__name__)

FINAL_SHARPEN_SIGMA = 0.8


class Stage(enum.Enum):
    START = "start"
    LOADED = "loaded"
    FACE_FOUND = "face_found"
    NO_FACE = "no_face"
    RESTORED = "restored"
    COMPOSITED = "composited"
    FINAL_PASSED = "final_passed"
    SAVED = "saved"


TRANSITIONS = {
    Stage.START: {Stage.LOADED},
    Stage.LOADED: {Stage.FACE_FOUND, Stage.NO_FACE},
    Stage.FACE_FOUND: {Stage.RESTORED},
    Stage.NO_FACE: {Stage.RESTORED},
    Stage.RESTORED: {Stage.COMPOSITED, Stage.FINAL_PASSED},
    Stage.COMPOSITED: {Stage.FINAL_PASSED},
    Stage.FINAL_PASSED: {Stage.SAVED},
    Stage.SAVED: set(),
}


def final_pass(image: np.ndarray, params: EnhanceParams, enabled: bool = True) -> np.ndarray:
    """Whole-image contrast and sharpening touch-up, each gated on its own value."""
    out = to_uint8_bgr(image)
    if not enabled:
        return out
    if params.gclip > 0:
        out = filters.clahe_luma(out, params.gclip)
    if params.gsharp > 0:
        out = filters.unsharp_mask(out, FINAL_SHARPEN_SIGMA, params.gsharp)
    return out


class EnhanceRun:
    """One pass over one image. Build, call ``run()``, discard."""

    def __init__(self, config: RunConfig, params: Optional[EnhanceParams] = None):
        self.config = config
        self.params = params if params is not None else config.params()
        self.stage = Stage.START
        self.base: Optional[np.ndarray] = None
        self.face: Optional[Box] = None
        self.roi: Optional[Box] = None
        self.restored: Optional[np.ndarray] = None
        self.output: Optional[np.ndarray] = None

    # ─── state handling ───────────────────────────────────────────
    def _check(self, *targets: Stage):
        for target in targets:
            if target not in TRANSITIONS[self.stage]:
                raise StageError(f"Illegal transition {self.stage.name} -> {target.name}")
        if Stage.COMPOSITED in targets and self.roi is None:
            raise StageError("Cannot composite without a face region")

    def _advance(self, target: Stage):
        self._check(target)
        logger.debug("%s -> %s", self.stage.name, target.name)
        self.stage = target

    @property
    def compositing(self) -> bool:
        return self.config.face_only and self.face is not None and not self.face.empty

    # ─── stages ───────────────────────────────────────────────────
    # each stage validates its transition first and only moves on once its work succeeded
    def load(self, image: Optional[np.ndarray] = None):
        self._check(Stage.LOADED)
        if image is None:
            image = read_image_any_path(self.config.input)
            if image is None:
                raise InputError(f"Failed to read: {self.config.input}")
        self.base = to_uint8_bgr(image)
        self._advance(Stage.LOADED)

    def locate(self, face: Optional[Box] = None):
        self._check(Stage.FACE_FOUND, Stage.NO_FACE)
        if face is None:
            net = detection.load_face_net(self.config.proto, self.config.weights)
            cascade = detection.load_cascade(self.config.cascade)
            face = detection.locate_face(self.base, net, cascade, self.config.confidence)
        self.face = face
        self._advance(Stage.NO_FACE if face.empty else Stage.FACE_FOUND)

    def restore(self):
        self._check(Stage.RESTORED)
        cfg = self.config
        if self.compositing:
            self.roi, crop = region.extract_region(self.base, self.face)
            self.restored = restore(crop, self.params, RestoreMode.FACE_CROP, cfg.scale, cfg.sr_model)
        else:
            h, w = self.base.shape[:2]
            up = restore(self.base, self.params, RestoreMode.WHOLE_FRAME, cfg.scale, cfg.sr_model)
            self.restored = cv2.resize(up, (w, h), interpolation=cv2.INTER_LANCZOS4)
        self._advance(Stage.RESTORED)

    def composite(self):
        self._check(Stage.COMPOSITED)
        self.restored = compositing.composite(self.base, self.restored, self.roi)
        self._advance(Stage.COMPOSITED)

    def finish(self):
        self._check(Stage.FINAL_PASSED)
        self.output = final_pass(self.restored, self.params, self.config.final_pass)
        self._advance(Stage.FINAL_PASSED)

    def save(self):
        self._check(Stage.SAVED)
        if not save_image_any_path(self.config.output, self.output):
            raise OutputError(f"Failed to save: {self.config.output}")
        self._advance(Stage.SAVED)

    def run(self) -> np.ndarray:
        self.load()
        self.locate()
        self.restore()
        if self.compositing:
            self.composite()
        self.finish()
        self.save()
        return self.output


def enhance_image(image: np.ndarray, config: RunConfig, face: Optional[Box] = None) -> np.ndarray:
    """In-memory run without file I/O; ``face`` skips detection when given."""
    run = EnhanceRun(config)
    run.load(image)
    run.locate(face)
    run.restore()
    if run.compositing:
        run.composite()
    run.finish()
    return run.output


def enhance_file(config: RunConfig) -> np.ndarray:
    return EnhanceRun(config).run()
