from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Optional

SCALE_MIN = 2
SCALE_MAX = 8
GAMMA_MIN = 0.1


@dataclass(frozen=True)
class EnhanceParams:
    """Tunable values for the restoration chain and the final pass.

    The defaults give a natural look; see ``select_params`` for overrides.
    """

    # local contrast (CLAHE on luma) / sharpening inside the restored region
    clip: float = 1.2
    sharp: float = 0.35

    # final pass over the whole output, 0 disables
    gclip: float = 0.0
    gsharp: float = 0.15

    gamma: float = 1.0

    # edge preserving smoothing
    bilateral_d: int = 7
    bilateral_sigma_color: float = 55.0
    bilateral_sigma_space: float = 55.0

    # cv2.detailEnhance
    detail_sigma_s: float = 8.0
    detail_sigma_r: float = 0.08


# A single shared default instance for simple use-cases
natural_params = EnhanceParams()


def select_params(**overrides) -> EnhanceParams:
    """Build an ``EnhanceParams`` from the natural defaults.

    ``None`` and negative values are ignored, gamma below ``GAMMA_MIN`` is
    ignored. Unknown names raise ``TypeError``.
    """
    known = {f.name for f in fields(EnhanceParams)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")

    accepted = {}
    for name, value in overrides.items():
        if value is None or value < 0:
            continue
        if name == "gamma" and value < GAMMA_MIN:
            continue
        accepted[name] = type(getattr(natural_params, name))(value)
    return replace(natural_params, **accepted)


def clamp_scale(scale: int) -> int:
    return max(SCALE_MIN, min(SCALE_MAX, int(scale)))


@dataclass(frozen=True)
class RunConfig:
    """Everything a single run needs. Read-only once built."""

    input: str
    output: str
    sr_model: Optional[str] = "models/EDSR_x4.pb"
    proto: Optional[str] = "models/opencv_face_detector.prototxt"
    weights: Optional[str] = "models/opencv_face_detector.caffemodel"
    cascade: Optional[str] = None
    scale: int = 4
    confidence: float = 0.5
    face_only: bool = True
    final_pass: bool = True

    # manual overrides, None keeps the natural default
    clip: Optional[float] = None
    gclip: Optional[float] = None
    sharp: Optional[float] = None
    gsharp: Optional[float] = None
    gamma: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "scale", clamp_scale(self.scale))

    def params(self) -> EnhanceParams:
        return select_params(
            clip=self.clip,
            gclip=self.gclip,
            sharp=self.sharp,
            gsharp=self.gsharp,
            gamma=self.gamma,
        )
