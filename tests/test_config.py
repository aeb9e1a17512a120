import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import dataclasses

import pytest

from face_enhancer.config import (
    EnhanceParams,
    RunConfig,
    clamp_scale,
    natural_params,
    select_params,
)


def test_natural_defaults():
    p = natural_params
    assert (p.clip, p.gclip, p.sharp, p.gsharp, p.gamma) == (1.2, 0.0, 0.35, 0.15, 1.0)
    assert (p.detail_sigma_s, p.detail_sigma_r) == (8.0, 0.08)
    assert (p.bilateral_d, p.bilateral_sigma_color, p.bilateral_sigma_space) == (7, 55.0, 55.0)


def test_select_params_without_overrides_returns_defaults():
    assert select_params() == natural_params
    assert select_params(clip=None, gamma=None) == natural_params


def test_select_params_applies_valid_overrides():
    p = select_params(clip=2.5, gclip=1.0, sharp=0.0, gsharp=0.4, gamma=1.8, bilateral_d=9)
    assert p.clip == 2.5
    assert p.gclip == 1.0
    assert p.sharp == 0.0
    assert p.gsharp == 0.4
    assert p.gamma == 1.8
    assert p.bilateral_d == 9 and isinstance(p.bilateral_d, int)


def test_select_params_ignores_invalid_values():
    p = select_params(clip=-1, sharp=-0.5, gamma=0.05)
    assert p.clip == natural_params.clip
    assert p.sharp == natural_params.sharp
    assert p.gamma == natural_params.gamma


def test_select_params_rejects_unknown_names():
    with pytest.raises(TypeError):
        select_params(contrast=1.0)


def test_params_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        natural_params.clip = 3.0


@pytest.mark.parametrize("raw, expected", [(1, 2), (2, 2), (4, 4), (8, 8), (10, 8), (-3, 2)])
def test_clamp_scale(raw, expected):
    assert clamp_scale(raw) == expected


def test_run_config_clamps_scale_and_builds_params():
    cfg = RunConfig(input="in.jpg", output="out.jpg", scale=10, gclip=2.0, gamma=2.2)
    assert cfg.scale == 8
    p = cfg.params()
    assert isinstance(p, EnhanceParams)
    assert p.gclip == 2.0
    assert p.gamma == 2.2
    assert p.clip == natural_params.clip
