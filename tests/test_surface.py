import math

import numpy as np
import pytest

from lampcap.params import (
    BELLY_MAX,
    SlotOptions,
    SurfaceParams,
    clamp_for_build_volume,
    height_segments,
    radial_segments,
)
from lampcap.surface import (
    MIN_RADIUS,
    base_radius,
    build_surface,
    inner_radius_at,
    outer_radius_at,
)


def test_base_radius_ends_and_belly():
    assert base_radius(0.0, 90.0, 63.0) == pytest.approx(90.0)
    assert base_radius(1.0, 90.0, 63.0) == pytest.approx(63.0)
    mid = base_radius(0.5, 90.0, 63.0)
    assert mid == pytest.approx(76.5 * 1.18)
    assert mid <= 90.0 * BELLY_MAX


def test_inner_radius_is_outer_minus_wall():
    p = SurfaceParams()
    for ang in (0.0, 0.3, 2.0, 5.9):
        assert inner_radius_at(p, 0.4, ang) == pytest.approx(outer_radius_at(p, 0.4, ang) - 0.7)


def test_vertical_ripple_peaks():
    p = SurfaceParams(twist_degrees=0.0)
    peak = math.pi / 2 / p.wave_count
    assert outer_radius_at(p, 0.0, peak) == pytest.approx(90.0 * 1.22)
    assert outer_radius_at(p, 0.0, 3 * peak) == pytest.approx(90.0 * 0.78)


def test_horizontal_ripple_varies_with_height():
    p = SurfaceParams(ripple_direction="horizontal", wave_count=4)
    radii = {round(outer_radius_at(p, v, 0.0), 6) for v in (0.0, 0.05, 0.1)}
    assert len(radii) == 3


def test_inner_radius_floor():
    p = SurfaceParams(base_radius_bottom=1.0, ripple_amplitude=0.9, wall_thickness=5.0)
    for ang in np.linspace(0.0, 2 * math.pi, 50):
        assert inner_radius_at(p, 0.0, float(ang)) >= MIN_RADIUS


@pytest.mark.parametrize("v, ang", [(math.nan, 0.0), (0.0, math.inf)])
def test_non_finite_sample_raises(v, ang):
    with pytest.raises(ValueError):
        inner_radius_at(SurfaceParams(), v, ang)


def test_invalid_params_rejected():
    with pytest.raises(ValueError):
        SurfaceParams(ripple_direction="diagonal")
    with pytest.raises(ValueError):
        SurfaceParams(resolution="ultra")
    with pytest.raises(ValueError):
        SurfaceParams(height_total=math.nan)
    with pytest.raises(ValueError):
        SlotOptions(width=math.inf)


def test_segment_tiers():
    assert radial_segments(SurfaceParams(resolution="low")) == 96
    assert height_segments(SurfaceParams(resolution="high")) == 360


def test_build_surface_grid_and_orientation():
    p = SurfaceParams(resolution="low")
    mesh = build_surface(p)
    radial, rows = radial_segments(p), height_segments(p)
    assert mesh.vertices.shape == ((rows + 1) * radial, 3)
    assert mesh.faces.shape == (2 * rows * radial, 3)
    assert mesh.bounds[0, 2] == pytest.approx(0.0)
    assert mesh.bounds[1, 2] == pytest.approx(p.height_total)

    tri = mesh.vertices[mesh.faces]
    normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
    centroids = tri.mean(axis=1)
    outward = np.einsum("ij,ij->i", normals[:, :2], centroids[:, :2])
    assert (outward > 0).mean() > 0.9


def test_build_surface_matches_oracle():
    p = SurfaceParams(resolution="low")
    mesh = build_surface(p)
    x, y, _ = mesh.vertices[5]
    ang = math.atan2(y, x)
    assert math.hypot(x, y) == pytest.approx(outer_radius_at(p, 0.0, ang))


def test_clamp_for_build_volume():
    small = SurfaceParams(base_radius_bottom=60.0, height_total=150.0)
    assert clamp_for_build_volume(small) is small

    big = SurfaceParams(base_radius_bottom=150.0, height_total=300.0)
    clamped = clamp_for_build_volume(big)
    assert clamped.height_total == pytest.approx(250.0)
    assert clamped.base_radius_bottom < 150.0
    worst = clamped.base_radius_bottom * BELLY_MAX * (1.0 + clamped.ripple_amplitude)
    assert worst <= 122.0 + 1e-9
