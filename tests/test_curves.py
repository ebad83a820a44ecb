"""Unit tests for brightness-modulated sine traces.

Tests:
    - Amplitude is non-increasing in brightness and always > 0
    - White threshold clamps bright cells to a constant amplitude
    - Envelope interpolation hits anchors, stays within anchor range
    - One trace per row: exactly `cols` cycles, continuous across cells
    - Uniform input → uniform amplitude along the row
    - Pure white input → small but nonzero wave
"""

import numpy as np
import pytest

from sinewave_art.renderer import curves
from sinewave_art.renderer.grid import map_grid

ENVELOPE_MODES = ["cosine", "linear", "pchip"]


@pytest.fixture
def random_grid():
    img = np.random.default_rng(7).integers(0, 256, (60, 90), dtype=np.uint8)
    return map_grid(img, rows=3, cols=9)


# ============================================================
# amplitude_for_brightness
# ============================================================

def test_amplitude_monotone_non_increasing():
    b = np.linspace(0, 255, 1021)
    for threshold in (0, 64, 200, 255):
        a = curves.amplitude_for_brightness(b, 10.0, threshold, 0.1)
        assert np.all(np.diff(a) <= 1e-12), f"not monotone for threshold={threshold}"


def test_amplitude_endpoints():
    a = curves.amplitude_for_brightness([0, 255], 10.0, 255, 0.1)
    assert a[0] == pytest.approx(10.0)
    assert a[1] == pytest.approx(1.0)


def test_amplitude_floor_strictly_positive():
    for threshold in (0, 128, 255):
        for frac in (1e-3, 0.1, 1.0):
            a = curves.amplitude_for_brightness(255, 4.5, threshold, frac)
            assert a > 0.0


def test_threshold_clamps_bright_cells():
    b = np.array([200, 220, 255])
    a = curves.amplitude_for_brightness(b, 10.0, 200, 0.1)
    assert np.allclose(a, a[0])
    assert a[0] > 1.0, "clamped amplitude sits above the floor when threshold < 255"


def test_threshold_zero_draws_full_amplitude_everywhere():
    a = curves.amplitude_for_brightness(np.array([0, 128, 255]), 8.0, 0, 0.1)
    assert np.allclose(a, 8.0)


def test_amplitude_clips_out_of_range_brightness():
    a = curves.amplitude_for_brightness(np.array([-20, 300]), 10.0, 255, 0.1)
    assert a[0] == pytest.approx(10.0)
    assert a[1] == pytest.approx(1.0)


def test_max_amplitude_fills_ninety_percent_of_band():
    assert curves.max_amplitude_for(20) == pytest.approx(9.0)


# ============================================================
# amplitude_envelope
# ============================================================

@pytest.mark.parametrize("mode", ENVELOPE_MODES)
def test_envelope_hits_anchors(mode):
    centers = np.array([5.0, 15.0, 25.0, 35.0])
    amps = np.array([1.0, 4.0, 2.0, 6.0])
    np.testing.assert_allclose(curves.amplitude_envelope(centers, centers, amps, mode), amps)


@pytest.mark.parametrize("mode", ENVELOPE_MODES)
def test_envelope_within_neighbour_range(mode):
    centers = np.array([5.0, 15.0, 25.0, 35.0])
    amps = np.array([1.0, 4.0, 2.0, 6.0])
    xs = np.linspace(0.0, 40.0, 801)
    env = curves.amplitude_envelope(xs, centers, amps, mode)

    assert np.all(env >= amps.min() - 1e-9)
    assert np.all(env <= amps.max() + 1e-9)
    for i in range(len(centers) - 1):
        seg = env[(xs >= centers[i]) & (xs <= centers[i + 1])]
        lo, hi = sorted((amps[i], amps[i + 1]))
        assert np.all(seg >= lo - 1e-9) and np.all(seg <= hi + 1e-9)


@pytest.mark.parametrize("mode", ENVELOPE_MODES)
def test_envelope_constant_outside_anchors(mode):
    centers = np.array([5.0, 15.0])
    amps = np.array([2.0, 3.0])
    env = curves.amplitude_envelope(np.array([0.0, 2.5, 17.0, 20.0]), centers, amps, mode)
    np.testing.assert_allclose(env, [2.0, 2.0, 3.0, 3.0])


def test_envelope_cosine_has_flat_tangent_at_anchors():
    centers = np.array([5.0, 15.0, 25.0])
    amps = np.array([1.0, 5.0, 2.0])
    eps = 1e-4
    c = centers[1]
    left = (curves.amplitude_envelope(c, centers, amps) - curves.amplitude_envelope(c - eps, centers, amps)) / eps
    right = (curves.amplitude_envelope(c + eps, centers, amps) - curves.amplitude_envelope(c, centers, amps)) / eps
    assert abs(left) < 1e-2
    assert abs(right) < 1e-2


def test_envelope_single_anchor():
    env = curves.amplitude_envelope(np.linspace(0, 10, 5), np.array([5.0]), np.array([3.0]))
    assert np.all(env == 3.0)


def test_envelope_unknown_mode():
    with pytest.raises(ValueError, match="Unknown envelope mode"):
        curves.amplitude_envelope(np.zeros(3), np.array([0.0, 1.0]), np.array([1.0, 1.0]), "spline")


# ============================================================
# RowCurve
# ============================================================

def _uniform_curve(value=128, size=100, rows=5, cols=10, row=0, **kwargs):
    img = np.full((size, size), value, dtype=np.uint8)
    return curves.RowCurve.from_grid(map_grid(img, rows, cols), row, **kwargs)


def test_row_curve_centered_on_band():
    img = np.full((100, 100), 128, dtype=np.uint8)
    grid = map_grid(img, rows=5, cols=10)
    centers = [curves.RowCurve.from_grid(grid, r).center_y for r in range(5)]
    assert centers == [10.0, 30.0, 50.0, 70.0, 90.0]


def test_row_curve_completes_exactly_cols_cycles():
    curve = _uniform_curve(cols=10)
    xs = (np.arange(1000) + 0.5) * 0.1
    signs = np.sign(curve.offset(xs))
    crossings = int(np.sum(np.diff(signs) != 0))
    assert crossings == 2 * 10 - 1


def test_row_curve_one_period_per_cell():
    curve = _uniform_curve(cols=10)
    edges = np.arange(0, 101, 10, dtype=np.float64)
    np.testing.assert_allclose(curve.offset(edges), 0.0, atol=1e-9)
    # Starts upward on screen: y decreases just after each cell's left edge
    assert np.all(curve(edges[:-1] + 0.5) < curve.center_y)


def test_row_curve_uniform_amplitude():
    curve = _uniform_curve(value=128)
    xs = np.linspace(0, 100, 1001)
    env = curve.envelope(xs)
    expected = curves.amplitude_for_brightness(128, 9.0, 255, 0.1)
    np.testing.assert_allclose(env, expected)


@pytest.mark.parametrize("mode", ENVELOPE_MODES)
def test_row_curve_phase_continuity(random_grid, mode):
    for row in range(random_grid.rows):
        curve = curves.RowCurve.from_grid(random_grid, row, envelope_mode=mode)
        for x in random_grid.col_edges[1:-1].astype(np.float64):
            eps = 1e-7
            left = curve(np.array([x - eps]))[0]
            right = curve(np.array([x + eps]))[0]
            assert abs(left - right) < 1e-4, f"jump at x={x} row={row}"


@pytest.mark.parametrize("mode", ENVELOPE_MODES)
def test_row_curve_stays_inside_band(random_grid, mode):
    for row in range(random_grid.rows):
        curve = curves.RowCurve.from_grid(random_grid, row, envelope_mode=mode)
        pts = curve.sample(4)
        half = curves.max_amplitude_for(random_grid.nominal_row_height())
        assert np.all(np.abs(pts[:, 1] - curve.center_y) <= half + 1e-9)


def test_row_curve_white_input_never_flat():
    curve = _uniform_curve(value=255, size=50, rows=5, cols=5)
    ys = curve.sample(4)[:, 1]
    assert np.ptp(ys) > 0.0
    assert np.all(curve.envelope(np.linspace(0, 50, 101)) > 0.0)


def test_row_curve_darker_row_swings_wider():
    img = np.full((40, 40), 255, dtype=np.uint8)
    img[20:, :] = 0
    grid = map_grid(img, rows=2, cols=4)
    bright = curves.RowCurve.from_grid(grid, 0)
    dark = curves.RowCurve.from_grid(grid, 1)
    assert np.ptp(dark.sample()[:, 1]) > np.ptp(bright.sample()[:, 1])


def test_row_curve_sample_spacing():
    curve = _uniform_curve(size=100)
    pts = curve.sample(4)
    assert pts.shape == (401, 2)
    assert pts[0, 0] == 0.0
    assert pts[-1, 0] == pytest.approx(100.0)
    assert np.allclose(np.diff(pts[:, 0]), 0.25)


def test_row_curve_remainder_cell_keeps_one_period():
    img = np.full((20, 105), 128, dtype=np.uint8)
    grid = map_grid(img, rows=1, cols=10)
    curve = curves.RowCurve.from_grid(grid, 0)

    assert grid.col_edges.tolist() == [0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 105]
    assert curve.cycles == 10
    np.testing.assert_allclose(curve.offset(grid.col_edges.astype(np.float64)), 0.0, atol=1e-9)

    # Peak a quarter of the way into every cell, the wide last one included
    quarter = grid.col_edges[:-1] + np.diff(grid.col_edges) / 4.0
    np.testing.assert_allclose(curve.offset(quarter), curve.envelope(quarter))


def test_row_curve_remainder_cell_sample_spans_width():
    img = np.full((20, 105), 128, dtype=np.uint8)
    curve = curves.RowCurve.from_grid(map_grid(img, rows=1, cols=10), 0)
    pts = curve.sample(2)
    assert pts[-1, 0] == pytest.approx(105.0)
    assert abs(pts[-1, 1] - curve.center_y) < 1e-9
