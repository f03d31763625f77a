import numpy as np
import pytest

from pyanomap.results import Heatmap, ResultItem
from pyanomap.visualization import (
    DrawContext,
    Style,
    alpha_over,
    canvas_from_image,
    centering_offset,
    colorize,
    draw_heatmap,
    draw_heatmaps,
    draw_result,
    gradient_colors,
    new_canvas,
    save_canvas,
)


def _heatmap(values) -> Heatmap:
    return Heatmap.from_array(np.asarray(values, dtype=np.uint8))


def _lut() -> np.ndarray:
    ramp = np.arange(256, dtype=np.uint8)
    return np.stack([ramp, 255 - ramp, np.full(256, 7, dtype=np.uint8)], axis=1)


def test_centering_offset_clamps_at_zero():
    assert centering_offset((4, 4), (2, 2)) == (1, 1)
    assert centering_offset((5, 9), (2, 2)) == (1, 3)
    assert centering_offset((2, 2), (4, 4)) == (0, 0)


def test_gradient_endpoints():
    colors = gradient_colors(np.asarray([[0, 255]], dtype=np.uint8))
    assert colors[0, 0].tolist() == [0, 255, 0]
    assert colors[0, 1].tolist() == [255, 0, 0]


def test_colorize_uses_lut_and_alpha():
    raster = np.asarray([[0, 10], [200, 255]], dtype=np.uint8)
    rgba = colorize(raster, Style(color_fill_alpha=33, colormap256=_lut()))
    assert rgba.shape == (2, 2, 4)
    assert rgba[0, 1].tolist() == [10, 245, 7, 33]
    assert rgba[1, 0].tolist() == [200, 55, 7, 33]


def test_small_raster_is_centered_on_canvas():
    canvas = new_canvas(4, 4)
    draw_heatmap(_heatmap([[255, 255], [255, 255]]), DrawContext(), canvas)

    painted = canvas[..., 3] > 0
    expected = np.zeros((4, 4), dtype=bool)
    expected[1:3, 1:3] = True
    np.testing.assert_array_equal(painted, expected)
    assert canvas[1, 1].tolist() == [255, 0, 0, 120]


def test_alpha_over_blends_onto_opaque_background():
    canvas = new_canvas(3, 1, (0, 0, 0, 255))
    draw_heatmap(_heatmap([[255]]), None, canvas)

    # Only the centered pixel changes: red at alpha 120 over opaque black.
    assert canvas[0, 0].tolist() == [0, 0, 0, 255]
    assert canvas[0, 1].tolist() == [120, 0, 0, 255]
    assert canvas[0, 2].tolist() == [0, 0, 0, 255]


def test_alpha_over_skips_transparent_overlay_pixels():
    canvas = new_canvas(2, 2, (10, 20, 30, 255))
    before = canvas.copy()
    overlay = np.zeros_like(canvas)
    alpha_over(canvas, overlay)
    np.testing.assert_array_equal(canvas, before)

    overlay[0, 0] = (1, 2, 3, 255)
    alpha_over(canvas, overlay)
    assert canvas[0, 0].tolist() == [1, 2, 3, 255]
    assert canvas[1, 1].tolist() == [10, 20, 30, 255]


def test_alpha_over_truncates_blended_channels():
    canvas = new_canvas(1, 1, (200, 200, 200, 255))
    overlay = np.zeros_like(canvas)
    overlay[0, 0] = (255, 0, 0, 100)
    alpha_over(canvas, overlay)

    # Exact red is 221.57 and green/blue 121.57; both are truncated.
    assert canvas[0, 0].tolist() == [221, 121, 121, 255]


def test_lut_style_from_context_and_local_override():
    heatmap = _heatmap([[10]])
    ctx = DrawContext(heatmap_style=Style(color_fill_alpha=255, colormap256=_lut()))

    canvas = new_canvas(1, 1)
    draw_heatmap(heatmap, ctx, canvas)
    assert canvas[0, 0].tolist() == [10, 245, 7, 255]

    canvas = new_canvas(1, 1)
    draw_heatmap(heatmap.with_style(Style(color_fill_alpha=255)), ctx, canvas)
    # Local style without a LUT falls back to the gradient, not to the context LUT.
    expected = gradient_colors(np.asarray([[10]], dtype=np.uint8))[0, 0].tolist()
    assert canvas[0, 0].tolist() == expected + [255]


def test_rendering_is_deterministic():
    rng = np.random.default_rng(3)
    heatmap = Heatmap.from_array(rng.integers(0, 256, size=(5, 7), dtype=np.uint8))
    ctx = DrawContext(heatmap_style=Style(color_fill_alpha=90))

    first = new_canvas(9, 8, (40, 50, 60, 255))
    second = new_canvas(9, 8, (40, 50, 60, 255))
    draw_heatmap(heatmap, ctx, first)
    draw_heatmap(heatmap, ctx, second)
    np.testing.assert_array_equal(first, second)


def test_oversized_raster_is_clipped_not_an_error():
    canvas = new_canvas(2, 3)
    draw_heatmap(_heatmap(np.full((6, 5), 255)), None, canvas)
    assert canvas.shape == (3, 2, 4)
    assert bool((canvas[..., 3] == 120).all())


def test_later_heatmaps_paint_over_earlier_ones():
    opaque = DrawContext(heatmap_style=Style(color_fill_alpha=255))
    canvas = new_canvas(3, 3)
    draw_heatmaps([_heatmap(np.zeros((3, 3))), _heatmap([[255]])], opaque, canvas)

    assert canvas[0, 0].tolist() == [0, 255, 0, 255]
    assert canvas[1, 1].tolist() == [255, 0, 0, 255]

    canvas = new_canvas(2, 2)
    draw_result(ResultItem(), opaque, canvas)
    assert int(canvas.max()) == 0


def test_canvas_validation():
    with pytest.raises(ValueError, match=r"\(H,W,4\)"):
        draw_heatmap(_heatmap([[1]]), None, np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(ValueError, match="uint8"):
        draw_heatmap(_heatmap([[1]]), None, np.zeros((2, 2, 4), dtype=np.float32))
    with pytest.raises(TypeError):
        draw_heatmap(_heatmap([[1]]), None, [[0, 0, 0, 0]])


def test_canvas_io_round_trip(tmp_path):
    rgb = np.zeros((3, 4, 3), dtype=np.uint8)
    rgb[..., 1] = 80
    canvas = canvas_from_image(rgb)
    assert canvas.shape == (3, 4, 4)
    assert canvas[0, 0].tolist() == [0, 80, 0, 255]

    path = save_canvas(canvas, tmp_path / "out" / "overlay.png")
    loaded = canvas_from_image(path)
    np.testing.assert_array_equal(loaded, canvas)
