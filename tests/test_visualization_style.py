import numpy as np
import pytest

from pyanomap.errors import StyleError
from pyanomap.visualization import (
    BUILTIN_HEATMAP_STYLE,
    DEFAULT_FILL_ALPHA,
    Style,
    colormap_lut,
    resolve_style,
)


def _lut() -> np.ndarray:
    ramp = np.arange(256, dtype=np.uint8)
    return np.stack([ramp, 255 - ramp, np.full(256, 7, dtype=np.uint8)], axis=1)


def test_resolve_style_precedence():
    local = Style(color_fill_alpha=10)
    global_default = Style(color_fill_alpha=20)

    assert resolve_style(local, global_default, BUILTIN_HEATMAP_STYLE).color_fill_alpha == 10
    assert resolve_style(None, global_default, BUILTIN_HEATMAP_STYLE).color_fill_alpha == 20
    assert resolve_style(None, None, BUILTIN_HEATMAP_STYLE) is BUILTIN_HEATMAP_STYLE
    assert BUILTIN_HEATMAP_STYLE.color_fill_alpha == DEFAULT_FILL_ALPHA == 120


def test_resolve_style_fills_unset_fields_from_builtin():
    local = Style(colormap256=_lut())
    resolved = resolve_style(local, Style(color_fill_alpha=20), BUILTIN_HEATMAP_STYLE)

    # The local style wins as a whole; missing fields come from the builtin.
    assert resolved.color_fill_alpha == 120
    np.testing.assert_array_equal(resolved.colormap256, _lut())

    builtin = Style(color_fill_alpha=200, colormap256=_lut())
    resolved = resolve_style(Style(color_fill_alpha=5), None, builtin)
    assert resolved.color_fill_alpha == 5
    np.testing.assert_array_equal(resolved.colormap256, _lut())


@pytest.mark.parametrize("alpha", [-1, 256, 1.5, True])
def test_style_rejects_invalid_alpha(alpha):
    with pytest.raises(StyleError):
        Style(color_fill_alpha=alpha)


def test_style_rejects_malformed_colormap():
    with pytest.raises(StyleError, match=r"\(256, 3\)"):
        Style(colormap256=np.zeros((255, 3), dtype=np.uint8))
    with pytest.raises(StyleError):
        Style(colormap256=np.full((256, 3), 300))


def test_style_equality_and_copy():
    lut = _lut()
    style = Style(color_fill_alpha=50, colormap256=lut)
    lut[0] = (1, 2, 3)

    assert style.colormap256[0].tolist() == [0, 255, 7]
    assert style == Style(color_fill_alpha=50, colormap256=_lut())
    assert style != Style(color_fill_alpha=50)
    assert style.with_alpha(60).color_fill_alpha == 60
    assert style.with_colormap(None).colormap256 is None


def test_colormap_lut_from_opencv_is_rgb():
    lut = colormap_lut("jet")
    assert lut.shape == (256, 3)
    assert lut.dtype == np.uint8
    # JET runs from blue (low) to red (high).
    assert lut[0, 2] > lut[0, 0]
    assert lut[255, 0] > lut[255, 2]

    style = Style.from_colormap_name("turbo", alpha=90)
    assert style.color_fill_alpha == 90
    assert style.colormap256.shape == (256, 3)

    with pytest.raises(StyleError, match="Unknown OpenCV colormap"):
        colormap_lut("not-a-colormap")
