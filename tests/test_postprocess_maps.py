import numpy as np
import pytest

from pyanomap.errors import ShapeMismatchError
from pyanomap.postprocess.maps import (
    apply_edge_ignore,
    clamp_unit,
    mean_score,
    parse_resize_filter,
    peak_score,
    quantize_u8,
    resize_raster,
    squeeze_channel,
)


def test_quantize_truncates_instead_of_rounding():
    values = np.asarray([0.5, 1.2, -0.3, 0.2, 0.0, 1.0], dtype=np.float32)
    assert quantize_u8(values).tolist() == [127, 255, 0, 51, 0, 255]


def test_quantize_matches_floor_of_clamped_values():
    rng = np.random.default_rng(0)
    values = rng.uniform(-0.5, 1.5, size=(16, 16)).astype(np.float32)
    expected = np.floor(np.clip(values, 0.0, 1.0) * np.float32(255.0)).astype(np.uint8)
    np.testing.assert_array_equal(quantize_u8(values), expected)


def test_clamp_unit_maps_nan_to_zero():
    out = clamp_unit(np.asarray([np.nan, -1.0, 0.25, 3.0], dtype=np.float32))
    assert out.dtype == np.float32
    assert out.tolist() == [0.0, 0.0, 0.25, 1.0]


def test_squeeze_channel_accepts_optional_singleton_axis():
    assert squeeze_channel(np.zeros((3, 5))).shape == (3, 5)
    assert squeeze_channel(np.zeros((1, 3, 5))).shape == (3, 5)


@pytest.mark.parametrize("shape", [(2, 3, 5), (5,), (1, 1, 3, 5)])
def test_squeeze_channel_rejects_other_layouts(shape):
    with pytest.raises(ShapeMismatchError, match="Item 4"):
        squeeze_channel(np.zeros(shape), index=4)


def test_edge_ignore_zeroes_left_and_right_columns_only():
    m = np.full((3, 6), 0.9, dtype=np.float32)
    out = apply_edge_ignore(m, 2)
    assert float(out[:, :2].max()) == 0.0
    assert float(out[:, 4:].max()) == 0.0
    np.testing.assert_allclose(out[:, 2:4], 0.9)
    # Input left untouched.
    assert float(m.min()) == pytest.approx(0.9)


def test_edge_ignore_zero_is_noop_and_wide_band_suppresses_all():
    m = np.full((2, 4), 0.5, dtype=np.float32)
    np.testing.assert_array_equal(apply_edge_ignore(m, 0), m)
    assert float(apply_edge_ignore(m, 2).max()) == 0.0


def test_peak_score_folds_from_zero():
    assert peak_score(np.zeros((4, 4), dtype=np.float32)) == 0.0
    assert peak_score(np.zeros((0,), dtype=np.float32)) == 0.0
    assert peak_score(np.asarray([0.1, 0.7, 0.3])) == pytest.approx(0.7)


def test_mean_score_handles_empty_maps():
    assert mean_score(np.zeros((0, 3))) == 0.0
    assert mean_score(np.asarray([[0.0, 1.0], [0.5, 0.5]])) == pytest.approx(0.5)


def test_resize_raster_returns_uint8_of_target_size():
    raster = np.full((4, 8), 200, dtype=np.uint8)
    out = resize_raster(raster, (16, 2), filter="triangle")
    assert out.shape == (2, 16)
    assert out.dtype == np.uint8
    # A constant raster stays constant under an averaging filter.
    assert int(out.min()) == 200 and int(out.max()) == 200


def test_parse_resize_filter_aliases():
    assert parse_resize_filter("Lanczos3") == "lanczos"
    assert parse_resize_filter("CatmullRom") == "cubic"
    assert parse_resize_filter("box") == "box"
    with pytest.raises(ValueError, match="Unknown resize filter"):
        parse_resize_filter("gaussian")
