import json
import math

import numpy as np
import pytest

from pyanomap.errors import BufferConstructionError
from pyanomap.results import (
    Heatmap,
    InstanceMeta,
    Mask,
    Prob,
    ResultItem,
    Text,
    results_to_jsonable,
)
from pyanomap.visualization import Style


def test_heatmap_from_buffer_is_row_major():
    heatmap = Heatmap.from_buffer([0, 1, 2, 3, 4, 5], width=3, height=2)
    assert heatmap.dimensions == (3, 2)
    assert heatmap.map[1, 0] == 3
    assert heatmap.to_bytes() == bytes(range(6))


def test_heatmap_from_buffer_size_mismatch_raises():
    with pytest.raises(BufferConstructionError, match="2x2"):
        Heatmap.from_buffer(b"\x00\x01\x02", width=2, height=2)
    with pytest.raises(BufferConstructionError):
        Heatmap.from_buffer([0, 256, 0, 0], width=2, height=2)
    # Still a ValueError for callers that guard shape problems generically.
    with pytest.raises(ValueError):
        Heatmap.from_buffer([], width=1, height=1)


def test_heatmap_rejects_non_2d_or_non_uint8():
    with pytest.raises(BufferConstructionError):
        Heatmap.from_array(np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(BufferConstructionError):
        Heatmap.from_array(np.zeros((2, 2), dtype=np.float32))


def test_heatmap_owns_a_read_only_copy():
    source = np.zeros((2, 3), dtype=np.uint8)
    heatmap = Heatmap.from_array(source)
    source[0, 0] = 99

    assert heatmap.map[0, 0] == 0
    assert not heatmap.map.flags.writeable
    with pytest.raises(ValueError):
        heatmap.map[0, 0] = 1


@pytest.mark.parametrize(
    "raw, expected",
    [(0.4, 0.4), (1.5, 1.0), (-0.2, 0.0), (math.nan, 0.0)],
)
def test_confidence_is_clamped(raw, expected):
    heatmap = Heatmap.from_array(np.zeros((1, 1), dtype=np.uint8)).with_confidence(raw)
    assert heatmap.confidence == pytest.approx(expected)
    assert Prob(confidence=raw).confidence == pytest.approx(expected)
    assert InstanceMeta(confidence=raw).confidence == pytest.approx(expected)


def test_with_setters_return_new_values():
    base = Heatmap.from_array(np.zeros((2, 2), dtype=np.uint8))
    styled = base.with_uid(3).with_id(7).with_name("anomaly").with_style(Style(color_fill_alpha=10))

    assert base.uid is None and base.style is None
    assert (styled.uid, styled.id, styled.name) == (3, 7, "anomaly")
    assert styled.style.color_fill_alpha == 10
    assert isinstance(styled, Heatmap)
    assert "dimensions=(2, 2)" in repr(styled)


def test_equality_compares_raster_only():
    a = Heatmap.from_array(np.full((2, 2), 5, dtype=np.uint8)).with_name("a")
    b = Heatmap.from_array(np.full((2, 2), 5, dtype=np.uint8)).with_name("b").with_confidence(0.9)
    c = Heatmap.from_array(np.full((2, 2), 6, dtype=np.uint8))

    assert a == b
    assert a != c
    assert Mask.from_array(a.map) != a


def test_result_item_fields_are_independent_and_optional():
    empty = ResultItem()
    assert empty.heatmaps is None and empty.probs is None and empty.masks is None
    assert empty.to_dict() == {}

    item = empty.with_probs([Prob(confidence=0.7, name="peak_anomaly_score", id=0)])
    assert empty.probs is None
    assert item.prob("peak_anomaly_score").confidence == pytest.approx(0.7)
    assert item.prob("missing") is None


def test_serialization_excludes_render_only_fields():
    heatmap = Heatmap.from_array(np.zeros((4, 4), dtype=np.uint8)).with_confidence(0.5)
    item = ResultItem(
        heatmaps=[heatmap],
        masks=[Mask.from_array(np.zeros((4, 4), dtype=np.uint8))],
        images=[np.zeros((4, 4, 3), dtype=np.uint8)],
        probs=[Prob(confidence=0.25, name="mean_anomaly_score", id=1)],
        texts=[Text("scratch", confidence=0.8)],
    )

    payload = results_to_jsonable([item])
    assert payload == [
        {
            "probs": [{"confidence": 0.25, "name": "mean_anomaly_score", "id": 1}],
            "texts": [{"text": "scratch", "confidence": pytest.approx(0.8)}],
        }
    ]
    json.dumps(payload)
    assert "heatmaps=" in repr(item) and "images=[1 image(s)]" in repr(item)
