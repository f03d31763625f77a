import logging

from pyanomap.reporting.timing import StageTimer


def test_stage_timer_accumulates_in_first_seen_order() -> None:
    timer = StageTimer(label="unit")
    with timer.stage("preprocess"):
        pass
    with timer.stage("inference"):
        pass
    with timer.stage("preprocess"):
        pass

    payload = timer.as_dict()
    assert list(payload) == ["preprocess_s", "inference_s"]
    assert all(isinstance(v, float) and v >= 0.0 for v in payload.values())
    assert timer.count("preprocess") == 2
    assert timer.count("postprocess") == 0
    assert timer.total("postprocess") == 0.0


def test_stage_timer_records_failed_stage() -> None:
    timer = StageTimer()
    try:
        with timer.stage("inference"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert timer.count("inference") == 1


def test_stage_timer_summary_logs(caplog) -> None:
    timer = StageTimer(label="glass")
    timer.add("postprocess", 0.002)
    with caplog.at_level(logging.INFO, logger="pyanomap.reporting.timing"):
        timer.summary()
    assert "[glass] postprocess: 1 call(s)" in caplog.text
