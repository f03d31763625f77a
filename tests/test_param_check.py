import pytest


def test_check_parameter_enforces_bounds() -> None:
    from pyanomap.utils.param_check import check_parameter

    # Inclusive lower bound
    check_parameter(1, low=1, param_name="x", include_left=True)
    with pytest.raises(ValueError, match="x"):
        check_parameter(0, low=1, param_name="x", include_left=True)

    # Exclusive lower bound
    with pytest.raises(ValueError, match="x"):
        check_parameter(1, low=1, param_name="x", include_left=False)

    # Inclusive upper bound
    check_parameter(1, high=1, param_name="x", include_right=True)
    with pytest.raises(ValueError, match="x"):
        check_parameter(2, high=1, param_name="x", include_right=True)

    # Exclusive upper bound
    with pytest.raises(ValueError, match="x"):
        check_parameter(1, high=1, param_name="x", include_right=False)


def test_check_parameter_rejects_nan() -> None:
    from pyanomap.utils.param_check import check_parameter

    with pytest.raises(ValueError, match="NaN"):
        check_parameter(float("nan"), 0.0, 1.0, param_name="x")


def test_check_int_rejects_bools_and_floats() -> None:
    from pyanomap.utils.param_check import check_int

    assert check_int(3, 0, param_name="n") == 3
    with pytest.raises(TypeError, match="n"):
        check_int(True, 0, param_name="n")
    with pytest.raises(TypeError, match="n"):
        check_int(1.5, 0, param_name="n")
    with pytest.raises(ValueError, match="n"):
        check_int(-1, 0, param_name="n")
