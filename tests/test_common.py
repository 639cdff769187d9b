import io

import numpy as np
import pytest

from noakit.common import (
    check_path_exists,
    find_line,
    flatten_tensors,
    get_numerics,
    load_tensor,
    mean_error,
    relative_error,
    stack,
    unflatten_like,
    vmap,
)


def test_check_path_exists_true(tmp_path):
    target = tmp_path / "data.bin"
    target.write_bytes(b"x")
    assert check_path_exists(target) is True


def test_check_path_exists_false_reports(tmp_path, capsys):
    assert check_path_exists(tmp_path / "missing") is False
    assert "Cannot find" in capsys.readouterr().err


def test_load_tensor_round_trip(tmp_path):
    array = np.arange(12, dtype=np.float64).reshape(3, 4)
    path = tmp_path / "t.npy"
    np.save(path, array)
    loaded = load_tensor(path)
    assert np.array_equal(loaded, array)
    assert loaded.dtype == array.dtype


def test_load_tensor_missing(tmp_path):
    assert load_tensor(tmp_path / "nothing.npy") is None


def test_load_tensor_corrupt(tmp_path):
    path = tmp_path / "bad.npy"
    path.write_bytes(b"not an array at all")
    assert load_tensor(path) is None


def test_find_line_returns_first_match():
    stream = io.StringIO("header\nvalue 1\nvalue 2\n")
    assert find_line(stream, r"value") == "value 1"


def test_find_line_no_match():
    stream = io.StringIO("a\nb\n")
    assert find_line(stream, r"zzz") is None


def test_get_numerics_parses():
    assert get_numerics("x 1.5 -2E+3 7", 3) == [1.5, -2e3, 7.0]


def test_get_numerics_wrong_count():
    assert get_numerics("1 2 3", 2) is None


def test_vmap_keeps_shape_and_dtype():
    values = np.arange(6, dtype=np.int64).reshape(2, 3)
    result = vmap(values, lambda x: x + 0.7)
    assert result.shape == values.shape
    assert result.dtype == values.dtype
    assert np.array_equal(result, values)


def test_vmap_applies_function():
    values = np.linspace(0.0, 1.0, 5)
    assert np.allclose(vmap(values, np.square), values ** 2)


def test_relative_error_identical_is_zero():
    values = np.array([1.0, 2.0, 3.0])
    assert relative_error(values, values) == 0.0


def test_relative_error_rejects_integers():
    with pytest.raises(TypeError):
        relative_error(np.array([1, 2]), np.array([1, 2]))


def test_mean_error_value():
    assert mean_error(np.array([1.0, 2.0, 3.0]), np.array([2.0, 2.0, 5.0])) == pytest.approx(1.0)


def test_flatten_unflatten_round_trip():
    tensors = [np.arange(6.0).reshape(2, 3), np.array([7.0]), np.arange(4.0).reshape(2, 2)]
    flat = flatten_tensors(tensors)
    assert flat.ndim == 1
    assert flat.size == 11
    restored = unflatten_like(flat, tensors)
    for original, back in zip(tensors, restored):
        assert np.array_equal(original, back)


def test_unflatten_rejects_2d():
    with pytest.raises(ValueError):
        unflatten_like(np.zeros((2, 2)), [np.zeros(4)])


def test_stack_rows():
    groups = [[np.ones((2, 2)), np.zeros(3)], [np.full((2, 2), 2.0), np.ones(3)]]
    result = stack(groups)
    assert result.shape == (2, 7)
    assert np.array_equal(result[1], flatten_tensors(groups[1]))