import numpy as np

from pseudostruct.core.array import PseudoStructArray, create
from pseudostruct.core.broadcast import (
    ArrayStyle,
    ElementwiseOperand,
    PseudoStructArrayStyle,
    broadcast,
    broadcast_shape,
    combine_styles,
    result_dtype,
    style_of,
)
from tests.conftest import Point3D


def test_views_are_elementwise_operands(points):
    assert isinstance(points, ElementwiseOperand)
    assert isinstance(np.zeros(3), ElementwiseOperand)


def test_style_reports_logical_rank(points, grid):
    assert style_of(points) == PseudoStructArrayStyle(1)
    assert style_of(grid) == PseudoStructArrayStyle(2)
    assert style_of(np.zeros((2, 2, 2))) == ArrayStyle(3)
    assert style_of(1.5) == ArrayStyle(0)


def test_struct_style_wins_at_max_rank():
    s = PseudoStructArrayStyle(1)

    assert combine_styles(s, ArrayStyle(3)) == PseudoStructArrayStyle(3)
    assert combine_styles(ArrayStyle(3), s) == PseudoStructArrayStyle(3)
    assert combine_styles(PseudoStructArrayStyle(2), ArrayStyle(0)) == (
        PseudoStructArrayStyle(2)
    )
    assert combine_styles(ArrayStyle(1), ArrayStyle(2)) == ArrayStyle(2)


def test_broadcast_shape_uses_logical_shape(points):
    # The buffer is (4, 3); the view takes part as (4,)
    assert broadcast_shape(points, np.zeros((2, 1))) == (2, 4)
    assert broadcast_shape(points, 1.0) == (4,)


def test_map_returns_plain_array(points):
    xs = points.map(lambda p: p.x)

    assert isinstance(xs, np.ndarray)
    assert not isinstance(xs, PseudoStructArray)
    assert xs.dtype == np.float64
    np.testing.assert_array_equal(xs, [0.0, 1.0, 2.0, 3.0])


def test_map_with_explicit_dtype(points):
    ys = points.map(lambda p: p.y, dtype=np.int32)

    assert ys.dtype == np.int32
    np.testing.assert_array_equal(ys, [4, 5, 6, 7])


def test_record_results_are_not_rewrapped(points):
    out = points.map(lambda p: Point3D(p.z, p.y, p.x))

    assert out.dtype == object
    assert out.shape == (4,)
    assert out[0] == Point3D(8.0, 4.0, 0.0)


def test_broadcast_with_scalar(points):
    out = broadcast(lambda p, s: p.y + s, points, 10.0)
    np.testing.assert_array_equal(out, [14.0, 15.0, 16.0, 17.0])


def test_broadcast_with_higher_rank_array(points):
    scale = np.array([[1.0], [2.0]])
    out = broadcast(lambda p, s: p.x * s, points, scale)

    assert out.shape == (2, 4)
    np.testing.assert_array_equal(out[1], [0.0, 2.0, 4.0, 6.0])


def test_broadcast_grid_against_row(grid):
    offsets = np.array([0.0, 100.0, 200.0, 300.0])
    out = broadcast(lambda p, o: p.x + o, grid, offsets)

    assert out.shape == (3, 4)
    assert out[2, 3] == 12.0 + 300.0
    assert out[1, 0] == 2.0


def test_broadcast_two_views(points):
    out = broadcast(lambda a, b: a.x + b.z, points, points)
    np.testing.assert_array_equal(out, [8.0, 10.0, 12.0, 14.0])


def test_broadcast_accepts_sequences(points):
    out = broadcast(lambda p, w: p.x * w, points, [1.0, 0.0, 1.0, 0.0])
    np.testing.assert_array_equal(out, [0.0, 0.0, 2.0, 0.0])


def test_broadcast_over_empty_view():
    empty = create(Point3D, np.zeros((0, 3)))
    out = empty.map(lambda p: p.x)

    assert out.shape == (0,)
    assert out.dtype == np.float64


def test_bool_results(points):
    out = points.map(lambda p: p.x > 1.0)

    assert out.dtype == np.bool_
    assert out.tolist() == [False, False, True, True]


def test_result_dtype():
    assert result_dtype(1.0) == np.float64
    assert result_dtype(np.float32(1.0)) == np.float32
    assert result_dtype(True) == np.bool_
    assert result_dtype(Point3D(0.0, 0.0, 0.0)) == object
    assert result_dtype("text") == object
    assert result_dtype(1, 0.5) == np.float64
    assert result_dtype(True, 2) == np.int64
    assert result_dtype(1.0, Point3D(0.0, 0.0, 0.0)) == object


def test_mixed_int_and_float_results_are_not_truncated(points):
    out = points.map(lambda p: 1 if p.x < 1.0 else 0.5)

    assert out.dtype == np.float64
    np.testing.assert_array_equal(out, [1.0, 0.5, 0.5, 0.5])


def test_mixed_bool_and_int_results_promote_to_int(points):
    out = points.map(lambda p: True if p.x < 1.0 else 2)

    assert out.dtype == np.int64
    np.testing.assert_array_equal(out, [1, 2, 2, 2])
