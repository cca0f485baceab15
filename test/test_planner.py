import runtime_path  # isort:skip

import itertools

import numpy as np
import pytest

import tensorview.planner as planner
from tensorview.backend.base import ElemwiseOps, ReduceOps
from tensorview.errors import IncompatibleDimension
from tensorview.planner import BroadcastPlanner, matches, plan_broadcast
from tensorview.shape import ShapeDescriptor

def test_matches():
  for d1, d2 in itertools.product(range(5), repeat=2):
    assert matches(d1, d2) == matches(d2, d1)
    assert matches(d1, d2) == (d1 == d2 or 1 in (d1, d2))

def test_op_dims_is_max():
  for shapes in (
          [(), (1, 2, 3, 4)],
          [(4,), (1, 2, 3, 4)],
          [(3, 1), (1, 2, 3, 4)],
          [(1, 3, 1), (2, 1, 3, 4)],
          [(5, 1, 7), (6, 7), (5, 6, 7)],
          [(8, 1, 6, 1), (7, 1, 5), (8, 7, 6, 5)]):
    plan = plan_broadcast(shapes, ElemwiseOps.ADD, align="trailing", flatten=False)
    expected = np.broadcast_shapes(*shapes)
    kept = [d for k, d in enumerate(expected)
            if any(ShapeDescriptor(s).pad(len(expected))[k] != 1 for s in shapes)]
    assert plan.op_dims == tuple(kept)

def test_broadcast_leading_alignment():
  # (1,2,21) op (13,1) -> (13,1,21)
  a, b, c = ShapeDescriptor((1, 2, 21)), ShapeDescriptor((13, 1)), ShapeDescriptor((13, 1, 21))
  plan = plan_broadcast([a, b, c], ElemwiseOps.ADD, align="leading")
  assert plan.rank == 3
  assert plan.op_dims == (13, 2, 21)
  sa, sb, sc = plan.shapes
  assert sa == ShapeDescriptor((1, 2, 21), strides=(0, 21, 1))
  assert sb == ShapeDescriptor((13, 1, 1), strides=(1, 0, 0))
  assert sc == ShapeDescriptor((13, 1, 21), strides=(21, 0, 1))
  assert plan.inverse == (False, True, False)
  assert plan.regular_dims == (13, 21)
  assert plan.inverse_dims == (2,)
  assert plan.num_elements == 273

def test_broadcast_leading_shapes_incompatible_when_trailing():
  with pytest.raises(IncompatibleDimension) as e:
    plan_broadcast([(1, 2, 21), (13, 1), (13, 1, 21)], ElemwiseOps.ADD, align="trailing")
  assert e.value.axis == 1
  assert (e.value.dim, e.value.op_dim) == (2, 13)

def test_incompatible_dimension():
  with pytest.raises(IncompatibleDimension) as e:
    plan_broadcast([(3, 4), (5, 4)], ElemwiseOps.ADD)
  assert e.value.axis == 0
  assert e.value.index == 0
  assert (e.value.dim, e.value.op_dim) == (3, 5)
  assert len(e.value.shapes) == 2
  assert "Dimension 0" in str(e.value)
  assert isinstance(e.value, ValueError)

  with pytest.raises(IncompatibleDimension) as e:
    plan_broadcast([(5, 4), (5, 4), (3, 4)], ElemwiseOps.ADD)
  assert (e.value.axis, e.value.index) == (0, 2)

def test_full_reduction():
  plan = plan_broadcast([(5,), (5,), (1,)], ElemwiseOps.MUL)
  assert plan.op_dims == (5,)
  assert plan.inverse == (True,)
  assert plan.regular_dims == ()
  assert plan.inverse_dims == (5,)
  assert plan.num_elements == 1
  launch = plan.launch()
  assert all(s.rank == 0 for s in launch.regular)
  assert [s.strides for s in launch.inverse] == [(1,), (1,), (0,)]

def test_all_singleton_is_scalar():
  plan = plan_broadcast([(1, 1), (1,), (1, 1, 1)], ElemwiseOps.ADD)
  assert plan.rank == 0
  assert plan.op_dims == ()
  assert all(s.rank == 0 for s in plan.shapes)
  assert plan.num_elements == 1

def test_singleton_axis_never_inverse():
  plan = plan_broadcast([(3, 1), (1, 1), (1, 1)], ElemwiseOps.ADD, flatten=False)
  assert plan.op_dims == (3,)
  assert plan.inverse_axes == (0,)
  plan = plan_broadcast([(1, 4), (1, 4), (1, 4)], ElemwiseOps.ADD, flatten=False)
  assert plan.op_dims == (4,)
  assert plan.inverse == (False,)

def test_flatten_contiguous():
  plan = plan_broadcast([(2, 3, 4)] * 3, ElemwiseOps.ADD)
  assert plan.op_dims == (24,)
  assert all(s == ShapeDescriptor((24,)) for s in plan.shapes)

def test_flatten_disabled():
  plan = BroadcastPlanner(flatten=False).plan([(2, 3, 4)] * 3, ElemwiseOps.ADD)
  assert plan.op_dims == (2, 3, 4)

def test_flatten_mixed_pattern():
  plan = plan_broadcast([(2, 3, 4), (3, 4), (2, 3, 4)], ElemwiseOps.ADD)
  assert plan.op_dims == (2, 12)
  a, b, c = plan.shapes
  assert a == ShapeDescriptor((2, 12))
  assert b == ShapeDescriptor((1, 12), strides=(0, 1))
  assert c == ShapeDescriptor((2, 12))
  assert plan.inverse == (False, False)

def test_flatten_all_broadcasting_pair():
  plan = plan_broadcast([(2, 3, 4), (2, 1, 1), (2, 3, 4)], ElemwiseOps.ADD)
  assert plan.op_dims == (2, 12)
  assert plan.shapes[1] == ShapeDescriptor((2, 1), strides=(1, 0))

def test_flatten_requires_every_participant_contiguous():
  transposed = ShapeDescriptor((3, 4), strides=(1, 3))
  plan = plan_broadcast([transposed, (3, 4), (3, 4)], ElemwiseOps.ADD)
  assert plan.op_dims == (3, 4)
  assert plan.shapes[0] == transposed
  assert plan.shapes[1] == ShapeDescriptor((3, 4))

def test_single_participant():
  plan = plan_broadcast([(2, 1, 3)], ElemwiseOps.ONE)
  assert plan.op_dims == (6,)
  assert plan.shapes == (ShapeDescriptor((6,)),)
  assert plan.inverse == (False,)

def test_fused_participants():
  plan = plan_broadcast([(4, 1), (1, 5), (4, 5), (4, 5)], ElemwiseOps.COND)
  assert plan.op_dims == (4, 5)
  assert [s.strides for s in plan.shapes] == [(1, 0), (0, 1), (5, 1), (5, 1)]
  assert plan.inverse == (False, False)

def test_plan_does_not_touch_inputs():
  shapes = [ShapeDescriptor((1, 2, 21)), ShapeDescriptor((13, 1)), ShapeDescriptor((13, 1, 21))]
  before = list(shapes)
  p1 = plan_broadcast(shapes, ElemwiseOps.ADD, align="leading")
  p2 = plan_broadcast(shapes, ElemwiseOps.ADD, align="leading")
  assert shapes == before
  assert (p1.op_dims, p1.shapes, p1.inverse) == (p2.op_dims, p2.shapes, p2.inverse)

def test_debug_output_does_not_change_plan(monkeypatch, capsys):
  shapes = [(2, 3, 4), (3, 1), (2, 1, 4)]
  quiet = plan_broadcast(shapes, ElemwiseOps.SUB)
  assert capsys.readouterr().out == ""
  monkeypatch.setattr(planner, "DEBUG", 1)
  loud = plan_broadcast(shapes, ElemwiseOps.SUB)
  out = capsys.readouterr().out
  assert "[DEBUG] Pre-flatten: Op SUB" in out
  assert "[DEBUG] Post-drop" in out
  assert (quiet.op_dims, quiet.shapes, quiet.inverse) == (loud.op_dims, loud.shapes, loud.inverse)

def test_launch():
  plan = plan_broadcast([(4, 5), (5,), (1, 5)], ElemwiseOps.ADD)
  launch = plan.launch(alpha=2.0, beta=1.0, reduce_op=ReduceOps.MAX)
  assert launch.operator == ElemwiseOps.ADD
  assert launch.reduce_op == ReduceOps.MAX
  assert (launch.alpha, launch.beta) == (2.0, 1.0)
  assert launch.regular_dims == (5,)
  assert launch.inverse_dims == (4,)
  assert launch.num_elements == 5
  assert [s.strides for s in launch.regular] == [(1,), (1,), (1,)]
  assert [s.strides for s in launch.inverse] == [(5,), (0,), (0,)]
