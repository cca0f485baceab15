from types import SimpleNamespace

from tensorview.backend.base import ReduceOps
from tensorview.env import ALIGN, DEBUG, OPT_FLATTEN
from tensorview.errors import IncompatibleDimension
from tensorview.shape import ShapeDescriptor
from tensorview.utils.math import prod


def matches(d1, d2):
  return d1 == 1 or d2 == 1 or d1 == d2

def summary(op, shapes, op_dims):
  name = getattr(op, "name", op)
  return f"Op {name}: {' op '.join(str(s) for s in shapes[:-1])} -> {shapes[-1]} via {ShapeDescriptor(op_dims)}"


class BroadcastPlan:
  """Reconciled operation shape plus one transformed descriptor per participant.

  The last participant is the output. An axis is inverse-broadcasting when the
  output has size 1 along it while the operation does not, so several input
  positions fold into one output position and the kernel has to loop over it.
  All other axes are regular and map onto kernel instances.
  """
  def __init__(self, op, op_dims, shapes):
    self.op = op
    self.op_dims = tuple(op_dims)
    self.shapes = tuple(shapes)
    out = self.shapes[-1]
    self.inverse = tuple(out[k] == 1 and d > 1 for k, d in enumerate(self.op_dims))

  def __repr__(self):
    return f"<{self.__class__.__name__} {summary(self.op, self.shapes, self.op_dims)} inverse={self.inverse}>"

  @property
  def rank(self):
    return len(self.op_dims)

  @property
  def regular_axes(self):
    return tuple(k for k, inv in enumerate(self.inverse) if not inv)

  @property
  def inverse_axes(self):
    return tuple(k for k, inv in enumerate(self.inverse) if inv)

  @property
  def regular_dims(self):
    return tuple(self.op_dims[k] for k in self.regular_axes)

  @property
  def inverse_dims(self):
    return tuple(self.op_dims[k] for k in self.inverse_axes)

  @property
  def num_elements(self):
    return prod(self.regular_dims)

  def launch(self, alpha=1.0, beta=0.0, reduce_op=ReduceOps.SUM):
    regular, inverse = self.regular_axes, self.inverse_axes
    return SimpleNamespace(
      operator=self.op, reduce_op=reduce_op, alpha=alpha, beta=beta,
      regular=tuple(s.select(regular) for s in self.shapes),
      inverse=tuple(s.select(inverse) for s in self.shapes),
      regular_dims=self.regular_dims, inverse_dims=self.inverse_dims,
      num_elements=self.num_elements)


class BroadcastPlanner:
  def __init__(self, align=ALIGN, flatten=OPT_FLATTEN):
    assert align in ("trailing", "leading"), f"Invalid alignment {align}"
    self.align = align
    self.flatten = flatten

  @staticmethod
  def _can_merge(shape, op_dims, k):
    if not shape.can_flatten(k):
      return False
    # either both axes non-broadcasting or both broadcasting
    return (shape[k] == op_dims[k] and shape[k-1] == op_dims[k-1]) or (shape[k] == 1 and shape[k-1] == 1)

  def plan(self, shapes, op=None):
    shapes = [s if isinstance(s, ShapeDescriptor) else ShapeDescriptor(s) for s in shapes]
    assert shapes, "Need at least one participant"

    dims = max(s.rank for s in shapes)
    shapes = [s.pad(dims, self.align) for s in shapes]
    op_dims = tuple(max(s[k] for s in shapes) for k in range(dims))

    for k in range(dims):
      for i, s in enumerate(shapes):
        if not matches(s[k], op_dims[k]):
          raise IncompatibleDimension(k, i, s[k], op_dims[k], shapes)

    if DEBUG: print(f"[DEBUG] Pre-flatten: {summary(op, shapes, op_dims)}")
    if self.flatten:
      k = 1
      while k < len(op_dims):
        if all(self._can_merge(s, op_dims, k) for s in shapes):
          shapes = [s.flatten(k) for s in shapes]
          op_dims = ShapeDescriptor(op_dims).flatten(k).dims
        else:
          k += 1
      if DEBUG: print(f"[DEBUG] Post-flatten: {summary(op, shapes, op_dims)}")

    # an axis that is 1 for every participant carries no information
    to_drop = [all(s[k] == 1 for s in shapes) for k in range(len(op_dims))]
    shapes = [s.drop_singleton_dims(to_drop) for s in shapes]
    op_dims = tuple(d for d, drop in zip(op_dims, to_drop) if not drop)
    if DEBUG: print(f"[DEBUG] Post-drop: {summary(op, shapes, op_dims)}")

    # all-singleton axes are gone, so any remaining 1 is broadcasting
    shapes = [s.with_broadcast_strides() for s in shapes]
    plan = BroadcastPlan(op, op_dims, shapes)
    if DEBUG: print(f"[DEBUG] {summary(op, shapes, op_dims)} inverse={plan.inverse}")
    return plan


def plan_broadcast(shapes, op=None, align=ALIGN, flatten=OPT_FLATTEN):
  return BroadcastPlanner(align=align, flatten=flatten).plan(shapes, op)
