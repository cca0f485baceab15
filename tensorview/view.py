import numpy as np

from tensorview.backend.base import ELEMWISE_ARITY, ElemwiseOps, ReduceOps, Storage
from tensorview.backend.numpy import NPStorage
from tensorview.env import ALIGN
from tensorview.errors import ConstructionMismatch
from tensorview.planner import BroadcastPlanner
from tensorview.shape import ShapeDescriptor
from tensorview.utils.math import prod


def check_storage_split(dims, rows, cols):
  # leading dims must multiply up to exactly the row count, the rest to the column count
  i, row_dim = 0, 1
  while i < len(dims) and row_dim < rows:
    row_dim *= dims[i]
    i += 1
  col_dim = prod(dims[i:])
  if row_dim != rows or col_dim != cols:
    raise ConstructionMismatch(ShapeDescriptor(dims), rows, cols)


class TensorView:
  """A tensor-shaped view over a rows x cols storage object. Does not own the storage.

  ``TensorView(storage)`` views the storage as a rank-2 tensor ``(rows, cols)``.
  ``TensorView(view_or_storage, shape)`` reinterprets it under ``shape``.
  """
  def __init__(self, storage, shape=None):
    if isinstance(storage, TensorView):
      storage = storage.storage
    elif isinstance(storage, np.ndarray):
      storage = NPStorage(storage)
    assert isinstance(storage, Storage), f"Can not view {type(storage).__name__} as a tensor"
    self.storage = storage
    if shape is None:
      self.shape = ShapeDescriptor((storage.nrows, storage.ncols))
    else:
      self.shape = shape if isinstance(shape, ShapeDescriptor) else ShapeDescriptor(shape)
      check_storage_split(self.shape.dims, storage.nrows, storage.ncols)

  def __repr__(self):
    return f"<{self.__class__.__name__} shape={self.shape} storage={self.storage!r}>"

  @property
  def ndim(self):
    return self.shape.rank

  def reshape(self, shape):
    return TensorView(self, shape)

  def numpy(self):
    return self.storage.view(self.shape).copy()

  # ##### Elemwise Ops #####
  def do_op_of(self, beta, inputs, alpha, op, reduce_op=ReduceOps.SUM, align=ALIGN):
    """self = beta * self + alpha * op(*inputs), summing (or reducing with
    ``reduce_op``) over axes where self has size 1 and the inputs do not."""
    assert ELEMWISE_ARITY[op] == len(inputs), f"{op.name} takes {ELEMWISE_ARITY[op]} inputs, got {len(inputs)}"
    assert all(type(x.storage) is type(self.storage) for x in inputs), "Operands live on different backends"
    plan = BroadcastPlanner(align=align).plan([x.shape for x in inputs] + [self.shape], op)
    self.storage.elemwise_op(plan.launch(alpha, beta, reduce_op), [x.storage for x in inputs] + [self.storage])
    return self

  def do_unary_op_of(self, beta, a, alpha, op, **kwargs):
    return self.do_op_of(beta, (a,), alpha, op, **kwargs)

  def do_binary_op_of(self, beta, a, b, alpha, op, **kwargs):
    return self.do_op_of(beta, (a, b), alpha, op, **kwargs)

  def do_ternary_op_of(self, beta, a, b, c, alpha, op, **kwargs):
    return self.do_op_of(beta, (a, b, c), alpha, op, **kwargs)

  for name, op in (("copy", "NOOP"), ("negate", "NEG"), ("exp", "EXP"), ("log", "LOG"), ("relu", "RELU")):
    exec(f"def do_{name}_of(self, beta, a, alpha, **kwargs): "
         f"return self.do_unary_op_of(beta, a, alpha, ElemwiseOps.{op}, **kwargs)")
  for name, op in (("sum", "ADD"), ("difference", "SUB"), ("element_wise_product", "MUL"),
                   ("element_wise_quotient", "DIV"), ("element_wise_power", "POW")):
    exec(f"def do_{name}_of(self, beta, a, b, alpha, **kwargs): "
         f"return self.do_binary_op_of(beta, a, b, alpha, ElemwiseOps.{op}, **kwargs)")
  exec("def do_cond_of(self, beta, cond, a, b, alpha, **kwargs): "
       "return self.do_ternary_op_of(beta, cond, a, b, alpha, ElemwiseOps.COND, **kwargs)")
  del name, op

  def set_value(self, value):
    return self.do_op_of(0, (), value, ElemwiseOps.ONE)
