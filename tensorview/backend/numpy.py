import numpy as np
from numpy.lib.stride_tricks import as_strided

from tensorview.backend.base import ElemwiseOps, ReduceOps, Storage
from tensorview.env import DEBUG
from tensorview.utils.helper import kernelstat

float32 = np.float32

ELEMWISE_MAPPING = {
  ElemwiseOps.NOOP: lambda a: a, ElemwiseOps.NEG: np.negative, ElemwiseOps.EXP: np.exp,
  ElemwiseOps.LOG: np.log, ElemwiseOps.RELU: lambda a: np.maximum(a, 0),
  ElemwiseOps.ADD: np.add, ElemwiseOps.SUB: np.subtract, ElemwiseOps.DIV: np.divide,
  ElemwiseOps.MUL: np.multiply, ElemwiseOps.POW: np.power,
  ElemwiseOps.EQ: lambda a, b: np.equal(a, b).astype(a.dtype),
  ElemwiseOps.GE: lambda a, b: np.greater_equal(a, b).astype(a.dtype),
  ElemwiseOps.GT: lambda a, b: np.greater(a, b).astype(a.dtype),
  ElemwiseOps.DRELU: lambda a, b: np.where(b > 0, a, 0).astype(a.dtype),
  ElemwiseOps.COND: lambda a, b, c: np.where(a != 0, b, c),
}
REDUCE_AGG_FN = {ReduceOps.SUM: np.sum, ReduceOps.MAX: np.max}


def strided_view(data, dims, strides, offset, writeable=False):
  flat = data.reshape(-1)
  itemsize = flat.dtype.itemsize
  return as_strided(flat[offset:], shape=dims, strides=tuple(s * itemsize for s in strides), writeable=writeable)


class NPStorage(Storage):
  def __init__(self, data=None, shape=None, dtype=None):
    if data is None:
      assert shape is not None, "Must specify shape when initializing storage without data"
      data = np.empty(shape, dtype=float32 if dtype is None else dtype)
    # an ndarray of matching dtype is referenced, never copied
    data = np.asarray(data, dtype=dtype)
    assert data.ndim == 2, f"Storage must be a matrix, got shape {data.shape}"
    assert data.flags.c_contiguous, "Storage must be C-contiguous, call np.ascontiguousarray first"
    self.data = data

  @property
  def nrows(self):
    return self.data.shape[0]

  @property
  def ncols(self):
    return self.data.shape[1]

  @property
  def dtype(self):
    return self.data.dtype

  def numpy(self):
    return self.data.copy()

  def view(self, shape):
    return strided_view(self.data, shape.dims, shape.strides, shape.offset)

  @classmethod
  def empty(cls, shape, dtype=float32):
    return cls(shape=shape, dtype=dtype)

  @classmethod
  def full(cls, shape, value, dtype=float32):
    return cls(np.full(shape, value, dtype=dtype))

  @staticmethod
  def elemwise_op(launch, operands):
    """Reference executor for a kernel launch, one storage object per participant.

    Inputs are read through their broadcast strides over the full operation
    shape (regular axes first, inverse-broadcasting axes last), the inverse
    axes are reduced, and the result is accumulated into the output as
    ``out = beta * out + alpha * result``. ``beta == 0`` never reads ``out``.
    """
    *inputs, out = operands
    regular, inverse = launch.regular, launch.inverse
    op_shape = launch.regular_dims + launch.inverse_dims
    args = [strided_view(x.data, op_shape, r.strides + v.strides, r.offset)
            for x, r, v in zip(inputs, regular, inverse)]
    if launch.operator == ElemwiseOps.ONE:
      res = np.ones(op_shape, dtype=out.dtype)
    else:
      res = ELEMWISE_MAPPING[launch.operator](*args)
    if launch.inverse_dims:
      axis = tuple(range(len(launch.regular_dims), len(op_shape)))
      res = REDUCE_AGG_FN[launch.reduce_op](res, axis=axis)
    ret = strided_view(out.data, launch.regular_dims, regular[-1].strides, regular[-1].offset, writeable=True)
    res = launch.alpha * res
    if launch.beta:
      res = res + launch.beta * ret
    ret[...] = res
    if DEBUG: print(f"[DEBUG] elemwise_op {launch.operator.name}: num_elements={launch.num_elements} "
                    f"regular={launch.regular_dims} inverse={launch.inverse_dims}")
    kernelstat.log(launch)
    return out
