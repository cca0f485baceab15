class TensorViewError(ValueError):
  pass


class ConstructionMismatch(TensorViewError):
  """Tensor dimensions do not split into the storage object's rows x cols."""
  def __init__(self, shape, rows, cols):
    self.shape, self.rows, self.cols = shape, rows, cols
    super().__init__(f"Tensor dimensions {shape} do not match storage-object dims {rows} x {cols}")


class IncompatibleDimension(TensorViewError):
  """A participant's dimension neither equals the operation dimension nor broadcasts."""
  def __init__(self, axis, index, dim, op_dim, shapes):
    self.axis, self.index, self.dim, self.op_dim = axis, index, dim, op_dim
    self.shapes = tuple(shapes)
    super().__init__(f"Dimension {axis} is incompatible between participant {index} and operation "
                     f"({dim} vs. {op_dim}) for shapes {', '.join(str(s) for s in self.shapes)}")
