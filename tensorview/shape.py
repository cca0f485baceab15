from tensorview.env import ALIGN
from tensorview.utils.math import prod


def dense_strides(dims):
  return tuple(prod(dims[i+1:]) for i in range(len(dims)))


class ShapeDescriptor:
  """Dimensions with parallel strides (in elements) into a storage object.

  Instances are never mutated: every transformation returns a new descriptor.
  A stride of 0 marks a broadcasting axis, i.e. the same element is read
  repeatedly along it.
  """
  __slots__ = ("dims", "strides", "offset")

  def __init__(self, dims=(), strides=None, offset=0):
    dims = tuple(int(d) for d in dims)
    assert all(d >= 0 for d in dims), f"Invalid dimensions {dims}"
    strides = dense_strides(dims) if strides is None else tuple(int(s) for s in strides)
    assert len(dims) == len(strides), f"Dims {dims} and strides {strides} differ in rank"
    object.__setattr__(self, "dims", dims)
    object.__setattr__(self, "strides", strides)
    object.__setattr__(self, "offset", int(offset))

  def __setattr__(self, name, value):
    raise AttributeError(f"{self.__class__.__name__} is immutable")

  def __eq__(self, other):
    if not isinstance(other, ShapeDescriptor):
      return NotImplemented
    return (self.dims, self.strides, self.offset) == (other.dims, other.strides, other.offset)

  def __hash__(self):
    return hash((self.dims, self.strides, self.offset))

  def __getitem__(self, k):
    return self.dims[k]

  def __len__(self):
    return len(self.dims)

  def __iter__(self):
    return iter(self.dims)

  def __str__(self):
    s = " x ".join(str(d) for d in self.dims)
    if self.strides != dense_strides(self.dims):
      s += " {" + ",".join(str(st) for st in self.strides) + "}"
    return f"[{s}]"

  def __repr__(self):
    return f"<{self.__class__.__name__} dims={self.dims} strides={self.strides} offset={self.offset}>"

  @property
  def rank(self):
    return len(self.dims)

  @property
  def size(self):
    return prod(self.dims)

  def _replace(self, dims, strides):
    return ShapeDescriptor(dims, strides, self.offset)

  def pad(self, rank, align=ALIGN):
    n = rank - self.rank
    if n <= 0:
      return self
    if align == "trailing":
      # new outermost axes continue the memory layout of the current outermost one
      stride = self.strides[0] * self.dims[0] if self.rank else 1
      return self._replace((1,) * n + self.dims, (stride,) * n + self.strides)
    assert align == "leading", f"Invalid alignment {align}"
    stride = self.strides[-1] if self.rank else 1
    return self._replace(self.dims + (1,) * n, self.strides + (stride,) * n)

  def can_flatten(self, k):
    assert 0 < k < self.rank, f"Invalid flatten index {k} for {self!r}"
    return self.strides[k-1] == self.strides[k] * self.dims[k]

  def flatten(self, k):
    assert self.can_flatten(k), f"Axes {k-1} and {k} of {self!r} are not contiguous"
    dims = (*self.dims[:k-1], self.dims[k-1] * self.dims[k], *self.dims[k+1:])
    strides = (*self.strides[:k-1], self.strides[k], *self.strides[k+1:])
    return self._replace(dims, strides)

  def drop_singleton_dims(self, mask):
    assert len(mask) == self.rank, f"Mask {mask} does not match rank of {self!r}"
    assert all(d == 1 for d, drop in zip(self.dims, mask) if drop), f"Can only drop size-1 axes of {self!r}"
    return self.select([k for k, drop in enumerate(mask) if not drop])

  def with_broadcast_strides(self):
    return self._replace(self.dims, (0 if d == 1 else s for d, s in zip(self.dims, self.strides)))

  def select(self, axes):
    return self._replace((self.dims[k] for k in axes), (self.strides[k] for k in axes))
