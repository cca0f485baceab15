from enum import Enum

ElemwiseOps = Enum("ElemwiseOps",
    ["ONE", "NOOP", "NEG", "EXP", "LOG", "RELU", "ADD", "SUB", "DIV", "MUL", "POW",
     "EQ", "GE", "GT", "DRELU", "COND"])
ReduceOps = Enum("ReduceOps", ["SUM", "MAX"])

ELEMWISE_ARITY = {
  ElemwiseOps.ONE: 0,
  ElemwiseOps.NOOP: 1, ElemwiseOps.NEG: 1, ElemwiseOps.EXP: 1, ElemwiseOps.LOG: 1, ElemwiseOps.RELU: 1,
  ElemwiseOps.ADD: 2, ElemwiseOps.SUB: 2, ElemwiseOps.DIV: 2, ElemwiseOps.MUL: 2, ElemwiseOps.POW: 2,
  ElemwiseOps.EQ: 2, ElemwiseOps.GE: 2, ElemwiseOps.GT: 2, ElemwiseOps.DRELU: 2,
  ElemwiseOps.COND: 3,
}

class Storage:
  """Dense rows x cols storage object that tensor views reinterpret."""
  def __repr__(self):
    return f"<{self.__class__.__name__} rows={self.nrows} cols={self.ncols}>"

  @property
  def nrows(self):
    raise NotImplementedError

  @property
  def ncols(self):
    raise NotImplementedError

  def numpy(self):
    raise NotImplementedError

  def view(self, shape):
    raise NotImplementedError

  @staticmethod
  def elemwise_op(launch, operands):
    raise NotImplementedError
