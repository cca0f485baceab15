"""Plans and runs the sum of a (1,2,21) and a (13,1) tensor into (13,1,21).

Run with DEBUG=1 to print the shapes after every planning stage.
"""
import numpy as np

from tensorview import TensorView
from tensorview.backend.numpy import NPStorage
from tensorview.planner import plan_broadcast

def main():
  a = TensorView(NPStorage(np.random.normal(0, 1, (1, 42))), (1, 2, 21))
  b = TensorView(NPStorage(np.random.normal(0, 1, (13, 1))), (13, 1))
  c = TensorView(NPStorage.empty((13, 21)), (13, 1, 21))

  plan = plan_broadcast([a.shape, b.shape, c.shape], align="leading")
  print(f"op_dims={plan.op_dims} regular={plan.regular_dims} inverse={plan.inverse_dims}")
  for s in plan.shapes:
    print(f"  {s!r}")

  c.do_sum_of(0, a, b, 1, align="leading")
  print(c.numpy()[:2, 0, :4])

if __name__ == "__main__":
  main()
