from tensorview.errors import ConstructionMismatch, IncompatibleDimension, TensorViewError
from tensorview.planner import BroadcastPlan, BroadcastPlanner, matches, plan_broadcast
from tensorview.shape import ShapeDescriptor
from tensorview.view import TensorView
