from collections import Counter, defaultdict

class KernelStat:
  """Counts kernel launches per operator along with the loop depth they needed."""
  def __init__(self):
    self.reset()

  def reset(self):
    self._launches = Counter()
    self._elements = Counter()
    self._depths = defaultdict(Counter)

  def log(self, launch):
    name = launch.operator.name
    self._launches[name] += 1
    self._elements[name] += launch.num_elements
    self._depths[name][len(launch.regular_dims) + len(launch.inverse_dims)] += 1

  def get(self, name):
    return self._launches[name]

  def total(self):
    return sum(self._launches.values())

  def depths(self, name):
    return dict(self._depths[name])

  @property
  def info(self):
    return {k: {"launches": v, "elements": self._elements[k], "depths": dict(self._depths[k])}
            for k, v in self._launches.items()}

kernelstat = KernelStat()
