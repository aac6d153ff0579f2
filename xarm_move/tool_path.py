import math
from typing import List, Sequence, Tuple

Point3 = Tuple[float, float, float]


class ToolPath:
    """
    Represents the open polyline traced by the end effector along a trajectory.
    """

    MIN_POINTS = 2

    def __init__(self, points: Sequence[Sequence[float]]):
        if len(points) < self.MIN_POINTS:
            raise ValueError("Tool path must have at least 2 points!")
        self.points: List[Point3] = [
            (float(p[0]), float(p[1]), float(p[2])) for p in points
        ]

    def segment_lengths(self) -> List[float]:
        return [
            math.dist(self.points[i], self.points[i + 1])
            for i in range(len(self.points) - 1)
        ]

    def length(self) -> float:
        return sum(self.segment_lengths())

    def end_error(self, x: float, y: float, z: float) -> float:
        """
        Distance from the last path point to (x, y, z).
        """
        return math.dist(self.points[-1], (x, y, z))

    def as_points(self) -> List[Point3]:
        return self.points
