import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class Pose:
    """
    End-effector pose: position in metres and orientation as a unit
    quaternion (x, y, z, w). Defaults to the identity rotation.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    qx: float = 0.0
    qy: float = 0.0
    qz: float = 0.0
    qw: float = 1.0

    def __post_init__(self):
        values = (self.x, self.y, self.z, self.qx, self.qy, self.qz, self.qw)
        if not all(math.isfinite(float(v)) for v in values):
            raise ValueError(f"Pose components must be finite, got {values}")
        if np.linalg.norm(self.quat_xyzw) == 0.0:
            raise ValueError("Pose orientation must be a non-zero quaternion")

    @property
    def position(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @property
    def quat_xyzw(self) -> Tuple[float, float, float, float]:
        return (self.qx, self.qy, self.qz, self.qw)

    def normalized(self) -> "Pose":
        """Return the same pose with a unit-length quaternion."""
        q = np.array(self.quat_xyzw, dtype=float)
        norm = np.linalg.norm(q)
        if np.isclose(norm, 1.0):
            return self
        q = q / norm
        return Pose(self.x, self.y, self.z, *map(float, q))

    @classmethod
    def from_position(cls, x: float, y: float, z: float) -> "Pose":
        return cls(float(x), float(y), float(z))

    @classmethod
    def from_dict(cls, data: dict) -> "Pose":
        orientation = data.get("orientation", {})
        position = data.get("position", data)
        return cls(
            x=float(position.get("x", 0.0)),
            y=float(position.get("y", 0.0)),
            z=float(position.get("z", 0.0)),
            qx=float(orientation.get("x", 0.0)),
            qy=float(orientation.get("y", 0.0)),
            qz=float(orientation.get("z", 0.0)),
            qw=float(orientation.get("w", 1.0)),
        )

    def __str__(self):
        return (f"Pose(position=({self.x:.3f}, {self.y:.3f}, {self.z:.3f}), "
                f"orientation=({self.qx:.3f}, {self.qy:.3f}, {self.qz:.3f}, {self.qw:.3f}))")


def title_pose(height: float) -> Pose:
    # identity rotation, lifted above the base for the status text
    return Pose(z=float(height))
