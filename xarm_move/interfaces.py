from dataclasses import dataclass
from typing import Any, Optional, Protocol

from .pose import Pose


@dataclass
class PlanResult:
    """
    Plan artifact returned by the planning backend.

    `trajectory` is opaque to the orchestrator; it is handed back to the
    backend for execution and to the visual tools for drawing.
    """

    success: bool
    trajectory: Optional[Any] = None
    waypoint_count: int = 0

    def __bool__(self):
        return self.success


class MotionBackend(Protocol):
    def configure(self, planning_timeout: float, joint_tol: float,
                  pos_tol: float, orient_tol: float) -> None: ...

    def start_state_tracking(self) -> None: ...

    def set_goal_pose(self, group: str, pose: Pose) -> None: ...

    def get_current_pose(self, group: str) -> Pose: ...

    def plan(self) -> PlanResult: ...

    def execute(self, plan: PlanResult) -> bool: ...


class VisualTools(Protocol):
    def clear_markers(self) -> None: ...

    def load_remote_control(self) -> None: ...

    def publish_text(self, pose: Pose, text: str, color: str, size: str) -> None: ...

    def publish_trajectory(self, plan: PlanResult, group: str) -> None: ...

    def trigger(self) -> None: ...

    def prompt(self, text: str) -> None:
        """Block the calling thread until the operator confirms."""
        ...


class Session(Protocol):
    """Process-wide communication context; released exactly once."""

    def start(self) -> Any: ...

    def ok(self) -> bool: ...

    def shutdown(self) -> None: ...
