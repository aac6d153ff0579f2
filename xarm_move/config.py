import json
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from .errors import ConfigError
from .pose import Pose

CONFIRM_VIA_CHOICES = ("rviz", "console")
EXECUTION_FAILURE_POLICIES = ("log", "fail")


@dataclass(frozen=True)
class MotionConfig:
    node_name: str = "xarm_move_client"
    group_name: str = "arm_group"
    joint_names: List[str] = field(
        default_factory=lambda: [f"joint{i}" for i in range(1, 7)]
    )
    base_link: str = "link_base"
    end_effector: str = "link_eef"
    visual_frame: str = "link1"

    # Planner budget and goal tolerances, passed to the backend unchecked
    planning_timeout: float = 10.0
    joint_tolerance: float = 0.01
    position_tolerance: float = 0.01
    orientation_tolerance: float = 0.01

    target: Pose = field(default_factory=lambda: Pose(0.4, 0.4, 0.4))
    title_height: float = 1.0

    marker_topic: str = "/rviz_visual_tools"
    remote_control_topic: str = "/rviz_visual_tools_gui"
    confirm_via: str = "rviz"
    execution_failure_policy: str = "log"
    state_wait_timeout: float = 5.0
    metrics_csv: Optional[str] = None

    def __post_init__(self):
        if self.confirm_via not in CONFIRM_VIA_CHOICES:
            raise ConfigError(
                f"confirm_via must be one of {CONFIRM_VIA_CHOICES}, got {self.confirm_via!r}"
            )
        if self.execution_failure_policy not in EXECUTION_FAILURE_POLICIES:
            raise ConfigError(
                "execution_failure_policy must be one of "
                f"{EXECUTION_FAILURE_POLICIES}, got {self.execution_failure_policy!r}"
            )

    def with_overrides(self, **overrides) -> "MotionConfig":
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def summary(self) -> str:
        return (f"group={self.group_name} planning_timeout={self.planning_timeout}s "
                f"tolerances(joint={self.joint_tolerance}, position={self.position_tolerance}, "
                f"orientation={self.orientation_tolerance}) target={self.target}")


class MotionConfigLoader:
    def __init__(self, file_name: str = "xarm_move.json", path="config/",
                 package_name="xarm_move", abs_path: Optional[str] = None):
        # Resolve absolute path inside the installed share dir unless given one
        if abs_path is None:
            from ament_index_python.packages import get_package_share_directory
            try:
                pkg_share = get_package_share_directory(package_name)
            except LookupError as e:
                raise ConfigError(f"Package share directory not found: {package_name}") from e
            abs_path = os.path.join(pkg_share, path + file_name)
        self.abs_path = abs_path
        if not os.path.exists(self.abs_path):
            raise ConfigError(f"Config not found: {self.abs_path}")

    def load_raw(self) -> Dict[str, Any]:
        try:
            with open(self.abs_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Malformed config {self.abs_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {self.abs_path} must hold a JSON object")
        return data

    def load_config(self) -> MotionConfig:
        data = self.load_raw()
        if "target" in data:
            try:
                data["target"] = Pose.from_dict(data["target"])
            except (AttributeError, TypeError, ValueError) as e:
                raise ConfigError(f"Invalid target pose in {self.abs_path}: {e}") from e
        return MotionConfig().with_overrides(**data)
