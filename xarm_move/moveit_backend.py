import time
from typing import List, Optional, Tuple

from rclpy.node import Node

from geometry_msgs.msg import Pose as PoseMsg
from sensor_msgs.msg import JointState
from trajectory_msgs.msg import JointTrajectory

from pymoveit2 import MoveIt2

from .config import MotionConfig
from .interfaces import PlanResult
from .pose import Pose


def pose_to_msg(pose: Pose) -> PoseMsg:
    msg = PoseMsg()
    msg.position.x, msg.position.y, msg.position.z = pose.position
    (msg.orientation.x, msg.orientation.y,
     msg.orientation.z, msg.orientation.w) = pose.quat_xyzw
    return msg


def pose_from_msg(msg: PoseMsg) -> Pose:
    return Pose(
        msg.position.x, msg.position.y, msg.position.z,
        msg.orientation.x, msg.orientation.y, msg.orientation.z, msg.orientation.w,
    )


class MoveIt2Backend:
    """Planning backend for one planning group on top of pymoveit2."""

    def __init__(self, node: Node, config: MotionConfig):
        self.node = node
        self.group_name = config.group_name
        self.state_wait_timeout = config.state_wait_timeout

        self.moveit2 = MoveIt2(
            node=node,
            joint_names=list(config.joint_names),
            base_link_name=config.base_link,
            end_effector_name=config.end_effector,
            group_name=config.group_name,
        )

        self.joint_tolerance = 0.001
        self.position_tolerance = 0.001
        self.orientation_tolerance = 0.001
        self._goal: Optional[Pose] = None

    def _check_group(self, group: str):
        if group != self.group_name:
            raise ValueError(
                f"Backend serves planning group '{self.group_name}', not '{group}'"
            )

    def configure(self, planning_timeout: float, joint_tol: float,
                  pos_tol: float, orient_tol: float):
        self.moveit2.allowed_planning_time = float(planning_timeout)
        self.joint_tolerance = float(joint_tol)
        self.position_tolerance = float(pos_tol)
        self.orientation_tolerance = float(orient_tol)

    def start_state_tracking(self):
        """Wait until the joint state subscription delivers a first message."""
        deadline = time.monotonic() + self.state_wait_timeout
        while self.moveit2.joint_state is None:
            if time.monotonic() >= deadline:
                self.node.get_logger().warn(
                    f"No joint state received within {self.state_wait_timeout}s; "
                    "planning will start from the planning scene state"
                )
                return
            self.node.get_logger().info('Waiting for joint states...')
            time.sleep(0.5)

    def set_goal_pose(self, group: str, pose: Pose):
        self._check_group(group)
        # Replaces any previous goal
        self._goal = pose.normalized()

    def get_current_pose(self, group: str) -> Pose:
        self._check_group(group)
        result = self.moveit2.compute_fk()
        if result is None:
            raise RuntimeError("Forward kinematics for the current state failed")
        return pose_from_msg(result.pose)

    def plan(self) -> PlanResult:
        if self._goal is None:
            raise RuntimeError("plan() called before a goal pose was set")
        trajectory: Optional[JointTrajectory] = self.moveit2.plan(
            position=list(self._goal.position),
            quat_xyzw=list(self._goal.quat_xyzw),
            tolerance_position=self.position_tolerance,
            tolerance_orientation=self.orientation_tolerance,
            tolerance_joint_position=self.joint_tolerance,
        )
        if trajectory is None:
            return PlanResult(success=False)
        return PlanResult(success=True, trajectory=trajectory,
                          waypoint_count=len(trajectory.points))

    def execute(self, plan: PlanResult) -> bool:
        if not plan.success or plan.trajectory is None:
            return False
        self.moveit2.execute(plan.trajectory)
        return bool(self.moveit2.wait_until_executed())

    def waypoint_positions(self, plan: PlanResult) -> List[Tuple[float, float, float]]:
        """End-effector position at every waypoint of a planned trajectory."""
        trajectory: JointTrajectory = plan.trajectory
        positions = []
        for point in trajectory.points:
            joint_state = JointState()
            joint_state.name = list(trajectory.joint_names)
            joint_state.position = list(point.positions)
            result = self.moveit2.compute_fk(joint_state=joint_state)
            if result is None:
                self.node.get_logger().warn("FK failed for a trajectory waypoint; skipping it")
                continue
            p = result.pose.position
            positions.append((p.x, p.y, p.z))
        return positions
