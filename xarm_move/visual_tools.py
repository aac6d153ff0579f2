from typing import Callable, Tuple

import rclpy
from rclpy.node import Node

from geometry_msgs.msg import Point
from sensor_msgs.msg import Joy
from visualization_msgs.msg import Marker, MarkerArray

from .checkpoints import RemoteControlGate
from .config import MotionConfig
from .interfaces import PlanResult
from .marker_batch import MarkerBatch
from .moveit_backend import MoveIt2Backend, pose_to_msg
from .pose import Pose
from .tool_path import ToolPath

COLORS = {
    "WHITE": (1.0, 1.0, 1.0, 1.0),
    "RED": (1.0, 0.0, 0.0, 1.0),
    "GREEN": (0.0, 1.0, 0.0, 1.0),
    "BLUE": (0.0, 0.0, 1.0, 1.0),
    "LIME_GREEN": (0.6, 0.98, 0.2, 1.0),
}

# Text height in metres
SCALES = {
    "SMALL": 0.05,
    "MEDIUM": 0.1,
    "LARGE": 0.15,
    "XLARGE": 0.2,
    "XXLARGE": 0.3,
}


class RvizVisualTools:
    """
    Batches RViz markers until trigger() and gates the workflow on the
    'Next' button of the RvizVisualToolsGui panel.
    """

    def __init__(self, node: Node, backend: MoveIt2Backend, config: MotionConfig,
                 is_ok: Callable[[], bool] = rclpy.ok):
        self.node = node
        self.backend = backend
        self.frame_id = config.visual_frame
        self.remote_control_topic = config.remote_control_topic
        self.goal = config.target

        self.marker_pub = self.node.create_publisher(MarkerArray, config.marker_topic, 10)
        self._batch = MarkerBatch(
            lambda markers: self.marker_pub.publish(MarkerArray(markers=markers))
        )
        self._next_id = 0

        self._remote_sub = None
        self._gate = RemoteControlGate(is_ok)

    def _new_marker(self, ns: str, marker_type: int) -> Marker:
        marker = Marker()
        marker.header.frame_id = self.frame_id
        marker.header.stamp = self.node.get_clock().now().to_msg()
        marker.ns = ns
        marker.id = self._next_id
        self._next_id += 1
        marker.type = marker_type
        marker.action = Marker.ADD
        marker.pose.orientation.w = 1.0
        return marker

    def clear_markers(self):
        marker = Marker()
        marker.header.frame_id = self.frame_id
        marker.action = Marker.DELETEALL
        self.marker_pub.publish(MarkerArray(markers=[marker]))
        self._batch.discard()
        self._next_id = 0

    def load_remote_control(self):
        if self._remote_sub is not None:
            return
        self._remote_sub = self.node.create_subscription(
            Joy, self.remote_control_topic, self._remote_control_callback, 10
        )
        self.node.get_logger().info(
            f"RvizVisualToolsGui remote control listening on {self.remote_control_topic}"
        )

    def _remote_control_callback(self, msg: Joy):
        self._gate.on_buttons(msg.buttons)

    def publish_text(self, pose: Pose, text: str, color: str = "WHITE", size: str = "XLARGE"):
        marker = self._new_marker("text", Marker.TEXT_VIEW_FACING)
        marker.pose = pose_to_msg(pose)
        marker.text = text
        marker.scale.z = SCALES[size]
        marker.color.r, marker.color.g, marker.color.b, marker.color.a = COLORS[color]
        self._batch.add(marker)

    def publish_trajectory(self, plan: PlanResult, group: str):
        positions = self.backend.waypoint_positions(plan)
        if len(positions) < ToolPath.MIN_POINTS:
            self.node.get_logger().info(
                f"Trajectory for '{group}' has {len(positions)} drawable waypoint(s); "
                "skipping tool path line"
            )
            return
        tool_path = ToolPath(positions)
        self.node.get_logger().info(
            f"Trajectory for '{group}': {len(tool_path.as_points())} waypoints, "
            f"tool path length {tool_path.length():.3f} m, "
            f"ends {tool_path.end_error(*self.goal.position):.3f} m from goal"
        )
        self._batch.add(self._as_marker(tool_path, "trajectory_line", COLORS["LIME_GREEN"], 0.005))

    def _as_marker(self, tool_path: ToolPath, ns: str,
                   color: Tuple[float, float, float, float], width: float) -> Marker:
        marker = self._new_marker(ns, Marker.LINE_STRIP)
        marker.scale.x = width
        marker.color.r, marker.color.g, marker.color.b, marker.color.a = color
        marker.points = []
        for pt in tool_path.as_points():
            point = Point()
            point.x, point.y, point.z = pt
            marker.points.append(point)
        return marker

    def trigger(self):
        self._batch.flush()

    def prompt(self, text: str):
        """Block until 'Next' is pressed; no timeout."""
        self.load_remote_control()
        self.node.get_logger().info(text)
        self._gate.wait(text)
