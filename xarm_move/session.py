from typing import List, Optional

import rclpy
import rclpy.logging
from rclpy.executors import ExternalShutdownException, ShutdownException, SingleThreadedExecutor
from rclpy.node import Node

from .errors import SessionInitError
from .spinner import SpinnerThread


class RosSession:
    """
    Owns the rclpy context, the client node and a background thread spinning
    a SingleThreadedExecutor so that state updates keep arriving while the
    main thread blocks on planning/execution requests.
    """

    def __init__(self, node_name: str, args: Optional[List[str]] = None):
        self.node_name = node_name
        self._args = args
        self.node: Optional[Node] = None
        self.executor: Optional[SingleThreadedExecutor] = None
        self._spinner: Optional[SpinnerThread] = None
        self._released = False

    def start(self) -> Node:
        try:
            rclpy.init(args=self._args)
            # Unknown -p overrides become node parameters without declaration
            self.node = Node(
                self.node_name,
                automatically_declare_parameters_from_overrides=True,
            )
            self.executor = SingleThreadedExecutor()
            self.executor.add_node(self.node)
            self._spinner = SpinnerThread(
                self.executor.spin, self.executor.shutdown,
                name=f"{self.node_name}_spinner",
                stop_exceptions=(ExternalShutdownException, ShutdownException),
            )
            self._spinner.start()
        except Exception as e:
            self._released = True
            try:
                self._release()
            except Exception as cleanup_error:
                rclpy.logging.get_logger(self.node_name).warn(
                    f"Cleanup after failed session start also failed: {cleanup_error}"
                )
            raise SessionInitError(f"Failed to start ROS session '{self.node_name}': {e}") from e
        return self.node

    def ok(self) -> bool:
        return rclpy.ok()

    def shutdown(self):
        if self._released:
            return
        self._released = True
        self._release()

    def _release(self):
        if self._spinner is not None:
            self._spinner.stop()
        elif self.executor is not None:
            self.executor.shutdown()
        if self.node is not None:
            self.node.destroy_node()
        rclpy.try_shutdown()

    def __enter__(self) -> Node:
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False
