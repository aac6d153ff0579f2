"""
ROS-free collaborators for the workflow tests. Every fake appends to one
shared call log so tests can assert on cross-collaborator ordering.
"""
import pytest

from xarm_move.config import MotionConfig
from xarm_move.errors import SessionInitError
from xarm_move.interfaces import PlanResult
from xarm_move.pose import Pose


class CallLog(list):
    def names(self):
        return [name for name, _ in self]

    def index_of(self, name, *args):
        for i, (n, a) in enumerate(self):
            if n == name and (not args or a[:len(args)] == args):
                return i
        raise ValueError(f"{name}{args} not called; log={self.names()}")

    def count_of(self, name):
        return sum(1 for n, _ in self if n == name)


class FakeLogger:
    def __init__(self, log):
        self.log = log

    def info(self, msg):
        self.log.append(("log.info", (msg,)))

    def warn(self, msg):
        self.log.append(("log.warn", (msg,)))

    def error(self, msg):
        self.log.append(("log.error", (msg,)))


class FakeBackend:
    def __init__(self, log, plan_result=None, execute_result=True, current_pose=None):
        self.log = log
        self.plan_result = plan_result if plan_result is not None else PlanResult(
            success=True, trajectory=["wp0", "wp1", "wp2"], waypoint_count=3
        )
        self.execute_result = execute_result
        self.current_pose = current_pose or Pose(0.2, 0.0, 0.3)
        self.goals = {}

    def configure(self, planning_timeout, joint_tol, pos_tol, orient_tol):
        self.log.append(("configure", (planning_timeout, joint_tol, pos_tol, orient_tol)))

    def start_state_tracking(self):
        self.log.append(("start_state_tracking", ()))

    def set_goal_pose(self, group, pose):
        self.log.append(("set_goal_pose", (group, pose)))
        self.goals[group] = pose

    def get_current_pose(self, group):
        self.log.append(("get_current_pose", (group,)))
        return self.current_pose

    def plan(self):
        self.log.append(("plan", ()))
        return self.plan_result

    def execute(self, plan):
        self.log.append(("execute", (plan,)))
        return self.execute_result


class FakeVisual:
    def __init__(self, log, failing=(), prompt_error=None):
        self.log = log
        self.failing = set(failing)
        self.prompt_error = prompt_error

    def _record(self, name, *args):
        self.log.append((name, args))
        if name in self.failing:
            raise RuntimeError(f"{name} unavailable")

    def clear_markers(self):
        self._record("clear_markers")

    def load_remote_control(self):
        self._record("load_remote_control")

    def publish_text(self, pose, text, color, size):
        self._record("publish_text", text, color, size)

    def publish_trajectory(self, plan, group):
        self._record("publish_trajectory", plan, group)

    def trigger(self):
        self._record("trigger")

    def prompt(self, text):
        self.log.append(("prompt", (text,)))
        if self.prompt_error is not None:
            raise self.prompt_error


class FakeSession:
    def __init__(self, log, fail_start=False, ok=True):
        self.log = log
        self.fail_start = fail_start
        self._ok = ok
        self.shutdown_calls = 0

    def start(self):
        self.log.append(("session.start", ()))
        if self.fail_start:
            raise SessionInitError("rmw unavailable")
        return "node"

    def ok(self):
        return self._ok

    def shutdown(self):
        self.shutdown_calls += 1
        self.log.append(("session.shutdown", ()))


@pytest.fixture
def call_log():
    return CallLog()


@pytest.fixture
def logger(call_log):
    return FakeLogger(call_log)


@pytest.fixture
def config():
    return MotionConfig()


@pytest.fixture
def backend(call_log):
    return FakeBackend(call_log)


@pytest.fixture
def visual(call_log):
    return FakeVisual(call_log)
