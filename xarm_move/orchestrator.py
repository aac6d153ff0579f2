"""
Arm Motion Orchestrator

Drives one pose-goal motion: configure, set goal, confirm, plan, draw,
confirm, execute. Every state is visited at most once per instance.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .config import MotionConfig
from .errors import ExecutionFailedError, WorkflowStateError
from .interfaces import MotionBackend, PlanResult, VisualTools
from .phase_metrics import PhaseMetrics
from .pose import title_pose

PLAN_PROMPT = "Press 'Next' in the RvizVisualToolsGui window to plan"
EXECUTE_PROMPT = "Press 'Next' in the RvizVisualToolsGui window to execute"


class WorkflowState(Enum):
    INIT = "init"
    CONFIGURED = "configured"
    GOAL_SET = "goal_set"
    AWAITING_PLAN_CONFIRM = "awaiting_plan_confirm"
    PLANNING = "planning"
    PLAN_FAILED = "plan_failed"
    PLANNED = "planned"
    AWAITING_EXEC_CONFIRM = "awaiting_exec_confirm"
    EXECUTING = "executing"
    DONE = "done"


_TRANSITIONS = {
    WorkflowState.INIT: {WorkflowState.CONFIGURED},
    WorkflowState.CONFIGURED: {WorkflowState.GOAL_SET},
    WorkflowState.GOAL_SET: {WorkflowState.AWAITING_PLAN_CONFIRM},
    WorkflowState.AWAITING_PLAN_CONFIRM: {WorkflowState.PLANNING},
    WorkflowState.PLANNING: {WorkflowState.PLAN_FAILED, WorkflowState.PLANNED},
    WorkflowState.PLANNED: {WorkflowState.AWAITING_EXEC_CONFIRM},
    WorkflowState.AWAITING_EXEC_CONFIRM: {WorkflowState.EXECUTING},
    WorkflowState.EXECUTING: {WorkflowState.DONE},
}


@dataclass
class WorkflowResult:
    state: WorkflowState
    plan: Optional[PlanResult] = None
    executed: bool = False
    execution_succeeded: Optional[bool] = None

    @property
    def succeeded(self) -> bool:
        return self.state is WorkflowState.DONE and bool(self.execution_succeeded)


class ArmMotionOrchestrator:
    """
    Single-shot pose-goal workflow over a motion backend and visual tools.

    Args:
        backend: planning/execution backend
        visual: marker publisher; also the confirmation gate unless
            `checkpoint` is given
        config: planning parameters, goal and failure policy
        logger: object with info/warn/error (rclpy logger in production)
        checkpoint: object with a blocking prompt(text)
        metrics: per-phase timing record
        is_ok: returns False once the process has been asked to stop
    """

    def __init__(self, backend: MotionBackend, visual: VisualTools,
                 config: MotionConfig, logger: Any,
                 checkpoint: Optional[Any] = None,
                 metrics: Optional[PhaseMetrics] = None,
                 is_ok: Callable[[], bool] = lambda: True):
        self.backend = backend
        self.visual = visual
        self.config = config
        self.logger = logger
        self.checkpoint = checkpoint if checkpoint is not None else visual
        self.metrics = metrics if metrics is not None else PhaseMetrics()
        self._is_ok = is_ok

        self.state = WorkflowState.INIT
        self.history = [WorkflowState.INIT]
        self.result: Optional[WorkflowResult] = None

    def _transition(self, new_state: WorkflowState):
        if new_state not in _TRANSITIONS.get(self.state, set()):
            raise WorkflowStateError(
                f"Illegal transition {self.state.name} -> {new_state.name}"
            )
        self.state = new_state
        self.history.append(new_state)

    def _visualize(self, what: str, action: Callable, *args):
        # Visualization is observability only; never abort the motion over it
        try:
            action(*args)
        except Exception as e:
            self.logger.warn(f"Visualization step '{what}' failed: {e}")

    def _log_current_pose(self):
        group = self.config.group_name
        try:
            current_pose = self.backend.get_current_pose(group)
        except Exception as e:
            self.logger.warn(f"Could not read current pose of '{group}': {e}")
            return
        self.logger.info(f"Current pose of '{group}': {current_pose}")

    def _draw_title(self, text: str):
        self._visualize(
            "title", self.visual.publish_text,
            title_pose(self.config.title_height), text, "WHITE", "XLARGE",
        )
        self._visualize("trigger", self.visual.trigger)

    def _finish(self, outcome: str, **kwargs) -> WorkflowResult:
        self.metrics.record_outcome(outcome)
        self.result = WorkflowResult(state=self.state, **kwargs)
        return self.result

    def configure(self):
        cfg = self.config
        self.backend.configure(
            cfg.planning_timeout,
            cfg.joint_tolerance,
            cfg.position_tolerance,
            cfg.orientation_tolerance,
        )
        self.backend.start_state_tracking()
        self._transition(WorkflowState.CONFIGURED)
        self.logger.info(f"Configured planning session: {cfg.summary()}")

    def set_goal(self):
        self.backend.set_goal_pose(self.config.group_name, self.config.target)
        self._transition(WorkflowState.GOAL_SET)

        self._visualize("clear markers", self.visual.clear_markers)
        self._visualize("load remote control", self.visual.load_remote_control)

    def run(self) -> WorkflowResult:
        if self.state is not WorkflowState.INIT:
            raise WorkflowStateError(
                f"Orchestrator is single-shot; already in state {self.state.name}"
            )

        self.configure()
        self.set_goal()

        if not self._is_ok():
            self.logger.warn("Shutdown requested before planning; skipping motion")
            return self._finish("interrupted")

        self._log_current_pose()

        # Checkpoint A
        self._transition(WorkflowState.AWAITING_PLAN_CONFIRM)
        with self.metrics.phase("plan_confirm"):
            self.checkpoint.prompt(PLAN_PROMPT)
        self._draw_title("Planning")

        self._transition(WorkflowState.PLANNING)
        with self.metrics.phase("planning"):
            plan = self.backend.plan()

        if not plan.success:
            self._transition(WorkflowState.PLAN_FAILED)
            self.logger.error("Planning failed!")
            return self._finish("plan_failed", plan=plan)

        self._transition(WorkflowState.PLANNED)
        self.metrics.record_plan(plan.waypoint_count)
        self.logger.info(f"Planning succeeded with {plan.waypoint_count} waypoints")
        self._visualize(
            "trajectory", self.visual.publish_trajectory, plan, self.config.group_name
        )
        self._visualize("trigger", self.visual.trigger)

        # Checkpoint B
        self._transition(WorkflowState.AWAITING_EXEC_CONFIRM)
        with self.metrics.phase("execute_confirm"):
            self.checkpoint.prompt(EXECUTE_PROMPT)
        self._draw_title("Executing")

        self._transition(WorkflowState.EXECUTING)
        with self.metrics.phase("execution"):
            succeeded = bool(self.backend.execute(plan))
        self._transition(WorkflowState.DONE)

        if succeeded:
            self.logger.info("Execution finished")
            return self._finish("done", plan=plan, executed=True, execution_succeeded=True)

        result = self._finish(
            "execution_failed", plan=plan, executed=True, execution_succeeded=False
        )
        if self.config.execution_failure_policy == "fail":
            self.logger.error("Execution failed!")
            raise ExecutionFailedError("Backend reported execution failure")
        self.logger.warn("Execution reported failure; continuing to shutdown")
        return result
