import pytest

from xarm_move.errors import ExecutionFailedError, WorkflowStateError
from xarm_move.interfaces import PlanResult
from xarm_move.orchestrator import (
    EXECUTE_PROMPT,
    PLAN_PROMPT,
    ArmMotionOrchestrator,
    WorkflowState,
)
from xarm_move.phase_metrics import PhaseMetrics
from xarm_move.pose import Pose

from conftest import FakeBackend, FakeVisual


def make(backend, visual, config, logger, **kwargs):
    return ArmMotionOrchestrator(backend, visual, config, logger, **kwargs)


class TestHappyPath:
    def test_publish_trajectory_then_prompt_then_execute(self, call_log, backend, visual, config, logger):
        result = make(backend, visual, config, logger).run()

        assert result.state is WorkflowState.DONE
        assert result.succeeded
        assert result.plan.waypoint_count == 3
        drawn = call_log.index_of("publish_trajectory")
        confirmed = call_log.index_of("prompt", EXECUTE_PROMPT)
        executed = call_log.index_of("execute")
        assert drawn < confirmed < executed

    def test_configure_once_before_plan(self, call_log, backend, visual, config, logger):
        make(backend, visual, config, logger).run()

        assert call_log.count_of("configure") == 1
        assert call_log.index_of("configure") < call_log.index_of("plan")
        assert call_log[call_log.index_of("configure")][1] == (10.0, 0.01, 0.01, 0.01)

    def test_state_tracking_and_goal_before_checkpoint(self, call_log, backend, visual, config, logger):
        make(backend, visual, config, logger).run()

        tracking = call_log.index_of("start_state_tracking")
        goal = call_log.index_of("set_goal_pose", "arm_group", Pose(0.4, 0.4, 0.4))
        assert tracking < goal < call_log.index_of("prompt", PLAN_PROMPT)

    def test_checkpoints_gate_plan_and_execute(self, call_log, backend, visual, config, logger):
        make(backend, visual, config, logger).run()

        assert call_log.index_of("prompt", PLAN_PROMPT) < call_log.index_of("plan")
        assert call_log.index_of("plan") < call_log.index_of("prompt", EXECUTE_PROMPT)
        assert call_log.index_of("prompt", EXECUTE_PROMPT) < call_log.index_of("execute")

    def test_titles_are_drawn_before_plan_and_execute(self, call_log, backend, visual, config, logger):
        make(backend, visual, config, logger).run()

        planning = call_log.index_of("publish_text", "Planning")
        executing = call_log.index_of("publish_text", "Executing")
        assert call_log.index_of("prompt", PLAN_PROMPT) < planning < call_log.index_of("plan")
        assert call_log.index_of("prompt", EXECUTE_PROMPT) < executing < call_log.index_of("execute")
        assert call_log[planning][1][1:] == ("WHITE", "XLARGE")

    def test_visits_every_state_once(self, backend, visual, config, logger):
        orchestrator = make(backend, visual, config, logger)
        orchestrator.run()

        assert orchestrator.history == [
            WorkflowState.INIT,
            WorkflowState.CONFIGURED,
            WorkflowState.GOAL_SET,
            WorkflowState.AWAITING_PLAN_CONFIRM,
            WorkflowState.PLANNING,
            WorkflowState.PLANNED,
            WorkflowState.AWAITING_EXEC_CONFIRM,
            WorkflowState.EXECUTING,
            WorkflowState.DONE,
        ]

    def test_current_pose_is_logged(self, call_log, backend, visual, config, logger):
        make(backend, visual, config, logger).run()

        infos = [args[0] for name, args in call_log if name == "log.info"]
        assert any("Current pose" in msg and "0.200" in msg for msg in infos)

    def test_unreadable_current_pose_does_not_stop_motion(self, call_log, visual, config, logger):
        class NoFkBackend(FakeBackend):
            def get_current_pose(self, group):
                raise RuntimeError("Forward kinematics for the current state failed")

        result = make(NoFkBackend(call_log), visual, config, logger).run()

        assert result.state is WorkflowState.DONE
        assert call_log.count_of("plan") == 1
        warnings = [args[0] for name, args in call_log if name == "log.warn"]
        assert any("current pose" in w for w in warnings)

    def test_repeated_goal_leaves_identical_goal(self, call_log, backend, visual, config, logger):
        backend.set_goal_pose(config.group_name, Pose(0.4, 0.4, 0.4))
        backend.set_goal_pose(config.group_name, Pose(0.4, 0.4, 0.4))
        make(backend, visual, config, logger).run()

        goals = [args for name, args in call_log if name == "set_goal_pose"]
        assert len(set(goals)) == 1
        assert backend.goals == {"arm_group": config.target}

    def test_run_is_single_shot(self, backend, visual, config, logger):
        orchestrator = make(backend, visual, config, logger)
        orchestrator.run()

        with pytest.raises(WorkflowStateError):
            orchestrator.run()


class TestPlanFailure:
    def test_skips_drawing_and_execution(self, call_log, visual, config, logger):
        backend = FakeBackend(call_log, plan_result=PlanResult(success=False))
        result = make(backend, visual, config, logger).run()

        assert result.state is WorkflowState.PLAN_FAILED
        assert not result.succeeded
        assert ("log.error", ("Planning failed!",)) in call_log
        assert "publish_trajectory" not in call_log.names()
        assert "execute" not in call_log.names()
        assert call_log.count_of("prompt") == 1

    def test_plan_requested_once(self, call_log, visual, config, logger):
        backend = FakeBackend(call_log, plan_result=PlanResult(success=False))
        make(backend, visual, config, logger).run()

        assert call_log.count_of("plan") == 1


class TestVisualization:
    def test_failures_are_logged_and_motion_continues(self, call_log, backend, config, logger):
        visual = FakeVisual(call_log, failing={"publish_trajectory", "publish_text", "clear_markers"})
        result = make(backend, visual, config, logger).run()

        assert result.state is WorkflowState.DONE
        assert call_log.count_of("execute") == 1
        warnings = [args[0] for name, args in call_log if name == "log.warn"]
        assert any("trajectory" in w for w in warnings)

    def test_separate_checkpoint_replaces_visual_prompt(self, call_log, backend, visual, config, logger):
        prompts = []

        class Gate:
            def prompt(self, text):
                prompts.append(text)

        make(backend, visual, config, logger, checkpoint=Gate()).run()

        assert prompts == [PLAN_PROMPT, EXECUTE_PROMPT]
        assert "prompt" not in call_log.names()


class TestExecutionFailure:
    def test_log_policy_continues(self, call_log, visual, config, logger):
        backend = FakeBackend(call_log, execute_result=False)
        result = make(backend, visual, config, logger).run()

        assert result.state is WorkflowState.DONE
        assert result.executed
        assert result.execution_succeeded is False
        assert not result.succeeded
        assert "log.warn" in call_log.names()

    def test_fail_policy_raises(self, call_log, visual, config, logger):
        backend = FakeBackend(call_log, execute_result=False)
        cfg = config.with_overrides(execution_failure_policy="fail")
        orchestrator = make(backend, visual, cfg, logger)

        with pytest.raises(ExecutionFailedError):
            orchestrator.run()
        assert orchestrator.result.execution_succeeded is False
        assert orchestrator.metrics.outcome == "execution_failed"


class TestShutdownRequested:
    def test_stops_before_checkpoint(self, call_log, backend, visual, config, logger):
        orchestrator = make(backend, visual, config, logger, is_ok=lambda: False)
        result = orchestrator.run()

        assert result.state is WorkflowState.GOAL_SET
        assert "prompt" not in call_log.names()
        assert "plan" not in call_log.names()


class TestMetrics:
    def test_phases_and_waypoints_recorded(self, backend, visual, config, logger):
        metrics = PhaseMetrics()
        make(backend, visual, config, logger, metrics=metrics).run()

        assert metrics.outcome == "done"
        assert metrics.waypoints == 3
        assert set(metrics.phase_times_s) == {"plan_confirm", "planning", "execute_confirm", "execution"}
