#!/usr/bin/env python3

import argparse
import sys
from typing import Any, Callable, List, Optional, Tuple

from .checkpoints import ConsoleCheckpoint
from .config import (
    CONFIRM_VIA_CHOICES,
    EXECUTION_FAILURE_POLICIES,
    MotionConfig,
    MotionConfigLoader,
)
from .errors import CheckpointAbortedError, ConfigError, ExecutionFailedError, SessionInitError
from .interfaces import Session
from .orchestrator import ArmMotionOrchestrator, WorkflowResult, WorkflowState
from .phase_metrics import PhaseMetrics
from .pose import Pose

EXIT_OK = 0
EXIT_PLAN_FAILED = 1
EXIT_EXECUTION_FAILED = 2
EXIT_SESSION_FAILED = 3
EXIT_CONFIG_ERROR = 4
EXIT_ABORTED = 5

CollaboratorFactory = Callable[[Any, MotionConfig], Tuple[Any, Any, Optional[Any]]]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Plan and execute one pose goal with MoveIt, gated by RViz 'Next' prompts"
    )
    parser.add_argument("--config", type=str, default=None, help="JSON config file (default: installed config/xarm_move.json)")
    parser.add_argument("--group", type=str, default=None, help="Planning group name")
    parser.add_argument("--planning_timeout", type=float, default=None, help="Planner time budget in seconds")
    parser.add_argument("--target", type=float, nargs=3, metavar=("X", "Y", "Z"), default=None, help="Goal position; orientation stays identity")
    parser.add_argument("--confirm_via", choices=CONFIRM_VIA_CHOICES, default=None, help="Checkpoint gate: RViz 'Next' button or console Enter")
    parser.add_argument("--execution_failure_policy", choices=EXECUTION_FAILURE_POLICIES, default=None, help="On execution failure: log and continue, or fail with non-zero status")
    parser.add_argument("--metrics_csv", type=str, default=None, help="Append per-phase run metrics to this CSV file")
    return parser


def parse_args(argv: Optional[List[str]] = None):
    """Split argv into client options and pass-through ROS arguments."""
    return build_parser().parse_known_args(argv)


def load_config(args) -> MotionConfig:
    if args.config:
        loader = MotionConfigLoader(abs_path=args.config)
    else:
        loader = MotionConfigLoader()
    config = loader.load_config()
    target = Pose.from_position(*args.target) if args.target else None
    return config.with_overrides(
        group_name=args.group,
        planning_timeout=args.planning_timeout,
        target=target,
        confirm_via=args.confirm_via,
        execution_failure_policy=args.execution_failure_policy,
        metrics_csv=args.metrics_csv,
    )


def exit_code_for(result: WorkflowResult) -> int:
    if result.state is WorkflowState.PLAN_FAILED:
        return EXIT_PLAN_FAILED
    if result.state is not WorkflowState.DONE:
        return EXIT_ABORTED
    return EXIT_OK


def run_client(config: MotionConfig, session: Session,
               build_collaborators: CollaboratorFactory, logger: Any,
               metrics: Optional[PhaseMetrics] = None) -> int:
    """
    Start the session, run the workflow once and release the session on
    every path past a successful start.

    Returns:
        Process exit status
    """
    try:
        node = session.start()
    except SessionInitError as e:
        logger.error(f"Session init failed: {e}")
        return EXIT_SESSION_FAILED

    metrics = metrics if metrics is not None else PhaseMetrics()
    try:
        backend, visual, checkpoint = build_collaborators(node, config)
        orchestrator = ArmMotionOrchestrator(
            backend, visual, config, logger,
            checkpoint=checkpoint, metrics=metrics, is_ok=session.ok,
        )
        return exit_code_for(orchestrator.run())
    except ExecutionFailedError as e:
        logger.error(str(e))
        return EXIT_EXECUTION_FAILED
    except CheckpointAbortedError as e:
        metrics.record_outcome("aborted")
        logger.warn(str(e))
        return EXIT_ABORTED
    finally:
        try:
            row = metrics.write_row(config.metrics_csv)
            if row is not None:
                logger.info(f"Run metrics appended to {config.metrics_csv}")
        except Exception as e:
            logger.warn(f"Run metrics write failed: {e}")
        finally:
            session.shutdown()


def build_ros_collaborators(node, config: MotionConfig):
    from .moveit_backend import MoveIt2Backend
    from .visual_tools import RvizVisualTools

    backend = MoveIt2Backend(node, config)
    visual = RvizVisualTools(node, backend, config)
    checkpoint = ConsoleCheckpoint() if config.confirm_via == "console" else None
    return backend, visual, checkpoint


def main(argv: Optional[List[str]] = None):
    import rclpy.logging
    from .session import RosSession

    args, ros_args = parse_args(argv if argv is not None else sys.argv[1:])
    logger = rclpy.logging.get_logger(MotionConfig.node_name)
    try:
        config = load_config(args)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(EXIT_CONFIG_ERROR)

    logger = rclpy.logging.get_logger(config.node_name)
    session = RosSession(config.node_name, args=[sys.argv[0]] + ros_args)
    sys.exit(run_client(config, session, build_ros_collaborators, logger))


if __name__ == '__main__':
    main()
