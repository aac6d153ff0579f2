class XarmMoveError(Exception):
    """Base class for errors raised by the move client."""


class ConfigError(XarmMoveError):
    pass


class SessionInitError(XarmMoveError):
    """The ROS context, node or spinner could not be brought up."""


class ExecutionFailedError(XarmMoveError):
    pass


class WorkflowStateError(XarmMoveError):
    """An illegal transition was requested on the workflow state machine."""


class CheckpointAbortedError(XarmMoveError):
    """The process was asked to stop while waiting for operator confirmation."""
