"""
xArm Move Client
Plans and executes one pose goal through MoveIt with operator checkpoints
"""

from .config import MotionConfig
from .orchestrator import ArmMotionOrchestrator, WorkflowResult, WorkflowState
from .pose import Pose

__all__ = ['ArmMotionOrchestrator', 'MotionConfig', 'Pose', 'WorkflowResult', 'WorkflowState']
