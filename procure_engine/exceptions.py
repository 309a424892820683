"""
Typed exceptions for the procurement pipeline.

Only ConfigurationError ends a mission in the failed state. EnhancementError is
always recovered by the stage that raised it. The approval and transition errors
signal misuse of the mission lifecycle by the caller.
"""

from typing import Optional


class ProcureEngineError(Exception):
    """Base class for all pipeline errors."""

    code: str = "PROCURE_ENGINE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ProcureEngineError):
    """A vendor or policy record is malformed and the stage cannot produce output."""

    code = "INVALID_CONFIGURATION"

    def __init__(self, message: str, record_type: Optional[str] = None):
        super().__init__(message)
        self.record_type = record_type


class EnhancementError(ProcureEngineError):
    """The optional text-generation service was unavailable or returned junk."""

    code = "ENHANCEMENT_UNAVAILABLE"


class InvalidTransitionError(ProcureEngineError):
    """A mission status change is not in the transition table."""

    code = "INVALID_TRANSITION"

    def __init__(self, mission_id: str, current: str, target: str):
        super().__init__(
            f"Mission {mission_id} cannot move from '{current}' to '{target}'"
        )
        self.mission_id = mission_id
        self.current = current
        self.target = target


class ApprovalAlreadyResolvedError(ProcureEngineError):
    """An approval request was decided more than once."""

    code = "APPROVAL_ALREADY_RESOLVED"

    def __init__(self, approval_id: str, status: str):
        super().__init__(f"Approval {approval_id} is already {status}")
        self.approval_id = approval_id
        self.status = status


class MissionAlreadyLaunchedError(ProcureEngineError):
    """A coordinator was asked to launch a second mission."""

    code = "MISSION_ALREADY_LAUNCHED"
