"""
Orchestrator Module

Mission coordinator and status state machine. The coordinator runs the
pipeline stages in order and owns the mission context for the whole run.
"""

from .coordinator import (
    ClarificationResult,
    LaunchResult,
    MissionCoordinator,
    MissionResult,
    run_mission,
)
from .state_machine import (
    MISSION_TRANSITIONS,
    PIPELINE_ORDER,
    PipelineStage,
    can_transition,
    transition,
)

__all__ = [
    "ClarificationResult",
    "LaunchResult",
    "MissionCoordinator",
    "MissionResult",
    "run_mission",
    "MISSION_TRANSITIONS",
    "PIPELINE_ORDER",
    "PipelineStage",
    "can_transition",
    "transition",
]
