"""
Mission State Machine

Allowed mission status changes and the pipeline stage order. Every status
change goes through transition(), which checks the table and writes the audit
entry; nothing else assigns Mission.status.
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet

from ..exceptions import InvalidTransitionError
from ..mission.context import MissionContext
from ..mission.models import AgentName, LogLevel, MissionStatus
from ..mission.payloads import StatusTransitionPayload

logger = logging.getLogger(__name__)


MISSION_TRANSITIONS: Dict[MissionStatus, FrozenSet[MissionStatus]] = {
    MissionStatus.PENDING: frozenset({
        MissionStatus.RUNNING,
        MissionStatus.FAILED,
    }),
    MissionStatus.RUNNING: frozenset({
        MissionStatus.AWAITING_APPROVAL,
        MissionStatus.COMPLETED,
        MissionStatus.FAILED,
    }),
    MissionStatus.AWAITING_APPROVAL: frozenset({
        MissionStatus.COMPLETED,
        MissionStatus.FAILED,
    }),
    MissionStatus.COMPLETED: frozenset(),
    MissionStatus.FAILED: frozenset(),
}


class PipelineStage(str, Enum):
    """Stages in the order the coordinator runs them."""
    PARSE = "parse"
    SOURCE = "source"
    COMPLY = "comply"
    GATE = "gate"
    RENDER = "render"
    FINALIZE = "finalize"


PIPELINE_ORDER = (
    PipelineStage.SOURCE,
    PipelineStage.COMPLY,
    PipelineStage.GATE,
    PipelineStage.RENDER,
)


def can_transition(current: MissionStatus, target: MissionStatus) -> bool:
    return target in MISSION_TRANSITIONS.get(current, frozenset())


def transition(context: MissionContext, target: MissionStatus) -> None:
    """
    Move the mission to a new status.

    Args:
        context: Mission context owning the mission
        target: Desired status

    Raises:
        InvalidTransitionError: If the move is not in MISSION_TRANSITIONS
    """
    mission = context.mission
    current = mission.status

    if not can_transition(current, target):
        logger.error(f"Rejected transition {current.value} -> {target.value} for mission {mission.id}")
        raise InvalidTransitionError(mission.id, current.value, target.value)

    mission.status = target
    context.touch()
    context.audit.record(
        AgentName.ORCHESTRATOR,
        LogLevel.ERROR if target == MissionStatus.FAILED else LogLevel.INFO,
        f"Mission status: {current.value} → {target.value}",
        StatusTransitionPayload(from_status=current.value, to_status=target.value)
    )
