"""
Mission Audit Log

Append-only, ordered record of what every component did during a mission.
Entries are mirrored to the Python log so operators see the same trail.
"""

import logging
from typing import List, Optional

from .clock import Clock
from .models import AgentLog, AgentName, LogLevel
from .payloads import LogPayload

logger = logging.getLogger(__name__)

_PYTHON_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class MissionAuditLog:
    """
    Audit trail for one mission.

    Entries can only be appended; `entries` hands out a copy so callers can't
    reorder or drop history.
    """

    def __init__(self, mission_id: str, clock: Clock):
        self.mission_id = mission_id
        self.clock = clock
        self._entries: List[AgentLog] = []

    def record(
        self,
        agent: AgentName,
        level: LogLevel,
        message: str,
        payload: Optional[LogPayload] = None
    ) -> AgentLog:
        """
        Append an entry.

        Args:
            agent: Component writing the entry
            level: Severity
            message: Human-readable message
            payload: Optional structured payload

        Returns:
            The stored AgentLog
        """
        entry = AgentLog(
            mission_id=self.mission_id,
            agent_name=agent,
            level=level,
            message=message,
            payload=payload,
            created_at=self.clock.now()
        )
        self._entries.append(entry)
        logger.log(
            _PYTHON_LEVELS[level],
            f"[{self.mission_id[:8]}] {agent.value}: {message}"
        )
        return entry

    def info(self, agent: AgentName, message: str, payload: Optional[LogPayload] = None) -> AgentLog:
        return self.record(agent, LogLevel.INFO, message, payload)

    def warn(self, agent: AgentName, message: str, payload: Optional[LogPayload] = None) -> AgentLog:
        return self.record(agent, LogLevel.WARN, message, payload)

    def error(self, agent: AgentName, message: str, payload: Optional[LogPayload] = None) -> AgentLog:
        return self.record(agent, LogLevel.ERROR, message, payload)

    def debug(self, agent: AgentName, message: str, payload: Optional[LogPayload] = None) -> AgentLog:
        return self.record(agent, LogLevel.DEBUG, message, payload)

    @property
    def entries(self) -> List[AgentLog]:
        return list(self._entries)

    def for_agent(self, agent: AgentName) -> List[AgentLog]:
        """Entries written by one component, in order."""
        return [entry for entry in self._entries if entry.agent_name == agent]

    def __len__(self) -> int:
        return len(self._entries)
