"""
Mission Module

Records, audit trail, and injectable time/randomness shared by every stage
of a procurement mission.
"""

from .audit import MissionAuditLog
from .clock import Clock, FixedClock, RandomSource, ScriptedRandom, SystemClock, SystemRandom
from .context import MissionContext
from .models import (
    AgentLog,
    AgentName,
    ApprovalRequest,
    ApprovalStatus,
    Availability,
    ComplianceResult,
    DocumentType,
    LogLevel,
    Mission,
    MissionStatus,
    ParsedItem,
    ParsedRequest,
    Policy,
    PolicyCategory,
    ProcurementDocument,
    Urgency,
    Vendor,
    VendorQuote,
)

__all__ = [
    "AgentLog",
    "AgentName",
    "ApprovalRequest",
    "ApprovalStatus",
    "Availability",
    "Clock",
    "ComplianceResult",
    "DocumentType",
    "FixedClock",
    "LogLevel",
    "Mission",
    "MissionAuditLog",
    "MissionContext",
    "MissionStatus",
    "ParsedItem",
    "ParsedRequest",
    "Policy",
    "PolicyCategory",
    "ProcurementDocument",
    "RandomSource",
    "ScriptedRandom",
    "SystemClock",
    "SystemRandom",
    "Urgency",
    "Vendor",
    "VendorQuote",
]
