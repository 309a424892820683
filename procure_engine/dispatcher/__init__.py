"""
Dispatcher Module

Human-in-the-loop approval gate. Holds missions above spending thresholds
until an approver signs off; everything else is auto-approved.
"""

from .approval_gate import (
    AUTO_APPROVER,
    ApprovalDecision,
    ApprovalGate,
    BaseApprovalGate,
)

__all__ = [
    "AUTO_APPROVER",
    "ApprovalDecision",
    "ApprovalGate",
    "BaseApprovalGate",
]
