"""
Approval Gate

Decides whether a sourced, compliance-checked mission needs human sign-off
before any purchase order is issued, and records the human decision when it
arrives.

BaseApprovalGate keeps the decision surface provider-agnostic so the in-process
gate can later be swapped for a ticketing or e-signature integration without
touching the coordinator.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel

from ..mission.audit import MissionAuditLog
from ..mission.clock import Clock, SystemClock
from ..mission.models import (
    AgentLog,
    AgentName,
    ApprovalRequest,
    ApprovalStatus,
    ComplianceResult,
    Policy,
    PolicyCategory,
    VendorQuote,
)
from ..mission.money import format_money
from ..mission.payloads import ApprovalDecisionPayload

logger = logging.getLogger(__name__)

DEFAULT_GENERAL_THRESHOLD = 10000.0
AUTO_APPROVER = "system (auto-approved)"


class ApprovalDecision(BaseModel):
    """Gate output: the approval record and why it is (or isn't) pending."""
    approval: ApprovalRequest
    requires_approval: bool
    reason: Optional[str] = None


class BaseApprovalGate(ABC):
    """
    Abstract approval gate.

    Implementations:
    - ApprovalGate (threshold rules, decisions recorded in-process)
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()
        logger.info(f"{self.__class__.__name__} initialized")

    @abstractmethod
    def evaluate(
        self,
        mission_id: str,
        total_amount: int,
        selected_quotes: List[VendorQuote],
        policies: List[Policy],
        compliance: List[ComplianceResult],
        audit: MissionAuditLog
    ) -> ApprovalDecision:
        """
        Decide whether the mission needs human approval.

        Args:
            mission_id: Owning mission
            total_amount: Sum of the selected quotes' total prices
            selected_quotes: Winning quote per item
            policies: Policy directory
            compliance: Verdicts from the compliance stage
            audit: Mission audit log

        Returns:
            ApprovalDecision with a pending or auto-approved request
        """
        pass

    @abstractmethod
    def record_decision(
        self,
        approval: ApprovalRequest,
        approved: bool,
        approver: str,
        audit: MissionAuditLog
    ) -> AgentLog:
        """
        Apply an external human decision to a pending request.

        Args:
            approval: The pending approval request
            approved: True to approve, False to reject
            approver: Identity of the decision maker
            audit: Mission audit log

        Returns:
            The audit entry recording the decision

        Raises:
            ApprovalAlreadyResolvedError: If the request was already decided
        """
        pass


class ApprovalGate(BaseApprovalGate):
    """
    Threshold-based approval gate.

    Rules, first match wins:
    1. An active budget policy whose threshold the total exceeds
    2. The general approval threshold
    3. Any failed compliance verdict (only when enabled)
    Everything else is auto-approved.
    """

    def __init__(
        self,
        general_threshold: float = DEFAULT_GENERAL_THRESHOLD,
        approval_on_compliance_failure: bool = False,
        clock: Optional[Clock] = None
    ):
        """
        Initialize the approval gate.

        Args:
            general_threshold: Total above which approval is always required
            approval_on_compliance_failure: Also hold missions with failed policies
            clock: Time source for request timestamps
        """
        self.general_threshold = general_threshold
        self.approval_on_compliance_failure = approval_on_compliance_failure
        super().__init__(clock)

    def evaluate(
        self,
        mission_id: str,
        total_amount: int,
        selected_quotes: List[VendorQuote],
        policies: List[Policy],
        compliance: List[ComplianceResult],
        audit: MissionAuditLog
    ) -> ApprovalDecision:
        reason = self._hold_reason(total_amount, policies, compliance)
        requires_approval = reason is not None
        now = self.clock.now()

        approval = ApprovalRequest(
            mission_id=mission_id,
            description=self._describe(total_amount, selected_quotes),
            total_amount=total_amount,
            created_at=now,
            reason=reason
        )

        vendors = ", ".join(q.vendor_name for q in selected_quotes) or "N/A"

        if requires_approval:
            audit.info(
                AgentName.HITL_BRIDGE,
                "Workflow paused — human approval required",
                ApprovalDecisionPayload(
                    approval_id=approval.id,
                    amount=total_amount,
                    requires_approval=True,
                    reason=reason,
                    vendor=vendors
                )
            )
        else:
            approval.status = ApprovalStatus.APPROVED
            approval.approver = AUTO_APPROVER
            approval.approved_at = now
            audit.info(
                AgentName.HITL_BRIDGE,
                f"Auto-approved: Amount {format_money(total_amount)} is within auto-approval limits",
                ApprovalDecisionPayload(
                    approval_id=approval.id,
                    amount=total_amount,
                    requires_approval=False,
                    vendor=vendors,
                    approver=AUTO_APPROVER,
                    approved=True
                )
            )

        logger.info(
            f"Approval gate for mission {mission_id}: "
            f"{'pending' if requires_approval else 'auto-approved'} ({format_money(total_amount)})"
        )
        return ApprovalDecision(
            approval=approval,
            requires_approval=requires_approval,
            reason=reason
        )

    def record_decision(
        self,
        approval: ApprovalRequest,
        approved: bool,
        approver: str,
        audit: MissionAuditLog
    ) -> AgentLog:
        approval.resolve(approved, approver, self.clock.now())

        message = (
            f"Approved by {approver} — resuming workflow" if approved
            else f"Rejected by {approver} — workflow terminated"
        )
        logger.info(f"Approval {approval.id}: {message}")
        return audit.info(
            AgentName.HITL_BRIDGE,
            message,
            ApprovalDecisionPayload(
                approval_id=approval.id,
                amount=approval.total_amount,
                requires_approval=True,
                reason=approval.reason,
                approver=approver,
                approved=approved
            )
        )

    def _hold_reason(
        self,
        total_amount: int,
        policies: List[Policy],
        compliance: List[ComplianceResult]
    ) -> Optional[str]:
        total = format_money(total_amount)

        for policy in policies:
            if (
                policy.category == PolicyCategory.BUDGET.value
                and policy.is_active
                and policy.threshold_amount is not None
                and total_amount > policy.threshold_amount
            ):
                return (
                    f"Total amount {total} exceeds {format_money(policy.threshold_amount)} "
                    f"threshold ({policy.name})"
                )

        if total_amount > self.general_threshold:
            return (
                f"Total amount {total} exceeds {format_money(self.general_threshold)} "
                f"general approval threshold"
            )

        if self.approval_on_compliance_failure:
            failed = [result.policy_name for result in compliance if not result.passed]
            if failed:
                return f"Compliance checks failed: {', '.join(failed)}"

        return None

    @staticmethod
    def _describe(total_amount: int, selected_quotes: List[VendorQuote]) -> str:
        total = format_money(total_amount)
        if len(selected_quotes) == 1:
            quote = selected_quotes[0]
            return (
                f"Approve purchase of {quote.quantity}x {quote.item_name} "
                f"from {quote.vendor_name} for {total}"
            )
        return f"Approve procurement totaling {total}"
