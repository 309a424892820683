"""
Tests for the human-in-the-loop approval gate.
"""

from datetime import datetime

import pytest

from procure_engine.directory import default_policies
from procure_engine.dispatcher import AUTO_APPROVER, ApprovalGate
from procure_engine.exceptions import ApprovalAlreadyResolvedError
from procure_engine.mission import (
    ApprovalStatus,
    ComplianceResult,
    FixedClock,
    MissionAuditLog,
    Policy,
    VendorQuote,
)

MISSION_ID = "mission-0003"
NOW = datetime(2026, 10, 19, 9, 0)


def make_gate(**kwargs) -> ApprovalGate:
    return ApprovalGate(clock=FixedClock(NOW), **kwargs)


def make_audit() -> MissionAuditLog:
    return MissionAuditLog(MISSION_ID, FixedClock(NOW))


def make_quote(total: int) -> VendorQuote:
    return VendorQuote(
        mission_id=MISSION_ID,
        vendor_id="v-techdirect",
        vendor_name="TechDirect Pro",
        item_name="Laptop — Premium Grade",
        unit_price=total // 10,
        quantity=10,
        total_price=total,
        shipping_days=5,
        selected=True
    )


def test_general_threshold_without_budget_policy():
    """Test a 12,000 total with no budget policy is held."""
    decision = make_gate().evaluate(MISSION_ID, 12000, [make_quote(12000)], [], [], make_audit())

    assert decision.requires_approval is True
    assert decision.approval.status == ApprovalStatus.PENDING
    assert decision.approval.approver is None
    assert "$10,000 general approval threshold" in decision.reason


def test_budget_policy_reason_cites_policy_name():
    """Test a budget policy triggers before the general threshold."""
    policy = Policy(id="p-b", name="Team Budget", category="budget",
                    rule_text="Team purchases over $5,000 need sign-off", threshold_amount=5000)

    decision = make_gate().evaluate(MISSION_ID, 6000, [make_quote(6000)], [policy], [], make_audit())

    assert decision.requires_approval is True
    assert decision.reason == "Total amount $6,000 exceeds $5,000 threshold (Team Budget)"


def test_inactive_budget_policy_ignored():
    """Test inactive budget policies never hold a mission."""
    policy = Policy(id="p-b", name="Team Budget", category="budget", rule_text="-",
                    threshold_amount=5000, is_active=False)

    decision = make_gate().evaluate(MISSION_ID, 6000, [make_quote(6000)], [policy], [], make_audit())

    assert decision.requires_approval is False


def test_auto_approval_within_limits():
    """Test small purchases are approved immediately."""
    audit = make_audit()
    decision = make_gate().evaluate(MISSION_ID, 1540, [make_quote(1540)], default_policies(), [], audit)

    approval = decision.approval
    assert decision.requires_approval is False
    assert approval.status == ApprovalStatus.APPROVED
    assert approval.approver == AUTO_APPROVER
    assert approval.approved_at == approval.created_at
    assert audit.entries[-1].message.startswith("Auto-approved")


def test_equal_to_general_threshold_is_auto_approved():
    """Test the general threshold is exclusive."""
    decision = make_gate().evaluate(MISSION_ID, 10000, [make_quote(10000)], [], [], make_audit())
    assert decision.requires_approval is False


def test_description_names_vendor_and_amount():
    """Test the approval description."""
    decision = make_gate().evaluate(MISSION_ID, 12000, [make_quote(12000)], [], [], make_audit())
    assert decision.approval.description == (
        "Approve purchase of 10x Laptop — Premium Grade from TechDirect Pro for $12,000"
    )


def test_description_without_selection():
    """Test the description when nothing was selected."""
    decision = make_gate().evaluate(MISSION_ID, 0, [], [], [], make_audit())
    assert decision.approval.description == "Approve procurement totaling $0"


class TestComplianceFailureOption:

    def setup_method(self):
        self.failed = [ComplianceResult(policy_id="p-delivery", policy_name="Delivery Window",
                                        passed=False, reason="No vendor selected yet")]

    def test_disabled_by_default(self):
        decision = make_gate().evaluate(MISSION_ID, 0, [], [], self.failed, make_audit())
        assert decision.requires_approval is False

    def test_holds_when_enabled(self):
        gate = make_gate(approval_on_compliance_failure=True)
        decision = gate.evaluate(MISSION_ID, 0, [], [], self.failed, make_audit())

        assert decision.requires_approval is True
        assert "Delivery Window" in decision.reason


class TestRecordDecision:

    def test_approve_once(self):
        gate = make_gate()
        audit = make_audit()
        approval = gate.evaluate(MISSION_ID, 12000, [make_quote(12000)], [], [], audit).approval

        entry = gate.record_decision(approval, True, "alice", audit)

        assert approval.status == ApprovalStatus.APPROVED
        assert approval.approver == "alice"
        assert approval.approved_at is not None
        assert entry.payload.approved is True

    def test_reject(self):
        gate = make_gate()
        audit = make_audit()
        approval = gate.evaluate(MISSION_ID, 12000, [make_quote(12000)], [], [], audit).approval

        gate.record_decision(approval, False, "bob", audit)

        assert approval.status == ApprovalStatus.REJECTED

    def test_second_decision_raises(self):
        gate = make_gate()
        audit = make_audit()
        approval = gate.evaluate(MISSION_ID, 12000, [make_quote(12000)], [], [], audit).approval
        gate.record_decision(approval, True, "alice", audit)

        with pytest.raises(ApprovalAlreadyResolvedError):
            gate.record_decision(approval, False, "bob", audit)
        assert approval.status == ApprovalStatus.APPROVED

    def test_auto_approved_cannot_be_decided(self):
        gate = make_gate()
        approval = gate.evaluate(MISSION_ID, 100, [make_quote(100)], [], [], make_audit()).approval

        with pytest.raises(ApprovalAlreadyResolvedError):
            gate.record_decision(approval, False, "bob", make_audit())


def test_zero_budget_threshold_is_a_real_limit():
    """Test a budget policy with a zero threshold holds any spend."""
    policy = Policy(id="p-freeze", name="Zero Spend Freeze", category="budget",
                    rule_text="No purchases without sign-off", threshold_amount=0)

    decision = make_gate().evaluate(MISSION_ID, 1540, [make_quote(1540)], [policy], [], make_audit())

    assert decision.requires_approval is True
    assert decision.reason == "Total amount $1,540 exceeds $0 threshold (Zero Spend Freeze)"
