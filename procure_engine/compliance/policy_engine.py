"""
Policy Engine

Checks the sourcing outcome against every active compliance policy and
returns a verdict with a citation per policy. Evaluation is dispatched on the
policy category; categories the engine does not know pass as general rules.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..mission.audit import MissionAuditLog
from ..mission.models import (
    AgentName,
    ComplianceResult,
    LogLevel,
    ParsedItem,
    Policy,
    PolicyCategory,
    Vendor,
    VendorQuote,
)
from ..mission.money import format_money
from ..mission.payloads import ComplianceSetPayload, PolicyVerdictPayload

logger = logging.getLogger(__name__)

MIN_COMPETING_QUOTES = 3
MAX_SHIPPING_DAYS = 14


class ComplianceSet(BaseModel):
    """Policy engine output."""
    results: List[ComplianceResult] = Field(default_factory=list)
    all_passed: bool = True
    passed_count: int = 0
    failed_count: int = 0


class EvaluationInputs(BaseModel):
    """Everything a single policy check may look at."""
    quotes: List[VendorQuote]
    selected: List[VendorQuote]
    vendors: Dict[str, Vendor]
    items: List[ParsedItem]
    total_amount: int


Check = Callable[[Policy, EvaluationInputs], Tuple[bool, str]]


def _threshold_text(policy: Policy) -> str:
    if policy.threshold_amount is None:
        return "(no threshold)"
    return format_money(policy.threshold_amount)


def check_sourcing(policy: Policy, inputs: EvaluationInputs) -> Tuple[bool, str]:
    threshold = policy.threshold_amount
    if threshold is None:
        return True, "No unit-price threshold configured — rule not applicable"

    expensive = [
        index for index, item in enumerate(inputs.items)
        if (item.estimated_unit_price or 0) > threshold
    ]
    if not expensive:
        return True, f"Item unit price below {_threshold_text(policy)} threshold — rule not applicable"

    counts = [
        sum(1 for q in inputs.quotes if q.item_index == index)
        for index in expensive
    ]
    fewest = min(counts)
    if fewest >= MIN_COMPETING_QUOTES:
        return True, f"{fewest} quotes obtained (minimum: {MIN_COMPETING_QUOTES})"
    return False, (
        f"Only {fewest} quotes — minimum {MIN_COMPETING_QUOTES} required for items "
        f"over {_threshold_text(policy)}"
    )


def check_budget(policy: Policy, inputs: EvaluationInputs) -> Tuple[bool, str]:
    if policy.threshold_amount is None:
        return True, "No spending limit configured"

    total = format_money(inputs.total_amount)
    if inputs.total_amount <= policy.threshold_amount:
        return True, f"Total {total} is within {_threshold_text(policy)} limit"
    return False, f"Total {total} exceeds {_threshold_text(policy)} — requires VP approval"


def check_vendor(policy: Policy, inputs: EvaluationInputs) -> Tuple[bool, str]:
    threshold = policy.threshold_amount
    if threshold is None or inputs.total_amount <= threshold:
        return True, f"Purchase under {_threshold_text(policy)} — whitelist check not required"

    if not inputs.selected:
        return False, (
            f"No vendor selected — a whitelisted vendor is required for purchases "
            f"over {_threshold_text(policy)}"
        )

    offenders = [
        q.vendor_name for q in inputs.selected
        if not (inputs.vendors.get(q.vendor_id) and inputs.vendors[q.vendor_id].is_whitelisted)
    ]
    if offenders:
        return False, (
            f"{', '.join(offenders)} is NOT whitelisted — required for purchases "
            f"over {_threshold_text(policy)}"
        )
    names = ", ".join(q.vendor_name for q in inputs.selected)
    return True, f"{names} is on the approved vendor whitelist"


def check_sustainability(policy: Policy, inputs: EvaluationInputs) -> Tuple[bool, str]:
    return True, "Eco-friendly alternatives considered — informational policy"


def check_logistics(policy: Policy, inputs: EvaluationInputs) -> Tuple[bool, str]:
    if not inputs.selected:
        return False, "No vendor selected yet — cannot verify shipping timeline"

    slowest = max(q.shipping_days for q in inputs.selected)
    if slowest <= MAX_SHIPPING_DAYS:
        return True, f"{slowest}-day shipping is within delivery window"
    return False, f"{slowest}-day shipping exceeds {MAX_SHIPPING_DAYS}-day delivery window"


def check_general(policy: Policy, inputs: EvaluationInputs) -> Tuple[bool, str]:
    return True, "Policy check passed (general rule)"


CHECKS: Dict[str, Check] = {
    PolicyCategory.SOURCING.value: check_sourcing,
    PolicyCategory.BUDGET.value: check_budget,
    PolicyCategory.VENDOR.value: check_vendor,
    PolicyCategory.SUSTAINABILITY.value: check_sustainability,
    PolicyCategory.LOGISTICS.value: check_logistics,
    PolicyCategory.GENERAL.value: check_general,
}


class PolicyEngine:
    """
    Evaluates active policies and records one verdict per policy.
    """

    def __init__(self, checks: Optional[Dict[str, Check]] = None):
        """
        Initialize the policy engine.

        Args:
            checks: Optional category -> check overrides merged over the defaults
        """
        self.checks = dict(CHECKS)
        if checks:
            self.checks.update(checks)
        logger.info(f"PolicyEngine initialized with {len(self.checks)} category checks")

    def evaluate(
        self,
        policies: List[Policy],
        quotes: List[VendorQuote],
        vendors: List[Vendor],
        items: List[ParsedItem],
        total_amount: int,
        audit: MissionAuditLog
    ) -> ComplianceSet:
        """
        Run every active policy.

        Args:
            policies: All policies; inactive ones are skipped entirely
            quotes: Every quote produced by sourcing
            vendors: Vendor directory
            items: Parsed line items
            total_amount: Sum of the selected quotes' total prices
            audit: Mission audit log

        Returns:
            ComplianceSet with one result per active policy
        """
        active = [policy for policy in policies if policy.is_active]
        inputs = EvaluationInputs(
            quotes=quotes,
            selected=[q for q in quotes if q.selected],
            vendors={vendor.id: vendor for vendor in vendors},
            items=items,
            total_amount=total_amount
        )

        audit.info(
            AgentName.COMPLIANCE_OFFICER,
            f"Running compliance checks against {len(active)} active policies"
        )

        results = []
        for policy in active:
            check = self.checks.get(policy.category, check_general)
            passed, reason = check(policy, inputs)
            results.append(ComplianceResult(
                policy_id=policy.id,
                policy_name=policy.name,
                passed=passed,
                reason=reason,
                citation=f'Policy: "{policy.name}" — {policy.rule_text}'
            ))
            audit.record(
                AgentName.COMPLIANCE_OFFICER,
                LogLevel.INFO if passed else LogLevel.WARN,
                f"{'PASS' if passed else 'FAIL'}: {policy.name} — {reason}",
                PolicyVerdictPayload(policy_id=policy.id, passed=passed)
            )

        passed_count = sum(1 for r in results if r.passed)
        failed_count = len(results) - passed_count
        all_passed = failed_count == 0

        audit.record(
            AgentName.COMPLIANCE_OFFICER,
            LogLevel.INFO if all_passed else LogLevel.WARN,
            f"All {passed_count} compliance checks PASSED" if all_passed
            else f"Compliance: {passed_count} passed, {failed_count} failed",
            ComplianceSetPayload(
                policies=len(active),
                passed=passed_count,
                failed=failed_count,
                total_amount=total_amount
            )
        )

        return ComplianceSet(
            results=results,
            all_passed=all_passed,
            passed_count=passed_count,
            failed_count=failed_count
        )
