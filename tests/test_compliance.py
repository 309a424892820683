"""
Tests for the compliance policy engine.
"""

from datetime import datetime
from typing import List

from procure_engine.compliance import PolicyEngine
from procure_engine.directory import default_policies, default_vendors
from procure_engine.mission import (
    FixedClock,
    MissionAuditLog,
    ParsedItem,
    Policy,
    Vendor,
    VendorQuote,
)

MISSION_ID = "mission-0002"

VENDORS = default_vendors()


def make_audit() -> MissionAuditLog:
    return MissionAuditLog(MISSION_ID, FixedClock(datetime(2026, 10, 19, 9, 0)))


def make_quote(vendor: Vendor, unit_price: int, quantity: int = 1, shipping_days: int = 5,
               selected: bool = True, item_index: int = 0) -> VendorQuote:
    return VendorQuote(
        mission_id=MISSION_ID,
        vendor_id=vendor.id,
        vendor_name=vendor.name,
        item_name="Laptop",
        item_index=item_index,
        unit_price=unit_price,
        quantity=quantity,
        total_price=unit_price * quantity,
        shipping_days=shipping_days,
        selected=selected
    )


def evaluate(policies: List[Policy], quotes: List[VendorQuote], items: List[ParsedItem]):
    total = sum(q.total_price for q in quotes if q.selected)
    return PolicyEngine().evaluate(policies, quotes, VENDORS, items, total, make_audit())


def verdict(result, policy_id):
    return next(r for r in result.results if r.policy_id == policy_id)


def budget_policy(threshold: float) -> Policy:
    return Policy(id="p-budget", name="Budget Control", category="budget",
                  rule_text="Stay within budget", threshold_amount=threshold)


LAPTOPS = [ParsedItem(name="Laptop", quantity=1, estimated_unit_price=1500)]


def test_one_verdict_per_active_policy():
    """Test inactive policies are skipped entirely."""
    policies = default_policies()
    policies[3] = policies[3].model_copy(update={"is_active": False})

    result = evaluate(policies, [make_quote(VENDORS[0], 1320)], LAPTOPS)

    assert len(result.results) == 4
    assert "p-green" not in {r.policy_id for r in result.results}
    assert result.passed_count + result.failed_count == 4


def test_citation_format():
    """Test every verdict cites its policy."""
    result = evaluate(default_policies(), [make_quote(VENDORS[0], 1320)], LAPTOPS)

    cited = verdict(result, "p-delivery")
    assert cited.citation == 'Policy: "Delivery Window" — Orders must ship within 14 days'


class TestBudgetPolicy:

    def test_total_equal_to_threshold_passes(self):
        result = evaluate([budget_policy(25000)], [make_quote(VENDORS[0], 25000)], LAPTOPS)
        assert result.results[0].passed is True

    def test_one_unit_over_threshold_fails(self):
        result = evaluate([budget_policy(25000)], [make_quote(VENDORS[0], 25001)], LAPTOPS)
        assert result.results[0].passed is False
        assert "exceeds $25,000" in result.results[0].reason
        assert result.all_passed is False


class TestSourcingPolicy:

    def test_three_quotes_required_for_expensive_items(self):
        quotes = [
            make_quote(VENDORS[0], 1320),
            make_quote(VENDORS[1], 1410, selected=False),
        ]
        result = evaluate(default_policies(), quotes, LAPTOPS)

        three_quote = verdict(result, "p-three-quotes")
        assert three_quote.passed is False
        assert "Only 2 quotes" in three_quote.reason

    def test_three_quotes_satisfied(self):
        quotes = [
            make_quote(VENDORS[0], 1320),
            make_quote(VENDORS[1], 1410, selected=False),
            make_quote(VENDORS[2], 1365, selected=False),
        ]
        result = evaluate(default_policies(), quotes, LAPTOPS)
        assert verdict(result, "p-three-quotes").passed is True

    def test_cheap_items_not_applicable(self):
        chairs = [ParsedItem(name="Chair", quantity=5, estimated_unit_price=350)]
        result = evaluate(default_policies(), [make_quote(VENDORS[0], 308, quantity=5)], chairs)

        three_quote = verdict(result, "p-three-quotes")
        assert three_quote.passed is True
        assert "not applicable" in three_quote.reason


class TestVendorPolicy:

    def test_non_whitelisted_vendor_over_threshold_fails(self):
        budget_tech = next(v for v in VENDORS if v.id == "v-budgettech")
        result = evaluate(default_policies(), [make_quote(budget_tech, 1230, quantity=5)], LAPTOPS)

        approved_vendors = verdict(result, "p-approved-vendors")
        assert approved_vendors.passed is False
        assert "BudgetTech Outlet is NOT whitelisted" in approved_vendors.reason

    def test_non_whitelisted_vendor_under_threshold_passes(self):
        budget_tech = next(v for v in VENDORS if v.id == "v-budgettech")
        result = evaluate(default_policies(), [make_quote(budget_tech, 1230)], LAPTOPS)
        assert verdict(result, "p-approved-vendors").passed is True


class TestLogisticsPolicy:

    def test_no_selected_quote_fails(self):
        result = evaluate(default_policies(), [], LAPTOPS)

        delivery = verdict(result, "p-delivery")
        assert delivery.passed is False
        assert delivery.reason == "No vendor selected yet — cannot verify shipping timeline"

    def test_slow_shipping_fails(self):
        result = evaluate(default_policies(), [make_quote(VENDORS[0], 1320, shipping_days=21)], LAPTOPS)
        assert verdict(result, "p-delivery").passed is False

    def test_fourteen_days_passes(self):
        result = evaluate(default_policies(), [make_quote(VENDORS[0], 1320, shipping_days=14)], LAPTOPS)
        assert verdict(result, "p-delivery").passed is True


def test_unknown_category_passes_as_general():
    """Test categories without a dedicated check."""
    policy = Policy(id="p-x", name="Ethics Review", category="ethics", rule_text="Be nice")
    result = evaluate([policy], [make_quote(VENDORS[0], 100)], LAPTOPS)
    assert result.results[0].passed is True


def test_audit_entries_per_policy_and_summary():
    """Test the compliance officer writes one entry per policy plus a summary."""
    audit = make_audit()
    policies = default_policies()
    quotes = [make_quote(VENDORS[0], 1320)]

    PolicyEngine().evaluate(policies, quotes, VENDORS, LAPTOPS, 1320, audit)

    kinds = [e.payload.kind for e in audit.entries if e.payload is not None]
    assert kinds.count("policy_verdict") == len(policies)
    assert kinds[-1] == "compliance_set"
