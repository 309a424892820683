#!/usr/bin/env python3
"""
Procure Engine - Main Pipeline Script

Runs one procurement mission end to end:
1. Load configuration and the vendor/policy directory
2. Parse the purchase request
3. Source and score vendor quotes
4. Check compliance policies
5. Gate the spend (auto-approve or hold for sign-off)
6. Render procurement documents

Usage:
    python run_pipeline.py ["purchase request text"] [--approve]

With --approve, a mission held for sign-off is approved by "demo-approver"
so the purchase documents are issued.
"""

import logging
import sys
from typing import List

from procure_engine.config import load_settings
from procure_engine.directory import JsonFileDirectory
from procure_engine.mission import MissionStatus
from procure_engine.mission.money import format_money
from procure_engine.orchestrator import ClarificationResult, MissionCoordinator, MissionResult

logger = logging.getLogger(__name__)

DEFAULT_REQUEST = "We need 5 ergonomic chairs for the new hires by Friday"
DEMO_APPROVER = "demo-approver"


def print_separator(title: str = "") -> None:
    """Print a formatted separator line."""
    if title:
        print(f"\n{'='*70}")
        print(f"  {title}")
        print(f"{'='*70}\n")
    else:
        print(f"{'='*70}")


def print_result(result: MissionResult) -> None:
    """Print the stage outputs of a mission result."""
    print_separator("Parsed Request")
    if result.parsed:
        for item in result.parsed.items:
            price = format_money(item.estimated_unit_price or 0)
            print(f"  - {item.quantity}x {item.name} [{item.category}] est. {price}/unit")
        print(f"  Urgency: {result.parsed.urgency.value}")
        if result.parsed.deadline:
            print(f"  Deadline: {result.parsed.deadline:%Y-%m-%d %H:%M}")

    print_separator("Vendor Quotes")
    for quote in result.quotes:
        marker = "★" if quote.selected else " "
        print(f"  {marker} {quote.vendor_name:<24} {format_money(quote.unit_price):>10}/unit  "
              f"{quote.shipping_days:>2}d  score {quote.score}")
    for event in result.self_healing:
        print(f"  ⚠ {event.vendor}: {event.issue} → {event.resolution}")
    if not result.quotes:
        print("  No quotes obtained")

    print_separator("Compliance")
    for verdict in result.compliance:
        print(f"  {'✓' if verdict.passed else '✗'} {verdict.policy_name}: {verdict.reason}")

    print_separator("Approval")
    if result.approval:
        print(f"  {result.approval.description}")
        print(f"  Status: {result.approval.status.value}"
              + (f" by {result.approval.approver}" if result.approval.approver else ""))
        if result.approval.reason:
            print(f"  Reason: {result.approval.reason}")

    print_separator("Documents")
    for document in result.documents:
        print(f"--- {document.title} ---")
        print(document.content)
        print()

    print_separator("Mission Summary")
    print(f"  Status:  {result.status.value}")
    print(f"  Total:   {format_money(result.total_amount)}")
    print(f"  Savings: {format_money(result.savings)} (estimated)")
    print(f"  Audit entries: {len(result.logs)}")
    if result.message:
        print(f"  {result.message}")


def main(argv: List[str]) -> int:
    """Run a single mission from the command line."""
    approve = "--approve" in argv
    request_text = " ".join(arg for arg in argv if arg != "--approve") or DEFAULT_REQUEST

    print_separator("PROCURE ENGINE - Procurement Mission")

    try:
        settings = load_settings()
        logging.basicConfig(
            level=getattr(logging, settings.log_level, logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        logger.info("Configuration loaded successfully")

        directory = JsonFileDirectory(settings.directory_file)
        coordinator = MissionCoordinator(directory, settings)

        print(f"Request: {request_text}")
        result = coordinator.launch(request_text)

        if isinstance(result, ClarificationResult):
            print_separator("Clarification Needed")
            print(f"  {result.question}")
            return 0

        if result.status == MissionStatus.AWAITING_APPROVAL:
            print(f"\n⏸ Held for approval: {result.message}")
            if approve:
                result = coordinator.resolve_approval(True, DEMO_APPROVER)
            else:
                print("  Re-run with --approve to sign off and issue purchase documents.")

        print_result(result)

        if not result.success:
            print(f"\n❌ Mission failed at {result.failed_stage}: {result.message}")
            return 1

        print_separator("Pipeline Complete")
        return 0

    except Exception as e:
        logger.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\n❌ Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
