"""
Mission Context

The shared record set for one workflow run. A coordinator owns exactly one
context; stages read their inputs from it and write their outputs back, never
talking to each other directly.
"""

from typing import TYPE_CHECKING, List, Optional

from .audit import MissionAuditLog
from .clock import Clock
from .models import (
    ApprovalRequest,
    ComplianceResult,
    Mission,
    ParsedItem,
    ParsedRequest,
    Policy,
    ProcurementDocument,
    Vendor,
    VendorQuote,
)

if TYPE_CHECKING:
    from ..sourcing.scout import SelfHealingEvent


class MissionContext:
    """Everything known about one mission so far."""

    def __init__(self, mission: Mission, clock: Clock):
        self.mission = mission
        self.clock = clock
        self.audit = MissionAuditLog(mission.id, clock)

        self.parsed: Optional[ParsedRequest] = None
        self.vendors: List[Vendor] = []
        self.policies: List[Policy] = []
        self.quotes: List[VendorQuote] = []
        self.self_healing: List["SelfHealingEvent"] = []
        self.compliance_results: List[ComplianceResult] = []
        self.compliance_all_passed: bool = True
        self.approval: Optional[ApprovalRequest] = None
        self.requires_approval: bool = False
        self.documents: List[ProcurementDocument] = []

    @property
    def mission_id(self) -> str:
        return self.mission.id

    @property
    def items(self) -> List[ParsedItem]:
        return list(self.mission.parsed_items)

    @property
    def selected_quotes(self) -> List[VendorQuote]:
        """Winning quote per item line, in item order."""
        winners = [quote for quote in self.quotes if quote.selected]
        return sorted(winners, key=lambda quote: quote.item_index)

    @property
    def total_amount(self) -> int:
        """Sum of the selected quotes' total prices."""
        return sum(quote.total_price for quote in self.selected_quotes)

    def touch(self) -> None:
        """Bump the mission's updated_at."""
        self.mission.updated_at = self.clock.now()
