"""
Mission Records

Pydantic models for every record a procurement mission produces or consumes.
Configuration records (Vendor, Policy) and stage outputs (quotes, verdicts,
documents, log entries) are frozen once built; Mission and ApprovalRequest are
the only records whose fields change during a run.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import ApprovalAlreadyResolvedError
from .payloads import LogPayload


def generate_id() -> str:
    """Return a fresh random identifier."""
    return str(uuid.uuid4())


class MissionStatus(str, Enum):
    """Lifecycle states of a mission."""
    PENDING = "pending"
    RUNNING = "running"
    AWAITING_APPROVAL = "awaiting_approval"
    COMPLETED = "completed"
    FAILED = "failed"


class AgentName(str, Enum):
    """Components that write to the audit log."""
    ORCHESTRATOR = "orchestrator"
    SOURCING_SCOUT = "sourcing_scout"
    COMPLIANCE_OFFICER = "compliance_officer"
    DOCUMENT_DRAFTER = "document_drafter"
    HITL_BRIDGE = "hitl_bridge"


class LogLevel(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    DEBUG = "debug"


class Availability(str, Enum):
    IN_STOCK = "In Stock"
    LIMITED_STOCK = "Limited Stock"
    PRE_ORDER = "Pre-Order"
    OUT_OF_STOCK = "Out of Stock"


class PolicyCategory(str, Enum):
    """Policy categories the compliance engine knows how to evaluate."""
    SOURCING = "sourcing"
    BUDGET = "budget"
    VENDOR = "vendor"
    SUSTAINABILITY = "sustainability"
    LOGISTICS = "logistics"
    GENERAL = "general"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentType(str, Enum):
    RFQ = "rfq"
    PURCHASE_ORDER = "purchase_order"
    CONTRACT_SUMMARY = "contract_summary"
    INVOICE = "invoice"


class ParsedItem(BaseModel):
    """A single line item extracted from a purchase request."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name of the item")
    quantity: int = Field(1, ge=1, description="Units requested")
    category: str = Field("General", description="Procurement category")
    specifications: Optional[str] = Field(None, description="Free-text specification")
    estimated_unit_price: Optional[float] = Field(
        None, ge=0, description="Estimated price per unit"
    )


class Urgency(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class ParsedRequest(BaseModel):
    """Structured reading of a natural-language purchase request."""
    items: List[ParsedItem] = Field(default_factory=list)
    urgency: Urgency = Urgency.NORMAL
    budget: Optional[float] = Field(None, description="Budget stated in the request")
    budget_estimate: Optional[float] = Field(None, description="Best-effort total estimate")
    deadline: Optional[datetime] = None
    summary: str = ""
    needs_clarification: bool = False
    clarification_question: Optional[str] = None
    used_ai: bool = False


class Vendor(BaseModel):
    """A supplier from the vendor directory."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    website: str = ""
    category: str = "General"
    is_whitelisted: bool = False
    rating: float = Field(3.0, ge=0, le=5)
    contact_email: Optional[str] = None
    notes: Optional[str] = None


class VendorQuote(BaseModel):
    """A vendor's priced offer for one item line."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    mission_id: str
    vendor_id: str
    vendor_name: str
    item_name: str
    item_index: int = Field(0, ge=0, description="Index of the ParsedItem this quote answers")
    unit_price: int
    quantity: int
    total_price: int
    availability: Availability = Availability.IN_STOCK
    shipping_days: int
    score: int = 0
    selected: bool = False
    reasoning: Optional[str] = None


class Policy(BaseModel):
    """A configurable compliance rule."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    category: str = PolicyCategory.GENERAL.value
    rule_text: str
    threshold_amount: Optional[float] = None
    is_active: bool = True


class ComplianceResult(BaseModel):
    """Verdict of one policy against one mission."""
    model_config = ConfigDict(frozen=True)

    policy_id: str
    policy_name: str
    passed: bool
    reason: str
    citation: Optional[str] = None


class ApprovalRequest(BaseModel):
    """
    Human-in-the-loop sign-off record.

    Status moves pending -> approved or pending -> rejected exactly once.
    """

    id: str = Field(default_factory=generate_id)
    mission_id: str
    description: str
    total_amount: int
    status: ApprovalStatus = ApprovalStatus.PENDING
    approver: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    reason: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING

    def resolve(self, approved: bool, approver: str, at: datetime) -> None:
        """
        Record the human decision.

        Args:
            approved: True to approve, False to reject
            approver: Identity of the person deciding
            at: Decision timestamp

        Raises:
            ApprovalAlreadyResolvedError: If the request is no longer pending
        """
        if not self.is_pending:
            raise ApprovalAlreadyResolvedError(self.id, self.status.value)
        self.status = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED
        self.approver = approver
        self.approved_at = at


class ProcurementDocument(BaseModel):
    """A rendered procurement document."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    mission_id: str
    type: DocumentType
    title: str
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class AgentLog(BaseModel):
    """One append-only audit trail entry."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    mission_id: str
    agent_name: AgentName
    level: LogLevel
    message: str
    payload: Optional[LogPayload] = None
    created_at: datetime


class Mission(BaseModel):
    """One end-to-end run of the procurement pipeline."""

    id: str = Field(default_factory=generate_id)
    request_text: str
    status: MissionStatus = MissionStatus.PENDING
    parsed_items: List[ParsedItem] = Field(default_factory=list)
    total_budget: Optional[float] = None
    total_savings: Optional[int] = None
    deadline: Optional[datetime] = None
    result_summary: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_terminal(self) -> bool:
        return self.status in (MissionStatus.COMPLETED, MissionStatus.FAILED)
