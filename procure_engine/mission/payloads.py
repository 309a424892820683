"""
Audit Payloads

Structured payload shapes attached to audit log entries. Each stage emits its
own variants; the `kind` field tags which shape an entry carries so the log
stays heterogeneous without falling back to free-form dictionaries.
"""

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class ParsedResultPayload(BaseModel):
    """Parser output summary."""
    kind: Literal["parsed_result"] = "parsed_result"
    request_text: str
    item_count: int = 0
    budget: Optional[float] = None
    urgency: Optional[str] = None
    needs_clarification: bool = False
    used_ai: bool = False


class VendorLookupPayload(BaseModel):
    """Outcome of a single vendor catalog lookup."""
    kind: Literal["vendor_lookup"] = "vendor_lookup"
    vendor: str
    item_name: str
    unit_price: Optional[int] = None
    shipping_days: Optional[int] = None
    error: Optional[str] = None


class QuoteSetPayload(BaseModel):
    """Scoring summary for one item line."""
    kind: Literal["quote_set"] = "quote_set"
    item_name: str
    scores: Dict[str, int] = Field(default_factory=dict)
    selected: Optional[str] = None
    total_quotes: int = 0
    vendors_available: int = 0


class PolicyVerdictPayload(BaseModel):
    """A single policy evaluation."""
    kind: Literal["policy_verdict"] = "policy_verdict"
    policy_id: str
    passed: bool


class ComplianceSetPayload(BaseModel):
    """Counts across all evaluated policies."""
    kind: Literal["compliance_set"] = "compliance_set"
    policies: int = 0
    passed: int = 0
    failed: int = 0
    total_amount: int = 0


class ApprovalDecisionPayload(BaseModel):
    """Approval gate decision or a human resolution of it."""
    kind: Literal["approval_decision"] = "approval_decision"
    approval_id: str
    amount: int
    requires_approval: bool
    reason: Optional[str] = None
    vendor: Optional[str] = None
    approver: Optional[str] = None
    approved: Optional[bool] = None


class DocumentBundlePayload(BaseModel):
    """Documents produced by the renderer."""
    kind: Literal["document_bundle"] = "document_bundle"
    document_types: List[str] = Field(default_factory=list)
    document_numbers: List[str] = Field(default_factory=list)
    vendor: Optional[str] = None


class StatusTransitionPayload(BaseModel):
    """Mission status change."""
    kind: Literal["status_transition"] = "status_transition"
    from_status: str
    to_status: str


class StageFailurePayload(BaseModel):
    """Unrecoverable error inside a pipeline stage."""
    kind: Literal["stage_failure"] = "stage_failure"
    stage: str
    error: str
    error_code: Optional[str] = None


LogPayload = Annotated[
    Union[
        ParsedResultPayload,
        VendorLookupPayload,
        QuoteSetPayload,
        PolicyVerdictPayload,
        ComplianceSetPayload,
        ApprovalDecisionPayload,
        DocumentBundlePayload,
        StatusTransitionPayload,
        StageFailurePayload,
    ],
    Field(discriminator="kind"),
]
