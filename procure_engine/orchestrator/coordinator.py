"""
Mission Coordinator

Runs one procurement mission through the pipeline:

    intake (parse) -> source -> comply -> gate -> render -> finalize

The coordinator owns the mission context exclusively. Stages only read the
context and write their outputs back to it. A mission that needs human sign-off
stops in awaiting_approval until resolve_approval() or expire_approval() is
called; purchase orders are only issued once the spend is approved.
"""

import logging
from typing import Callable, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError

from ..config import Settings
from ..directory.repository import BaseDirectory
from ..dispatcher.approval_gate import ApprovalGate, BaseApprovalGate
from ..documents.renderer import DocumentRenderer
from ..exceptions import (
    ApprovalAlreadyResolvedError,
    InvalidTransitionError,
    MissionAlreadyLaunchedError,
    ProcureEngineError,
)
from ..compliance.policy_engine import PolicyEngine
from ..ingestion.parser import RequestParser
from ..mission.clock import Clock, RandomSource, SystemClock, SystemRandom
from ..mission.context import MissionContext
from ..mission.models import (
    AgentLog,
    AgentName,
    ApprovalRequest,
    ComplianceResult,
    DocumentType,
    Mission,
    MissionStatus,
    ParsedRequest,
    ProcurementDocument,
    VendorQuote,
)
from ..mission.money import format_money, to_whole_units
from ..mission.payloads import (
    DocumentBundlePayload,
    ParsedResultPayload,
    StageFailurePayload,
)
from ..reasoner.claude_client import ClaudeClient
from ..sourcing.catalogs import VendorCatalog
from ..sourcing.scout import SelfHealingEvent, SourcingEngine
from .state_machine import PIPELINE_ORDER, PipelineStage, transition

logger = logging.getLogger(__name__)

SAVINGS_BASE_RATE = 0.08
SAVINGS_SPREAD = 0.15
EXPIRED_APPROVER = "system (approval expired)"


class MissionResult(BaseModel):
    """Everything a caller needs to display a mission."""
    success: bool
    status: MissionStatus
    mission: Mission
    parsed: Optional[ParsedRequest] = None
    quotes: List[VendorQuote] = Field(default_factory=list)
    self_healing: List[SelfHealingEvent] = Field(default_factory=list)
    compliance: List[ComplianceResult] = Field(default_factory=list)
    compliance_all_passed: bool = True
    needs_approval: bool = False
    approval: Optional[ApprovalRequest] = None
    documents: List[ProcurementDocument] = Field(default_factory=list)
    total_amount: int = 0
    savings: int = 0
    logs: List[AgentLog] = Field(default_factory=list)
    summary: str = ""
    used_ai: bool = False
    message: Optional[str] = None
    failed_stage: Optional[str] = None


class ClarificationResult(BaseModel):
    """Returned instead of a MissionResult when the request can't be priced."""
    success: bool = True
    status: Literal["clarification_needed"] = "clarification_needed"
    mission_id: str
    question: Optional[str] = None
    original_request: str
    parsed_context: ParsedRequest
    logs: List[AgentLog] = Field(default_factory=list)


LaunchResult = Union[MissionResult, ClarificationResult]


class MissionCoordinator:
    """
    Sequential pipeline for a single mission.

    One coordinator runs one mission; create a new coordinator per request.
    """

    def __init__(
        self,
        directory: BaseDirectory,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        random_source: Optional[RandomSource] = None,
        claude_client: Optional[ClaudeClient] = None,
        catalog: Optional[VendorCatalog] = None,
        gate: Optional[BaseApprovalGate] = None
    ):
        """
        Initialize the coordinator and its stages.

        Args:
            directory: Vendor and policy source
            settings: Pipeline settings (defaults to Settings())
            clock: Time source shared by every stage
            random_source: Draws for source failures and the savings estimate
            claude_client: Optional client for request parsing; built from
                settings when omitted and an API key is configured
            catalog: Vendor catalogs (defaults to the bundled catalogs)
            gate: Approval gate (defaults to the threshold gate from settings)
        """
        self.directory = directory
        self.settings = settings or Settings()
        self.clock = clock or SystemClock()
        self.random_source = random_source or SystemRandom()

        if claude_client is None:
            claude_client = ClaudeClient.from_settings(self.settings)

        self.parser = RequestParser(claude_client, self.clock)
        self.sourcing = SourcingEngine(catalog, self.random_source, self.settings.source_failure_rate)
        self.policy_engine = PolicyEngine()
        self.gate = gate or ApprovalGate(
            general_threshold=self.settings.general_approval_threshold,
            approval_on_compliance_failure=self.settings.approval_on_compliance_failure,
            clock=self.clock
        )
        self.renderer = DocumentRenderer(self.clock)

        self.context: Optional[MissionContext] = None
        self._failure: Optional[Tuple[PipelineStage, str]] = None
        self._stages: Dict[PipelineStage, Callable[[], None]] = {
            PipelineStage.PARSE: self._parse,
            PipelineStage.SOURCE: self._source,
            PipelineStage.COMPLY: self._comply,
            PipelineStage.GATE: self._gate,
            PipelineStage.RENDER: self._render,
            PipelineStage.FINALIZE: self._finalize,
        }
        logger.info("MissionCoordinator initialized")

    @property
    def mission(self) -> Optional[Mission]:
        return self.context.mission if self.context else None

    def launch(self, request_text: str) -> LaunchResult:
        """
        Run a new mission up to completion, failure, clarification or approval.

        Args:
            request_text: Natural-language purchase request

        Returns:
            ClarificationResult when the request can't be priced, otherwise
            MissionResult

        Raises:
            ValueError: If the request text is empty
            MissionAlreadyLaunchedError: If this coordinator already ran a mission
        """
        if self.context is not None:
            raise MissionAlreadyLaunchedError(
                f"Coordinator already launched mission {self.context.mission_id}"
            )
        if not request_text or not request_text.strip():
            raise ValueError("Request text must not be empty")

        now = self.clock.now()
        mission = Mission(request_text=request_text, created_at=now, updated_at=now)
        self.context = MissionContext(mission, self.clock)
        context = self.context

        logger.info(f"Launching mission {mission.id}")
        context.audit.info(AgentName.ORCHESTRATOR, f"Mission created: {request_text.strip()[:80]}")

        if not self._run_stage(PipelineStage.PARSE):
            return self._result()

        if context.parsed.needs_clarification:
            context.audit.info(
                AgentName.ORCHESTRATOR,
                "Clarification needed — mission held before sourcing"
            )
            return ClarificationResult(
                mission_id=mission.id,
                question=context.parsed.clarification_question,
                original_request=request_text,
                parsed_context=context.parsed,
                logs=context.audit.entries
            )

        transition(context, MissionStatus.RUNNING)

        for stage in PIPELINE_ORDER:
            if not self._run_stage(stage):
                return self._result()

        if context.requires_approval:
            transition(context, MissionStatus.AWAITING_APPROVAL)
            return self._result()

        self._run_stage(PipelineStage.FINALIZE)
        return self._result()

    def resolve_approval(self, approved: bool, approver: str) -> MissionResult:
        """
        Apply the human decision to a mission awaiting approval.

        Approval issues the purchase documents and completes the mission;
        rejection fails it without issuing any.

        Args:
            approved: True to approve, False to reject
            approver: Identity of the decision maker

        Returns:
            MissionResult after the decision

        Raises:
            InvalidTransitionError: If the mission is not awaiting approval
            ApprovalAlreadyResolvedError: If the approval was already decided
        """
        context = self._awaiting_context(MissionStatus.COMPLETED if approved else MissionStatus.FAILED)
        self.gate.record_decision(context.approval, approved, approver, context.audit)

        if not approved:
            context.mission.result_summary = f"Rejected by {approver} — no purchase order issued"
            transition(context, MissionStatus.FAILED)
            return self._result()

        if self._run_stage(PipelineStage.RENDER):
            self._run_stage(PipelineStage.FINALIZE)
        return self._result()

    def expire_approval(self, reason: str = "Approval window expired") -> MissionResult:
        """
        Treat an unanswered approval request as rejected.

        Args:
            reason: Why the approval window closed

        Returns:
            MissionResult with the mission failed

        Raises:
            InvalidTransitionError: If the mission is not awaiting approval
        """
        context = self._awaiting_context(MissionStatus.FAILED)
        context.audit.warn(AgentName.HITL_BRIDGE, f"Approval expired: {reason}")
        self.gate.record_decision(context.approval, False, EXPIRED_APPROVER, context.audit)
        context.mission.result_summary = f"Approval expired — {reason}"
        transition(context, MissionStatus.FAILED)
        return self._result()

    def _awaiting_context(self, target: MissionStatus) -> MissionContext:
        context = self.context
        if context is None:
            raise InvalidTransitionError("<none>", "unlaunched", target.value)
        if context.approval is None or context.mission.status != MissionStatus.AWAITING_APPROVAL:
            if context.approval is not None and not context.approval.is_pending:
                raise ApprovalAlreadyResolvedError(context.approval.id, context.approval.status.value)
            raise InvalidTransitionError(context.mission_id, context.mission.status.value, target.value)
        return context

    def _run_stage(self, stage: PipelineStage) -> bool:
        """
        Run one stage, turning unrecoverable errors into a failed mission.

        Returns:
            True if the stage completed
        """
        context = self.context
        logger.info(f"[{context.mission_id[:8]}] stage {stage.value} starting")
        try:
            self._stages[stage]()
        except (InvalidTransitionError, ApprovalAlreadyResolvedError):
            raise
        except (ProcureEngineError, ValidationError) as e:
            self._fail(stage, e)
            return False
        except Exception as e:
            logger.exception(f"Unexpected error in stage {stage.value}")
            self._fail(stage, e)
            return False
        if not context.mission.is_terminal:
            context.touch()
        return True

    def _fail(self, stage: PipelineStage, error: Exception) -> None:
        context = self.context
        message = f"{stage.value} stage failed: {error}"
        logger.error(f"Mission {context.mission_id} {message}")
        context.audit.error(
            AgentName.ORCHESTRATOR,
            message,
            StageFailurePayload(
                stage=stage.value,
                error=str(error),
                error_code=getattr(error, "code", type(error).__name__)
            )
        )
        context.mission.result_summary = message
        self._failure = (stage, message)
        transition(context, MissionStatus.FAILED)

    def _parse(self) -> None:
        context = self.context
        parsed = self.parser.parse(context.mission.request_text)
        context.parsed = parsed

        mission = context.mission
        mission.parsed_items = list(parsed.items)
        mission.total_budget = parsed.budget_estimate
        mission.deadline = parsed.deadline

        context.audit.info(
            AgentName.ORCHESTRATOR,
            f"Parsed request into {len(parsed.items)} item(s): {parsed.summary}",
            ParsedResultPayload(
                request_text=mission.request_text,
                item_count=len(parsed.items),
                budget=parsed.budget,
                urgency=parsed.urgency.value,
                needs_clarification=parsed.needs_clarification,
                used_ai=parsed.used_ai
            )
        )

    def _source(self) -> None:
        context = self.context
        context.vendors = self.directory.list_vendors()
        quote_set = self.sourcing.search(
            context.mission_id,
            context.items,
            context.vendors,
            context.audit
        )
        context.quotes = quote_set.quotes
        context.self_healing = quote_set.self_healing

    def _comply(self) -> None:
        context = self.context
        context.policies = self.directory.list_policies()
        compliance = self.policy_engine.evaluate(
            context.policies,
            context.quotes,
            context.vendors,
            context.items,
            context.total_amount,
            context.audit
        )
        context.compliance_results = compliance.results
        context.compliance_all_passed = compliance.all_passed

    def _gate(self) -> None:
        context = self.context
        decision = self.gate.evaluate(
            context.mission_id,
            context.total_amount,
            context.selected_quotes,
            context.policies,
            context.compliance_results,
            context.audit
        )
        context.approval = decision.approval
        context.requires_approval = decision.requires_approval
        context.mission.total_savings = self._estimate_savings(context.total_amount)

    def _render(self) -> None:
        """
        Render the RFQ on the first pass; purchase documents once spend is approved.
        """
        context = self.context
        rendered: List[ProcurementDocument] = []

        if not any(doc.type == DocumentType.RFQ for doc in context.documents):
            rendered.append(self.renderer.render_rfq(context.mission_id, context.items))

        if context.approval is not None and not context.approval.is_pending:
            rendered.extend(self.renderer.render_purchase_orders(
                context.mission_id, context.quotes, context.approval
            ))
            rendered.extend(self.renderer.render_contract_summaries(
                context.mission_id, context.quotes, context.compliance_results
            ))
            if not context.selected_quotes:
                context.audit.warn(
                    AgentName.DOCUMENT_DRAFTER,
                    "No vendor selected — purchase order not issued"
                )

        context.documents.extend(rendered)
        if rendered:
            context.audit.info(
                AgentName.DOCUMENT_DRAFTER,
                f"Generated {len(rendered)} document(s): {', '.join(doc.title for doc in rendered)}",
                DocumentBundlePayload(
                    document_types=[doc.type.value for doc in rendered],
                    document_numbers=[
                        doc.metadata.get("po_number") or doc.metadata.get("rfq_number", "")
                        for doc in rendered
                    ],
                    vendor=", ".join(q.vendor_name for q in context.selected_quotes) or None
                )
            )

    def _finalize(self) -> None:
        context = self.context
        selected = context.selected_quotes
        if selected:
            vendors = ", ".join(dict.fromkeys(q.vendor_name for q in selected))
            outcome = f"{vendors} selected, total {format_money(context.total_amount)}"
        else:
            outcome = "no vendor could quote — RFQ issued only"

        context.mission.result_summary = f"{context.parsed.summary} — {outcome}"
        transition(context, MissionStatus.COMPLETED)
        context.audit.info(AgentName.ORCHESTRATOR, f"Mission complete: {outcome}")

    def _estimate_savings(self, total_amount: int) -> int:
        """Informational savings figure, 8-23% of the total."""
        if total_amount <= 0:
            return 0
        rate = SAVINGS_BASE_RATE + self.random_source.random() * SAVINGS_SPREAD
        return to_whole_units(total_amount * rate)

    def _result(self) -> MissionResult:
        context = self.context
        mission = context.mission
        failed_stage, failure_message = self._failure if self._failure else (None, None)

        message = failure_message
        if message is None:
            if mission.status == MissionStatus.AWAITING_APPROVAL and context.approval:
                message = context.approval.reason
            else:
                message = mission.result_summary

        return MissionResult(
            success=mission.status != MissionStatus.FAILED,
            status=mission.status,
            mission=mission.model_copy(deep=True),
            parsed=context.parsed,
            quotes=list(context.quotes),
            self_healing=list(context.self_healing),
            compliance=list(context.compliance_results),
            compliance_all_passed=context.compliance_all_passed,
            needs_approval=context.requires_approval,
            approval=context.approval.model_copy() if context.approval else None,
            documents=list(context.documents),
            total_amount=context.total_amount,
            savings=mission.total_savings or 0,
            logs=context.audit.entries,
            summary=context.parsed.summary if context.parsed else mission.request_text,
            used_ai=context.parsed.used_ai if context.parsed else False,
            message=message,
            failed_stage=failed_stage.value if failed_stage else None
        )


def run_mission(
    request_text: str,
    directory: BaseDirectory,
    settings: Optional[Settings] = None,
    **kwargs
) -> LaunchResult:
    """
    Launch a mission with a fresh coordinator.

    Args:
        request_text: Natural-language purchase request
        directory: Vendor and policy source
        settings: Pipeline settings
        **kwargs: Forwarded to MissionCoordinator (clock, random_source, ...)

    Returns:
        MissionResult or ClarificationResult
    """
    coordinator = MissionCoordinator(directory, settings, **kwargs)
    return coordinator.launch(request_text)
