"""
Document Renderer

Fills the document templates from a mission's items and selected quotes.
Rendering is a pure function of (clock time, mission id, items, quotes): the
same inputs always give the same document text, numbers and totals.
"""

import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..mission.clock import Clock, SystemClock
from ..mission.models import (
    ApprovalRequest,
    ApprovalStatus,
    ComplianceResult,
    DocumentType,
    ParsedItem,
    ProcurementDocument,
    VendorQuote,
)
from ..mission.money import TAX_RATE, apply_rate, format_money
from .templates import DocumentTemplates

logger = logging.getLogger(__name__)

RFQ_RESPONSE_DAYS = 7
UNSIGNED = "_________________________"
DEFAULT_SPECIFICATION = "Standard business grade"


def format_long_date(value: datetime) -> str:
    """October 19, 2026"""
    return f"{value:%B} {value.day}, {value.year}"


def group_by_vendor(quotes: List[VendorQuote]) -> "OrderedDict[str, List[VendorQuote]]":
    """
    Group selected quotes by vendor, in item order.

    Args:
        quotes: Any quotes; unselected ones are ignored

    Returns:
        vendor_id -> quotes, ordered by each vendor's first item line
    """
    groups: "OrderedDict[str, List[VendorQuote]]" = OrderedDict()
    selected = sorted((q for q in quotes if q.selected), key=lambda q: q.item_index)
    for quote in selected:
        groups.setdefault(quote.vendor_id, []).append(quote)
    return groups


class DocumentRenderer:
    """
    Renders RFQs, purchase orders and contract summaries.
    """

    def __init__(self, clock: Optional[Clock] = None):
        """
        Initialize the document renderer.

        Args:
            clock: Time source for document dates and numbers
        """
        self.clock = clock or SystemClock()
        self.templates = DocumentTemplates()
        logger.info("DocumentRenderer initialized")

    def document_number(self, prefix: str, mission_id: str, sequence: Optional[int] = None) -> str:
        """
        Build a document number such as PO-2026-1019-A1B2.

        Args:
            prefix: RFQ or PO
            mission_id: Owning mission; its last four characters are used
            sequence: Optional 1-based suffix when a mission issues several

        Returns:
            Document number
        """
        now = self.clock.now()
        number = f"{prefix}-{now:%Y}-{now:%m%d}-{mission_id[-4:].upper()}"
        if sequence is not None:
            number += f"-{sequence}"
        return number

    def render_rfq(self, mission_id: str, items: List[ParsedItem]) -> ProcurementDocument:
        """
        Render the request for quotation. Always possible, even with no quotes.

        Args:
            mission_id: Owning mission
            items: Parsed line items

        Returns:
            RFQ document
        """
        now = self.clock.now()
        due = now + timedelta(days=RFQ_RESPONSE_DAYS)
        rfq_number = self.document_number("RFQ", mission_id)

        line_items = "\n\n".join(
            self.templates.rfq_line_item().format(
                position=position,
                name=item.name,
                quantity=item.quantity,
                specifications=item.specifications or DEFAULT_SPECIFICATION
            )
            for position, item in enumerate(items, start=1)
        )

        content = self.templates.rfq_template().format(
            rfq_number=rfq_number,
            date=format_long_date(now),
            due_date=format_long_date(due),
            line_items=line_items
        )

        title_subject = items[0].name if items else "Procurement Request"
        return ProcurementDocument(
            mission_id=mission_id,
            type=DocumentType.RFQ,
            title=f"RFQ — {title_subject}",
            content=content,
            metadata={
                "rfq_number": rfq_number,
                "items_count": len(items),
                "due_date": due.date().isoformat(),
            },
            created_at=now
        )

    def render_purchase_orders(
        self,
        mission_id: str,
        quotes: List[VendorQuote],
        approval: Optional[ApprovalRequest] = None
    ) -> List[ProcurementDocument]:
        """
        Render one purchase order per selected vendor.

        Tax is applied once to each order's subtotal.

        Args:
            mission_id: Owning mission
            quotes: Quotes from sourcing; only selected ones are ordered
            approval: Approval record shown in the authorization block

        Returns:
            Purchase orders, empty when nothing was selected
        """
        now = self.clock.now()
        groups = group_by_vendor(quotes)
        numbered = len(groups) > 1
        documents = []

        approved = approval is not None and approval.status == ApprovalStatus.APPROVED
        approver = approval.approver if approved else UNSIGNED
        approved_date = format_long_date(approval.approved_at) if approved and approval.approved_at else UNSIGNED

        for sequence, vendor_quotes in enumerate(groups.values(), start=1):
            po_number = self.document_number("PO", mission_id, sequence if numbered else None)
            totals = self._totals(vendor_quotes)
            shipping_days = max(q.shipping_days for q in vendor_quotes)
            vendor_name = vendor_quotes[0].vendor_name

            line_items = "\n\n".join(
                self.templates.purchase_order_line_item().format(
                    position=position,
                    name=quote.item_name,
                    quantity=quote.quantity,
                    unit_price=format_money(quote.unit_price),
                    line_total=format_money(quote.total_price)
                )
                for position, quote in enumerate(vendor_quotes, start=1)
            )

            content = self.templates.purchase_order_template().format(
                po_number=po_number,
                date=format_long_date(now),
                status="APPROVED" if approved else "PENDING APPROVAL",
                vendor_name=vendor_name,
                line_items=line_items,
                subtotal=format_money(totals["subtotal"]),
                tax_rate=f"{int(TAX_RATE * 100)}%",
                tax=format_money(totals["tax"]),
                total=format_money(totals["total"]),
                delivery_date=format_long_date(now + timedelta(days=shipping_days)),
                approver=approver,
                approved_date=approved_date
            )

            if len(vendor_quotes) == 1:
                title = f"PO — {vendor_quotes[0].quantity}x {vendor_quotes[0].item_name}"
            else:
                title = f"PO — {len(vendor_quotes)} items from {vendor_name}"

            documents.append(ProcurementDocument(
                mission_id=mission_id,
                type=DocumentType.PURCHASE_ORDER,
                title=title,
                content=content,
                metadata={
                    "po_number": po_number,
                    "vendor": vendor_name,
                    "vendor_id": vendor_quotes[0].vendor_id,
                    "item_count": len(vendor_quotes),
                    **totals,
                },
                created_at=now
            ))

        return documents

    def render_contract_summaries(
        self,
        mission_id: str,
        quotes: List[VendorQuote],
        compliance: Optional[List[ComplianceResult]] = None
    ) -> List[ProcurementDocument]:
        """
        Render one contract summary per selected vendor.

        Args:
            mission_id: Owning mission
            quotes: Quotes from sourcing; only selected ones are summarized
            compliance: Verdicts listed under the compliance notes

        Returns:
            Contract summaries, empty when nothing was selected
        """
        now = self.clock.now()
        groups = group_by_vendor(quotes)
        numbered = len(groups) > 1
        notes = self._compliance_notes(compliance)
        documents = []

        for sequence, vendor_quotes in enumerate(groups.values(), start=1):
            po_number = self.document_number("PO", mission_id, sequence if numbered else None)
            totals = self._totals(vendor_quotes)
            vendor_name = vendor_quotes[0].vendor_name

            content = self.templates.contract_summary_template().format(
                po_number=po_number,
                date=format_long_date(now),
                vendor_name=vendor_name,
                products="; ".join(f"{q.quantity}x {q.item_name}" for q in vendor_quotes),
                total=format_money(totals["total"]),
                shipping_days=max(q.shipping_days for q in vendor_quotes),
                compliance_notes=notes
            )

            documents.append(ProcurementDocument(
                mission_id=mission_id,
                type=DocumentType.CONTRACT_SUMMARY,
                title=f"Contract Summary — {vendor_name}",
                content=content,
                metadata={
                    "po_number": po_number,
                    "vendor": vendor_name,
                    "total": totals["total"],
                },
                created_at=now
            ))

        return documents

    def render_all(
        self,
        mission_id: str,
        items: List[ParsedItem],
        quotes: List[VendorQuote],
        approval: Optional[ApprovalRequest] = None,
        compliance: Optional[List[ComplianceResult]] = None
    ) -> List[ProcurementDocument]:
        """
        RFQ followed by purchase orders and contract summaries.

        Returns:
            Documents in RFQ, PO..., contract summary... order
        """
        documents = [self.render_rfq(mission_id, items)]
        documents.extend(self.render_purchase_orders(mission_id, quotes, approval))
        documents.extend(self.render_contract_summaries(mission_id, quotes, compliance))
        logger.info(f"Rendered {len(documents)} document(s) for mission {mission_id}")
        return documents

    @staticmethod
    def _totals(quotes: List[VendorQuote]) -> Dict[str, int]:
        subtotal = sum(q.total_price for q in quotes)
        tax = apply_rate(subtotal, TAX_RATE)
        return {"subtotal": subtotal, "tax": tax, "total": subtotal + tax}

    @staticmethod
    def _compliance_notes(compliance: Optional[List[ComplianceResult]]) -> str:
        if not compliance:
            return "- Compliance review not recorded"
        return "\n".join(
            f"- {'PASS' if result.passed else 'FAIL'}: {result.policy_name}"
            for result in compliance
        )
