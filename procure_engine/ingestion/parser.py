"""
Request Parser

Turns a free-form purchase request into structured line items, urgency, budget
and deadline. Uses Claude when configured; otherwise (or when Claude fails)
falls back to keyword heuristics that never raise for a non-empty request.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..exceptions import EnhancementError
from ..mission.clock import Clock, SystemClock
from ..mission.models import ParsedItem, ParsedRequest, Urgency
from ..mission.money import format_money
from ..reasoner.claude_client import ClaudeClient
from .templates import IntakeTemplates

logger = logging.getLogger(__name__)

ITEM_KEYWORDS = (
    "laptop", "chair", "firewall", "monitor", "desk", "phone", "tablet", "server",
    "printer", "coffee", "keyboard", "mouse", "headset", "webcam", "license",
    "subscription",
)
ADJECTIVES = ("high-end", "enterprise", "ergonomic", "premium", "standard")

CATEGORY_MAP: Dict[str, str] = {
    "laptop": "IT Hardware",
    "monitor": "IT Hardware",
    "server": "IT Hardware",
    "tablet": "IT Hardware",
    "keyboard": "IT Peripherals",
    "mouse": "IT Peripherals",
    "headset": "IT Peripherals",
    "webcam": "IT Peripherals",
    "chair": "Office Furniture",
    "desk": "Office Furniture",
    "phone": "Communications",
    "printer": "Office Equipment",
    "firewall": "Networking",
    "coffee": "Office Supplies",
    "license": "Software",
    "subscription": "Software",
}

SPEC_MAP: Dict[str, str] = {
    "laptop": "16GB+ RAM, 512GB SSD, i7/Ryzen 7+",
    "monitor": '27" 4K IPS, USB-C, adjustable stand',
    "server": "Rack-mounted, Xeon, 64GB ECC RAM",
    "chair": "Adjustable lumbar, mesh back, armrests",
    "desk": "Height-adjustable standing desk",
    "firewall": "Next-gen, IPS/IDS, 10Gbps throughput",
    "printer": "Color laser, duplex, network-ready",
}

PRICE_MAP: Dict[str, float] = {
    "laptop": 1500,
    "monitor": 600,
    "server": 5000,
    "chair": 350,
    "desk": 800,
    "firewall": 4500,
    "printer": 1200,
    "keyboard": 80,
    "mouse": 50,
    "headset": 150,
    "webcam": 120,
    "phone": 400,
    "tablet": 900,
    "coffee": 25,
    "license": 200,
    "subscription": 100,
}

DEFAULT_CATEGORY = "General"
DEFAULT_UNIT_PRICE = 100.0
GENERIC_SPECIFICATION = "Standard specifications"

_ITEM_PATTERN = re.compile(
    r"(?:(?<![$\d.,])(\d+)\s*(?:x\s+)?)?"
    r"(?:\b(" + "|".join(re.escape(a) for a in ADJECTIVES) + r")\s+)?"
    r"\b(" + "|".join(ITEM_KEYWORDS) + r")(?:e?s)?\b",
    re.IGNORECASE
)
_BUDGET_PATTERN = re.compile(
    r"\$\s*(\d[\d,]*(?:\.\d+)?)\s*(k)?\b"
    r"(\s*(?:each|apiece|per\s+(?:unit|item|piece)|/\s*(?:unit|item)))?",
    re.IGNORECASE
)
_RELATIVE_PATTERN = re.compile(
    r"\b(\d+)\s*(?:business\s+|working\s+)?(day|week)s?\b",
    re.IGNORECASE
)

_URGENCY_KEYWORDS: List[Tuple[Urgency, Tuple[str, ...]]] = [
    (Urgency.CRITICAL, ("critical", "emergency")),
    (Urgency.HIGH, ("urgent", "urgently", "asap", "immediately")),
    (Urgency.LOW, ("whenever", "no rush", "low priority")),
]

END_OF_BUSINESS_HOUR = 17


class RequestParser:
    """
    Parses natural-language purchase requests into a ParsedRequest.

    Supports two paths:
    - claude: structured parse through tool use (when a client is supplied)
    - heuristic: fixed vocabulary, price tables and relative-date rules
    """

    def __init__(
        self,
        claude_client: Optional[ClaudeClient] = None,
        clock: Optional[Clock] = None
    ):
        """
        Initialize the request parser.

        Args:
            claude_client: Optional Claude client for the enhanced path
            clock: Time source for relative deadlines (defaults to system time)
        """
        self.claude_client = claude_client
        self.clock = clock or SystemClock()
        self.templates = IntakeTemplates()
        mode = "claude" if claude_client else "heuristic"
        logger.info(f"RequestParser initialized (mode={mode})")

    def parse(self, request_text: str) -> ParsedRequest:
        """
        Parse a purchase request.

        Args:
            request_text: Raw request from the requester

        Returns:
            ParsedRequest with items, urgency, budget, deadline and clarification flag

        Raises:
            ValueError: If the request text is empty
        """
        if not request_text or not request_text.strip():
            raise ValueError("Request text must not be empty")

        if self.claude_client is not None:
            try:
                return self._parse_with_claude(request_text)
            except (EnhancementError, ValidationError, TypeError, ValueError) as e:
                logger.warning(f"Claude parse unavailable, falling back to heuristics: {e}")

        return self.parse_heuristic(request_text)

    def _parse_with_claude(self, request_text: str) -> ParsedRequest:
        data = self.claude_client.generate_structured(
            request_text,
            self.templates.system_prompt(),
            self.templates.get_function_definition()
        )
        parsed = ParsedRequest.model_validate({**data, "used_ai": True})
        if not parsed.items:
            raise EnhancementError("Claude returned no line items")
        if parsed.budget_estimate is None:
            parsed.budget_estimate = parsed.budget or _estimate_total(parsed.items)
        if parsed.deadline is not None and parsed.deadline.tzinfo is None:
            parsed.deadline = parsed.deadline.replace(tzinfo=self.clock.now().tzinfo)
        logger.info(f"Claude parsed {len(parsed.items)} item(s)")
        return parsed

    def parse_heuristic(self, request_text: str) -> ParsedRequest:
        """
        Deterministic parse using keyword and price tables.

        Args:
            request_text: Raw request

        Returns:
            ParsedRequest (used_ai is False)
        """
        text = request_text.strip()
        items, matched = self._extract_items(text)
        budget, unit_price = self._extract_budget(text)

        if unit_price is not None:
            items = [item.model_copy(update={"estimated_unit_price": unit_price}) for item in items]
            budget = unit_price * sum(item.quantity for item in items)

        deadline = self._extract_deadline(text)
        urgency = self._extract_urgency(text)

        needs_clarification = budget is None and not matched
        question = None
        if needs_clarification:
            question = self.templates.clarification_question(f'"{items[0].name}"')

        parsed = ParsedRequest(
            items=items,
            urgency=urgency,
            budget=budget,
            budget_estimate=budget if budget is not None else _estimate_total(items),
            deadline=deadline,
            summary=self._summarize(items, budget, deadline),
            needs_clarification=needs_clarification,
            clarification_question=question,
            used_ai=False
        )

        logger.info(
            f"Heuristic parse: {len(items)} item(s), budget={budget}, "
            f"needs_clarification={needs_clarification}"
        )
        return parsed

    def _extract_items(self, text: str) -> Tuple[List[ParsedItem], bool]:
        """
        Find every known item keyword with its optional quantity and adjective.

        Returns:
            (items, matched) where matched is False when only the generic
            fallback item could be produced
        """
        items: List[ParsedItem] = []
        seen = set()

        for match in _ITEM_PATTERN.finditer(text):
            quantity_str, adjective, keyword = match.groups()
            keyword = keyword.lower()
            if keyword in seen:
                continue
            seen.add(keyword)

            quantity = max(1, int(quantity_str)) if quantity_str else 1
            name = keyword.capitalize()
            if adjective:
                adjective = adjective.lower()
                name = f"{adjective[0].upper()}{adjective[1:]} {name}"

            items.append(ParsedItem(
                name=name,
                quantity=quantity,
                category=CATEGORY_MAP.get(keyword, DEFAULT_CATEGORY),
                specifications=SPEC_MAP.get(keyword),
                estimated_unit_price=PRICE_MAP.get(keyword, DEFAULT_UNIT_PRICE)
            ))

        if items:
            return items, True

        logger.debug("No known item keyword found; using generic line item")
        generic = ParsedItem(
            name=text[:60],
            quantity=1,
            category=DEFAULT_CATEGORY,
            specifications=GENERIC_SPECIFICATION,
            estimated_unit_price=DEFAULT_UNIT_PRICE
        )
        return [generic], False

    def _extract_budget(self, text: str) -> Tuple[Optional[float], Optional[float]]:
        """
        Find the first dollar amount.

        Returns:
            (budget, unit_price). unit_price is set instead of budget when the
            amount is quoted per unit ("$2000 each").
        """
        match = _BUDGET_PATTERN.search(text)
        if not match:
            return None, None

        amount = float(match.group(1).replace(",", ""))
        if match.group(2):
            amount *= 1000

        if match.group(3):
            return None, amount
        return amount, None

    def _extract_deadline(self, text: str) -> Optional[datetime]:
        lowered = text.lower()
        now = self.clock.now()

        if re.search(r"\bfriday\b", lowered):
            days_ahead = (4 - now.weekday()) % 7 or 7
            friday = now + timedelta(days=days_ahead)
            return friday.replace(hour=END_OF_BUSINESS_HOUR, minute=0, second=0, microsecond=0)

        if "next week" in lowered:
            return now + timedelta(days=7)

        match = _RELATIVE_PATTERN.search(lowered)
        if match:
            n = int(match.group(1))
            days = n * 7 if match.group(2) == "week" else n
            return now + timedelta(days=days)

        return None

    def _extract_urgency(self, text: str) -> Urgency:
        lowered = text.lower()
        for urgency, keywords in _URGENCY_KEYWORDS:
            if any(re.search(rf"\b{re.escape(k)}\b", lowered) for k in keywords):
                return urgency
        return Urgency.NORMAL

    def _summarize(
        self,
        items: List[ParsedItem],
        budget: Optional[float],
        deadline: Optional[datetime]
    ) -> str:
        summary = "Procure " + ", ".join(f"{item.quantity}x {item.name}" for item in items)
        if budget is not None:
            summary += f" (budget {format_money(budget)})"
        if deadline is not None:
            summary += f" by {deadline:%Y-%m-%d}"
        return summary


def _estimate_total(items: List[ParsedItem]) -> float:
    return sum(item.quantity * (item.estimated_unit_price or 0) for item in items)
