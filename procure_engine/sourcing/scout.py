"""
Sourcing Scout

Collects vendor quotes for every parsed item and picks a winner per item by
weighted score. Unreliable sources are skipped with a warning instead of
aborting the mission.
"""

import logging
from typing import List, Optional, Tuple
from urllib.parse import quote as url_quote

from pydantic import BaseModel, Field

from ..mission.audit import MissionAuditLog
from ..mission.clock import RandomSource, SystemRandom
from ..mission.models import AgentName, ParsedItem, Vendor, VendorQuote
from ..mission.money import format_money, to_whole_units
from ..mission.payloads import QuoteSetPayload, VendorLookupPayload
from .catalogs import VendorCatalog, VendorCatalogEntry, reference_price

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_RATE = 0.15

PRICE_WEIGHT = 40
FAST_SHIPPING_DAYS = 7
STANDARD_SHIPPING_DAYS = 14
FAST_SHIPPING_POINTS = 25
STANDARD_SHIPPING_POINTS = 15
SLOW_SHIPPING_POINTS = 5
RATING_MULTIPLIER = 5
WHITELIST_BONUS = 10


class SelfHealingEvent(BaseModel):
    """A vendor source that failed and was routed around."""
    vendor: str
    item_name: str
    issue: str
    resolution: str


class QuoteSet(BaseModel):
    """Sourcing stage output."""
    quotes: List[VendorQuote] = Field(default_factory=list)
    self_healing: List[SelfHealingEvent] = Field(default_factory=list)

    @property
    def selected(self) -> List[VendorQuote]:
        return [q for q in self.quotes if q.selected]


def score_quote(unit_price: float, reference: float, shipping_days: int, vendor: Vendor) -> int:
    """
    Composite vendor score, rounded to whole points.

    price (40 at reference price 0, more for cheaper) + shipping (25/15/5)
    + rating x 5 + 10 for whitelisted vendors.
    """
    price_score = PRICE_WEIGHT * (1 - unit_price / reference)
    if shipping_days <= FAST_SHIPPING_DAYS:
        shipping_score = FAST_SHIPPING_POINTS
    elif shipping_days <= STANDARD_SHIPPING_DAYS:
        shipping_score = STANDARD_SHIPPING_POINTS
    else:
        shipping_score = SLOW_SHIPPING_POINTS
    rating_score = vendor.rating * RATING_MULTIPLIER
    bonus = WHITELIST_BONUS if vendor.is_whitelisted else 0
    return to_whole_units(price_score + shipping_score + rating_score + bonus)


class SourcingEngine:
    """
    Searches vendor catalogs and ranks the resulting quotes.
    """

    def __init__(
        self,
        catalog: Optional[VendorCatalog] = None,
        random_source: Optional[RandomSource] = None,
        failure_rate: float = DEFAULT_FAILURE_RATE
    ):
        """
        Initialize the sourcing engine.

        Args:
            catalog: Vendor catalog registry (defaults to the bundled catalogs)
            random_source: Source of draws for simulated source failures
            failure_rate: Chance that a non-whitelisted vendor lookup fails
        """
        self.catalog = catalog or VendorCatalog.default()
        self.random_source = random_source or SystemRandom()
        self.failure_rate = failure_rate
        logger.info(f"SourcingEngine initialized (failure_rate={failure_rate})")

    def search(
        self,
        mission_id: str,
        items: List[ParsedItem],
        vendors: List[Vendor],
        audit: MissionAuditLog
    ) -> QuoteSet:
        """
        Collect and rank quotes for every item.

        Args:
            mission_id: Owning mission
            items: Parsed line items
            vendors: Vendor directory, in preference order for ties
            audit: Mission audit log

        Returns:
            QuoteSet with exactly one selected quote per item that got any quote
        """
        result = QuoteSet()

        for index, item in enumerate(items):
            audit.info(
                AgentName.SOURCING_SCOUT,
                f"Initiating vendor search for: {item.name} (qty: {item.quantity})"
            )

            offers = self._collect_offers(item, vendors, audit, result)
            if not offers:
                audit.warn(
                    AgentName.SOURCING_SCOUT,
                    f"No vendor could quote {item.name} — continuing without a selected vendor",
                    QuoteSetPayload(item_name=item.name, vendors_available=len(vendors))
                )
                continue

            ranked = self._rank(mission_id, index, item, offers)
            result.quotes.extend(ranked)

            best = ranked[0]
            audit.info(
                AgentName.SOURCING_SCOUT,
                f"Vendor comparison complete. Recommending {best.vendor_name} "
                f"(score: {best.score}/100)",
                QuoteSetPayload(
                    item_name=item.name,
                    scores={q.vendor_name: q.score for q in ranked},
                    selected=best.vendor_name,
                    total_quotes=len(ranked),
                    vendors_available=len(vendors)
                )
            )

        logger.info(
            f"Sourcing complete: {len(result.quotes)} quotes, "
            f"{len(result.self_healing)} source failures recovered"
        )
        return result

    def _collect_offers(
        self,
        item: ParsedItem,
        vendors: List[Vendor],
        audit: MissionAuditLog,
        result: QuoteSet
    ) -> List[Tuple[Vendor, VendorCatalogEntry]]:
        offers = []

        for vendor in vendors:
            lookup = self.catalog.get(vendor.name)
            if lookup is None:
                audit.info(
                    AgentName.SOURCING_SCOUT,
                    f"No catalog available for {vendor.name} — skipped",
                    VendorLookupPayload(vendor=vendor.name, item_name=item.name, error="NO_CATALOG")
                )
                continue

            if not vendor.is_whitelisted and self.random_source.random() < self.failure_rate:
                audit.warn(
                    AgentName.SOURCING_SCOUT,
                    f"Self-healing: {vendor.name} source unavailable — skipping to alternative source",
                    VendorLookupPayload(vendor=vendor.name, item_name=item.name, error="CONNECTION_TIMEOUT")
                )
                result.self_healing.append(SelfHealingEvent(
                    vendor=vendor.name,
                    item_name=item.name,
                    issue="Source unavailable (connection timeout)",
                    resolution="Skipped to alternative vendors"
                ))
                continue

            try:
                entry = lookup(item)
            except Exception as e:
                audit.warn(
                    AgentName.SOURCING_SCOUT,
                    f"Self-healing: {vendor.name} lookup failed ({e}) — skipping to alternative source",
                    VendorLookupPayload(vendor=vendor.name, item_name=item.name, error=type(e).__name__)
                )
                result.self_healing.append(SelfHealingEvent(
                    vendor=vendor.name,
                    item_name=item.name,
                    issue=f"Catalog lookup failed: {e}",
                    resolution="Skipped to alternative vendors"
                ))
                continue

            if entry is None:
                audit.info(
                    AgentName.SOURCING_SCOUT,
                    f"{vendor.name} does not list {item.name} — skipped",
                    VendorLookupPayload(vendor=vendor.name, item_name=item.name, error="NOT_LISTED")
                )
                continue

            audit.debug(
                AgentName.SOURCING_SCOUT,
                f"GET {vendor.website}/api/products?q={url_quote(item.name)} — 200 OK",
                VendorLookupPayload(
                    vendor=vendor.name,
                    item_name=item.name,
                    unit_price=entry.unit_price,
                    shipping_days=entry.shipping_days
                )
            )
            offers.append((vendor, entry))

        return offers

    def _rank(
        self,
        mission_id: str,
        item_index: int,
        item: ParsedItem,
        offers: List[Tuple[Vendor, VendorCatalogEntry]]
    ) -> List[VendorQuote]:
        """
        Score offers, sort best first and write selection reasoning.

        Equal scores keep directory order, so the earlier vendor wins a tie.
        """
        reference = reference_price(item)
        scored = [
            (score_quote(entry.unit_price, reference, entry.shipping_days, vendor), vendor, entry)
            for vendor, entry in offers
        ]
        scored.sort(key=lambda row: row[0], reverse=True)

        best_score, best_vendor, best_entry = scored[0]
        ranked = []

        for position, (score, vendor, entry) in enumerate(scored):
            if position == 0:
                reasoning = (
                    f"Best score: {score}/100 — competitive pricing at "
                    f"{format_money(entry.unit_price)}/unit, {entry.shipping_days}-day shipping, "
                    f"vendor rating {vendor.rating:g}★"
                )
            else:
                reasoning = self._compare(score, vendor, entry, best_entry)

            ranked.append(VendorQuote(
                mission_id=mission_id,
                vendor_id=vendor.id,
                vendor_name=vendor.name,
                item_name=entry.product_name,
                item_index=item_index,
                unit_price=entry.unit_price,
                quantity=item.quantity,
                total_price=entry.unit_price * item.quantity,
                availability=entry.availability,
                shipping_days=entry.shipping_days,
                score=score,
                selected=position == 0,
                reasoning=reasoning
            ))

        return ranked

    @staticmethod
    def _compare(
        score: int,
        vendor: Vendor,
        entry: VendorCatalogEntry,
        best: VendorCatalogEntry
    ) -> str:
        reasons = []
        if entry.unit_price > best.unit_price:
            reasons.append(f"{format_money(entry.unit_price - best.unit_price)} more expensive per unit")
        if entry.shipping_days > best.shipping_days:
            reasons.append(f"{entry.shipping_days - best.shipping_days} days slower shipping")
        if not vendor.is_whitelisted:
            reasons.append("Not on approved vendor list")
        return ". ".join(reasons) if reasons else f"Score: {score}/100"
