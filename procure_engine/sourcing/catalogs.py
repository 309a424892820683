"""
Vendor Catalogs

Simulated product catalogs keyed by vendor name. Each catalog function prices
an item relative to its reference price and reports stock and lead time.
Future: replace the profiles with live supplier API lookups.
"""

import logging
from typing import Callable, Dict, Optional

from pydantic import BaseModel

from ..mission.models import Availability, ParsedItem
from ..mission.money import to_whole_units

logger = logging.getLogger(__name__)

FALLBACK_REFERENCE_PRICE = 1000.0


class VendorCatalogEntry(BaseModel):
    """What a vendor's catalog says about one item."""
    product_name: str
    unit_price: int
    availability: Availability = Availability.IN_STOCK
    shipping_days: int


CatalogFunction = Callable[[ParsedItem], Optional[VendorCatalogEntry]]


def reference_price(item: ParsedItem) -> float:
    """Price that catalog discounts and price scores are measured against."""
    return item.estimated_unit_price or FALLBACK_REFERENCE_PRICE


def price_profile(
    grade: str,
    price_factor: float,
    shipping_days: int,
    availability: Availability = Availability.IN_STOCK
) -> CatalogFunction:
    """
    Build a catalog function that discounts the reference price by a fixed factor.

    Args:
        grade: Product line label appended to the item name
        price_factor: Multiplier applied to the reference price
        shipping_days: Lead time in days
        availability: Stock state

    Returns:
        Catalog function for the vendor
    """
    def lookup(item: ParsedItem) -> VendorCatalogEntry:
        return VendorCatalogEntry(
            product_name=f"{item.name} — {grade}",
            unit_price=to_whole_units(reference_price(item) * price_factor),
            availability=availability,
            shipping_days=shipping_days
        )
    return lookup


class VendorCatalog:
    """
    Registry of catalog functions by vendor name.
    """

    def __init__(self, catalogs: Optional[Dict[str, CatalogFunction]] = None):
        self._catalogs: Dict[str, CatalogFunction] = dict(catalogs or {})

    @classmethod
    def default(cls) -> "VendorCatalog":
        """Catalog covering the vendors in the default directory."""
        return cls({
            "TechDirect Pro": price_profile("Premium Grade", 0.88, 5),
            "GlobalSupply Co": price_profile("Standard", 0.94, 7),
            "PrimeOffice Solutions": price_profile("Business Line", 0.91, 4),
            "CloudWare Systems": price_profile("Enterprise", 0.98, 3),
            "SecureNet Distributors": price_profile("Certified", 0.95, 6),
            "BudgetTech Outlet": price_profile("Value", 0.82, 21, Availability.LIMITED_STOCK),
        })

    def register(self, vendor_name: str, catalog: CatalogFunction) -> None:
        self._catalogs[vendor_name] = catalog
        logger.debug(f"Catalog registered for {vendor_name}")

    def get(self, vendor_name: str) -> Optional[CatalogFunction]:
        return self._catalogs.get(vendor_name)

    def __contains__(self, vendor_name: str) -> bool:
        return vendor_name in self._catalogs
