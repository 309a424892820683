"""
Sourcing Module

Vendor catalog lookups with self-healing skips, and weighted quote scoring.
"""

from .catalogs import VendorCatalog, VendorCatalogEntry, price_profile
from .scout import QuoteSet, SelfHealingEvent, SourcingEngine, score_quote

__all__ = [
    "QuoteSet",
    "SelfHealingEvent",
    "SourcingEngine",
    "VendorCatalog",
    "VendorCatalogEntry",
    "price_profile",
    "score_quote",
]
