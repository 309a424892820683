"""
Documents Module

Deterministic RFQ, purchase order and contract summary rendering.
"""

from .renderer import DocumentRenderer, format_long_date, group_by_vendor
from .templates import DocumentTemplates

__all__ = [
    "DocumentRenderer",
    "DocumentTemplates",
    "format_long_date",
    "group_by_vendor",
]
