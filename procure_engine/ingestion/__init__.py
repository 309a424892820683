"""
Ingestion Module

Turns free-form purchase requests into structured line items.
Uses Claude tool use when configured, keyword heuristics otherwise.
"""

from .parser import RequestParser
from .templates import IntakeTemplates

__all__ = ["RequestParser", "IntakeTemplates"]
