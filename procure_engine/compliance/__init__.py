"""
Compliance Module

Category-dispatched policy checks with citations.
"""

from .policy_engine import ComplianceSet, PolicyEngine

__all__ = ["ComplianceSet", "PolicyEngine"]
