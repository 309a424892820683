"""
Procure Engine - Autonomous Procurement Mission Pipeline

Turns a free-form purchase request into structured line items, sources and scores
competing vendor quotes, checks them against configurable compliance policies,
gates large purchases behind human approval, and renders procurement documents.
"""

__version__ = "0.1.0"
__author__ = "Procure Engine Team"
