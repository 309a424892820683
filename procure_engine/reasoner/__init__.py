"""
Reasoner Module

Optional Claude enhancement. Absent an API key, or on any failure, stages use
their deterministic logic instead.
"""

from .claude_client import ClaudeClient

__all__ = ["ClaudeClient"]
