"""
Directory Module

Injected source of vendor and policy configuration.
"""

from .repository import (
    BaseDirectory,
    InMemoryDirectory,
    JsonFileDirectory,
    default_policies,
    default_vendors,
)

__all__ = [
    "BaseDirectory",
    "InMemoryDirectory",
    "JsonFileDirectory",
    "default_policies",
    "default_vendors",
]
