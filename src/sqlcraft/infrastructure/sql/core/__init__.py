"""Core SQL utilities shared by all builders."""

from .identifier import IdentifierEnclosure, quote_identifier

__all__ = ["IdentifierEnclosure", "quote_identifier"]
