"""Key builders for the distributed cache tier."""

from rostercache.infrastructure.key_builders.default import DefaultKeyBuilder

__all__ = ["DefaultKeyBuilder"]
