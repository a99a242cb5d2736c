"""HTTP API for rostercache."""

from rostercache.api.app import create_app

__all__ = ["create_app"]
