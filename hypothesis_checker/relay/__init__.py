"""Same-origin relay for providers that refuse cross-origin calls."""

from .app import create_relay_app

__all__ = ["create_relay_app"]
