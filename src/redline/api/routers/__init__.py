"""HTTP routers mounted by :func:`redline.api.app.create_app`."""

from __future__ import annotations

from . import documents, plans

__all__ = ["documents", "plans"]
