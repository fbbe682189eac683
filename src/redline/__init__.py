"""redline package bootstrap.

Exposes the package version. The document model and algorithms live under
:mod:`redline.core`; storage, sharing, the HTTP API and the CLI sit on top.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
