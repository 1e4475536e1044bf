"""Weaver - coordinated multi-workflow CI/CD generation from templates."""

from __future__ import annotations

__version__ = "0.1.0"
