"""Story universe registry source package.

This package contains:
- config: Configuration loading and management
- registry: Authors, universes, stories, access control and the event log
"""

from __future__ import annotations

__all__: list[str] = []
