"""Personal work-time logger built around working days that start at 05:00."""

from __future__ import annotations

__version__ = "0.3.0"
