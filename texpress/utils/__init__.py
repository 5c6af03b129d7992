"""
Shared utilities for TEXPRESS.

Common functionality used across contexts:
- Settings loading
- Logging setup
- Pipeline event log
- Timestamps and PDF helpers
"""

from texpress.utils.config import CompileSettings, load_settings
from texpress.utils.timestamp import now, now_exact

__all__ = ["CompileSettings", "load_settings", "now", "now_exact"]
