"""
Utilities Module
================

Helper functions and validators.
"""

from app.utils.helpers import call_with_timeout, format_datetime, parse_datetime, utc_now

__all__ = ["call_with_timeout", "format_datetime", "parse_datetime", "utc_now"]
