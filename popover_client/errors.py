"""Exceptions raised for caller contract violations."""
from __future__ import annotations


class PopoverConfigError(ValueError):
    """Invalid popover configuration, rejected when settings are built."""
