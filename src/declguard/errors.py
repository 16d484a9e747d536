"""Base exception for declguard library errors."""

from __future__ import annotations


class DeclguardError(Exception):
    """Base exception for all declguard errors.

    Raised only for unusable input files or configuration; comparing
    well-formed declaration trees never raises.
    """

    pass
