from __future__ import annotations

class InvalidArgument(ValueError):
    """Missing or malformed input supplied by the caller (HTTP 400)."""

class NotFound(LookupError):
    """Target row absent or no longer eligible (HTTP 404)."""

