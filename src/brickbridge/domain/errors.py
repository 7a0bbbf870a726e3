"""Error taxonomy shared by matching and inventory materialization."""

from __future__ import annotations


class BrickBridgeError(RuntimeError):
    """Base class for domain-level failures."""


class InvalidIdentifierError(BrickBridgeError, ValueError):
    """Raised for a malformed or empty catalog identifier.

    Batch callers skip the offending item and continue.
    """


class UpstreamUnavailableError(BrickBridgeError):
    """Raised when a catalog API could not be reached after retries."""


class FetchTimeoutError(UpstreamUnavailableError):
    """Raised when an on-demand composition fetch exceeds its time budget."""


class InventoryUnavailableError(BrickBridgeError):
    """Raised when no source can provide inventory data for a container."""


class MappingConflictError(BrickBridgeError):
    """Raised when a mapping would violate the one-to-one link between catalogs."""


class DataIntegrityWarning(UserWarning):
    """Two sources disagree on a static field for the same canonical key."""


def require_identifier(value: str | None, *, kind: str) -> str:
    """Return ``value`` stripped, raising for empty or missing identifiers."""

    if value is None:
        raise InvalidIdentifierError(f"Missing {kind} identifier")
    stripped = value.strip()
    if not stripped:
        raise InvalidIdentifierError(f"Empty {kind} identifier")
    if ":" in stripped:
        raise InvalidIdentifierError(f"Invalid {kind} identifier {value!r}: ':' is reserved")
    return stripped
