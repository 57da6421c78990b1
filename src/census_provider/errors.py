"""Exception types raised by the provider."""

from __future__ import annotations


class CensusProviderError(Exception):
    """Base class for provider errors."""


class MappingValidationError(CensusProviderError, ValueError):
    """A field mapping list is invalid and must not be sent to the API."""

    def __init__(self, message: str, index: int | None = None):
        self.index = index
        if index is not None:
            message = f"field_mapping[{index}]: {message}"
        super().__init__(message)


class BlueprintValidationError(CensusProviderError, ValueError):
    """A sync blueprint failed schema validation."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = errors or []
        if self.errors:
            message = message + "\n" + "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(message)


class WireDecodeError(CensusProviderError, ValueError):
    """An API response is missing structure required to rebuild state."""


class ImportIdError(CensusProviderError, ValueError):
    """An import identifier is not in `workspace_id:sync_id` form."""
