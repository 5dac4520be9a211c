"""Error hierarchy for viralgrowth.

Error layers:
- ViralGrowthError: Base class for all viralgrowth errors
- DomainError: Business rule violations (illegal transitions, unknown records)
- InfrastructureError: Failures of external collaborators (channel, metadata provider)

The scheduler and pipeline engine never let these escape a run; they are
surfaced through record status and connection state instead.
"""


class ViralGrowthError(Exception):
    """Base class for all viralgrowth errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(ViralGrowthError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class ConflictError(DomainError):
    """Operation would break a uniqueness rule (e.g. a second active run)."""


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(ViralGrowthError):
    """Base class for infrastructure/system errors."""


class ExternalServiceError(InfrastructureError):
    """External service is unavailable or failed."""


class ChannelConnectionError(ExternalServiceError):
    """Connecting to the publishing channel failed or was abandoned."""


class MetadataFetchError(ExternalServiceError):
    """The metadata provider could not produce trend/title/description data."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
