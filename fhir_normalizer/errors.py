"""
Error types for the conversion layer.

Two tiers:
1. ConversionIssue - a soft problem recorded in Diagnostics; processing continues
2. ConversionError - a hard failure that aborts the current resource and
   propagates to the caller
"""
from dataclasses import dataclass
from enum import Enum


class IssueSeverity(str, Enum):
    """Severity of a recorded conversion issue."""
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ConversionIssue:
    """
    A soft conversion problem.

    Attributes:
        severity: ERROR (needs a manual code change) or WARNING (review)
        message: Human-readable description
        resource_type: resourceType of the artifact being processed, if known
        resource_id: id of the artifact being processed, if known
    """
    severity: IssueSeverity
    message: str
    resource_type: str = ""
    resource_id: str = ""

    def __str__(self) -> str:
        return self.message


class ConversionError(ValueError):
    """
    Invalid source data that cannot be converted (ambiguous base type,
    unresolvable content reference, missing slicing discriminator, ...).
    """

    def __init__(
        self,
        message: str,
        structure: str = "",
        element_path: str = "",
        element_id: str = "",
    ):
        super().__init__(message)
        self.structure = structure
        self.element_path = element_path
        self.element_id = element_id


class VersionNotSupportedError(ValueError):
    """Raised when a FHIR version identifier matches no known release."""
