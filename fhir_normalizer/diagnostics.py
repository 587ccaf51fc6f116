"""
Diagnostics collector for a conversion run.

Each converter owns one Diagnostics instance (or is handed one by the
caller). Soft issues, and elements that had to be dropped because their
parent could not be resolved, accumulate here instead of in global state.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .errors import ConversionIssue, IssueSeverity

logger = logging.getLogger(__name__)


@dataclass
class DroppedElement:
    """A snapshot element skipped because no parent could be resolved."""
    structure: str
    element_path: str
    element_id: str = ""


@dataclass
class Diagnostics:
    """
    Errors, warnings and dropped elements collected while converting.

    Usage:
        diagnostics = Diagnostics()
        converter = converter_for("4.0.1", diagnostics=diagnostics)
        ...
        if diagnostics.has_issues():
            print(diagnostics.summary())
    """
    issues: List[ConversionIssue] = field(default_factory=list)
    dropped_elements: List[DroppedElement] = field(default_factory=list)

    def error(self, message: str, resource_type: str = "", resource_id: str = "") -> ConversionIssue:
        """Record an error (only able to pass with manual code changes)."""
        issue = ConversionIssue(IssueSeverity.ERROR, message, resource_type, resource_id)
        self.issues.append(issue)
        logger.debug("conversion error: %s", message)
        return issue

    def warning(self, message: str, resource_type: str = "", resource_id: str = "") -> ConversionIssue:
        """Record a warning (able to pass, but should be reviewed)."""
        issue = ConversionIssue(IssueSeverity.WARNING, message, resource_type, resource_id)
        self.issues.append(issue)
        logger.debug("conversion warning: %s", message)
        return issue

    def record_dropped(self, structure: str, element_path: str, element_id: str = "") -> None:
        self.dropped_elements.append(DroppedElement(structure, element_path, element_id))

    @property
    def errors(self) -> List[str]:
        return [i.message for i in self.issues if i.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> List[str]:
        return [i.message for i in self.issues if i.severity == IssueSeverity.WARNING]

    @property
    def dropped_element_count(self) -> int:
        return len(self.dropped_elements)

    def has_issues(self) -> bool:
        return len(self.issues) > 0

    def clear(self) -> None:
        self.issues.clear()
        self.dropped_elements.clear()

    def summary(self) -> str:
        """One-line summary, e.g. '2 errors, 1 warning, 0 dropped elements'."""
        errors = len(self.errors)
        warnings = len(self.warnings)
        return (
            f"{errors} error{'s' if errors != 1 else ''}, "
            f"{warnings} warning{'s' if warnings != 1 else ''}, "
            f"{self.dropped_element_count} dropped element{'s' if self.dropped_element_count != 1 else ''}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        return {
            "errors": self.errors,
            "warnings": self.warnings,
            "dropped_elements": [
                {"structure": d.structure, "path": d.element_path, "id": d.element_id}
                for d in self.dropped_elements
            ],
            "summary": self.summary(),
        }
