"""
FHIR release identification.

Maps the many version strings a release is published under (ballots,
CI builds, package names) to a FhirSequence. The table is authoritative
data; the first-character heuristic only applies when no entry matches.
"""
from enum import Enum
from typing import Dict, Tuple, Union

from .errors import VersionNotSupportedError


class FhirSequence(str, Enum):
    """Published FHIR release lines."""
    DSTU2 = "DSTU2"
    STU3 = "STU3"
    R4 = "R4"
    R4B = "R4B"
    R5 = "R5"

    @property
    def major_version(self) -> int:
        return _MAJOR_VERSIONS[self]


_MAJOR_VERSIONS: Dict[FhirSequence, int] = {
    FhirSequence.DSTU2: 2,
    FhirSequence.STU3: 3,
    FhirSequence.R4: 4,
    FhirSequence.R4B: 4,
    FhirSequence.R5: 5,
}

RELEASE_LITERALS: Dict[FhirSequence, Tuple[str, ...]] = {
    FhirSequence.DSTU2: (
        "R2", "2", "0.4", "0.4.0", "0.5", "0.5.0",
        "1.0", "1.0.0", "1.0.1", "1.0.2",
        "hl7.fhir.r2", "hl7.fhir.r2.core",
    ),
    FhirSequence.STU3: (
        "STU3", "R3", "3",
        "1.1", "1.1.0", "1.2", "1.2.0", "1.4", "1.4.0", "1.6", "1.6.0", "1.8", "1.8.0",
        "3.0", "3.0.0", "3.0.1", "3.0.2",
        "hl7.fhir.r3", "hl7.fhir.r3.core",
    ),
    FhirSequence.R4: (
        "R4", "4", "3.2", "3.2.0", "3.3", "3.3.0", "3.5", "3.5.0", "3.5a", "3.5a.0",
        "4.0", "4.0.0", "4.0.1",
        "hl7.fhir.r4", "hl7.fhir.r4.core",
    ),
    FhirSequence.R4B: (
        "R4B", "4B", "4.1", "4.1.0", "4.3", "4.3.0", "4.3.0-snapshot1",
        "hl7.fhir.r4b", "hl7.fhir.r4b.core",
    ),
    FhirSequence.R5: (
        "R5", "5", "4.2", "4.2.0", "4.4", "4.4.0", "4.5", "4.5.0", "4.6", "4.6.0",
        "5.0", "5.0.0", "5.0.0-cibuild", "5.0.0-snapshot1", "5.0.0-ballot",
        "5.0.0-snapshot3", "5.0.0-draft-final",
        "hl7.fhir.r5", "hl7.fhir.r5.core",
    ),
}

# 4.x builds published after R4 that belong to the R5 line
NEXT_MAJOR_PREFIXES: Tuple[str, ...] = ("4.2", "4.4", "4.5", "4.6")

LATEST_RELEASE = FhirSequence.R5

_LOOKUP: Dict[str, FhirSequence] = {
    literal.lower(): sequence
    for sequence, literals in RELEASE_LITERALS.items()
    for literal in literals
}

_MAJOR_TO_SEQUENCE: Dict[int, FhirSequence] = {
    1: FhirSequence.DSTU2,
    2: FhirSequence.DSTU2,
    3: FhirSequence.STU3,
    4: FhirSequence.R4,
    5: FhirSequence.R5,
}


def lookup_release(version: str) -> Union[FhirSequence, None]:
    """
    Exact (case-insensitive) table lookup.

    Also tries the text before a '#' and the text before a '-', so
    'hl7.fhir.r4.core#4.0.1' and '4.0.1-cibuild' resolve.
    """
    if not version:
        return None

    key = version.strip().lower()
    if key in _LOOKUP:
        return _LOOKUP[key]

    if "#" in key:
        prefix = key.split("#", 1)[0]
        if prefix in _LOOKUP:
            return _LOOKUP[prefix]

    if "-" in key:
        prefix = key.split("-", 1)[0]
        if prefix in _LOOKUP:
            return _LOOKUP[prefix]

    return None


def sequence_for_version(version: Union[int, str]) -> FhirSequence:
    """
    Resolve a version identifier to a release.

    Args:
        version: Major version number (1-5) or a free-form version string

    Returns:
        The matching FhirSequence

    Raises:
        VersionNotSupportedError: If no rule matches
    """
    if isinstance(version, bool):
        raise VersionNotSupportedError(f"Unsupported FHIR version: {version!r}")

    if isinstance(version, int):
        if version in _MAJOR_TO_SEQUENCE:
            return _MAJOR_TO_SEQUENCE[version]
        raise VersionNotSupportedError(f"Unsupported FHIR major version: {version}")

    found = lookup_release(version)
    if found is not None:
        return found

    text = (version or "").strip()
    if not text:
        raise VersionNotSupportedError("Unsupported FHIR version: empty version string")

    first = text[0]
    if first in ("1", "2"):
        return FhirSequence.DSTU2
    if first == "3":
        return FhirSequence.STU3
    if first == "4":
        if text.startswith(NEXT_MAJOR_PREFIXES):
            return LATEST_RELEASE
        return FhirSequence.R4
    if first == "5":
        return FhirSequence.R5

    raise VersionNotSupportedError(f"Unsupported FHIR version: {version}")
