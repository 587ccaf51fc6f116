"""
FHIR Spec Normalizer

Normalizes FHIR conformance artifacts from DSTU2 through R5 into one
version-independent model.

Components:
- json_tree: typed accessor over parsed JSON
- typed: per-release pydantic models
- models: the version-independent model
- sink: PackageImportable contract and DefinitionCollection
- converters: release converters and ConverterFactory
"""
from .converters import ConverterFactory, FhirConverter, converter_for
from .diagnostics import Diagnostics
from .errors import ConversionError, ConversionIssue, VersionNotSupportedError
from .json_tree import JsonTree
from .models import ArtifactClass
from .releases import FhirSequence, sequence_for_version
from .sink import DefinitionCollection, PackageImportable

__all__ = [
    "ConverterFactory",
    "FhirConverter",
    "converter_for",
    "Diagnostics",
    "ConversionError",
    "ConversionIssue",
    "VersionNotSupportedError",
    "JsonTree",
    "ArtifactClass",
    "FhirSequence",
    "sequence_for_version",
    "DefinitionCollection",
    "PackageImportable",
]
