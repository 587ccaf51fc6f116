"""
Release Converters

Turn release-specific FHIR conformance resources into the
version-independent model.

Components:
- base: FhirConverter contract and dispatch
- adapters: per-release field access
- element_tree, terminology, conformance: shared processors
- r2, r3, r4, r4b, r5: typed converters; normative: JsonTree converter
- factory: ConverterFactory / converter_for
"""
from .adapters import ReleaseAdapter
from .base import FhirConverter, TypedConverter
from .factory import ConverterFactory, converter_for
from .normative import NormativeConverter
from .r2 import R2Converter
from .r3 import R3Converter
from .r4 import R4Converter
from .r4b import R4BConverter
from .r5 import R5Converter

__all__ = [
    "ReleaseAdapter",
    "FhirConverter",
    "TypedConverter",
    "ConverterFactory",
    "converter_for",
    "NormativeConverter",
    "R2Converter",
    "R3Converter",
    "R4Converter",
    "R4BConverter",
    "R5Converter",
]
