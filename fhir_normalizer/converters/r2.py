"""
FHIR DSTU2 (1.0.x) converter.

DSTU2 has no CodeSystem resource (code systems arrive embedded in
ValueSet.codeSystem) and publishes server capabilities as Conformance.
"""
from ..releases import FhirSequence
from ..typed import r2
from .adapters import R2Adapter
from .base import TypedConverter


class R2Converter(TypedConverter):
    release = FhirSequence.DSTU2
    adapter_class = R2Adapter
    models = r2
