"""FHIR STU3 (3.0.x) converter."""
from ..releases import FhirSequence
from ..typed import r3
from .adapters import R3Adapter
from .base import TypedConverter


class R3Converter(TypedConverter):
    release = FhirSequence.STU3
    adapter_class = R3Adapter
    models = r3
