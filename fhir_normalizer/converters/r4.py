"""FHIR R4 (4.0.x) converter."""
from ..releases import FhirSequence
from ..typed import r4
from .adapters import R4Adapter
from .base import TypedConverter


class R4Converter(TypedConverter):
    release = FhirSequence.R4
    adapter_class = R4Adapter
    models = r4
