"""FHIR R4B (4.3.x) converter. Same resource shapes as R4."""
from ..releases import FhirSequence
from ..typed import r4b
from .adapters import R4BAdapter
from .base import TypedConverter


class R4BConverter(TypedConverter):
    release = FhirSequence.R4B
    adapter_class = R4BAdapter
    models = r4b
