"""
FHIR R5 (5.0.x) converter.

Also used for the 4.2 - 4.6 builds and the 5.0.0 ballots.
"""
from ..releases import FhirSequence
from ..typed import r5
from .adapters import R5Adapter
from .base import TypedConverter


class R5Converter(TypedConverter):
    release = FhirSequence.R5
    adapter_class = R5Adapter
    models = r5
