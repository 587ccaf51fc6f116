"""
FHIR R4B (4.3.x) conformance resource shapes.

R4B kept the R4 conformance layer unchanged; only SearchParameter and
CapabilityStatement gained optional elements that pass through as extras.
"""
from typing import Any, Dict

from . import r4
from .base import TypedResource, parse_typed

StructureDefinition = r4.StructureDefinition
CodeSystem = r4.CodeSystem
ValueSet = r4.ValueSet
OperationDefinition = r4.OperationDefinition
ImplementationGuide = r4.ImplementationGuide
CompartmentDefinition = r4.CompartmentDefinition
SearchParameter = r4.SearchParameter
CapabilityStatement = r4.CapabilityStatement

RESOURCE_MODELS = dict(r4.RESOURCE_MODELS)


def parse_resource(data: Dict[str, Any]) -> TypedResource:
    return parse_typed(RESOURCE_MODELS, data)
