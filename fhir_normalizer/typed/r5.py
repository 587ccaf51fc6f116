"""
FHIR R5 (5.0.x) conformance resource shapes.

R5 adds SearchParameter.processingMode (replacing xpathUsage), version
algorithms on canonical resources, and the capability statement
search-parameter-combination extension on rest.resource.
"""
from typing import Any, Dict, Optional

from pydantic import Field

from . import r4
from .base import Coding, TypedResource, parse_typed

StructureDefinition = r4.StructureDefinition
CodeSystem = r4.CodeSystem
ValueSet = r4.ValueSet
OperationDefinition = r4.OperationDefinition
ImplementationGuide = r4.ImplementationGuide
CapabilityStatement = r4.CapabilityStatement


class SearchParameter(r4.SearchParameter):
    processing_mode: Optional[str] = Field(None, alias="processingMode")
    constraint: Optional[str] = None


class CompartmentDefinition(r4.CompartmentDefinition):
    version_algorithm_string: Optional[str] = Field(None, alias="versionAlgorithmString")
    version_algorithm_coding: Optional[Coding] = Field(None, alias="versionAlgorithmCoding")


RESOURCE_MODELS = dict(r4.RESOURCE_MODELS)
RESOURCE_MODELS.update({
    "SearchParameter": SearchParameter,
    "CompartmentDefinition": CompartmentDefinition,
})


def parse_resource(data: Dict[str, Any]) -> TypedResource:
    return parse_typed(RESOURCE_MODELS, data)
