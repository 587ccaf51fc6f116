"""
FHIR DSTU2 (1.0.x) conformance resource shapes.

DSTU2 predates CodeSystem and CapabilityStatement: code systems are
embedded in ValueSet.codeSystem and server capabilities are a
Conformance resource. StructureDefinition uses constrainedType and a
`base` canonical, slices are named by `name`, and SearchParameter.base
is a single code.
"""
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import ElementList, Reference, TypedElement, TypedResource, parse_typed


class StructureDefinition(TypedResource):
    kind: Optional[str] = None
    constrained_type: Optional[str] = Field(None, alias="constrainedType")
    abstract: Optional[bool] = None
    base: Optional[str] = None
    context_type: Optional[str] = Field(None, alias="contextType")
    context: Optional[List[str]] = None
    snapshot: Optional[ElementList] = None
    differential: Optional[ElementList] = None


class ValueSetCodeSystem(TypedElement):
    system: Optional[str] = None
    version: Optional[str] = None
    case_sensitive: Optional[bool] = Field(None, alias="caseSensitive")
    concept: Optional[List[Dict[str, Any]]] = None


class ValueSet(TypedResource):
    code_system: Optional[ValueSetCodeSystem] = Field(None, alias="codeSystem")
    compose: Optional[Dict[str, Any]] = None
    expansion: Optional[Dict[str, Any]] = None


class SearchParameter(TypedResource):
    code: Optional[str] = None
    base: Optional[str] = None
    target: Optional[List[str]] = None
    type: Optional[str] = None
    xpath: Optional[str] = None
    xpath_usage: Optional[str] = Field(None, alias="xpathUsage")


class OperationDefinition(TypedResource):
    kind: Optional[str] = None
    code: Optional[str] = None
    base: Optional[Reference] = None
    type: Optional[List[str]] = None
    system: Optional[bool] = None
    instance: Optional[bool] = None
    parameter: Optional[List[Dict[str, Any]]] = None


class ConformanceRest(TypedElement):
    mode: Optional[str] = None
    resource: Optional[List[Dict[str, Any]]] = None


class Conformance(TypedResource):
    kind: Optional[str] = None
    fhir_version: Optional[str] = Field(None, alias="fhirVersion")
    format: Optional[List[str]] = None
    format_ext: Optional[List[Any]] = Field(None, alias="_format")
    rest: Optional[List[ConformanceRest]] = None


class ImplementationGuide(TypedResource):
    fhir_version: Optional[str] = Field(None, alias="fhirVersion")
    dependency: Optional[List[Dict[str, Any]]] = None


RESOURCE_MODELS = {
    "StructureDefinition": StructureDefinition,
    "ValueSet": ValueSet,
    "SearchParameter": SearchParameter,
    "OperationDefinition": OperationDefinition,
    "Conformance": Conformance,
    "ImplementationGuide": ImplementationGuide,
}


def parse_resource(data: Dict[str, Any]) -> TypedResource:
    return parse_typed(RESOURCE_MODELS, data)
