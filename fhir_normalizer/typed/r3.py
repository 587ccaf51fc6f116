"""
FHIR STU3 (3.0.x) conformance resource shapes.

STU3 differences from R4: extension contexts are plain strings, search
parameter component definitions and operation bases are References,
and type.targetProfile / type.profile are single canonicals.
"""
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import ElementList, Reference, TypedElement, TypedResource, parse_typed


class StructureDefinition(TypedResource):
    kind: Optional[str] = None
    derivation: Optional[str] = None
    type: Optional[str] = None
    abstract: Optional[bool] = None
    base_definition: Optional[str] = Field(None, alias="baseDefinition")
    context_type: Optional[str] = Field(None, alias="contextType")
    context: Optional[List[str]] = None
    snapshot: Optional[ElementList] = None
    differential: Optional[ElementList] = None


class CodeSystem(TypedResource):
    content: Optional[str] = None
    concept: Optional[List[Dict[str, Any]]] = None
    filter: Optional[List[Dict[str, Any]]] = None
    property: Optional[List[Dict[str, Any]]] = None


class ValueSet(TypedResource):
    compose: Optional[Dict[str, Any]] = None
    expansion: Optional[Dict[str, Any]] = None


class SearchParameterComponent(TypedElement):
    definition: Optional[Reference] = None
    expression: Optional[str] = None


class SearchParameter(TypedResource):
    code: Optional[str] = None
    base: Optional[List[str]] = None
    target: Optional[List[str]] = None
    type: Optional[str] = None
    expression: Optional[str] = None
    xpath: Optional[str] = None
    xpath_usage: Optional[str] = Field(None, alias="xpathUsage")
    component: Optional[List[SearchParameterComponent]] = None


class OperationDefinition(TypedResource):
    kind: Optional[str] = None
    code: Optional[str] = None
    base: Optional[Reference] = None
    resource: Optional[List[str]] = None
    system: Optional[bool] = None
    type: Optional[bool] = None
    instance: Optional[bool] = None
    parameter: Optional[List[Dict[str, Any]]] = None


class CapabilityStatementRest(TypedElement):
    mode: Optional[str] = None
    resource: Optional[List[Dict[str, Any]]] = None


class CapabilityStatement(TypedResource):
    kind: Optional[str] = None
    fhir_version: Optional[str] = Field(None, alias="fhirVersion")
    format: Optional[List[str]] = None
    format_ext: Optional[List[Any]] = Field(None, alias="_format")
    patch_format: Optional[List[str]] = Field(None, alias="patchFormat")
    patch_format_ext: Optional[List[Any]] = Field(None, alias="_patchFormat")
    instantiates: Optional[List[str]] = None
    instantiates_ext: Optional[List[Any]] = Field(None, alias="_instantiates")
    implementation_guide: Optional[List[str]] = Field(None, alias="implementationGuide")
    implementation_guide_ext: Optional[List[Any]] = Field(None, alias="_implementationGuide")
    rest: Optional[List[CapabilityStatementRest]] = None


class ImplementationGuide(TypedResource):
    fhir_version: Optional[str] = Field(None, alias="fhirVersion")
    dependency: Optional[List[Dict[str, Any]]] = None


class CompartmentDefinition(TypedResource):
    code: Optional[str] = None
    search: Optional[bool] = None
    resource: Optional[List[Dict[str, Any]]] = None


RESOURCE_MODELS = {
    "StructureDefinition": StructureDefinition,
    "CodeSystem": CodeSystem,
    "ValueSet": ValueSet,
    "SearchParameter": SearchParameter,
    "OperationDefinition": OperationDefinition,
    "CapabilityStatement": CapabilityStatement,
    "ImplementationGuide": ImplementationGuide,
    "CompartmentDefinition": CompartmentDefinition,
}


def parse_resource(data: Dict[str, Any]) -> TypedResource:
    return parse_typed(RESOURCE_MODELS, data)
