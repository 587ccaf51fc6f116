"""
Version-Independent FHIR Definition Model

The normalized objects every release converter produces.

Components:
- enums: ArtifactClass, SlicingRule
- structure: primitives, complex types and their element trees
- terminology: code systems, concept trees and value sets
- conformance: search parameters, operations, capability statements,
  compartments and implementation guides
"""
from .enums import ArtifactClass, SlicingRule
from .structure import (
    FhirComplex,
    FhirConstraint,
    FhirElement,
    FhirElementDefMapping,
    FhirElementType,
    FhirPrimitive,
    FhirSliceDiscriminatorRule,
    FhirSlicing,
    FhirStructureDefMapping,
)
from .terminology import (
    FhirCodeSystem,
    FhirCodeSystemFilter,
    FhirCodeSystemProperty,
    FhirConcept,
    FhirConceptProperty,
    FhirConceptTreeNode,
    FhirValueSet,
    FhirValueSetComposition,
    FhirValueSetExpansion,
    FhirValueSetFilter,
    PropertyType,
)
from .conformance import (
    FhirCapabilityStatement,
    FhirCapOperation,
    FhirCapResource,
    FhirCapSearchParam,
    FhirCapSearchParamCombination,
    FhirCompartment,
    FhirCompartmentResource,
    FhirIgDependsOn,
    FhirImplementationGuide,
    FhirOperation,
    FhirParameter,
    FhirSearchParam,
    FhirSearchParamComponent,
)

__all__ = [
    "ArtifactClass",
    "SlicingRule",
    "FhirComplex",
    "FhirConstraint",
    "FhirElement",
    "FhirElementDefMapping",
    "FhirElementType",
    "FhirPrimitive",
    "FhirSliceDiscriminatorRule",
    "FhirSlicing",
    "FhirStructureDefMapping",
    "FhirCodeSystem",
    "FhirCodeSystemFilter",
    "FhirCodeSystemProperty",
    "FhirConcept",
    "FhirConceptProperty",
    "FhirConceptTreeNode",
    "FhirValueSet",
    "FhirValueSetComposition",
    "FhirValueSetExpansion",
    "FhirValueSetFilter",
    "PropertyType",
    "FhirCapabilityStatement",
    "FhirCapOperation",
    "FhirCapResource",
    "FhirCapSearchParam",
    "FhirCapSearchParamCombination",
    "FhirCompartment",
    "FhirCompartmentResource",
    "FhirIgDependsOn",
    "FhirImplementationGuide",
    "FhirOperation",
    "FhirParameter",
    "FhirSearchParam",
    "FhirSearchParamComponent",
]
