"""
Definition sink.

Converters register normalized artifacts through the PackageImportable
contract and query it for cross-references (known resource names,
already-loaded value sets). DefinitionCollection is the in-memory
implementation: one insertion-ordered dict per artifact bucket.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict

from .models import (
    ArtifactClass,
    FhirCapabilityStatement,
    FhirCodeSystem,
    FhirCompartment,
    FhirComplex,
    FhirImplementationGuide,
    FhirOperation,
    FhirPrimitive,
    FhirSearchParam,
    FhirValueSet,
)
from .releases import FhirSequence, sequence_for_version

logger = logging.getLogger(__name__)


class PackageImportable(ABC):
    """Registry populated by the converters while loading one package."""

    @property
    @abstractmethod
    def version_string(self) -> str:
        pass

    @property
    @abstractmethod
    def fhir_sequence(self) -> FhirSequence:
        pass

    @property
    @abstractmethod
    def resources(self) -> Dict[str, FhirComplex]:
        """Resources keyed by name."""
        pass

    @abstractmethod
    def has_value_set(self, url: str) -> bool:
        pass

    @abstractmethod
    def add_primitive(self, primitive: FhirPrimitive) -> None:
        pass

    @abstractmethod
    def add_complex_type(self, complex_type: FhirComplex) -> None:
        pass

    @abstractmethod
    def add_resource(self, resource: FhirComplex) -> None:
        pass

    @abstractmethod
    def add_extension(self, extension: FhirComplex) -> None:
        pass

    @abstractmethod
    def add_profile(self, profile: FhirComplex) -> None:
        pass

    @abstractmethod
    def add_logical_model(self, logical_model: FhirComplex) -> None:
        pass

    @abstractmethod
    def add_code_system(self, code_system: FhirCodeSystem) -> None:
        pass

    @abstractmethod
    def add_value_set(self, value_set: FhirValueSet) -> None:
        pass

    @abstractmethod
    def add_search_parameter(self, search_param: FhirSearchParam) -> None:
        pass

    @abstractmethod
    def add_operation(self, operation: FhirOperation) -> None:
        pass

    @abstractmethod
    def add_capability_statement(self, capability_statement: FhirCapabilityStatement) -> None:
        pass

    @abstractmethod
    def add_compartment(self, compartment: FhirCompartment) -> None:
        pass

    @abstractmethod
    def add_implementation_guide(self, implementation_guide: FhirImplementationGuide) -> None:
        pass


class DefinitionCollection(PackageImportable):
    """
    In-memory definitions for one FHIR package.

    Usage:
        collection = DefinitionCollection("4.0.1")
        converter = converter_for(collection.version_string)
        resource, _ = converter.try_parse_resource(text)
        converter.process_resource(resource, collection)
    """

    def __init__(self, version_string: str, fhir_sequence: FhirSequence = None):
        self._version_string = version_string
        self._fhir_sequence = fhir_sequence or sequence_for_version(version_string)

        self.primitive_types: Dict[str, FhirPrimitive] = {}
        self.complex_types: Dict[str, FhirComplex] = {}
        self._resources: Dict[str, FhirComplex] = {}
        self.extensions_by_url: Dict[str, FhirComplex] = {}
        self.profiles_by_url: Dict[str, FhirComplex] = {}
        self.logical_models: Dict[str, FhirComplex] = {}
        self.code_systems: Dict[str, FhirCodeSystem] = {}
        self.value_sets_by_url: Dict[str, FhirValueSet] = {}
        self.search_params_by_url: Dict[str, FhirSearchParam] = {}
        self.operations_by_url: Dict[str, FhirOperation] = {}
        self.capability_statements: Dict[str, FhirCapabilityStatement] = {}
        self.compartments: Dict[str, FhirCompartment] = {}
        self.implementation_guides: Dict[str, FhirImplementationGuide] = {}

    @property
    def version_string(self) -> str:
        return self._version_string

    @property
    def fhir_sequence(self) -> FhirSequence:
        return self._fhir_sequence

    @property
    def resources(self) -> Dict[str, FhirComplex]:
        return self._resources

    def has_value_set(self, url: str) -> bool:
        return url in self.value_sets_by_url

    def add_primitive(self, primitive: FhirPrimitive) -> None:
        self.primitive_types[primitive.name] = primitive

    def add_complex_type(self, complex_type: FhirComplex) -> None:
        self.complex_types[complex_type.name] = complex_type

    def add_resource(self, resource: FhirComplex) -> None:
        self._resources[resource.name] = resource

    def add_extension(self, extension: FhirComplex) -> None:
        self.extensions_by_url[extension.url] = extension

    def add_profile(self, profile: FhirComplex) -> None:
        self.profiles_by_url[profile.url] = profile

    def add_logical_model(self, logical_model: FhirComplex) -> None:
        self.logical_models[logical_model.url or logical_model.name] = logical_model

    def add_code_system(self, code_system: FhirCodeSystem) -> None:
        self.code_systems[code_system.url] = code_system

    def add_value_set(self, value_set: FhirValueSet) -> None:
        if value_set.url in self.value_sets_by_url:
            logger.debug("Value set already registered: %s", value_set.url)
            return
        self.value_sets_by_url[value_set.url] = value_set

    def add_search_parameter(self, search_param: FhirSearchParam) -> None:
        self.search_params_by_url[search_param.url] = search_param

    def add_operation(self, operation: FhirOperation) -> None:
        self.operations_by_url[operation.url] = operation

    def add_capability_statement(self, capability_statement: FhirCapabilityStatement) -> None:
        self.capability_statements[capability_statement.url] = capability_statement

    def add_compartment(self, compartment: FhirCompartment) -> None:
        self.compartments[compartment.url] = compartment

    def add_implementation_guide(self, implementation_guide: FhirImplementationGuide) -> None:
        self.implementation_guides[implementation_guide.url] = implementation_guide

    def artifact_counts(self) -> Dict[ArtifactClass, int]:
        """Number of registered artifacts per bucket."""
        return {
            ArtifactClass.PRIMITIVE_TYPE: len(self.primitive_types),
            ArtifactClass.COMPLEX_TYPE: len(self.complex_types),
            ArtifactClass.RESOURCE: len(self._resources),
            ArtifactClass.EXTENSION: len(self.extensions_by_url),
            ArtifactClass.PROFILE: len(self.profiles_by_url),
            ArtifactClass.LOGICAL_MODEL: len(self.logical_models),
            ArtifactClass.CODE_SYSTEM: len(self.code_systems),
            ArtifactClass.VALUE_SET: len(self.value_sets_by_url),
            ArtifactClass.SEARCH_PARAMETER: len(self.search_params_by_url),
            ArtifactClass.OPERATION: len(self.operations_by_url),
            ArtifactClass.CAPABILITY_STATEMENT: len(self.capability_statements),
            ArtifactClass.COMPARTMENT: len(self.compartments),
            ArtifactClass.IMPLEMENTATION_GUIDE: len(self.implementation_guides),
        }
