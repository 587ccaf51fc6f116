"""
Converter contract shared by every release.

A converter parses raw resource JSON into its release's representation
(a typed pydantic model, or a JsonTree for the generic converter),
dispatches on resourceType and registers the normalized records in a
PackageImportable sink. All releases share the processors; a release
contributes its ReleaseAdapter and its parse step.

Components:
- FhirConverter: try_parse_resource, process_resource, replace_value,
  process_metadata, has_issues, display_issues
- TypedConverter: converters backed by one fhir_normalizer.typed module
"""
import json
import logging
from abc import ABC, abstractmethod
from types import ModuleType
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from ..diagnostics import Diagnostics
from ..json_tree import JsonTree
from ..models import ArtifactClass, FhirCapabilityStatement
from ..releases import FhirSequence
from ..sink import PackageImportable
from ..typed import TypedResource
from .adapters import ReleaseAdapter
from .conformance import ConformanceProcessor
from .element_tree import StructureProcessor
from .terminology import TerminologyProcessor

logger = logging.getLogger(__name__)

ResourceObject = Union[TypedResource, JsonTree, Dict[str, Any]]
PathKey = Union[str, int]


class FhirConverter(ABC):
    """
    Normalizes the conformance resources of one FHIR release.

    One converter instance processes one package, in load order. Soft
    issues collect in `diagnostics`; hard failures raise ConversionError.

    Usage:
        converter = converter_for("4.0.1")
        resource, resource_type = converter.try_parse_resource(text)
        if resource is not None:
            url, artifact_class = converter.process_resource(resource, collection)
    """

    release: Optional[FhirSequence] = None
    adapter_class = ReleaseAdapter

    def __init__(self, diagnostics: Optional[Diagnostics] = None, adapter: Optional[ReleaseAdapter] = None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.adapter = adapter if adapter is not None else self.adapter_class()

        self.structures = StructureProcessor(self.adapter, self.diagnostics)
        self.terminology = TerminologyProcessor(self.adapter, self.diagnostics)
        self.conformance = ConformanceProcessor(self.adapter, self.diagnostics)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} adapter={self.adapter!r}>"

    @abstractmethod
    def parse_json(self, data: Dict[str, Any]) -> ResourceObject:
        """
        Turn a decoded JSON object into this converter's resource object.

        Raises:
            ValueError: If the object does not fit the release shape
        """
        pass

    @abstractmethod
    def get_resource_type(self, resource: ResourceObject) -> str:
        pass

    @property
    def capability_resource_types(self) -> Tuple[str, ...]:
        return (self.adapter.capability_resource_type,)

    # ========================================================================
    # Parsing
    # ========================================================================

    def try_parse_resource(self, json_text: str) -> Tuple[Optional[ResourceObject], str]:
        """
        Parse one resource.

        Returns:
            (resource, resourceType), or (None, "") after recording an error
            when the text is not a JSON object of this release's shape
        """
        try:
            data = json.loads(json_text)
            if not isinstance(data, dict):
                raise TypeError(f"expected a JSON object, got {type(data).__name__}")
            resource = self.parse_json(data)
        except (ValueError, TypeError) as exc:
            self.diagnostics.error(f"Failed to parse resource: {exc}")
            logger.warning("Failed to parse resource with %s: %s", type(self).__name__, exc)
            return None, ""

        return resource, self.get_resource_type(resource)

    @staticmethod
    def to_tree(resource: ResourceObject) -> JsonTree:
        """View any supported resource object as a JsonTree."""
        if isinstance(resource, JsonTree):
            return resource
        if isinstance(resource, TypedResource):
            return JsonTree(resource.to_json_dict())
        if isinstance(resource, dict):
            return JsonTree(resource)
        raise TypeError(f"Unsupported resource object: {type(resource).__name__}")

    # ========================================================================
    # Dispatch
    # ========================================================================

    def process_resource(self, resource: ResourceObject, sink: PackageImportable) -> Tuple[str, ArtifactClass]:
        """
        Normalize one resource into the sink.

        Returns:
            (canonical url, artifact class). Unknown resource types give
            ("", ArtifactClass.UNKNOWN) and are otherwise ignored.

        Raises:
            ConversionError: If a StructureDefinition cannot be rebuilt
        """
        tree = self.to_tree(resource)
        resource_type = tree.get_string("resourceType") or ""
        url = tree.get_string("url") or ""

        if resource_type == "StructureDefinition":
            artifact_class = self.adapter.classify_structure(tree)
            self.structures.process(tree, sink, artifact_class)
            return url, artifact_class

        if resource_type in self.capability_resource_types:
            self.conformance.process_metadata(tree, None, sink)
            return url, ArtifactClass.CAPABILITY_STATEMENT

        if resource_type == "CodeSystem":
            self.terminology.process_code_system(tree, sink)
            return url, ArtifactClass.CODE_SYSTEM

        if resource_type == "ValueSet":
            self.terminology.process_value_set(tree, sink)
            return url, ArtifactClass.VALUE_SET

        if resource_type == "SearchParameter":
            self.conformance.process_search_parameter(tree, sink)
            return url, ArtifactClass.SEARCH_PARAMETER

        if resource_type == "OperationDefinition":
            self.conformance.process_operation(tree, sink)
            return url, ArtifactClass.OPERATION

        if resource_type == "ImplementationGuide":
            self.conformance.process_implementation_guide(tree, sink)
            return url, ArtifactClass.IMPLEMENTATION_GUIDE

        if resource_type == "CompartmentDefinition":
            self.conformance.process_compartment(tree, sink)
            return url, ArtifactClass.COMPARTMENT

        logger.debug("Ignoring resource type %r", resource_type)
        return "", ArtifactClass.UNKNOWN

    def process_metadata(
        self,
        metadata: Optional[ResourceObject],
        server_url: Optional[str] = None,
        sink: Optional[PackageImportable] = None,
    ) -> Optional[FhirCapabilityStatement]:
        """Flatten a server's CapabilityStatement (Conformance in DSTU2)."""
        if metadata is None:
            return None
        return self.conformance.process_metadata(self.to_tree(metadata), server_url, sink)

    # ========================================================================
    # Pre-processing patches
    # ========================================================================

    def replace_value(self, resource: Optional[ResourceObject], path: Sequence[PathKey], value: Any) -> None:
        """
        Patch a parsed resource before it is processed.

        Walks path[:-1] without creating anything; a missing step makes the
        call a no-op. A None value removes the final key.
        """
        if resource is None or not path:
            return

        current: Any = resource
        for key in path[:-1]:
            current = _child(current, key)
            if current is None:
                logger.debug("replace_value: %r not found, nothing replaced", list(path))
                return

        _assign(current, path[-1], value)

    # ========================================================================
    # Issues
    # ========================================================================

    def has_issues(self) -> Tuple[bool, int, int]:
        """(any issues, error count, warning count)"""
        error_count = len(self.diagnostics.errors)
        warning_count = len(self.diagnostics.warnings)
        return (error_count > 0 or warning_count > 0), error_count, warning_count

    def display_issues(self) -> None:
        logger.warning("Errors (only able to pass with manual code changes)")
        for message in self.diagnostics.errors:
            logger.warning(" - %s", message)

        logger.info("Warnings (able to pass, but should be reviewed)")
        for message in self.diagnostics.warnings:
            logger.info(" - %s", message)


class TypedConverter(FhirConverter):
    """Converter whose resources are the pydantic models of one release module."""

    models: ModuleType = None

    def parse_json(self, data: Dict[str, Any]) -> TypedResource:
        return self.models.parse_resource(data)

    def get_resource_type(self, resource: ResourceObject) -> str:
        if isinstance(resource, TypedResource):
            return resource.resource_type
        return self.to_tree(resource).get_string("resourceType") or ""


# ============================================================================
# replace_value helpers
# ============================================================================

def _model_field_name(model: BaseModel, key: str) -> Optional[str]:
    for name, info in type(model).model_fields.items():
        if name == key or info.alias == key:
            return name
    return None


def _child(node: Any, key: PathKey) -> Any:
    if isinstance(node, JsonTree):
        node = node.data

    if isinstance(node, dict):
        return node.get(key)

    if isinstance(node, list):
        if isinstance(key, int) and -len(node) <= key < len(node):
            return node[key]
        return None

    if isinstance(node, BaseModel) and isinstance(key, str):
        field_name = _model_field_name(node, key)
        if field_name is not None:
            return getattr(node, field_name)
        return (node.model_extra or {}).get(key)

    return None


def _assign(node: Any, key: PathKey, value: Any) -> None:
    if isinstance(node, JsonTree):
        node = node.data

    if isinstance(node, dict):
        if value is None:
            node.pop(key, None)
        else:
            node[key] = value
        return

    if isinstance(node, list):
        if isinstance(key, int) and -len(node) <= key < len(node):
            node[key] = value
        return

    if isinstance(node, BaseModel) and isinstance(key, str):
        field_name = _model_field_name(node, key)
        if field_name is not None:
            # exclude_none drops a None field when the model is dumped
            setattr(node, field_name, value)
            return

        extras = node.model_extra
        if extras is None:
            logger.debug("replace_value: %s does not accept %r", type(node).__name__, key)
            return
        if value is None:
            extras.pop(key, None)
        else:
            extras[key] = value
