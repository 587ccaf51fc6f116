"""
Release field adapters.

The processors in this package run one algorithm for every FHIR release.
Wherever a release stores a value under a different field name or shape,
the processors ask the adapter instead of reading the field directly.

Components:
- ReleaseAdapter: probes every known shape in priority order (used as-is
  by the Normative converter)
- R2Adapter, R3Adapter, R4Adapter, R4BAdapter, R5Adapter: one per release
- NAME_REFERENCE_ALIASES: DSTU2 nameReference targets that moved or were
  renamed in the snapshots
"""
from typing import Dict, List, Optional, Tuple

from ..constants import FHIR_SD_PREFIX
from ..errors import ConversionError
from ..json_tree import JsonTree
from ..models import ArtifactClass
from ..releases import FhirSequence

# DSTU2 nameReference value -> snapshot path of the referenced element
NAME_REFERENCE_ALIASES: Dict[str, str] = {
    "Extension.extension": "Extension.extension",
    "Bundle.link": "Bundle.link",
    "Composition.section": "Composition.section",
    "ConceptMap.dependsOn": "ConceptMap.element.target.dependsOn",
    "Conformance.searchParam": "Conformance.rest.resource.searchParam",
    "ConsentDirective.identifier": "Contract.identifier",
    "ConsentDirective.issued": "Contract.issued",
    "ConsentDirective.applies": "Contract.applies",
    "ConsentDirective.subject": "Contract.subject",
    "ConsentDirective.authority": "Contract.authority",
    "ConsentDirective.domain": "Contract.domain",
    "ConsentDirective.type": "Contract.type",
    "ConsentDirective.subType": "Contract.subType",
    "ConsentDirective.action": "Contract.action",
    "ConsentDirective.actionReason": "Contract.actionReason",
    "ConsentDirective.actor": "Contract.actor",
    "ConsentDirective.actor.entity": "Contract.actor.entity",
    "ConsentDirective.actor.role": "Contract.actor.role",
    "ConsentDirective.valuedItem": "Contract.valuedItem",
    "ConsentDirective.valuedItem.entity[x]": "Contract.valuedItem.entity[x]",
    "ConsentDirective.valuedItem.identifier": "Contract.valuedItem.identifier",
    "ConsentDirective.valuedItem.effectiveTime": "Contract.valuedItem.effectiveTime",
    "ConsentDirective.valuedItem.quantity": "Contract.valuedItem.quantity",
    "ConsentDirective.valuedItem.unitprice": "Contract.valuedItem.unitPrice",
    "ConsentDirective.valuedItem.factor": "Contract.valuedItem.factor",
    "ConsentDirective.valuedItem.points": "Contract.valuedItem.points",
    "ConsentDirective.valuedItem.net": "Contract.valuedItem.net",
    "ConsentDirective.signer": "Contract.signer",
    "ConsentDirective.signer.type": "Contract.signer.type",
    "ConsentDirective.signer.party": "Contract.signer.party",
    "ConsentDirective.signer.signature": "Contract.signer.signature",
    "ConsentDirective.term": "Contract.term",
    "ConsentDirective.term.identifier": "Contract.term.identifier",
    "ConsentDirective.term.issued": "Contract.term.issued",
    "ConsentDirective.term.applies": "Contract.term.applies",
    "ConsentDirective.term.type": "Contract.term.type",
    "ConsentDirective.term.subType": "Contract.term.subType",
    "ConsentDirective.term.subject": "Contract.term.subject",
    "ConsentDirective.term.action": "Contract.term.action",
    "ConsentDirective.term.actionReason": "Contract.term.actionReason",
    "ConsentDirective.term.actor": "Contract.term.actor",
    "ConsentDirective.term.actor.entity": "Contract.term.actor.entity",
    "ConsentDirective.term.actor.role": "Contract.term.actor.role",
    "ConsentDirective.term.text": "Contract.term.text",
    "ConsentDirective.term.valuedItem": "Contract.term.valuedItem",
    "ConsentDirective.term.valuedItem.entity[x]": "Contract.term.valuedItem.entity[x]",
    "ConsentDirective.term.valuedItem.identifier": "Contract.term.valuedItem.identifier",
    "ConsentDirective.term.valuedItem.effectiveTime": "Contract.term.valuedItem.effectiveTime",
    "ConsentDirective.term.valuedItem.quantity": "Contract.term.valuedItem.quantity",
    "ConsentDirective.term.valuedItem.unitPrice": "Contract.term.valuedItem.unitPrice",
    "ConsentDirective.term.valuedItem.factor": "Contract.term.valuedItem.factor",
    "ConsentDirective.term.valuedItem.points": "Contract.term.valuedItem.points",
    "ConsentDirective.term.valuedItem.net": "Contract.term.valuedItem.net",
    "Contract.term": "Contract.term",
    "Condition.onsetquantity": "Condition.onsetQuantity",
    "Condition.onsetdatetime": "Condition.onsetDateTime",
    "DiagnosticReport.USLabLOINCCoding": "DiagnosticReport.code.coding",
    "DiagnosticReport.locationPerformed.valueReference": "DiagnosticReport.extension.valueReference",
    "MedicationAdministration.medicationcodeableconcept": "MedicationAdministration.medicationCodeableConcept",
    "MedicationAdministration.medicationreference": "MedicationAdministration.medicationReference",
    "Observation.referenceRange": "Observation.referenceRange",
    "Specimen.USLabPlacerSID": "Specimen.identifier",
    "DiagnosticOrder.event": "DiagnosticOrder.event",
    "DiagnosticOrder.USLabDOPlacerID": "DiagnosticOrder.identifier",
    "ImplementationGuide.page": "ImplementationGuide.page",
    "OperationDefinition.parameter": "OperationDefinition.parameter",
    "Parameters.parameter": "Parameters.parameter",
    "Provenance.agent": "Provenance.agent",
    "Questionnaire.group": "Questionnaire.group",
    "QuestionnaireResponse.group": "Questionnaire.group",
    "ValueSet.designation": "ValueSet.codeSystem.concept.designation",
    "ValueSet.concept": "ValueSet.codeSystem.concept",
    "ValueSet.include": "ValueSet.compose.include",
    "ValueSet.contains": "ValueSet.expansion.contains",
    "DataElement.l": "DataElement.element.maxValue[x]",
    "DataElement.MappingEquivalence": "DataElement.element.mapping.extension",
    "TestScript.metadata": "TestScript.metadata",
    "TestScript.operation": "TestScript.setup.action.operation",
    "TestScript.assert": "TestScript.setup.action.assert",
}


def _canonical(value) -> str:
    """A canonical stored either as a string or as a {reference} object."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        reference = value.get("reference")
        if isinstance(reference, str):
            return reference
    return ""


def _canonical_list(value) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    return [c for c in (_canonical(v) for v in value) if c]


class ReleaseAdapter:
    """
    Field access that differs between releases.

    The base class accepts every shape it knows about (first match wins),
    so it reads DSTU2 through R5 content. Release subclasses narrow the
    probing to what their release actually publishes.
    """

    sequence: Optional[FhirSequence] = None
    capability_resource_type = "CapabilityStatement"

    # DSTU2 snapshot quirks
    rebuilds_slice_ids = False
    inherits_outside_differential = False
    skips_repeated_paths = False
    primitive_from_snapshot = False

    # capability statement search-parameter-combination extension (R5)
    reads_search_param_combinations = True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.sequence.value if self.sequence else 'any'}>"

    # ========================================================================
    # Canonical resources
    # ========================================================================

    def get_status(self, resource: JsonTree) -> Optional[str]:
        return resource.get_string("status")

    def is_retired(self, resource: JsonTree) -> bool:
        return self.get_status(resource) == "retired"

    # ========================================================================
    # StructureDefinition
    # ========================================================================

    def classify_structure(self, sd: JsonTree) -> ArtifactClass:
        """Artifact bucket for a StructureDefinition (Unknown when skipped)."""
        if self.is_retired(sd):
            return ArtifactClass.UNKNOWN

        kind = sd.get_string("kind")
        if kind == "datatype" or (kind == "resource" and "constrainedType" in sd):
            return self._classify_dstu2(sd)

        if kind == "primitive-type":
            return ArtifactClass.PRIMITIVE_TYPE
        if kind == "logical":
            return ArtifactClass.LOGICAL_MODEL
        if kind in ("resource", "complex-type"):
            if sd.get_string("derivation") == "constraint":
                if sd.get_string("type") == "Extension":
                    return ArtifactClass.EXTENSION
                return ArtifactClass.PROFILE
            if kind == "complex-type":
                return ArtifactClass.COMPLEX_TYPE
            return ArtifactClass.RESOURCE
        return ArtifactClass.UNKNOWN

    @staticmethod
    def _classify_dstu2(sd: JsonTree) -> ArtifactClass:
        kind = sd.get_string("kind")
        constrained_type = sd.get_string("constrainedType") or ""

        if kind == "datatype":
            if constrained_type == "Extension":
                return ArtifactClass.EXTENSION
            name = sd.get_string("name") or ""
            if name[:1].islower():
                return ArtifactClass.PRIMITIVE_TYPE
            return ArtifactClass.COMPLEX_TYPE

        if kind == "resource":
            if not constrained_type or constrained_type == "Quantity":
                return ArtifactClass.RESOURCE
            return ArtifactClass.EXTENSION

        if kind == "logical":
            return ArtifactClass.LOGICAL_MODEL
        return ArtifactClass.UNKNOWN

    def get_base_definition(self, sd: JsonTree) -> str:
        return sd.get_string("baseDefinition") or sd.get_string("base") or ""

    def get_contexts(self, sd: JsonTree) -> List[Tuple[str, str]]:
        """Extension contexts as (type, expression); bare strings are element contexts."""
        contexts = []
        value = sd.get("context")
        if value is None:
            return contexts
        if not isinstance(value, list):
            value = [value]
        for entry in value:
            if isinstance(entry, str):
                contexts.append(("element", entry))
            elif isinstance(entry, dict):
                contexts.append((entry.get("type") or "", entry.get("expression") or ""))
        return contexts

    def get_primitive_elements(self, sd: JsonTree) -> List[JsonTree]:
        if self.primitive_from_snapshot:
            return sd.get_expando_list("snapshot", "element")
        return sd.get_expando_list("differential", "element")

    def get_primitive_comment(self, element: JsonTree) -> str:
        return element.get_string("comment") or element.get_string("comments") or ""

    # ========================================================================
    # ElementDefinition
    # ========================================================================

    def get_slice_name(self, element: JsonTree) -> str:
        return element.get_string("sliceName") or ""

    def get_type_check_name(self, element: JsonTree) -> str:
        """Value compared to the structure name to detect the root element."""
        return element.get_string("id") or ""

    def get_comment(self, element: JsonTree) -> str:
        return element.get_string("comment") or element.get_string("comments") or ""

    def get_type_targets(self, element_type: JsonTree) -> List[str]:
        return _canonical_list(element_type.get("targetProfile"))

    def get_type_profiles(self, element_type: JsonTree) -> List[str]:
        return _canonical_list(element_type.get("profile"))

    def get_binding_value_set(self, binding: JsonTree) -> str:
        return (
            _canonical(binding.get("valueSet"))
            or binding.get_string("valueSetUri")
            or binding.get_string("valueSetReference", "reference")
            or ""
        )

    def get_discriminators(self, slicing: JsonTree) -> List[Tuple[str, str]]:
        """Discriminators as (type, path); DSTU2 plain paths are value discriminators."""
        rules = []
        value = slicing.get("discriminator")
        if value is None:
            return rules
        if not isinstance(value, list):
            value = [value]
        for entry in value:
            if isinstance(entry, str):
                rules.append(("value", entry))
            elif isinstance(entry, dict):
                rules.append((entry.get("type") or "", entry.get("path") or ""))
        return rules

    def resolve_content_reference(self, sd_name: str, element: JsonTree, path: str) -> Optional[str]:
        """
        Type name of the element a content reference points at, or None when
        the element has no content reference.

        Raises:
            ConversionError: If the reference cannot be resolved
        """
        content_reference = element.get_string("contentReference")
        if content_reference:
            if content_reference.startswith(FHIR_SD_PREFIX) and "#" in content_reference:
                return content_reference[content_reference.index("#") + 1:]
            if content_reference.startswith("#"):
                return content_reference[1:]
            raise ConversionError(
                f"Could not resolve ContentReference {content_reference} in {sd_name} field {path}",
                structure=sd_name,
                element_path=path,
            )

        name_reference = element.get_string("nameReference")
        if name_reference:
            return self._resolve_name_reference(sd_name, name_reference, path)
        return None

    @staticmethod
    def _resolve_name_reference(sd_name: str, name_reference: str, path: str) -> str:
        if "." in name_reference:
            key = name_reference
        else:
            key = f"{path.split('.')[0]}.{name_reference}"

        if key not in NAME_REFERENCE_ALIASES:
            raise ConversionError(
                f"Could not resolve NameReference {name_reference} in {sd_name} field {path}",
                structure=sd_name,
                element_path=path,
            )
        return NAME_REFERENCE_ALIASES[key]

    # ========================================================================
    # SearchParameter / OperationDefinition
    # ========================================================================

    def get_search_param_bases(self, search_param: JsonTree) -> List[str]:
        return search_param.get_string_array("base") or []

    def get_component_definition(self, component: JsonTree) -> str:
        return _canonical(component.get("definition"))

    def get_processing_mode(self, search_param: JsonTree) -> str:
        return search_param.get_string("processingMode") or search_param.get_string("xpathUsage") or ""

    def get_operation_base(self, operation: JsonTree) -> Optional[str]:
        return _canonical(operation.get("base")) or None

    def get_operation_on_type(self, operation: JsonTree) -> bool:
        """DSTU2 lists resource types in `type`; later releases use a boolean."""
        value = operation.get("type")
        if isinstance(value, bool):
            return value
        return False

    def get_operation_resources(self, operation: JsonTree) -> List[str]:
        resources = operation.get_string_array("resource")
        if resources:
            return resources
        value = operation.get("type")
        if isinstance(value, list):
            return [v for v in value if isinstance(v, str)]
        return []

    def get_fhir_versions(self, resource: JsonTree) -> List[str]:
        return resource.get_string_array("fhirVersion") or []


class R2Adapter(ReleaseAdapter):
    """DSTU2: constrainedType, `base`, slice names in `name`, nameReference."""

    sequence = FhirSequence.DSTU2
    capability_resource_type = "Conformance"

    rebuilds_slice_ids = True
    inherits_outside_differential = True
    skips_repeated_paths = True
    primitive_from_snapshot = True
    reads_search_param_combinations = False

    def classify_structure(self, sd: JsonTree) -> ArtifactClass:
        if self.is_retired(sd):
            return ArtifactClass.UNKNOWN
        return self._classify_dstu2(sd)

    def get_base_definition(self, sd: JsonTree) -> str:
        return sd.get_string("base") or ""

    def get_primitive_comment(self, element: JsonTree) -> str:
        return element.get_string("requirements") or ""

    def get_slice_name(self, element: JsonTree) -> str:
        return element.get_string("name") or ""

    def get_type_check_name(self, element: JsonTree) -> str:
        return element.get_string("name") or ""

    def get_comment(self, element: JsonTree) -> str:
        return element.get_string("comments") or ""

    def get_type_targets(self, element_type: JsonTree) -> List[str]:
        if element_type.get_string("code") != "Reference":
            return []
        return _canonical_list(element_type.get("profile"))

    def get_type_profiles(self, element_type: JsonTree) -> List[str]:
        if element_type.get_string("code") == "Reference":
            return []
        return _canonical_list(element_type.get("profile"))

    def get_binding_value_set(self, binding: JsonTree) -> str:
        return binding.get_string("valueSetUri") or binding.get_string("valueSetReference", "reference") or ""

    def resolve_content_reference(self, sd_name: str, element: JsonTree, path: str) -> Optional[str]:
        name_reference = element.get_string("nameReference")
        if not name_reference:
            return None
        return self._resolve_name_reference(sd_name, name_reference, path)


class R3Adapter(ReleaseAdapter):
    """STU3: string contexts, single canonical targetProfile, reference-typed canonicals."""

    sequence = FhirSequence.STU3
    reads_search_param_combinations = False

    def get_base_definition(self, sd: JsonTree) -> str:
        return sd.get_string("baseDefinition") or ""

    def get_binding_value_set(self, binding: JsonTree) -> str:
        return binding.get_string("valueSetUri") or binding.get_string("valueSetReference", "reference") or ""

    def get_component_definition(self, component: JsonTree) -> str:
        return component.get_string("definition", "reference") or ""

    def get_operation_base(self, operation: JsonTree) -> Optional[str]:
        return operation.get_string("base", "reference")


class R4Adapter(ReleaseAdapter):
    """R4: canonicals are plain strings and contexts are {type, expression}."""

    sequence = FhirSequence.R4
    reads_search_param_combinations = False

    def get_base_definition(self, sd: JsonTree) -> str:
        return sd.get_string("baseDefinition") or ""

    def get_binding_value_set(self, binding: JsonTree) -> str:
        return binding.get_string("valueSet") or ""

    def get_component_definition(self, component: JsonTree) -> str:
        return component.get_string("definition") or ""

    def get_operation_base(self, operation: JsonTree) -> Optional[str]:
        return operation.get_string("base")

    def get_processing_mode(self, search_param: JsonTree) -> str:
        return search_param.get_string("xpathUsage") or ""


class R4BAdapter(R4Adapter):
    sequence = FhirSequence.R4B


class R5Adapter(R4Adapter):
    """R5: processingMode replaces xpathUsage."""

    sequence = FhirSequence.R5
    reads_search_param_combinations = True

    def get_processing_mode(self, search_param: JsonTree) -> str:
        return search_param.get_string("processingMode") or search_param.get_string("xpathUsage") or ""


ADAPTERS: Dict[FhirSequence, type] = {
    FhirSequence.DSTU2: R2Adapter,
    FhirSequence.STU3: R3Adapter,
    FhirSequence.R4: R4Adapter,
    FhirSequence.R4B: R4BAdapter,
    FhirSequence.R5: R5Adapter,
}
