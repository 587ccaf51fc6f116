"""
StructureDefinition Tests

Tests for:
1. Primitive type processing
2. Element tree reconstruction (choice types, backbones, slicing, differential)
3. Hard failures (base type, content references, discriminators)
4. DSTU2 snapshots (classification, slice ids, name references)
"""
import copy

import pytest

from fhir_normalizer.constants import (
    DEFAULT_EXTENSION_SLICING_DESCRIPTION,
    EXT_BEST_PRACTICE,
    EXT_FHIR_TYPE,
    EXT_REGEX,
    EXT_XML_TYPE,
    EXTENSION_SHORT,
)
from fhir_normalizer.converters import R2Converter, R4Converter, R5Converter
from fhir_normalizer.converters.adapters import R2Adapter, R4Adapter
from fhir_normalizer.errors import ConversionError
from fhir_normalizer.fhir_types import xml_base_type
from fhir_normalizer.json_tree import JsonTree
from fhir_normalizer.models import ArtifactClass, SlicingRule
from fhir_normalizer.sink import DefinitionCollection


# ============================================================================
# Sample Data for Testing
# ============================================================================

SAMPLE_STRING_PRIMITIVE = {
    "resourceType": "StructureDefinition",
    "id": "string",
    "url": "http://hl7.org/fhir/StructureDefinition/string",
    "name": "string",
    "status": "active",
    "kind": "primitive-type",
    "type": "string",
    "baseDefinition": "http://hl7.org/fhir/StructureDefinition/Element",
    "derivation": "specialization",
    "differential": {
        "element": [
            {
                "id": "string",
                "path": "string",
                "short": "Primitive Type string",
                "definition": "A sequence of Unicode characters",
                "comment": "Note that FHIR strings SHALL NOT exceed 1MB in size",
            },
            {
                "id": "string.value",
                "path": "string.value",
                "type": [
                    {
                        "code": "",
                        "extension": [{"url": EXT_XML_TYPE, "valueString": "string"}],
                    }
                ],
            },
        ]
    },
}

SAMPLE_INTEGER_PRIMITIVE = {
    "resourceType": "StructureDefinition",
    "id": "integer",
    "url": "http://hl7.org/fhir/StructureDefinition/integer",
    "name": "integer",
    "status": "active",
    "kind": "primitive-type",
    "type": "integer",
    "baseDefinition": "http://hl7.org/fhir/StructureDefinition/Element",
    "derivation": "specialization",
    "differential": {
        "element": [
            {"id": "integer", "path": "integer", "short": "Primitive Type integer"},
            {
                "id": "integer.value",
                "path": "integer.value",
                "type": [
                    {
                        "_code": {"extension": [{"url": EXT_XML_TYPE, "valueString": "xsd:int"}]},
                        "extension": [{"url": EXT_REGEX, "valueString": "-?([0]|([1-9][0-9]*))"}],
                    }
                ],
            },
        ]
    },
}

PATIENT_URL = "http://hl7.org/fhir/StructureDefinition/Patient"

SAMPLE_PATIENT = {
    "resourceType": "StructureDefinition",
    "id": "Patient",
    "url": PATIENT_URL,
    "name": "Patient",
    "status": "active",
    "kind": "resource",
    "abstract": False,
    "type": "Patient",
    "baseDefinition": "http://hl7.org/fhir/StructureDefinition/DomainResource",
    "derivation": "specialization",
    "mapping": [{"identity": "w5", "uri": "http://hl7.org/fhir/fivews", "name": "FiveWs Pattern Mapping"}],
    "snapshot": {
        "element": [
            {
                "id": "Patient",
                "path": "Patient",
                "short": "Information about an individual or animal receiving health care services",
                "definition": "Demographics and other administrative information about an individual.",
                "min": 0,
                "max": "*",
                "base": {"path": "Patient", "min": 0, "max": "*"},
            },
            {
                "id": "Patient.id",
                "path": "Patient.id",
                "min": 0,
                "max": "1",
                "base": {"path": "Resource.id", "min": 0, "max": "1"},
                "type": [
                    {
                        "code": "http://hl7.org/fhirpath/System.String",
                        "extension": [{"url": EXT_FHIR_TYPE, "valueUrl": "string"}],
                    }
                ],
            },
            {
                "id": "Patient.gender",
                "path": "Patient.gender",
                "short": "male | female | other | unknown",
                "min": 0,
                "max": "1",
                "base": {"path": "Patient.gender", "min": 0, "max": "1"},
                "type": [{"code": "code"}],
                "isSummary": True,
                "binding": {
                    "strength": "required",
                    "valueSet": "http://hl7.org/fhir/ValueSet/administrative-gender|4.0.1",
                },
                "mapping": [{"identity": "w5", "map": "FiveWs.subject[x]"}],
            },
            {
                "id": "Patient.deceased[x]",
                "path": "Patient.deceased[x]",
                "min": 0,
                "max": "1",
                "base": {"path": "Patient.deceased[x]", "min": 0, "max": "1"},
                "type": [{"code": "boolean"}, {"code": "dateTime"}],
                "isModifier": True,
                "isModifierReason": "This element is labeled as a modifier because once a patient is "
                                    "marked as deceased, the actions that are appropriate to perform "
                                    "on the patient may be significantly different.",
            },
            {
                "id": "Patient.active",
                "path": "Patient.active",
                "min": 1,
                "max": "1",
                "base": {"path": "Patient.active", "min": 0, "max": "1"},
                "type": [{"code": "boolean"}],
                "defaultValueBoolean": True,
                "mapping": [{"identity": "w5", "map": "FiveWs.status"}],
                "constraint": [
                    {
                        "key": "pat-1",
                        "severity": "warning",
                        "human": "Should be active",
                        "expression": "active.exists()",
                        "extension": [{"url": EXT_BEST_PRACTICE, "valueBoolean": True}],
                    }
                ],
            },
            {
                "id": "Patient.contact",
                "path": "Patient.contact",
                "min": 0,
                "max": "*",
                "base": {"path": "Patient.contact", "min": 0, "max": "*"},
                "type": [{"code": "BackboneElement"}],
                "condition": ["pat-1"],
            },
            {
                "id": "Patient.contact.name",
                "path": "Patient.contact.name",
                "min": 0,
                "max": "1",
                "base": {"path": "Patient.contact.name", "min": 0, "max": "1"},
                "type": [{"code": "HumanName"}],
            },
            {
                "id": "Patient.generalPractitioner",
                "path": "Patient.generalPractitioner",
                "min": 0,
                "max": "*",
                "base": {"path": "Patient.generalPractitioner", "min": 0, "max": "*"},
                "type": [
                    {
                        "code": "Reference",
                        "targetProfile": [
                            "http://hl7.org/fhir/StructureDefinition/Organization",
                            "http://hl7.org/fhir/StructureDefinition/Practitioner",
                        ],
                    }
                ],
            },
        ]
    },
}

EXTENSION_URL = "http://example.org/StructureDefinition/my-ext"

SAMPLE_EXTENSION = {
    "resourceType": "StructureDefinition",
    "id": "my-ext",
    "url": EXTENSION_URL,
    "name": "MyExt",
    "status": "draft",
    "kind": "complex-type",
    "abstract": False,
    "context": [{"type": "element", "expression": "Patient"}],
    "type": "Extension",
    "baseDefinition": "http://hl7.org/fhir/StructureDefinition/Extension",
    "derivation": "constraint",
    "snapshot": {
        "element": [
            {"id": "MyExt", "path": "MyExt", "min": 0, "max": "*"},
            {
                "id": "MyExt.extension:sub1",
                "path": "MyExt.extension",
                "sliceName": "sub1",
                "min": 0,
                "max": "1",
                "type": [{"code": "Extension"}],
            },
        ]
    },
    "differential": {
        "element": [
            {"id": "MyExt.extension:sub1", "path": "MyExt.extension", "sliceName": "sub1"},
        ]
    },
}

PROFILE_URL = "http://example.org/StructureDefinition/my-patient"

SAMPLE_PROFILE = {
    "resourceType": "StructureDefinition",
    "id": "my-patient",
    "url": PROFILE_URL,
    "name": "MyPatient",
    "status": "active",
    "kind": "resource",
    "abstract": False,
    "type": "Patient",
    "baseDefinition": PATIENT_URL,
    "derivation": "constraint",
    "snapshot": {
        "element": [
            {"id": "Patient", "path": "Patient", "min": 0, "max": "*"},
            {
                "id": "Patient.identifier",
                "path": "Patient.identifier",
                "min": 1,
                "max": "*",
                "base": {"path": "Patient.identifier", "min": 0, "max": "*"},
                "type": [{"code": "Identifier"}],
                "slicing": {
                    "discriminator": [{"type": "pattern", "path": "system"}],
                    "ordered": False,
                    "rules": "openAtEnd",
                },
            },
            {
                "id": "Patient.identifier:mrn",
                "path": "Patient.identifier",
                "sliceName": "mrn",
                "min": 1,
                "max": "1",
                "type": [{"code": "Identifier"}],
            },
            {
                "id": "Patient.name",
                "path": "Patient.name",
                "min": 1,
                "max": "*",
                "base": {"path": "Patient.name", "min": 0, "max": "*"},
                "type": [{"code": "HumanName"}],
                "mustSupport": True,
            },
        ]
    },
    "differential": {
        "element": [
            {
                "id": "Patient",
                "path": "Patient",
                "constraint": [{"key": "my-1", "severity": "error", "human": "Needs a name"}],
                "mapping": [{"identity": "rim", "map": "Patient[classCode=PAT]"}],
            },
            {"id": "Patient.identifier:mrn", "path": "Patient.identifier", "sliceName": "mrn"},
            {"id": "Patient.name", "path": "Patient.name", "min": 1},
        ]
    },
}

OBSERVATION_PROFILE_URL = "http://example.org/StructureDefinition/my-obs"

SAMPLE_OBSERVATION_PROFILE = {
    "resourceType": "StructureDefinition",
    "id": "my-obs",
    "url": OBSERVATION_PROFILE_URL,
    "name": "MyObs",
    "status": "active",
    "kind": "resource",
    "abstract": False,
    "type": "Observation",
    "baseDefinition": "http://hl7.org/fhir/StructureDefinition/Observation",
    "derivation": "constraint",
    "snapshot": {
        "element": [
            {"id": "Observation", "path": "Observation", "min": 0, "max": "*"},
            {
                "id": "Observation.value[x]",
                "path": "Observation.value[x]",
                "min": 0,
                "max": "1",
                "base": {"path": "Observation.value[x]", "min": 0, "max": "1"},
                "type": [{"code": "Quantity"}, {"code": "string"}],
                "slicing": {
                    "discriminator": [{"type": "type", "path": "$this"}],
                    "ordered": False,
                    "rules": "closed",
                },
            },
            {
                "id": "Observation.value[x]:valueQuantity",
                "path": "Observation.value[x]",
                "sliceName": "valueQuantity",
                "min": 0,
                "max": "1",
                "type": [{"code": "Quantity"}],
            },
            {
                "id": "Observation.value[x]:valueQuantity.unit",
                "path": "Observation.value[x].unit",
                "min": 1,
                "max": "1",
                "type": [{"code": "string"}],
            },
        ]
    },
    "differential": {
        "element": [
            {"id": "Observation", "path": "Observation"},
            {"id": "Observation.value[x]:valueQuantity", "path": "Observation.value[x]", "sliceName": "valueQuantity"},
        ]
    },
}

SAMPLE_DSTU2_PROFILE = {
    "resourceType": "StructureDefinition",
    "id": "us-patient",
    "url": "http://example.org/StructureDefinition/us-patient",
    "name": "USPatient",
    "status": "draft",
    "kind": "resource",
    "constrainedType": "Patient",
    "abstract": False,
    "base": PATIENT_URL,
    "snapshot": {
        "element": [
            {"path": "Patient", "min": 0, "max": "*"},
            {
                "path": "Patient.extension",
                "slicing": {"discriminator": ["url"], "ordered": False, "rules": "open"},
                "min": 0,
                "max": "*",
                "type": [{"code": "Extension"}],
            },
            {
                "path": "Patient.extension",
                "name": "race",
                "min": 0,
                "max": "1",
                "type": [{"code": "Extension", "profile": ["http://example.org/StructureDefinition/race"]}],
            },
            {
                "path": "Patient.gender",
                "min": 1,
                "max": "1",
                "type": [{"code": "code"}],
                "comments": "The gender may not match the biological sex.",
                "binding": {
                    "strength": "required",
                    "valueSetReference": {"reference": "http://hl7.org/fhir/ValueSet/administrative-gender"},
                },
            },
            {
                "path": "Patient.managingOrganization",
                "min": 0,
                "max": "1",
                "type": [{"code": "Reference", "profile": ["http://hl7.org/fhir/StructureDefinition/Organization"]}],
            },
        ]
    },
    "differential": {
        "element": [
            {"path": "Patient"},
            {"path": "Patient.gender", "min": 1},
        ]
    },
}


def _process(converter, resource, collection=None):
    collection = collection or DefinitionCollection("4.0.1")
    url, artifact_class = converter.process_resource(
        converter.parse_json(copy.deepcopy(resource)), collection
    )
    return collection, url, artifact_class


# ============================================================================
# Primitive Types
# ============================================================================

class TestPrimitiveTypes:
    """Test primitive StructureDefinition processing."""

    def test_xml_type_extension_falls_back_to_name(self):
        collection, url, artifact_class = _process(R4Converter(), SAMPLE_STRING_PRIMITIVE)

        primitive = collection.primitive_types["string"]
        assert artifact_class == ArtifactClass.PRIMITIVE_TYPE
        assert url == "http://hl7.org/fhir/StructureDefinition/string"
        assert primitive.base_type_name == "string"
        assert primitive.short_description == "Primitive Type string"
        assert primitive.purpose == "A sequence of Unicode characters"
        assert primitive.comment.startswith("Note that FHIR strings")

    def test_xml_type_on_code_shadow_element(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_INTEGER_PRIMITIVE)

        primitive = collection.primitive_types["integer"]
        assert primitive.base_type_name == "int"
        assert primitive.validation_regex == "-?([0]|([1-9][0-9]*))"

    @pytest.mark.parametrize(
        "xml_type,expected",
        [
            ("xs:token", "code"),
            ("anyURI", "string"),
            ("base64Binary", "string"),
            ("xs:anyURI+", "string"),
            ("xs:string+", "string"),
            ("xsd:date", "date"),
            ("time", "time"),
        ],
    )
    def test_xml_wire_type_variants(self, xml_type, expected):
        resource = copy.deepcopy(SAMPLE_INTEGER_PRIMITIVE)
        resource["differential"]["element"][1]["type"][0]["_code"]["extension"][0]["valueString"] = xml_type

        collection, _, _ = _process(R4Converter(), resource)

        assert xml_base_type(xml_type) == expected
        assert collection.primitive_types["integer"].base_type_name == expected

    def test_fhirpath_type_code(self):
        resource = copy.deepcopy(SAMPLE_STRING_PRIMITIVE)
        resource["id"] = resource["name"] = "boolean"
        resource["differential"]["element"] = [
            {"id": "boolean", "path": "boolean"},
            {"id": "boolean.value", "path": "boolean.value",
             "type": [{"code": "http://hl7.org/fhirpath/System.Boolean"}]},
        ]

        collection, _, _ = _process(R5Converter(), resource)

        assert collection.primitive_types["boolean"].base_type_name == "boolean"

    def test_retired_structure_is_skipped(self):
        resource = copy.deepcopy(SAMPLE_STRING_PRIMITIVE)
        resource["status"] = "retired"

        collection, _, artifact_class = _process(R4Converter(), resource)

        assert artifact_class == ArtifactClass.UNKNOWN
        assert collection.primitive_types == {}


# ============================================================================
# Element Tree Reconstruction
# ============================================================================

class TestComplexStructures:
    """Test element tree reconstruction from snapshots."""

    def test_resource_is_registered_with_base_type(self):
        collection, url, artifact_class = _process(R4Converter(), SAMPLE_PATIENT)

        patient = collection.resources["Patient"]
        assert artifact_class == ArtifactClass.RESOURCE
        assert url == PATIENT_URL
        assert patient.base_type_name == "DomainResource"
        assert patient.base_type_canonical == "http://hl7.org/fhir/StructureDefinition/DomainResource"
        assert patient.short_description.startswith("Information about an individual")
        assert "w5" in patient.mappings
        assert patient.root_element is not None
        assert patient.root_element.path == "Patient"

    def test_choice_type_is_collapsed(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_PATIENT)

        patient = collection.resources["Patient"]
        deceased = patient.elements["Patient.deceased"]
        assert "Patient.deceased[x]" not in patient.elements
        assert deceased.id == "Patient.deceased"
        assert set(deceased.element_types) == {"boolean", "dateTime"}
        assert deceased.base_type_name == ""
        assert deceased.is_modifier is True
        assert deceased.is_summary is True

    def test_element_order_follows_snapshot(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_PATIENT)

        patient = collection.resources["Patient"]
        assert list(patient.elements) == [
            "Patient.id",
            "Patient.gender",
            "Patient.deceased",
            "Patient.active",
            "Patient.contact",
            "Patient.generalPractitioner",
        ]
        assert patient.elements["Patient.active"].field_order == 3

    def test_backbone_children_are_nested(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_PATIENT)

        patient = collection.resources["Patient"]
        contact = patient.components["Patient.contact"]
        assert "Patient.contact.name" in contact.elements
        assert "Patient.contact.name" not in patient.elements
        assert patient.elements["Patient.contact"].base_type_name == "Patient.contact"
        assert patient.elements["Patient.contact"].conditions == ["pat-1"]

    def test_fhir_type_extension_marks_simple(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_PATIENT)

        patient_id = collection.resources["Patient"].elements["Patient.id"]
        assert set(patient_id.element_types) == {"string"}
        assert patient_id.is_simple is True
        assert patient_id.is_inherited is True

    def test_binding_codes_and_five_ws(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_PATIENT)

        patient = collection.resources["Patient"]
        gender = patient.elements["Patient.gender"]
        assert gender.binding_strength == "required"
        assert gender.value_set == "http://hl7.org/fhir/ValueSet/administrative-gender|4.0.1"
        assert gender.codes == ["male", "female", "other", "unknown"]
        assert gender.five_ws == ""
        assert patient.elements["Patient.active"].five_ws == "FiveWs.status"

    def test_inheritance_flags(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_PATIENT)

        patient = collection.resources["Patient"]
        assert patient.elements["Patient.gender"].is_inherited is False
        assert patient.elements["Patient.gender"].modifies_parent is False
        assert patient.elements["Patient.active"].modifies_parent is True

    def test_default_value_and_constraints(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_PATIENT)

        active = collection.resources["Patient"].elements["Patient.active"]
        assert active.default_field_name == "defaultValueBoolean"
        assert active.default_field_value is True
        assert len(active.constraints) == 1
        assert active.constraints[0].key == "pat-1"
        assert active.constraints[0].is_best_practice is True
        assert active.constraints[0].path == "Patient.active"

    def test_reference_targets(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_PATIENT)

        practitioner = collection.resources["Patient"].elements["Patient.generalPractitioner"]
        reference = practitioner.element_types["Reference"]
        assert list(reference.target_profiles) == ["Organization", "Practitioner"]

    def test_duplicate_snapshot_path_is_rejected(self):
        resource = copy.deepcopy(SAMPLE_PATIENT)
        resource["snapshot"]["element"].append(copy.deepcopy(resource["snapshot"]["element"][2]))
        converter = R4Converter()

        collection, _, _ = _process(converter, resource)

        patient = collection.resources["Patient"]
        assert list(patient.elements).count("Patient.gender") == 1
        assert converter.diagnostics.errors == [
            "Complex Patient snapshot error (Patient.gender): Repeated snapshot: Patient.gender & Patient.gender"
        ]

    def test_element_without_parent_is_dropped(self):
        resource = copy.deepcopy(SAMPLE_PATIENT)
        resource["snapshot"]["element"].append({
            "id": "Patient.link.other",
            "path": "Patient.link.other",
            "min": 1,
            "max": "1",
            "type": [{"code": "Reference"}],
        })
        converter = R4Converter()

        collection, _, _ = _process(converter, resource)

        assert converter.diagnostics.dropped_element_count == 1
        assert converter.diagnostics.dropped_elements[0].element_path == "Patient.link.other"
        assert collection.resources["Patient"].find_element("Patient.link.other") is None

    def test_content_reference(self):
        resource = {
            "resourceType": "StructureDefinition",
            "id": "Questionnaire",
            "url": "http://hl7.org/fhir/StructureDefinition/Questionnaire",
            "name": "Questionnaire",
            "status": "active",
            "kind": "resource",
            "type": "Questionnaire",
            "baseDefinition": "http://hl7.org/fhir/StructureDefinition/DomainResource",
            "derivation": "specialization",
            "snapshot": {"element": [
                {"id": "Questionnaire", "path": "Questionnaire"},
                {"id": "Questionnaire.item", "path": "Questionnaire.item", "type": [{"code": "BackboneElement"}]},
                {"id": "Questionnaire.item.item", "path": "Questionnaire.item.item",
                 "contentReference": "#Questionnaire.item"},
            ]},
        }

        collection, _, _ = _process(R4Converter(), resource)

        nested = collection.resources["Questionnaire"].find_element("Questionnaire.item.item")
        assert nested.base_type_name == "Questionnaire.item"
        assert nested.element_types == {}


# ============================================================================
# Slicing and Differential
# ============================================================================

class TestSlicing:
    """Test slice attachment and differential flags."""

    def test_extension_slice_synthesizes_sliced_element(self):
        collection, _, artifact_class = _process(R4Converter(), SAMPLE_EXTENSION)

        extension = collection.extensions_by_url[EXTENSION_URL]
        sliced = extension.elements["MyExt.extension"]
        slicing = sliced.slicing[EXTENSION_URL]

        assert artifact_class == ArtifactClass.EXTENSION
        assert list(extension.elements) == ["MyExt.extension"]
        assert "MyExt.extension:sub1" not in extension.elements
        assert sliced.base_type_name == "Extension"
        assert sliced.short_description == EXTENSION_SHORT
        assert list(slicing.discriminator_rules) == ["value+url"]
        assert slicing.description == DEFAULT_EXTENSION_SLICING_DESCRIPTION
        assert slicing.has_slice("sub1")
        assert extension.context_elements == ["Patient"]

    def test_extension_slice_in_differential(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_EXTENSION)

        extension = collection.extensions_by_url[EXTENSION_URL]
        slicing = extension.elements["MyExt.extension"].slicing[EXTENSION_URL]
        assert slicing.slices_in_differential == ["sub1"]
        assert slicing.slices["sub1"].in_differential is True

    def test_declared_slicing(self):
        collection, _, artifact_class = _process(R4Converter(), SAMPLE_PROFILE)

        profile = collection.profiles_by_url[PROFILE_URL]
        identifier = profile.elements["Patient.identifier"]
        slicing = identifier.slicing[PROFILE_URL]

        assert artifact_class == ArtifactClass.PROFILE
        assert list(slicing.discriminator_rules) == ["pattern+system"]
        assert slicing.slicing_rules == SlicingRule.OPEN_AT_END
        assert list(slicing.slices) == ["mrn"]
        assert slicing.slices["mrn"].slice_name == "mrn"

    def test_differential_flags_and_root_items(self):
        collection, _, _ = _process(R4Converter(), SAMPLE_PROFILE)

        profile = collection.profiles_by_url[PROFILE_URL]
        assert profile.elements["Patient.name"].in_differential is True
        assert profile.elements["Patient.identifier"].in_differential is True
        assert profile.elements["Patient.identifier"].slicing[PROFILE_URL].slices_in_differential == ["mrn"]
        assert [c.key for c in profile.constraints] == ["my-1"]
        assert profile.constraints[0].path == "MyPatient"
        assert "rim" in profile.root_mappings

    def test_choice_element_slice_keeps_children(self):
        converter = R4Converter()
        collection, _, _ = _process(converter, SAMPLE_OBSERVATION_PROFILE)

        profile = collection.profiles_by_url[OBSERVATION_PROFILE_URL]
        value = profile.elements["Observation.value"]
        slicing = value.slicing[OBSERVATION_PROFILE_URL]

        assert "Observation.value[x]" not in profile.elements
        assert set(value.element_types) == {"Quantity", "string"}
        assert list(slicing.discriminator_rules) == ["type+$this"]
        assert slicing.has_slice("valueQuantity")
        assert slicing.slices_in_differential == ["valueQuantity"]

        quantity = slicing.slices["valueQuantity"]
        unit = quantity.elements["Observation.value[x].unit"]
        assert unit.cardinality_min == 1
        assert unit.in_differential is True
        assert converter.diagnostics.dropped_element_count == 0

    def test_missing_discriminator_raises(self):
        resource = copy.deepcopy(SAMPLE_PROFILE)
        resource["snapshot"]["element"][1]["slicing"]["discriminator"] = []

        with pytest.raises(ConversionError, match="Missing slicing discriminator: MyPatient - Patient.identifier"):
            _process(R4Converter(), resource)


# ============================================================================
# Hard Failures
# ============================================================================

class TestStructureErrors:
    """Test the failures that abort a structure."""

    @staticmethod
    def _logical(root):
        return {
            "resourceType": "StructureDefinition",
            "id": "Widget",
            "url": "http://example.org/StructureDefinition/Widget",
            "name": "Widget",
            "status": "draft",
            "kind": "logical",
            "snapshot": {"element": [root]},
        }

    def test_single_root_type_is_base(self):
        resource = self._logical({"id": "Widget", "path": "Widget", "type": [{"code": "Element"}]})

        collection, _, artifact_class = _process(R4Converter(), resource)

        assert artifact_class == ArtifactClass.LOGICAL_MODEL
        widget = collection.logical_models["http://example.org/StructureDefinition/Widget"]
        assert widget.base_type_name == "Element"

    def test_no_base_type(self):
        resource = self._logical({"id": "Gadget", "path": "Gadget"})

        with pytest.raises(ConversionError, match="Could not determine base type for Widget"):
            _process(R4Converter(), resource)

    def test_too_many_base_types(self):
        resource = self._logical({
            "id": "Widget",
            "path": "Widget",
            "type": [{"code": "string"}, {"code": "boolean"}],
        })

        with pytest.raises(ConversionError, match="Too many types for Widget: 2"):
            _process(R4Converter(), resource)

    def test_unresolvable_content_reference(self):
        resource = self._logical({"id": "Widget", "path": "Widget", "type": [{"code": "Element"}]})
        resource["snapshot"]["element"].extend([
            {"id": "Widget.part", "path": "Widget.part", "type": [{"code": "BackboneElement"}]},
            {"id": "Widget.part.part", "path": "Widget.part.part", "contentReference": "Widget.part"},
        ])

        with pytest.raises(ConversionError) as exc_info:
            _process(R4Converter(), resource)

        assert "Could not resolve ContentReference Widget.part" in str(exc_info.value)
        assert exc_info.value.element_path == "Widget.part.part"

    def test_non_element_context_is_soft_error(self):
        resource = copy.deepcopy(SAMPLE_EXTENSION)
        resource["context"] = [{"type": "fhirpath", "expression": "Patient.name"}]
        converter = R4Converter()

        collection, _, _ = _process(converter, resource)

        assert collection.extensions_by_url == {}
        assert converter.diagnostics.errors == [
            "StructureDefinition MyExt (my-ext) unhandled context type: fhirpath"
        ]

    def test_known_bad_snapshot_type_is_coerced(self):
        element = JsonTree({
            "id": "ArtifactAssessment.approvalDate",
            "path": "ArtifactAssessment.approvalDate",
            "type": [{"code": "dateTime"}],
        })
        converter = R5Converter()

        element_types, _, _ = converter.structures.get_types_from_element("ArtifactAssessment", element)

        assert list(element_types) == ["date"]
        assert converter.diagnostics.warnings == [
            "StructureDefinition - ArtifactAssessment coerced ArtifactAssessment.approvalDate to type 'date'"
        ]


# ============================================================================
# DSTU2
# ============================================================================

class TestDstu2Structures:
    """Test DSTU2 snapshot handling."""

    @pytest.mark.parametrize("sd,expected", [
        ({"kind": "datatype", "name": "Ext", "constrainedType": "Extension"}, ArtifactClass.EXTENSION),
        ({"kind": "datatype", "name": "string"}, ArtifactClass.PRIMITIVE_TYPE),
        ({"kind": "datatype", "name": "Quantity"}, ArtifactClass.COMPLEX_TYPE),
        ({"kind": "resource", "name": "Patient"}, ArtifactClass.RESOURCE),
        ({"kind": "resource", "name": "SimpleQuantity", "constrainedType": "Quantity"}, ArtifactClass.RESOURCE),
        ({"kind": "resource", "name": "USPatient", "constrainedType": "Patient"}, ArtifactClass.EXTENSION),
        ({"kind": "logical", "name": "Model"}, ArtifactClass.LOGICAL_MODEL),
        ({"kind": "resource", "name": "Old", "status": "retired"}, ArtifactClass.UNKNOWN),
    ])
    def test_classification(self, sd, expected):
        assert R2Adapter().classify_structure(JsonTree(sd)) == expected

    def test_r4_classification(self):
        adapter = R4Adapter()

        assert adapter.classify_structure(JsonTree(SAMPLE_PATIENT)) == ArtifactClass.RESOURCE
        assert adapter.classify_structure(JsonTree(SAMPLE_PROFILE)) == ArtifactClass.PROFILE
        assert adapter.classify_structure(JsonTree(SAMPLE_EXTENSION)) == ArtifactClass.EXTENSION

    def test_slice_ids_are_rebuilt(self):
        converter = R2Converter()
        collection = DefinitionCollection("1.0.2")

        _process(converter, SAMPLE_DSTU2_PROFILE, collection)

        profile = collection.extensions_by_url["http://example.org/StructureDefinition/us-patient"]
        extension = profile.elements["Patient.extension"]
        slicing = extension.slicing["http://example.org/StructureDefinition/us-patient"]
        assert list(slicing.discriminator_rules) == ["value+url"]
        assert list(slicing.slices) == ["race"]
        assert "Patient.gender" in profile.elements
        assert len(profile.elements) == 3

    def test_inherited_outside_differential(self):
        collection = DefinitionCollection("1.0.2")

        _process(R2Converter(), SAMPLE_DSTU2_PROFILE, collection)

        profile = collection.extensions_by_url["http://example.org/StructureDefinition/us-patient"]
        gender = profile.elements["Patient.gender"]
        organization = profile.elements["Patient.managingOrganization"]
        assert gender.modifies_parent is True
        assert organization.is_inherited is True
        assert organization.modifies_parent is False

    def test_dstu2_field_shapes(self):
        collection = DefinitionCollection("1.0.2")

        _process(R2Converter(), SAMPLE_DSTU2_PROFILE, collection)

        profile = collection.extensions_by_url["http://example.org/StructureDefinition/us-patient"]
        gender = profile.elements["Patient.gender"]
        organization = profile.elements["Patient.managingOrganization"]
        assert profile.base_type_name == "Patient"
        assert gender.value_set == "http://hl7.org/fhir/ValueSet/administrative-gender"
        assert gender.comment == "The gender may not match the biological sex."
        assert list(organization.element_types["Reference"].target_profiles) == ["Organization"]

    def test_name_reference_resolution(self):
        adapter = R2Adapter()

        resolved = adapter.resolve_content_reference(
            "ValueSet", JsonTree({"nameReference": "include"}), "ValueSet.compose.exclude"
        )

        assert resolved == "ValueSet.compose.include"

    def test_unknown_name_reference_raises(self):
        with pytest.raises(ConversionError, match="Could not resolve NameReference"):
            R2Adapter().resolve_content_reference(
                "Widget", JsonTree({"nameReference": "nowhere"}), "Widget.part"
            )

    def test_repeated_paths_are_skipped_silently(self):
        resource = copy.deepcopy(SAMPLE_DSTU2_PROFILE)
        resource["snapshot"]["element"].append(copy.deepcopy(resource["snapshot"]["element"][3]))
        converter = R2Converter()

        _process(converter, resource, DefinitionCollection("1.0.2"))

        assert converter.diagnostics.errors == []
