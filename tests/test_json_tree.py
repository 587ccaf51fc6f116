"""
JsonTree Tests

Tests for:
1. Path walking and scalar getters
2. Arrays and objects
3. Extension lookup
"""
import json
from decimal import Decimal

import pytest

from fhir_normalizer.constants import EXT_CAP_EXPECTATION, EXT_FMM, EXT_STANDARDS_STATUS
from fhir_normalizer.json_tree import JsonTree


# ============================================================================
# Sample Data for Testing
# ============================================================================

SAMPLE_RESOURCE = {
    "resourceType": "StructureDefinition",
    "id": "Patient",
    "abstract": False,
    "experimental": "true",
    "version": "4.0.1",
    "extension": [
        {"url": EXT_STANDARDS_STATUS, "valueCode": "normative"},
        {"url": EXT_FMM, "valueInteger": 5},
    ],
    "snapshot": {
        "element": [
            {"id": "Patient", "path": "Patient", "min": 0, "max": "*"},
            {"id": "Patient.multipleBirth[x]", "path": "Patient.multipleBirth[x]", "min": 0, "max": "1"},
        ]
    },
    "differential": None,
    "contextInvariant": "single",
    "format": ["json", "xml"],
    "_format": [
        {"extension": [{"url": EXT_CAP_EXPECTATION, "valueCode": "SHALL"}]},
        None,
    ],
    "maxValueDecimal": 1.5,
    "count": "12",
}


# ============================================================================
# Path Walking
# ============================================================================

class TestJsonTreeAccess:
    """Test raw access and scalar getters."""

    def test_parse_and_repr(self):
        tree = JsonTree.parse(json.dumps(SAMPLE_RESOURCE))

        assert tree.get_string("resourceType") == "StructureDefinition"
        assert "StructureDefinition/Patient" in repr(tree)

    def test_parse_rejects_non_object(self):
        with pytest.raises(TypeError):
            JsonTree.parse("[1, 2, 3]")

    def test_get_walks_objects_and_arrays(self):
        tree = JsonTree(SAMPLE_RESOURCE)

        assert tree.get("snapshot", "element", 1, "id") == "Patient.multipleBirth[x]"
        assert tree.get("snapshot", "element", "0", "path") == "Patient"
        assert tree.get("snapshot", "element", 5, "id") is None
        assert tree.get("missing", "anything") is None

    def test_contains_ignores_null(self):
        tree = JsonTree(SAMPLE_RESOURCE)

        assert "snapshot" in tree
        assert "differential" not in tree
        assert tree.has("snapshot", "element")

    def test_scalar_getters(self):
        tree = JsonTree(SAMPLE_RESOURCE)

        assert tree.get_bool("abstract") is False
        assert tree.get_bool("experimental") is True
        assert tree.get_int("count") == 12
        assert tree.get_int("snapshot", "element", 0, "min") == 0
        assert tree.get_decimal("maxValueDecimal") == Decimal("1.5")
        assert tree.get_string("count") == "12"
        assert tree.get_string("abstract") is None
        assert tree.get_byte_array("version") == b"4.0.1"

    def test_get_int_rejects_bool(self):
        tree = JsonTree({"flag": True})

        assert tree.get_int("flag") is None

    def test_writes_are_shared(self):
        data = {"snapshot": {"element": [{"id": "a"}]}}
        tree = JsonTree(data)

        tree.get_expando("snapshot")["extra"] = 1

        assert data["snapshot"]["extra"] == 1


# ============================================================================
# Arrays and Objects
# ============================================================================

class TestJsonTreeCollections:
    """Test array and object getters."""

    def test_string_array_promotes_scalar(self):
        tree = JsonTree(SAMPLE_RESOURCE)

        assert tree.get_string_array("format") == ["json", "xml"]
        assert tree.get_string_array("contextInvariant") == ["single"]
        assert tree.get_string_array("missing") is None

    def test_expando_list(self):
        tree = JsonTree(SAMPLE_RESOURCE)

        elements = tree.get_expando_list("snapshot", "element")

        assert len(elements) == 2
        assert all(isinstance(e, JsonTree) for e in elements)
        assert elements[1].get_string("max") == "1"

    def test_expando_list_promotes_single_object(self):
        tree = JsonTree({"rest": {"mode": "server"}})

        rest = tree.get_expando_list("rest")

        assert len(rest) == 1
        assert rest[0].get_string("mode") == "server"

    def test_expando_list_missing_is_empty(self):
        assert JsonTree({}).get_expando_list("concept") == []


# ============================================================================
# Extensions
# ============================================================================

class TestJsonTreeExtensions:
    """Test extension lookup by url."""

    def test_extension_values(self):
        tree = JsonTree(SAMPLE_RESOURCE)

        assert tree.get_extension_value_code(EXT_STANDARDS_STATUS) == "normative"
        assert tree.get_extension_value_integer(EXT_FMM) == 5
        assert tree.get_extension_value_string(EXT_FMM) is None
        assert tree.get_extension("http://example.org/unknown") is None

    def test_extension_code_list_follows_shadow_array(self):
        tree = JsonTree(SAMPLE_RESOURCE)

        assert tree.get_extension_value_code_list(EXT_CAP_EXPECTATION, "_format") == ["SHALL", ""]
        assert tree.get_extension_value_code_list(EXT_CAP_EXPECTATION, "_missing") == []

    def test_sub_extension_strings(self):
        combination = JsonTree({
            "extension": [
                {"url": "required", "valueString": "family"},
                {"url": "required", "valueString": "given"},
                {"url": "optional", "valueString": "gender"},
            ]
        })

        assert combination.get_sub_extension_strings("required") == ["family", "given"]
        assert combination.get_sub_extension_strings("optional") == ["gender"]
