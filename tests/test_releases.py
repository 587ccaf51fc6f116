"""
Release Selection Tests

Tests for:
1. Version string to release lookup
2. ConverterFactory / converter_for
"""
import pytest
from unittest.mock import patch

from fhir_normalizer.converters import (
    ConverterFactory,
    NormativeConverter,
    R2Converter,
    R3Converter,
    R4BConverter,
    R4Converter,
    R5Converter,
    converter_for,
)
from fhir_normalizer.converters.adapters import R2Adapter, ReleaseAdapter
from fhir_normalizer.diagnostics import Diagnostics
from fhir_normalizer.errors import VersionNotSupportedError
from fhir_normalizer.releases import FhirSequence, lookup_release, sequence_for_version


# ============================================================================
# Version Lookup
# ============================================================================

class TestReleaseLookup:
    """Test the version table and the first-character fallback."""

    @pytest.mark.parametrize("version,expected", [
        ("1.0.2", FhirSequence.DSTU2),
        ("STU3", FhirSequence.STU3),
        ("3.0.2", FhirSequence.STU3),
        ("4.0.1", FhirSequence.R4),
        ("4.3.0", FhirSequence.R4B),
        ("hl7.fhir.r4b.core", FhirSequence.R4B),
        ("5.0.0-ballot", FhirSequence.R5),
        ("4.6.0", FhirSequence.R5),
        ("R5", FhirSequence.R5),
    ])
    def test_table(self, version, expected):
        assert sequence_for_version(version) == expected

    def test_lookup_is_case_insensitive(self):
        assert lookup_release("hl7.FHIR.R4.core") == FhirSequence.R4

    def test_lookup_strips_package_version_and_suffix(self):
        assert lookup_release("hl7.fhir.r4.core#4.0.1") == FhirSequence.R4
        assert lookup_release("4.0.1-cibuild") == FhirSequence.R4

    def test_first_character_fallback(self):
        assert sequence_for_version("2.9.9") == FhirSequence.DSTU2
        assert sequence_for_version("3.9") == FhirSequence.STU3
        assert sequence_for_version("4.0.9") == FhirSequence.R4
        assert sequence_for_version("5.1.0") == FhirSequence.R5

    def test_next_major_prefix_maps_to_latest(self):
        assert sequence_for_version("4.5.9") == FhirSequence.R5

    def test_major_numbers(self):
        assert sequence_for_version(1) == FhirSequence.DSTU2
        assert sequence_for_version(2) == FhirSequence.DSTU2
        assert sequence_for_version(3) == FhirSequence.STU3
        assert sequence_for_version(4) == FhirSequence.R4
        assert sequence_for_version(5) == FhirSequence.R5

    @pytest.mark.parametrize("version", [0, 6, "", "9.0.0", "abc"])
    def test_unsupported(self, version):
        with pytest.raises(VersionNotSupportedError):
            sequence_for_version(version)

    def test_major_version_property(self):
        assert FhirSequence.R4B.major_version == 4
        assert FhirSequence.STU3.major_version == 3


# ============================================================================
# Converter Factory
# ============================================================================

class TestConverterFactory:
    """Test converter selection."""

    @pytest.mark.parametrize("version,converter_class", [
        (2, R2Converter),
        ("1.0.2", R2Converter),
        ("3.0.1", R3Converter),
        (4, R4Converter),
        ("4.0.1", R4Converter),
        ("4.3.0", R4BConverter),
        ("5.0.0", R5Converter),
        ("4.4.0", R5Converter),
    ])
    def test_create_typed(self, version, converter_class):
        converter = ConverterFactory.create(version)

        assert type(converter) is converter_class
        assert converter.adapter.sequence == converter.release

    def test_create_json_tree(self):
        converter = ConverterFactory.create("1.0.2", use_json_tree=True)

        assert isinstance(converter, NormativeConverter)
        assert isinstance(converter.adapter, R2Adapter)
        assert converter.release == FhirSequence.DSTU2

    def test_unsupported_version_raises(self):
        with pytest.raises(VersionNotSupportedError, match="Unsupported"):
            ConverterFactory.create(7)

    def test_converter_for_default_version(self):
        with patch("fhir_normalizer.converters.factory.settings") as mock_settings:
            mock_settings.default_fhir_version = "3.0.1"

            assert isinstance(converter_for(), R3Converter)
            assert isinstance(converter_for(""), R3Converter)

    def test_converter_for_shares_diagnostics(self):
        diagnostics = Diagnostics()

        converter = converter_for("4.0.1", diagnostics=diagnostics)

        assert converter.diagnostics is diagnostics
        assert converter.structures.diagnostics is diagnostics
        assert converter.terminology.diagnostics is diagnostics

    def test_generic_normative_converter(self):
        converter = NormativeConverter()

        assert type(converter.adapter) is ReleaseAdapter
        assert converter.capability_resource_types == ("CapabilityStatement", "Conformance")
