"""
Shared constants: extension URLs, synthesized Extension element text,
and the FHIR "open type" choices probed for default/fixed/pattern values.
"""
from enum import Enum
from typing import Tuple

FHIR_SD_PREFIX = "http://hl7.org/fhir/StructureDefinition/"

# Extension URLs
EXT_STANDARDS_STATUS = FHIR_SD_PREFIX + "structuredefinition-standards-status"
EXT_FMM = FHIR_SD_PREFIX + "structuredefinition-fmm"
EXT_CAP_EXPECTATION = FHIR_SD_PREFIX + "capabilitystatement-expectation"
EXT_CAP_SEARCH_PARAM_COMBINATION = FHIR_SD_PREFIX + "capabilitystatement-search-parameter-combination"
EXT_REGEX = FHIR_SD_PREFIX + "regex"
EXT_SD_REGEX = FHIR_SD_PREFIX + "structuredefinition-regex"
EXT_XML_TYPE = FHIR_SD_PREFIX + "structuredefinition-xml-type"
EXT_FHIR_TYPE = FHIR_SD_PREFIX + "structuredefinition-fhir-type"
EXT_EXPLICIT_TYPE_NAME = FHIR_SD_PREFIX + "structuredefinition-explicit-type-name"
EXT_BINDING_NAME = FHIR_SD_PREFIX + "elementdefinition-bindingName"
EXT_BEST_PRACTICE = FHIR_SD_PREFIX + "elementdefinition-bestpractice"
EXT_BEST_PRACTICE_EXPLANATION = FHIR_SD_PREFIX + "elementdefinition-bestpractice-explanation"
EXT_VALUESET_DEPRECATED = FHIR_SD_PREFIX + "valueset-deprecated"

# Text for Extension elements synthesized under sliced `extension` fields
EXTENSION_SHORT = "Additional content defined by implementations"
EXTENSION_DEFINITION = (
    "May be used to represent additional information that is not part of the basic "
    "definition of the resource. To make the use of extensions safe and manageable, "
    "there is a strict set of governance  applied to the definition and use of "
    "extensions. Though any implementer can define an extension, there is a set of "
    "requirements that SHALL be met as part of the definition of the extension."
)
EXTENSION_COMMENT = (
    "There can be no stigma associated with the use of extensions by any application, "
    "project, or standard - regardless of the institution or jurisdiction that uses or "
    "defines the extensions.  The use of extensions is what allows the FHIR specification "
    "to retain a core level of simplicity for everyone."
)

DEFAULT_EXTENSION_SLICING_DESCRIPTION = "Extensions are always sliced by (at least) url"

# Value sets renamed between the R5 ballot and the published release
BALLOT_VERSIONS: Tuple[str, ...] = ("5.0.0-ballot", "5.0.0-cibuild")
BALLOT_VALUE_SET_RENAMES = {
    "FHIRTypes": "FHIRAllTypes",
    "ResourceTypes": "ResourceType",
}


class ReadType(str, Enum):
    """How a default/fixed/pattern value is materialized."""
    BYTES = "bytes"
    BOOL = "bool"
    DECIMAL = "decimal"
    STRING = "string"
    STRING_ARRAY = "string_array"
    INT = "int"
    LONG = "long"
    OBJECT = "object"


# Priority order matters: the first suffix present on an element wins
OPEN_TYPE_CHOICES: Tuple[Tuple[str, ReadType], ...] = (
    ("Base64Binary", ReadType.BYTES),
    ("Boolean", ReadType.BOOL),
    ("Canonical", ReadType.STRING),
    ("Code", ReadType.STRING),
    ("Date", ReadType.STRING),
    ("DateTime", ReadType.STRING),
    ("Decimal", ReadType.DECIMAL),
    ("Id", ReadType.STRING),
    ("Instant", ReadType.STRING),
    ("Integer", ReadType.INT),
    ("Integer64", ReadType.LONG),
    ("Markdown", ReadType.STRING),
    ("Oid", ReadType.STRING),
    ("PositiveInt", ReadType.INT),
    ("String", ReadType.STRING),
    ("Time", ReadType.STRING),
    ("UnsignedInt", ReadType.INT),
    ("Uri", ReadType.STRING),
    ("Url", ReadType.STRING),
    ("Uuid", ReadType.STRING),
    ("Address", ReadType.OBJECT),
    ("Age", ReadType.OBJECT),
    ("Annotation", ReadType.OBJECT),
    ("Attachment", ReadType.OBJECT),
    ("CodeableConcept", ReadType.OBJECT),
    ("CodeableReference", ReadType.OBJECT),
    ("Coding", ReadType.OBJECT),
    ("ContactPoint", ReadType.OBJECT),
    ("Count", ReadType.OBJECT),
    ("Distance", ReadType.OBJECT),
    ("Duration", ReadType.OBJECT),
    ("HumanName", ReadType.OBJECT),
    ("Identifier", ReadType.OBJECT),
    ("Money", ReadType.OBJECT),
    ("Period", ReadType.OBJECT),
    ("Quantity", ReadType.OBJECT),
    ("Range", ReadType.OBJECT),
    ("Ratio", ReadType.OBJECT),
    ("RatioRange", ReadType.OBJECT),
    ("Reference", ReadType.OBJECT),
    ("SampledData", ReadType.OBJECT),
    ("SimpleQuantity", ReadType.OBJECT),
    ("Signature", ReadType.OBJECT),
    ("Timing", ReadType.OBJECT),
    ("ContactDetail", ReadType.OBJECT),
    ("DataRequirement", ReadType.OBJECT),
    ("Expression", ReadType.OBJECT),
    ("ParameterDefinition", ReadType.OBJECT),
    ("RelatedArtifact", ReadType.OBJECT),
    ("TriggerDefinition", ReadType.OBJECT),
    ("UsageContext", ReadType.OBJECT),
    ("Availability", ReadType.OBJECT),
    ("ExtendedContactDetail", ReadType.OBJECT),
    ("Dosage", ReadType.OBJECT),
    ("Meta", ReadType.OBJECT),
)

VALUE_PREFIXES: Tuple[str, ...] = ("defaultValue", "fixed", "pattern")

# Known-bad published snapshots: element path -> corrected type code
ELEMENT_TYPE_OVERRIDES = {
    "ArtifactAssessment.approvalDate": "date",
    "ArtifactAssessment.lastReviewDate": "date",
}
