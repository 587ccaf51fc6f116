from enum import Enum


class ArtifactClass(str, Enum):
    """Bucket a processed resource is registered under."""
    UNKNOWN = "Unknown"
    PRIMITIVE_TYPE = "PrimitiveType"
    COMPLEX_TYPE = "ComplexType"
    RESOURCE = "Resource"
    EXTENSION = "Extension"
    PROFILE = "Profile"
    LOGICAL_MODEL = "LogicalModel"
    CODE_SYSTEM = "CodeSystem"
    VALUE_SET = "ValueSet"
    SEARCH_PARAMETER = "SearchParameter"
    OPERATION = "Operation"
    CAPABILITY_STATEMENT = "CapabilityStatement"
    COMPARTMENT = "Compartment"
    IMPLEMENTATION_GUIDE = "ImplementationGuide"


class SlicingRule(str, Enum):
    """How slices are interpreted when evaluating an instance."""
    CLOSED = "closed"
    OPEN = "open"
    OPEN_AT_END = "openAtEnd"

    @classmethod
    def parse(cls, value) -> "SlicingRule":
        for rule in cls:
            if rule.value == value:
                return rule
        return cls.OPEN
