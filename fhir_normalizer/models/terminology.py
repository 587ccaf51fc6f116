"""
Version-independent terminology model: code systems, concept trees and value sets.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, PrivateAttr


class PropertyType(str, Enum):
    """Declared type of a code system property."""
    CODE = "code"
    CODING = "Coding"
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE_TIME = "dateTime"
    DECIMAL = "decimal"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "PropertyType":
        for prop_type in cls:
            if prop_type.value == value:
                return prop_type
        return cls.UNKNOWN


class FhirConceptProperty(BaseModel):
    """One property value on a concept (typed value plus its string form)."""
    code: str
    value: Any = None
    value_string: str = ""

    model_config = {"extra": "forbid"}


class FhirConcept(BaseModel):
    system: str = ""
    code: str = ""
    display: str = ""
    version: str = ""
    definition: str = ""
    code_system_id: str = ""
    properties: List[FhirConceptProperty] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @staticmethod
    def get_canonical(system: str, code: str, version: str = "") -> str:
        """'system|version#code', with the version part omitted when empty."""
        if version:
            return f"{system}|{version}#{code}"
        return f"{system}#{code}"

    def add_property(self, code: str, value: Any, value_string: str) -> None:
        self.properties.append(FhirConceptProperty(code=code, value=value, value_string=value_string))

    def get_property(self, code: str) -> Optional[FhirConceptProperty]:
        for prop in self.properties:
            if prop.code == code:
                return prop
        return None


class FhirConceptTreeNode(BaseModel):
    """A node in a code system hierarchy. The root node carries no concept."""
    concept: Optional[FhirConcept] = None
    children: Dict[str, "FhirConceptTreeNode"] = Field(default_factory=dict)

    _parent: Optional["FhirConceptTreeNode"] = PrivateAttr(default=None)

    model_config = {"extra": "forbid"}

    @property
    def parent(self) -> Optional["FhirConceptTreeNode"]:
        return self._parent

    @property
    def code(self) -> str:
        return self.concept.code if self.concept else ""

    def add_child(self, concept: FhirConcept) -> "FhirConceptTreeNode":
        node = FhirConceptTreeNode(concept=concept)
        node._parent = self
        self.children[concept.code] = node
        return node

    def contains_code(self, code: str) -> bool:
        if code in self.children:
            return True
        return any(child.contains_code(code) for child in self.children.values())


class FhirCodeSystemFilter(BaseModel):
    code: str
    description: str = ""
    operators: List[str] = Field(default_factory=list)
    value: str = ""

    model_config = {"extra": "forbid"}


class FhirCodeSystemProperty(BaseModel):
    code: str
    uri: str = ""
    description: str = ""
    type: PropertyType = PropertyType.UNKNOWN

    model_config = {"extra": "forbid"}


class FhirCodeSystem(BaseModel):
    id: str
    name: str = ""
    url: str = ""
    version: str = ""
    title: str = ""
    status: str = ""
    standard_status: str = ""
    fhir_maturity_level: Optional[int] = None
    description: str = ""
    content: str = ""
    root_concept: FhirConceptTreeNode = Field(default_factory=FhirConceptTreeNode)
    concept_lookup: Dict[str, FhirConceptTreeNode] = Field(default_factory=dict)
    filters: Dict[str, FhirCodeSystemFilter] = Field(default_factory=dict)
    properties: Dict[str, FhirCodeSystemProperty] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}

    def has_concept(self, code: str) -> bool:
        return code in self.concept_lookup


class FhirValueSetFilter(BaseModel):
    property: str = ""
    operation: str = ""
    value: str = ""

    model_config = {"extra": "forbid"}


class FhirValueSetComposition(BaseModel):
    """One include or exclude entry of a value set composition."""
    system: str = ""
    version: str = ""
    concepts: Optional[List[FhirConcept]] = None
    filters: Optional[List[FhirValueSetFilter]] = None
    linked_value_sets: Optional[List[str]] = None

    model_config = {"extra": "forbid"}


class FhirValueSetExpansion(BaseModel):
    id: str = ""
    timestamp: str = ""
    total: Optional[int] = None
    offset: Optional[int] = None
    parameters: Optional[Dict[str, Any]] = None
    contains: Optional[List[FhirConcept]] = None

    model_config = {"extra": "forbid"}


class FhirValueSet(BaseModel):
    id: str
    name: str = ""
    url: str = ""
    version: str = ""
    title: str = ""
    status: str = ""
    standard_status: str = ""
    fhir_maturity_level: Optional[int] = None
    description: str = ""
    includes: Optional[List[FhirValueSetComposition]] = None
    excludes: Optional[List[FhirValueSetComposition]] = None
    expansion: Optional[FhirValueSetExpansion] = None

    model_config = {"extra": "forbid"}


FhirConceptTreeNode.model_rebuild()
