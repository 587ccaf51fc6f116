"""
Version-independent structure model.

Components:
- FhirElementType: one allowed type of an element (with target/type profiles)
- FhirElement: one field of a complex type
- FhirSlicing / FhirSliceDiscriminatorRule: slicing declared on an element
- FhirComplex: complex type, resource, extension, profile or logical model
- FhirPrimitive: primitive data type
"""
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..fhir_types import normalize_type_code
from .enums import SlicingRule


def _last_segment(url: str) -> str:
    return url.rsplit("/", 1)[-1] if "/" in url else url


def _slice_name_at(id_components: List[str], index: int) -> str:
    split = id_components[index].split(":")
    if len(split) == 1:
        return ""
    return split[1]


class FhirElementType(BaseModel):
    """One allowed type for an element (a choice element has several)."""
    name: str
    type: str = ""
    url: str = ""
    target_profiles: Dict[str, str] = Field(default_factory=dict)
    type_profiles: Dict[str, str] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}

    @classmethod
    def from_code(
        cls,
        code: str,
        target_profiles: Optional[List[str]] = None,
        type_profiles: Optional[List[str]] = None,
    ) -> "FhirElementType":
        element_type = cls(name=normalize_type_code(code), type=code)
        if code.startswith("http"):
            element_type.url = code
        for profile in target_profiles or []:
            element_type.add_target_profile(profile)
        for profile in type_profiles or []:
            element_type.add_type_profile(profile)
        return element_type

    def add_target_profile(self, profile: str) -> None:
        if not profile:
            return
        key = _last_segment(profile)
        if key not in self.target_profiles:
            self.target_profiles[key] = profile

    def add_type_profile(self, profile: str) -> None:
        if not profile:
            return
        key = _last_segment(profile)
        if key not in self.type_profiles:
            self.type_profiles[key] = profile


class FhirSliceDiscriminatorRule(BaseModel):
    type: str
    path: str

    model_config = {"extra": "forbid"}

    @property
    def key(self) -> str:
        return f"{self.type}+{self.path}"


class FhirConstraint(BaseModel):
    """An invariant on an element or structure."""
    key: str
    severity: str = ""
    description: str = ""
    expression: str = ""
    xpath: str = ""
    requirements: str = ""
    suppress: Optional[bool] = None
    is_best_practice: bool = False
    best_practice_explanation: str = ""
    source: str = ""
    path: str = ""
    order: int = 0

    model_config = {"extra": "forbid"}


class FhirElementDefMapping(BaseModel):
    identity: str
    language: str = ""
    map: str = ""
    comment: str = ""

    model_config = {"extra": "forbid"}


class FhirStructureDefMapping(BaseModel):
    identity: str
    uri: str = ""
    name: str = ""
    comment: str = ""

    model_config = {"extra": "forbid"}


class FhirSlicing(BaseModel):
    """Slicing of one element, as defined by one structure (keyed by its url)."""
    defined_by_id: str
    defined_by_url: str
    description: str = ""
    is_ordered: bool = False
    field_order: int = 0
    slicing_rules: SlicingRule = SlicingRule.OPEN
    discriminator_rules: Dict[str, FhirSliceDiscriminatorRule] = Field(default_factory=dict)
    slices: Dict[str, "FhirComplex"] = Field(default_factory=dict)
    slices_in_differential: List[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    def add_discriminator_rule(self, rule: FhirSliceDiscriminatorRule) -> None:
        if rule.key not in self.discriminator_rules:
            self.discriminator_rules[rule.key] = rule

    def has_slice(self, slice_name: str) -> bool:
        return slice_name in self.slices

    def add_slice(self, slice_name: str, slice_complex: "FhirComplex") -> None:
        self.slices[slice_name] = slice_complex

    def set_in_differential(self, slice_name: str) -> None:
        """Mark a named slice (and everything under it) as defined in the differential."""
        if slice_name not in self.slices:
            return
        if slice_name not in self.slices_in_differential:
            self.slices_in_differential.append(slice_name)

        slice_complex = self.slices[slice_name]
        slice_complex.in_differential = True
        for element in slice_complex.elements.values():
            element.in_differential = True


class FhirElement(BaseModel):
    """One field of a complex type."""
    id: str
    path: str
    base_path: str = ""
    explicit_name: str = ""
    url: str = ""
    field_order: int = 0
    short_description: str = ""
    purpose: str = ""
    comment: str = ""
    validation_regex: str = ""
    base_type_name: str = ""
    element_types: Dict[str, FhirElementType] = Field(default_factory=dict)
    cardinality_min: int = 0
    cardinality_max: int = -1
    is_modifier: bool = False
    is_modifier_reason: str = ""
    is_summary: bool = False
    must_support: bool = False
    is_simple: bool = False
    representation: List[str] = Field(default_factory=list)
    default_field_name: str = ""
    default_field_value: Any = None
    fixed_field_name: str = ""
    fixed_field_value: Any = None
    pattern_field_name: str = ""
    pattern_field_value: Any = None
    is_inherited: bool = False
    modifies_parent: bool = True
    hides_parent: bool = False
    binding_strength: str = ""
    value_set: str = ""
    binding_name: str = ""
    five_ws: str = ""
    slicing: Dict[str, FhirSlicing] = Field(default_factory=dict)
    constraints: List[FhirConstraint] = Field(default_factory=list)
    conditions: List[str] = Field(default_factory=list)
    mappings: Dict[str, List[FhirElementDefMapping]] = Field(default_factory=dict)
    in_differential: bool = False
    codes: Optional[List[str]] = None

    model_config = {"extra": "forbid"}

    def model_post_init(self, __context: Any) -> None:
        if self.is_modifier:
            self.is_summary = True
        if self.codes is None and (self.base_type_name == "code" or "code" in self.element_types):
            self.codes = self._codes_from_short(self.short_description)

    @staticmethod
    def parse_max(max_value: Optional[str]) -> int:
        """'*' (or anything unparseable) is unbounded (-1)."""
        if not max_value or max_value == "*":
            return -1
        try:
            return int(max_value)
        except ValueError:
            return -1

    @staticmethod
    def _codes_from_short(short: str) -> Optional[List[str]]:
        if short == "formats supported (xml | json | mime type)":
            return ["xml", "json", "MIME Type"]
        if short == "formats supported (xml | json | ttl | mime type)":
            return ["xml", "json", "ttl", "MIME Type"]
        if not short or "|" not in short:
            return None

        codes = []
        for value in short.split("|"):
            clean = value.strip()
            if " " in clean:
                clean = clean[: clean.index(" ")]
            codes.append(clean.strip())
        return codes

    @property
    def name(self) -> str:
        return self.path.rsplit(".", 1)[-1]

    @property
    def is_array(self) -> bool:
        return self.cardinality_max == -1 or self.cardinality_max > 1

    @property
    def is_optional(self) -> bool:
        return self.cardinality_min == 0

    def add_slicing(self, slicing: FhirSlicing) -> None:
        if slicing.defined_by_url not in self.slicing:
            self.slicing[slicing.defined_by_url] = slicing

    def add_slice(self, url: str, slice_name: str) -> bool:
        """
        Create a slice of this element under the slicing defined by `url`.

        Returns False when no such slicing exists or the slice is already present.
        """
        if url not in self.slicing:
            return False
        if self.slicing[url].has_slice(slice_name):
            return False

        slice_complex = FhirComplex(
            id=self.id,
            name=self.name,
            path=self.path,
            url=self.url,
            explicit_name=self.explicit_name,
            short_description=self.short_description,
            purpose=self.purpose,
            comment=self.comment,
            validation_regex=self.validation_regex,
            base_type_name=self.base_type_name,
            slice_name=slice_name,
        )
        self.slicing[url].add_slice(slice_name, slice_complex)
        return True


class FhirComplex(BaseModel):
    """A complex type, resource, extension, profile, logical model or backbone component."""
    id: str
    name: str = ""
    path: str = ""
    url: str = ""
    explicit_name: str = ""
    status: str = ""
    standard_status: str = ""
    fhir_maturity_level: Optional[int] = None
    is_abstract: bool = False
    is_experimental: bool = False
    short_description: str = ""
    purpose: str = ""
    comment: str = ""
    validation_regex: str = ""
    base_type_name: str = ""
    base_type_canonical: str = ""
    slice_name: str = ""
    in_differential: bool = False
    context_elements: List[str] = Field(default_factory=list)
    root_element: Optional[FhirElement] = None
    elements: Dict[str, FhirElement] = Field(default_factory=dict)
    components: Dict[str, "FhirComplex"] = Field(default_factory=dict)
    constraints: List[FhirConstraint] = Field(default_factory=list)
    mappings: Dict[str, FhirStructureDefMapping] = Field(default_factory=dict)
    root_mappings: Dict[str, List[FhirElementDefMapping]] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}

    def add_context_element(self, element: str) -> None:
        self.context_elements.append(element)

    def add_constraint(self, constraint: FhirConstraint) -> None:
        self.constraints.append(constraint)

    def add_component_from_element(self, path: str) -> bool:
        """
        Promote an element to a nested component (backbone) so children
        can be attached to it. The element's base type becomes the path.
        """
        if path not in self.elements or path in self.components:
            return False

        element = self.elements[path]
        element_type = element.base_type_name
        if not element_type and element.element_types:
            element_type = next(iter(element.element_types.values())).name

        self.components[element.path] = FhirComplex(
            id=element.id,
            name=element.name,
            path=element.path,
            url=element.url,
            short_description=element.short_description,
            purpose=element.purpose,
            comment=element.comment,
            validation_regex=element.validation_regex,
            base_type_name=element_type,
        )
        element.base_type_name = element.path
        return True

    def get_parent_and_field_name(
        self,
        url: str,
        id_components: List[str],
        path_components: List[str],
    ) -> Optional[Tuple["FhirComplex", str, str]]:
        """
        Walk the id/path components down the element tree.

        Returns:
            (parent complex, field name, slice name) or None if the parent
            cannot be resolved. Slice name is "" when the element is not a slice.
        """
        if not id_components or len(id_components) < 2:
            return None
        if not path_components or len(path_components) < 2:
            return None

        return self._get_parent_and_field_name(url, id_components, path_components, 0)

    def _get_parent_and_field_name(
        self,
        url: str,
        id_components: List[str],
        path_components: List[str],
        start_index: int,
    ) -> Optional[Tuple["FhirComplex", str, str]]:
        if start_index == len(path_components) - 2:
            slice_name = _slice_name_at(id_components, len(id_components) - 1)
            return self, path_components[-1], slice_name

        path = ".".join(path_components[: start_index + 2]).replace("[x]", "")

        next_slice = ""
        if start_index + 1 < len(id_components):
            next_slice = _slice_name_at(id_components, start_index + 1)

        if path in self.elements and next_slice:
            slicing = self.elements[path].slicing.get(url)
            if slicing is None or next_slice not in slicing.slices:
                return None
            return slicing.slices[next_slice]._get_parent_and_field_name(
                url, id_components, path_components, start_index + 1
            )

        if path in self.elements and path not in self.components:
            self.add_component_from_element(path)

        if path in self.components:
            return self.components[path]._get_parent_and_field_name(
                url, id_components, path_components, start_index + 1
            )

        return None

    def find_element(self, path: str) -> Optional[FhirElement]:
        """Find an element by full path in this complex or any nested component."""
        if path in self.elements:
            return self.elements[path]
        for component in self.components.values():
            found = component.find_element(path)
            if found is not None:
                return found
        return None


class FhirPrimitive(BaseModel):
    """A FHIR primitive data type."""
    id: str
    name: str
    base_type_name: str
    url: str = ""
    status: str = ""
    standard_status: str = ""
    fhir_maturity_level: Optional[int] = None
    is_experimental: bool = False
    short_description: str = ""
    purpose: str = ""
    comment: str = ""
    validation_regex: str = ""

    model_config = {"extra": "forbid"}


FhirSlicing.model_rebuild()
FhirElement.model_rebuild()
FhirComplex.model_rebuild()
