"""
Version-independent conformance model: search parameters, operations,
capability statements, compartments and implementation guides.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Search parameters and operations
# ============================================================================

class FhirSearchParamComponent(BaseModel):
    definition: str = ""
    expression: str = ""

    model_config = {"extra": "forbid"}


class FhirSearchParam(BaseModel):
    id: str
    url: str = ""
    version: str = ""
    name: str = ""
    description: str = ""
    purpose: str = ""
    code: str = ""
    resource_types: List[str] = Field(default_factory=list)
    targets: List[str] = Field(default_factory=list)
    value_type: str = ""
    status: str = ""
    standard_status: str = ""
    fhir_maturity_level: Optional[int] = None
    is_experimental: bool = False
    xpath: str = ""
    xpath_usage: str = ""
    expression: str = ""
    components: List[FhirSearchParamComponent] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class FhirParameter(BaseModel):
    """One OperationDefinition parameter."""
    name: str = ""
    use: str = ""
    scopes: Optional[List[str]] = None
    min: int = 0
    max: str = ""
    documentation: str = ""
    value_type: str = ""
    allowed_types: Optional[List[str]] = None
    target_profiles: Optional[List[str]] = None
    search_type: str = ""
    field_order: int = 0

    model_config = {"extra": "forbid"}


class FhirOperation(BaseModel):
    id: str
    url: str = ""
    version: str = ""
    name: str = ""
    description: str = ""
    status: str = ""
    standard_status: str = ""
    fhir_maturity_level: Optional[int] = None
    affects_state: Optional[bool] = None
    defined_on_system: bool = False
    defined_on_type: bool = False
    defined_on_instance: bool = False
    code: str = ""
    comment: str = ""
    base_definition: Optional[str] = None
    resource_types: Optional[List[str]] = None
    parameters: List[FhirParameter] = Field(default_factory=list)
    is_experimental: bool = False
    kind: str = ""

    model_config = {"extra": "forbid"}


# ============================================================================
# Capability statements
# ============================================================================

class FhirCapSearchParam(BaseModel):
    name: str
    definition: str = ""
    parameter_type: str = ""
    documentation: str = ""
    expectation: str = ""

    model_config = {"extra": "forbid"}


class FhirCapOperation(BaseModel):
    name: str
    definition_canonicals: List[str] = Field(default_factory=list)
    documentation: str = ""
    expectation: str = ""

    model_config = {"extra": "forbid"}

    def add_definition(self, definition: Optional[str]) -> None:
        if definition and definition not in self.definition_canonicals:
            self.definition_canonicals.append(definition)


class FhirCapSearchParamCombination(BaseModel):
    required_params: List[str] = Field(default_factory=list)
    optional_params: List[str] = Field(default_factory=list)
    expectation: str = ""

    model_config = {"extra": "forbid"}


class FhirCapResource(BaseModel):
    """Capabilities declared for one resource type."""
    resource_type: str
    expectation: str = ""
    interactions: List[str] = Field(default_factory=list)
    interaction_expectations: List[str] = Field(default_factory=list)
    supported_profiles: List[str] = Field(default_factory=list)
    supported_profile_expectations: List[str] = Field(default_factory=list)
    versioning_support: str = ""
    read_history: Optional[bool] = None
    update_create: Optional[bool] = None
    conditional_create: Optional[bool] = None
    conditional_read: str = ""
    conditional_update: Optional[bool] = None
    conditional_patch: Optional[bool] = None
    conditional_delete: str = ""
    reference_policies: List[str] = Field(default_factory=list)
    search_includes: List[str] = Field(default_factory=list)
    search_include_expectations: List[str] = Field(default_factory=list)
    search_rev_includes: List[str] = Field(default_factory=list)
    search_rev_include_expectations: List[str] = Field(default_factory=list)
    search_params: Dict[str, FhirCapSearchParam] = Field(default_factory=dict)
    operations: Dict[str, FhirCapOperation] = Field(default_factory=dict)
    search_param_combinations: List[FhirCapSearchParamCombination] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class FhirCapabilityStatement(BaseModel):
    id: str
    url: str = ""
    name: str = ""
    title: str = ""
    version: str = ""
    status: str = ""
    standard_status: str = ""
    fhir_maturity_level: Optional[int] = None
    is_experimental: bool = False
    description: str = ""
    fhir_version: str = ""
    kind: str = ""
    software_name: str = ""
    software_version: str = ""
    software_release_date: str = ""
    implementation_description: str = ""
    implementation_url: str = ""
    server_interactions: List[str] = Field(default_factory=list)
    server_interaction_expectations: List[str] = Field(default_factory=list)
    formats: List[str] = Field(default_factory=list)
    format_expectations: List[str] = Field(default_factory=list)
    patch_formats: List[str] = Field(default_factory=list)
    patch_format_expectations: List[str] = Field(default_factory=list)
    instantiates: List[str] = Field(default_factory=list)
    instantiates_expectations: List[str] = Field(default_factory=list)
    implementation_guides: List[str] = Field(default_factory=list)
    implementation_guide_expectations: List[str] = Field(default_factory=list)
    resource_interactions: Dict[str, FhirCapResource] = Field(default_factory=dict)
    server_search_parameters: Dict[str, FhirCapSearchParam] = Field(default_factory=dict)
    server_operations: Dict[str, FhirCapOperation] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


# ============================================================================
# Compartments and implementation guides
# ============================================================================

class FhirCompartmentResource(BaseModel):
    code: str
    search_params: List[str] = Field(default_factory=list)
    documentation: str = ""
    start_param: str = ""
    end_param: str = ""

    model_config = {"extra": "forbid"}


class FhirCompartment(BaseModel):
    id: str
    name: str = ""
    title: str = ""
    url: str = ""
    version: str = ""
    version_algorithm: str = ""
    status: str = ""
    standard_status: str = ""
    fhir_maturity_level: Optional[int] = None
    is_experimental: bool = False
    purpose: str = ""
    description: str = ""
    compartment_type: str = ""
    search: bool = False
    resources: Dict[str, FhirCompartmentResource] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


class FhirIgDependsOn(BaseModel):
    uri: str
    package_id: str = ""
    version: str = ""

    model_config = {"extra": "forbid"}


class FhirImplementationGuide(BaseModel):
    id: str
    name: str = ""
    url: str = ""
    version: str = ""
    status: str = ""
    standard_status: str = ""
    fhir_maturity_level: Optional[int] = None
    is_experimental: bool = False
    title: str = ""
    description: str = ""
    package_id: str = ""
    fhir_versions: List[str] = Field(default_factory=list)
    depends_on: Dict[str, FhirIgDependsOn] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}
