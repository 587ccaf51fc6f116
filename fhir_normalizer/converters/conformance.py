"""
Conformance resource processing.

Components:
- ConformanceProcessor.process_search_parameter: base resources (inferred
  from the id when absent), components, expression and processing mode
- ConformanceProcessor.process_operation: parameters and base definition
- ConformanceProcessor.process_metadata: CapabilityStatement / Conformance
- ConformanceProcessor.process_compartment / process_implementation_guide
"""
import logging
import uuid
from typing import Dict, List, Optional

from ..config import settings
from ..constants import (
    EXT_CAP_EXPECTATION,
    EXT_CAP_SEARCH_PARAM_COMBINATION,
    EXT_FMM,
    EXT_STANDARDS_STATUS,
)
from ..diagnostics import Diagnostics
from ..json_tree import JsonTree
from ..models import (
    FhirCapabilityStatement,
    FhirCapOperation,
    FhirCapResource,
    FhirCapSearchParam,
    FhirCapSearchParamCombination,
    FhirCompartment,
    FhirCompartmentResource,
    FhirIgDependsOn,
    FhirImplementationGuide,
    FhirOperation,
    FhirParameter,
    FhirSearchParam,
    FhirSearchParamComponent,
)
from ..sink import PackageImportable
from .adapters import ReleaseAdapter

logger = logging.getLogger(__name__)


class ConformanceProcessor:
    """Build search parameter, operation, capability, compartment and IG records."""

    def __init__(self, adapter: ReleaseAdapter, diagnostics: Diagnostics):
        self.adapter = adapter
        self.diagnostics = diagnostics

    def _checked_status(self, resource: JsonTree, resource_type: str) -> str:
        """Status, or "unknown" with an error when the field is missing."""
        status = self.adapter.get_status(resource)
        if not status:
            name = resource.get_string("name") or ""
            resource_id = resource.get_string("id") or ""
            self.diagnostics.error(
                f"{resource_type} {name} ({resource_id}): Status field missing",
                resource_type,
                resource_id,
            )
            return "unknown"
        return status

    # ========================================================================
    # SearchParameter
    # ========================================================================

    def process_search_parameter(self, sp: JsonTree, sink: PackageImportable) -> Optional[FhirSearchParam]:
        """
        Register a search parameter.

        Without a declared base, the resources are guessed from the id
        tokens ("patient-birthdate" -> Patient when Patient is loaded).
        A parameter that still has no resource is dropped.
        """
        status = self.adapter.get_status(sp) or "unknown"
        if status == "retired":
            return None

        sp_id = sp.get_string("id") or ""
        resources = self.adapter.get_search_param_bases(sp)

        if not resources:
            known = sink.resources
            resources = [token for token in sp_id.split("-") if token in known]
            if not resources:
                logger.debug("SearchParameter %s has no resolvable base, skipping", sp_id)
                return None

        components = [
            FhirSearchParamComponent(
                definition=self.adapter.get_component_definition(component),
                expression=component.get_string("expression") or "",
            )
            for component in sp.get_expando_list("component")
        ]

        search_param = FhirSearchParam(
            id=sp_id,
            url=sp.get_string("url") or "",
            version=sp.get_string("version") or "",
            name=sp.get_string("name") or "",
            description=sp.get_string("description") or "",
            purpose=sp.get_string("purpose") or "",
            code=sp.get_string("code") or "",
            resource_types=resources,
            targets=sp.get_string_array("target") or [],
            value_type=sp.get_string("type") or "",
            status=status,
            standard_status=sp.get_extension_value_code(EXT_STANDARDS_STATUS) or "",
            fhir_maturity_level=sp.get_extension_value_integer(EXT_FMM),
            is_experimental=sp.get_bool("experimental") is True,
            xpath=sp.get_string("xpath") or "",
            xpath_usage=self.adapter.get_processing_mode(sp),
            expression=sp.get_string("expression") or "",
            components=components,
        )

        sink.add_search_parameter(search_param)
        return search_param

    # ========================================================================
    # OperationDefinition
    # ========================================================================

    def process_operation(self, op: JsonTree, sink: PackageImportable) -> Optional[FhirOperation]:
        status = self.adapter.get_status(op) or "unknown"
        if status == "retired":
            return None

        parameters: List[FhirParameter] = []
        for param in op.get_expando_list("parameter"):
            parameters.append(FhirParameter(
                name=param.get_string("name") or "",
                use=param.get_string("use") or "",
                scopes=param.get_string_array("scope"),
                min=param.get_int("min") or 0,
                max=param.get_string("max") or "",
                documentation=param.get_string("documentation") or "",
                value_type=param.get_string("type") or "",
                allowed_types=param.get_string_array("allowedType"),
                target_profiles=param.get_string_array("targetProfile"),
                search_type=param.get_string("searchType") or "",
                field_order=len(parameters),
            ))

        resource_types = self.adapter.get_operation_resources(op)

        operation = FhirOperation(
            id=op.get_string("id") or op.get_string("name") or "",
            url=op.get_string("url") or "",
            version=op.get_string("version") or "",
            name=op.get_string("name") or "",
            description=op.get_string("description") or "",
            status=status,
            standard_status=op.get_extension_value_code(EXT_STANDARDS_STATUS) or "",
            fhir_maturity_level=op.get_extension_value_integer(EXT_FMM),
            affects_state=op.get_bool("affectsState"),
            defined_on_system=op.get_bool("system") is True,
            defined_on_type=self.adapter.get_operation_on_type(op),
            defined_on_instance=op.get_bool("instance") is True,
            code=op.get_string("code") or "",
            comment=op.get_string("comment") or "",
            base_definition=self.adapter.get_operation_base(op),
            resource_types=resource_types or None,
            parameters=parameters,
            is_experimental=op.get_bool("experimental") is True,
            kind=op.get_string("kind") or "",
        )

        sink.add_operation(operation)
        return operation

    # ========================================================================
    # CapabilityStatement / Conformance
    # ========================================================================

    def process_metadata(
        self,
        caps: JsonTree,
        server_url: Optional[str] = None,
        sink: Optional[PackageImportable] = None,
    ) -> FhirCapabilityStatement:
        """
        Flatten a capability statement.

        Only the first `rest` entry is read. The url is the server url when
        given, then the resource url, then a placeholder built from the id.
        """
        cap_id = caps.get_string("id") or str(uuid.uuid4())
        cap_url = server_url or caps.get_string("url") or ""
        if not cap_url:
            cap_url = f"{settings.missing_capability_url_base}/{cap_id}"

        server_interactions: List[str] = []
        server_interaction_expectations: List[str] = []
        server_search_params: Dict[str, FhirCapSearchParam] = {}
        server_operations: Dict[str, FhirCapOperation] = {}
        resource_interactions: Dict[str, FhirCapResource] = {}

        rest_entries = caps.get_expando_list("rest")
        if rest_entries:
            rest = rest_entries[0]

            server_interactions, server_interaction_expectations = _read_interactions(rest)
            server_search_params = _read_search_params(rest)
            server_operations = _read_operations(rest)

            for resource in rest.get_expando_list("resource"):
                resource_info = self.parse_rest_resource(resource)
                if resource_info.resource_type in resource_interactions:
                    continue
                resource_interactions[resource_info.resource_type] = resource_info

        capability_statement = FhirCapabilityStatement(
            id=cap_id,
            url=cap_url,
            name=caps.get_string("name") or "",
            title=caps.get_string("title") or "",
            version=caps.get_string("version") or "",
            status=caps.get_string("status") or "",
            standard_status=caps.get_extension_value_code(EXT_STANDARDS_STATUS) or "",
            fhir_maturity_level=caps.get_extension_value_integer(EXT_FMM),
            is_experimental=caps.get_bool("experimental") is True,
            description=caps.get_string("description") or "",
            fhir_version=caps.get_string("fhirVersion") or "",
            kind=caps.get_string("kind") or "",
            software_name=caps.get_string("software", "name") or "",
            software_version=caps.get_string("software", "version") or "",
            software_release_date=caps.get_string("software", "releaseDate") or "",
            implementation_description=caps.get_string("implementation", "description") or "",
            implementation_url=caps.get_string("implementation", "url") or "",
            server_interactions=server_interactions,
            server_interaction_expectations=server_interaction_expectations,
            formats=caps.get_string_array("format") or [],
            format_expectations=caps.get_extension_value_code_list(EXT_CAP_EXPECTATION, "_format"),
            patch_formats=caps.get_string_array("patchFormat") or [],
            patch_format_expectations=caps.get_extension_value_code_list(EXT_CAP_EXPECTATION, "_patchFormat"),
            instantiates=caps.get_string_array("instantiates") or [],
            instantiates_expectations=caps.get_extension_value_code_list(EXT_CAP_EXPECTATION, "_instantiates"),
            implementation_guides=caps.get_string_array("implementationGuide") or [],
            implementation_guide_expectations=caps.get_extension_value_code_list(
                EXT_CAP_EXPECTATION, "_implementationGuide"
            ),
            resource_interactions=resource_interactions,
            server_search_parameters=server_search_params,
            server_operations=server_operations,
        )

        if sink is not None:
            sink.add_capability_statement(capability_statement)

        return capability_statement

    def parse_rest_resource(self, resource: JsonTree) -> FhirCapResource:
        """One rest.resource entry."""
        interactions, interaction_expectations = _read_interactions(resource)

        combinations = []
        combination_extensions = []
        if self.adapter.reads_search_param_combinations:
            combination_extensions = resource.get_extensions(EXT_CAP_SEARCH_PARAM_COMBINATION)
        for combination in combination_extensions:
            combinations.append(FhirCapSearchParamCombination(
                required_params=combination.get_sub_extension_strings("required"),
                optional_params=combination.get_sub_extension_strings("optional"),
                expectation=combination.get_extension_value_code(EXT_CAP_EXPECTATION) or "",
            ))

        return FhirCapResource(
            resource_type=resource.get_string("type") or "",
            expectation=resource.get_extension_value_code(EXT_CAP_EXPECTATION) or "",
            interactions=interactions,
            interaction_expectations=interaction_expectations,
            supported_profiles=resource.get_string_array("supportedProfile") or [],
            supported_profile_expectations=resource.get_extension_value_code_list(
                EXT_CAP_EXPECTATION, "_supportedProfile"
            ),
            versioning_support=resource.get_string("versioning") or "",
            read_history=resource.get_bool("readHistory"),
            update_create=resource.get_bool("updateCreate"),
            conditional_create=resource.get_bool("conditionalCreate"),
            conditional_read=resource.get_string("conditionalRead") or "",
            conditional_update=resource.get_bool("conditionalUpdate"),
            conditional_patch=resource.get_bool("conditionalPatch"),
            conditional_delete=resource.get_string("conditionalDelete") or "",
            reference_policies=resource.get_string_array("referencePolicy") or [],
            search_includes=resource.get_string_array("searchInclude") or [],
            search_include_expectations=resource.get_extension_value_code_list(
                EXT_CAP_EXPECTATION, "_searchInclude"
            ),
            search_rev_includes=resource.get_string_array("searchRevInclude") or [],
            search_rev_include_expectations=resource.get_extension_value_code_list(
                EXT_CAP_EXPECTATION, "_searchRevInclude"
            ),
            search_params=_read_search_params(resource),
            operations=_read_operations(resource),
            search_param_combinations=combinations,
        )

    # ========================================================================
    # CompartmentDefinition / ImplementationGuide
    # ========================================================================

    def process_compartment(self, cd: JsonTree, sink: PackageImportable) -> Optional[FhirCompartment]:
        status = self._checked_status(cd, "CompartmentDefinition")
        if status == "retired":
            return None

        resources: Dict[str, FhirCompartmentResource] = {}
        for res in cd.get_expando_list("resource"):
            code = res.get_string("code")
            if not code:
                continue
            resources[code] = FhirCompartmentResource(
                code=code,
                search_params=res.get_string_array("param") or [],
                documentation=res.get_string("documentation") or "",
                start_param=res.get_string("startParam") or "",
                end_param=res.get_string("endParam") or "",
            )

        version_algorithm = (
            cd.get_string("versionAlgorithmCoding", "code")
            or cd.get_string("versionAlgorithmString")
            or ""
        )

        compartment = FhirCompartment(
            id=cd.get_string("id") or "",
            name=cd.get_string("name") or "",
            title=cd.get_string("title") or "",
            url=cd.get_string("url") or "",
            version=cd.get_string("version") or "",
            version_algorithm=version_algorithm,
            status=status,
            standard_status=cd.get_extension_value_code(EXT_STANDARDS_STATUS) or "",
            fhir_maturity_level=cd.get_extension_value_integer(EXT_FMM),
            is_experimental=cd.get_bool("experimental") is True,
            purpose=cd.get_string("purpose") or "",
            description=cd.get_string("description") or "",
            compartment_type=cd.get_string("code") or "",
            search=cd.get_bool("search") is True,
            resources=resources,
        )

        sink.add_compartment(compartment)
        return compartment

    def process_implementation_guide(
        self,
        ig: JsonTree,
        sink: PackageImportable,
    ) -> Optional[FhirImplementationGuide]:
        status = self._checked_status(ig, "ImplementationGuide")
        if status == "retired":
            return None

        depends_on: Dict[str, FhirIgDependsOn] = {}
        # DSTU2 calls these `dependency`
        for dep in ig.get_expando_list("dependsOn") or ig.get_expando_list("dependency"):
            uri = dep.get_string("uri")
            if not uri:
                continue
            depends_on[uri] = FhirIgDependsOn(
                uri=uri,
                package_id=dep.get_string("packageId") or "",
                version=dep.get_string("version") or "",
            )

        implementation_guide = FhirImplementationGuide(
            id=ig.get_string("id") or "",
            name=ig.get_string("name") or "",
            url=ig.get_string("url") or "",
            version=ig.get_string("version") or "",
            status=status,
            standard_status=ig.get_extension_value_code(EXT_STANDARDS_STATUS) or "",
            fhir_maturity_level=ig.get_extension_value_integer(EXT_FMM),
            is_experimental=ig.get_bool("experimental") is True,
            title=ig.get_string("title") or "",
            description=ig.get_string("description") or "",
            package_id=ig.get_string("packageId") or "",
            fhir_versions=self.adapter.get_fhir_versions(ig),
            depends_on=depends_on,
        )

        sink.add_implementation_guide(implementation_guide)
        return implementation_guide


# ============================================================================
# rest / rest.resource helpers
# ============================================================================

def _read_interactions(node: JsonTree):
    """(codes, expectations) of node.interaction."""
    codes: List[str] = []
    expectations: List[str] = []
    for interaction in node.get_expando_list("interaction"):
        code = interaction.get_string("code")
        if not code:
            continue
        codes.append(code)
        expectations.append(interaction.get_extension_value_code(EXT_CAP_EXPECTATION) or "")
    return codes, expectations


def _read_search_params(node: JsonTree) -> Dict[str, FhirCapSearchParam]:
    """First declaration of each name wins."""
    params: Dict[str, FhirCapSearchParam] = {}
    for sp in node.get_expando_list("searchParam"):
        name = sp.get_string("name")
        if not name or name in params:
            continue
        params[name] = FhirCapSearchParam(
            name=name,
            definition=sp.get_string("definition") or "",
            parameter_type=sp.get_string("type") or "",
            documentation=sp.get_string("documentation") or "",
            expectation=sp.get_extension_value_code(EXT_CAP_EXPECTATION) or "",
        )
    return params


def _read_operations(node: JsonTree) -> Dict[str, FhirCapOperation]:
    """Repeated operation names collect their extra definitions."""
    operations: Dict[str, FhirCapOperation] = {}
    for operation in node.get_expando_list("operation"):
        name = operation.get_string("name")
        if not name:
            continue

        definition = _definition(operation)
        if name in operations:
            operations[name].add_definition(definition)
            continue

        operations[name] = FhirCapOperation(
            name=name,
            definition_canonicals=[definition] if definition else [],
            documentation=operation.get_string("documentation") or "",
            expectation=operation.get_extension_value_code(EXT_CAP_EXPECTATION) or "",
        )
    return operations


def _definition(operation: JsonTree) -> str:
    # canonical (R4+) or Reference (STU3 and earlier)
    return operation.get_string("definition") or operation.get_string("definition", "reference") or ""
