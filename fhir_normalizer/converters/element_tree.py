"""
StructureDefinition processing.

Turns primitive StructureDefinitions into FhirPrimitive records and
rebuilds the element tree of every other structure (complex types,
resources, extensions, profiles and logical models) from its snapshot.

Components:
- StructureProcessor: primitive and complex processing for one release adapter
- SliceIdTracker: DSTU2 slice id reconstruction (DSTU2 element ids carry no slice names)
"""
import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from ..constants import (
    DEFAULT_EXTENSION_SLICING_DESCRIPTION,
    ELEMENT_TYPE_OVERRIDES,
    EXT_BEST_PRACTICE,
    EXT_BEST_PRACTICE_EXPLANATION,
    EXT_BINDING_NAME,
    EXT_EXPLICIT_TYPE_NAME,
    EXT_FHIR_TYPE,
    EXT_FMM,
    EXT_REGEX,
    EXT_SD_REGEX,
    EXT_STANDARDS_STATUS,
    EXT_XML_TYPE,
    EXTENSION_COMMENT,
    EXTENSION_DEFINITION,
    EXTENSION_SHORT,
    OPEN_TYPE_CHOICES,
    VALUE_PREFIXES,
    ReadType,
)
from ..diagnostics import Diagnostics
from ..errors import ConversionError
from ..fhir_types import primitive_base_type, xml_base_type
from ..json_tree import JsonTree
from ..models import (
    ArtifactClass,
    FhirComplex,
    FhirConstraint,
    FhirElement,
    FhirElementDefMapping,
    FhirElementType,
    FhirPrimitive,
    FhirSliceDiscriminatorRule,
    FhirSlicing,
    FhirStructureDefMapping,
    SlicingRule,
)
from ..sink import PackageImportable
from .adapters import ReleaseAdapter

logger = logging.getLogger(__name__)

ElementTypes = Dict[str, FhirElementType]

COMPLEX_CLASSES = (
    ArtifactClass.COMPLEX_TYPE,
    ArtifactClass.RESOURCE,
    ArtifactClass.EXTENSION,
    ArtifactClass.PROFILE,
    ArtifactClass.LOGICAL_MODEL,
)


class SliceIdTracker:
    """
    Rebuild slice-qualified ids for DSTU2 snapshots.

    DSTU2 names slices with `name` and leaves ids empty, so while walking a
    slicing group every id component at a sliced depth is rewritten to
    `component:sliceName`.
    """

    def __init__(self):
        self._paths: Dict[int, str] = {}
        self._names: Dict[int, str] = {}

    @property
    def active(self) -> bool:
        return bool(self._paths)

    def rebuild(self, element: JsonTree, path: str, id_components: List[str]) -> None:
        """Rewrite id_components in place for the current slicing groups."""
        element_depth = len(path.split(".")) - 1
        name = element.get_string("name") or ""

        for depth in sorted(self._paths):
            if depth >= len(id_components):
                self._clear(depth)
                continue

            if element_depth > depth:
                id_components[depth] = f"{id_components[depth]}:{self._names[depth]}"
                continue

            if element_depth == depth and path == self._paths[depth] and name:
                self._names[depth] = name
                id_components[depth] = f"{id_components[depth]}:{name}"
                continue

            self._clear(depth)

    def start(self, path: str) -> None:
        depth = len(path.split(".")) - 1
        self._paths[depth] = path
        self._names[depth] = ""

    def _clear(self, depth: int) -> None:
        self._paths.pop(depth, None)
        self._names.pop(depth, None)


class StructureProcessor:
    """
    Process StructureDefinitions through a release adapter.

    Hard failures (no unique base type, unresolvable content reference,
    missing slicing discriminator) raise ConversionError after being logged
    with the structure and element context. Soft issues go to diagnostics.
    """

    def __init__(self, adapter: ReleaseAdapter, diagnostics: Diagnostics):
        self.adapter = adapter
        self.diagnostics = diagnostics

    def process(self, sd: JsonTree, sink: PackageImportable, artifact_class: ArtifactClass) -> None:
        if artifact_class == ArtifactClass.PRIMITIVE_TYPE:
            self.process_primitive(sd, sink)
        elif artifact_class in COMPLEX_CLASSES:
            self.process_complex(sd, sink, artifact_class)

    # ========================================================================
    # Primitive types
    # ========================================================================

    def process_primitive(self, sd: JsonTree, sink: PackageImportable) -> FhirPrimitive:
        """
        Build a FhirPrimitive from a primitive StructureDefinition.

        The differential is read instead of the snapshot (DSTU2 has no ids
        in its differential, so it reads the snapshot). The base type comes
        from the type of `{id}.value`, falling back to the structure name.
        """
        sd_id = sd.get_string("id") or ""
        sd_name = sd.get_string("name") or sd_id
        root_path = sd_id or sd_name

        short = sd.get_string("description") or ""
        definition = sd.get_string("purpose") or sd.get_string("requirements") or ""
        comment = ""
        regex = ""
        base_type_name = ""

        for element in self.adapter.get_primitive_elements(sd):
            element_id = element.get_string("id") or element.get_string("path") or ""

            if element_id in (sd_id, sd_name) or "." not in element_id:
                short = element.get_string("short") or short
                definition = element.get_string("definition") or definition
                comment = self.adapter.get_primitive_comment(element) or comment
                continue

            if element_id not in (f"{root_path}.value", f"{sd_name}.value"):
                continue

            for element_type in element.get_expando_list("type"):
                type_code = element_type.get_string("code") or ""

                if not type_code:
                    xml_type = (
                        element_type.get_extension_value_string(EXT_XML_TYPE, "_code")
                        or element_type.get_extension_value_string(EXT_XML_TYPE)
                        or ""
                    )
                    base_type_name = xml_base_type(xml_type) or base_type_name
                else:
                    base_type_name = primitive_base_type(type_code) or base_type_name

                if "extension" not in element_type:
                    continue

                regex = (
                    element_type.get_extension_value_string(EXT_SD_REGEX)
                    or element_type.get_extension_value_string(EXT_REGEX)
                    or regex
                )

        primitive = FhirPrimitive(
            id=sd_id,
            name=sd_name,
            base_type_name=base_type_name or sd_name or sd_id,
            url=sd.get_string("url") or "",
            status=sd.get_string("status") or "unknown",
            standard_status=sd.get_extension_value_code(EXT_STANDARDS_STATUS) or "",
            fhir_maturity_level=sd.get_extension_value_integer(EXT_FMM),
            is_experimental=sd.get_bool("experimental") is True,
            short_description=short,
            purpose=definition,
            comment=comment,
            validation_regex=regex,
        )
        sink.add_primitive(primitive)
        return primitive

    # ========================================================================
    # Complex structures
    # ========================================================================

    def process_complex(
        self,
        sd: JsonTree,
        sink: PackageImportable,
        artifact_class: ArtifactClass,
    ) -> Optional[FhirComplex]:
        """
        Rebuild the element tree of a complex structure and register it.

        Returns None (registering nothing) when the structure has no
        snapshot or declares a non-element extension context.

        Raises:
            ConversionError: If the base type is missing or ambiguous, or an
                element cannot be converted
        """
        snapshot = sd.get_expando_list("snapshot", "element")
        if not snapshot:
            return None

        sd_id = sd.get_string("id") or ""
        sd_name = sd.get_string("name") or sd_id
        sd_url = sd.get_string("url") or ""

        try:
            contexts = []
            for context_type, expression in self.adapter.get_contexts(sd):
                if context_type != "element":
                    self.diagnostics.error(
                        f"StructureDefinition {sd_name} ({sd_id}) unhandled context type: {context_type}",
                        "StructureDefinition",
                        sd_id,
                    )
                    return None
                contexts.append(expression)

            element0 = snapshot[0]
            structure_maps: Dict[str, FhirStructureDefMapping] = {}
            for mapping in sd.get_expando_list("mapping"):
                identity = mapping.get_string("identity") or ""
                if identity in structure_maps:
                    continue
                structure_maps[identity] = FhirStructureDefMapping(
                    identity=identity,
                    uri=mapping.get_string("uri") or "",
                    name=mapping.get_string("name") or "",
                    comment=mapping.get_string("comment") or "",
                )

            complex_structure = FhirComplex(
                id=sd_id,
                name=sd_name,
                path=sd_name,
                url=sd_url,
                status=sd.get_string("status") or "unknown",
                standard_status=sd.get_extension_value_code(EXT_STANDARDS_STATUS) or "",
                fhir_maturity_level=sd.get_extension_value_integer(EXT_FMM),
                is_abstract=sd.get_bool("abstract") is True,
                is_experimental=sd.get_bool("experimental") is True,
                short_description=element0.get_string("short") or sd.get_string("description") or "",
                purpose=element0.get_string("definition") or sd.get_string("purpose") or "",
                context_elements=contexts,
                mappings=structure_maps,
            )

            base_definition = self.adapter.get_base_definition(sd)
            if base_definition:
                complex_structure.base_type_name = base_definition.rsplit("/", 1)[-1]
                complex_structure.base_type_canonical = base_definition
            else:
                base_types = self.get_types_from_elements(sd_name, snapshot)
                if not base_types:
                    raise ConversionError(f"Could not determine base type for {sd_name}", structure=sd_name)
                if len(base_types) > 1:
                    raise ConversionError(
                        f"Too many types for {sd_name}: {len(base_types)}",
                        structure=sd_name,
                    )
                complex_structure.base_type_name = next(iter(base_types.values())).name

            differential = sd.get_expando_list("differential", "element")
            differential_paths: Set[str] = {
                e.get_string("path") for e in differential if e.get_string("path")
            }
            tracker = SliceIdTracker() if self.adapter.rebuilds_slice_ids else None

            for element in snapshot:
                self._process_element(
                    sd_id, sd_name, sd_url, complex_structure, element, differential_paths, tracker
                )

            if differential:
                self._apply_differential(sd_url, complex_structure, differential)

        except Exception as e:
            logger.error("Failed to process StructureDefinition %s (%s): %s", sd_name, sd_id, e)
            raise

        self._register(sink, complex_structure, artifact_class)
        return complex_structure

    def _process_element(
        self,
        sd_id: str,
        sd_name: str,
        sd_url: str,
        complex_structure: FhirComplex,
        element: JsonTree,
        differential_paths: Set[str],
        tracker: Optional[SliceIdTracker],
    ) -> None:
        element_id = element.get_string("id") or element.get_string("path") or ""
        element_path = element.get_string("path") or element.get_string("id") or ""
        base_path = element.get_string("base", "path") or ""

        try:
            id_components = element_id.split(".")
            path_components = element_path.split(".")
            is_root = len(path_components) < 2

            if is_root:
                if path_components[0] != sd_name and not complex_structure.context_elements:
                    complex_structure.add_context_element(path_components[0])
            elif tracker is not None and tracker.active:
                tracker.rebuild(element, element_path, id_components)
                element_id = ".".join(id_components)

            resolved = complex_structure.get_parent_and_field_name(sd_url, id_components, path_components)
            if resolved is None:
                if not is_root:
                    # no second pass: an element whose parent is not loaded yet is dropped
                    self.diagnostics.record_dropped(sd_name, element_path, element_id)
                    return
                resolved = (complex_structure, "", "")

            parent, field, slice_name = resolved

            if slice_name:
                self._add_slice(sd_id, sd_url, parent, field, slice_name, element, element_path, base_path)
                return

            element_types, regex, is_simple = self.get_types_from_element(parent.name, element)
            element_type = ""
            if element_types is None:
                element_types = {}
                element_type = "Extension" if field in ("Extension", "extension") else "Element"

            if "[x]" in field:
                element_id = element_id.replace("[x]", "")
                element_path = element_path.replace("[x]", "")
                field = field.replace("[x]", "")
                element_type = ""
            else:
                referenced = self.adapter.resolve_content_reference(sd_name, element, element_path)
                if referenced is not None:
                    element_type = referenced
                    element_types = {}

            default_name, default_value = self._read_open_type_value(element, VALUE_PREFIXES[0])
            fixed_name, fixed_value = self._read_open_type_value(element, VALUE_PREFIXES[1])
            pattern_name, pattern_value = self._read_open_type_value(element, VALUE_PREFIXES[2])

            is_inherited = not element_path.startswith(complex_structure.name)
            modifies_parent = True
            if "base" in element:
                if element.get_string("base", "path") != element.get_string("path"):
                    is_inherited = True
                if (
                    element.get_int("base", "min") == element.get_int("min")
                    and element.get_string("base", "max") == element.get_string("max")
                    and "slicing" not in element
                ):
                    modifies_parent = False

            if self.adapter.inherits_outside_differential and element.get_string("path") not in differential_paths:
                is_inherited = True
                modifies_parent = False

            binding_strength = ""
            value_set = ""
            binding_name = ""
            binding = element.get_expando("binding")
            if binding is not None:
                binding_strength = binding.get_string("strength") or ""
                value_set = self.adapter.get_binding_value_set(binding)
                binding_name = binding.get_extension_value_string(EXT_BINDING_NAME) or ""

            explicit_name = element.get_extension_value_string(EXT_EXPLICIT_TYPE_NAME) or ""
            element_maps = self._read_element_mappings(element)

            if element_path in parent.elements:
                if not self.adapter.skips_repeated_paths:
                    self.diagnostics.error(
                        f"Complex {sd_name} snapshot error ({element_path}): "
                        f"Repeated snapshot: {parent.elements[element_path].id} & {element_id}",
                        "StructureDefinition",
                        sd_id,
                    )
                return

            fhir_element = FhirElement(
                id=element_id,
                path=element_path,
                base_path=base_path,
                explicit_name=explicit_name,
                field_order=len(parent.elements),
                short_description=element.get_string("short") or "",
                purpose=element.get_string("definition") or "",
                comment=self.adapter.get_comment(element),
                validation_regex=regex,
                base_type_name=element_type,
                element_types=element_types,
                cardinality_min=element.get_int("min") or 0,
                cardinality_max=FhirElement.parse_max(element.get_string("max")),
                is_modifier=element.get_bool("isModifier") is True,
                is_modifier_reason=element.get_string("isModifierReason") or "",
                is_summary=element.get_bool("isSummary") is True,
                must_support=element.get_bool("mustSupport") is True,
                is_simple=is_simple,
                representation=element.get_string_array("representation") or [],
                default_field_name=default_name,
                default_field_value=default_value,
                fixed_field_name=fixed_name,
                fixed_field_value=fixed_value,
                pattern_field_name=pattern_name,
                pattern_field_value=pattern_value,
                is_inherited=is_inherited,
                modifies_parent=modifies_parent,
                binding_strength=binding_strength,
                value_set=value_set,
                binding_name=binding_name,
                five_ws=self._five_ws(element_maps),
                mappings=element_maps,
            )

            if is_root:
                parent.root_element = fhir_element
            else:
                parent.elements[element_path] = fhir_element

            slicing = element.get_expando("slicing")
            if slicing is not None:
                self._add_slicing(sd_id, sd_name, sd_url, fhir_element, slicing, element_path)
                if tracker is not None and not is_root:
                    tracker.start(element.get_string("path") or element_path)

            fhir_element.conditions.extend(element.get_string_array("condition") or [])

            for order, constraint in enumerate(element.get_expando_list("constraint")):
                fhir_element.constraints.append(self._build_constraint(constraint, element_path, order))

        except Exception as e:
            logger.error("Failed to process element %s (%s) of %s: %s", element_path, element_id, sd_name, e)
            raise

    def _add_slice(
        self,
        sd_id: str,
        sd_url: str,
        parent: FhirComplex,
        field: str,
        slice_name: str,
        element: JsonTree,
        element_path: str,
        base_path: str,
    ) -> None:
        """Attach a slice to its sliced element; slices never get a path entry of their own."""
        # choice elements are keyed without [x]
        element_path = element_path.replace("[x]", "")

        if element_path not in parent.elements and field == "extension":
            parent.elements[element_path] = FhirElement(
                id=element_path,
                path=element_path,
                base_path=base_path,
                field_order=len(parent.elements),
                short_description=EXTENSION_SHORT,
                purpose=EXTENSION_DEFINITION,
                comment=EXTENSION_COMMENT,
                base_type_name="Extension",
                cardinality_min=0,
                cardinality_max=-1,
                is_modifier=element.get_bool("isModifier") is True,
                is_modifier_reason=element.get_string("isModifierReason") or "",
                is_summary=element.get_bool("isSummary") is True,
                must_support=element.get_bool("mustSupport") is True,
                is_inherited=True,
                modifies_parent=True,
            )

        sliced = parent.elements.get(element_path)
        if sliced is None:
            return

        if sd_url not in sliced.slicing:
            slicing = FhirSlicing(
                defined_by_id=sd_id,
                defined_by_url=sd_url,
                description=DEFAULT_EXTENSION_SLICING_DESCRIPTION,
                slicing_rules=SlicingRule.OPEN,
                field_order=sliced.field_order,
            )
            slicing.add_discriminator_rule(FhirSliceDiscriminatorRule(type="value", path="url"))
            sliced.add_slicing(slicing)

        sliced.add_slice(sd_url, slice_name)

    def _add_slicing(
        self,
        sd_id: str,
        sd_name: str,
        sd_url: str,
        fhir_element: FhirElement,
        slicing: JsonTree,
        element_path: str,
    ) -> None:
        discriminators = self.adapter.get_discriminators(slicing)
        if not discriminators:
            raise ConversionError(
                f"Missing slicing discriminator: {sd_name} - {element_path}",
                structure=sd_name,
                element_path=element_path,
            )

        fhir_slicing = FhirSlicing(
            defined_by_id=sd_id,
            defined_by_url=sd_url,
            description=slicing.get_string("description") or "",
            is_ordered=slicing.get_bool("ordered") is True,
            field_order=fhir_element.field_order,
            slicing_rules=SlicingRule.parse(slicing.get_string("rules")),
        )
        for rule_type, rule_path in discriminators:
            fhir_slicing.add_discriminator_rule(FhirSliceDiscriminatorRule(type=rule_type, path=rule_path))
        fhir_element.add_slicing(fhir_slicing)

    def _apply_differential(self, sd_url: str, complex_structure: FhirComplex, differential: List[JsonTree]) -> None:
        element0 = differential[0]

        for identity, mappings in self._read_element_mappings(element0).items():
            complex_structure.root_mappings.setdefault(identity, []).extend(mappings)

        for order, constraint in enumerate(element0.get_expando_list("constraint")):
            complex_structure.add_constraint(self._build_constraint(constraint, complex_structure.name, order))

        for element in differential:
            path = (element.get_string("path") or "").replace("[x]", "")
            found = complex_structure.find_element(path)
            if found is None:
                continue

            found.in_differential = True

            slice_name = self.adapter.get_slice_name(element)
            slicing = found.slicing.get(sd_url)
            if slice_name and slicing is not None and slicing.has_slice(slice_name):
                slicing.set_in_differential(slice_name)

    @staticmethod
    def _register(sink: PackageImportable, complex_structure: FhirComplex, artifact_class: ArtifactClass) -> None:
        if artifact_class == ArtifactClass.COMPLEX_TYPE:
            sink.add_complex_type(complex_structure)
        elif artifact_class == ArtifactClass.RESOURCE:
            sink.add_resource(complex_structure)
        elif artifact_class == ArtifactClass.EXTENSION:
            sink.add_extension(complex_structure)
        elif artifact_class == ArtifactClass.PROFILE:
            sink.add_profile(complex_structure)
        elif artifact_class == ArtifactClass.LOGICAL_MODEL:
            sink.add_logical_model(complex_structure)

    # ========================================================================
    # Type resolution
    # ========================================================================

    def get_types_from_elements(self, structure_name: str, elements: List[JsonTree]) -> Optional[ElementTypes]:
        """
        Base type of a structure without a base definition: the root
        element's type, else the last `{type}.value` element with a type.
        """
        found: Optional[ElementTypes] = None

        for element in elements:
            components = (element.get_string("path") or "").split(".")

            if len(components) == 1:
                element_types, _, _ = self.get_types_from_element(structure_name, element)
                if element_types is not None:
                    return element_types

            if len(components) == 2 and components[1] == "value":
                element_types, _, _ = self.get_types_from_element(structure_name, element)
                if element_types is not None:
                    found = element_types

        return found

    def get_types_from_element(
        self,
        structure_name: str,
        element: JsonTree,
    ) -> Tuple[Optional[ElementTypes], str, bool]:
        """
        Types declared on one element.

        Returns:
            (types keyed by name or None when nothing was found, regex, is_simple)
        """
        element_path = element.get_string("path") or ""
        element_id = element.get_string("id") or ""
        element_types: ElementTypes = {}
        regex = ""
        is_simple = False

        override = ELEMENT_TYPE_OVERRIDES.get(element_path)
        if override:
            declared = element.get_expando_list("type")
            if declared and declared[0].get_string("code") != override:
                self.diagnostics.warning(
                    f"StructureDefinition - {structure_name} coerced {element_id or element_path} to type '{override}'",
                    "StructureDefinition",
                )
                return {override: FhirElementType.from_code(override)}, regex, is_simple

        for element_type in element.get_expando_list("type"):
            regex = element_type.get_extension_value_string(EXT_REGEX) or ""
            fhir_type_ext = element_type.get_extension(EXT_FHIR_TYPE)
            fhir_type = ""
            if fhir_type_ext is not None:
                fhir_type = fhir_type_ext.get_string("valueUrl") or fhir_type_ext.get_string("valueString") or ""

            targets = self.adapter.get_type_targets(element_type)
            profiles = self.adapter.get_type_profiles(element_type)
            code = fhir_type or element_type.get_string("code") or ""
            if not code:
                continue

            resolved = FhirElementType.from_code(code, targets, profiles)
            if fhir_type:
                is_simple = True

            if resolved.name in element_types:
                existing = element_types[resolved.name]
                if targets:
                    existing.add_target_profile(targets[0])
                if profiles:
                    existing.add_type_profile(profiles[0])
                continue

            element_types[resolved.name] = resolved

        if element_types:
            return element_types, regex, is_simple

        check_name = self.adapter.get_type_check_name(element)
        if not check_name or check_name == structure_name:
            root_type = FhirElementType.from_code(element_path)
            return {root_type.name: root_type}, regex, is_simple

        return None, regex, is_simple

    # ========================================================================
    # Element details
    # ========================================================================

    @staticmethod
    def _read_open_type_value(element: JsonTree, prefix: str) -> Tuple[str, Any]:
        """First `{prefix}{Type}` key present, in open-type priority order."""
        for suffix, read_type in OPEN_TYPE_CHOICES:
            name = prefix + suffix
            if name not in element:
                continue

            if read_type == ReadType.BYTES:
                return name, element.get_byte_array(name)
            if read_type == ReadType.BOOL:
                return name, element.get_bool(name)
            if read_type == ReadType.DECIMAL:
                return name, element.get_decimal(name)
            if read_type == ReadType.STRING:
                return name, element.get_string(name)
            if read_type == ReadType.STRING_ARRAY:
                return name, element.get_string_array(name)
            if read_type == ReadType.INT:
                return name, element.get_int(name)
            if read_type == ReadType.LONG:
                return name, element.get_long(name)
            return name, element.get(name)

        return "", None

    @staticmethod
    def _read_element_mappings(element: JsonTree) -> Dict[str, List[FhirElementDefMapping]]:
        mappings: Dict[str, List[FhirElementDefMapping]] = {}
        for mapping in element.get_expando_list("mapping"):
            identity = mapping.get_string("identity") or ""
            mappings.setdefault(identity, []).append(FhirElementDefMapping(
                identity=identity,
                language=mapping.get_string("language") or "",
                map=mapping.get_string("map") or "",
                comment=mapping.get_string("comment") or "",
            ))
        return mappings

    @staticmethod
    def _five_ws(mappings: Dict[str, List[FhirElementDefMapping]]) -> str:
        for mapping in mappings.get("w5", []):
            if mapping.map.startswith("FiveWs") and mapping.map != "FiveWs.subject[x]":
                return mapping.map
        return ""

    @staticmethod
    def _build_constraint(constraint: JsonTree, path: str, order: int) -> FhirConstraint:
        is_best_practice = False
        explanation = ""
        for ext in constraint.get_expando_list("extension"):
            url = ext.get_string("url")
            if url == EXT_BEST_PRACTICE:
                is_best_practice = ext.get_bool("valueBoolean") is True
            elif url == EXT_BEST_PRACTICE_EXPLANATION:
                explanation = ext.get_string("valueMarkdown") or ext.get_string("valueString") or ""

        return FhirConstraint(
            key=constraint.get_string("key") or "",
            severity=constraint.get_string("severity") or "",
            description=constraint.get_string("human") or "",
            expression=constraint.get_string("expression") or "",
            xpath=constraint.get_string("xpath") or "",
            requirements=constraint.get_string("requirements") or "",
            suppress=constraint.get_bool("suppress"),
            is_best_practice=is_best_practice,
            best_practice_explanation=explanation,
            source=constraint.get_string("source") or "",
            path=path,
            order=order,
        )
