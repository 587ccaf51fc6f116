"""
CodeSystem and ValueSet processing.

Components:
- TerminologyProcessor.process_code_system: filters, properties and the
  concept tree (with its flat code lookup)
- TerminologyProcessor.process_value_set: compose include/exclude and
  expansion; DSTU2 value sets also carry an embedded code system
"""
import logging
from typing import Any, Dict, List, Optional

from ..constants import (
    BALLOT_VALUE_SET_RENAMES,
    BALLOT_VERSIONS,
    EXT_FMM,
    EXT_STANDARDS_STATUS,
    EXT_VALUESET_DEPRECATED,
)
from ..diagnostics import Diagnostics
from ..json_tree import JsonTree
from ..models import (
    FhirCodeSystem,
    FhirCodeSystemFilter,
    FhirCodeSystemProperty,
    FhirConcept,
    FhirConceptTreeNode,
    FhirValueSet,
    FhirValueSetComposition,
    FhirValueSetExpansion,
    FhirValueSetFilter,
    PropertyType,
)
from ..sink import PackageImportable
from .adapters import ReleaseAdapter

logger = logging.getLogger(__name__)

FHIR_BASE_URL = "http://hl7.org/fhir/"


class TerminologyProcessor:
    """Build FhirCodeSystem and FhirValueSet records."""

    def __init__(self, adapter: ReleaseAdapter, diagnostics: Diagnostics):
        self.adapter = adapter
        self.diagnostics = diagnostics

    # ========================================================================
    # CodeSystem
    # ========================================================================

    def process_code_system(self, cs: JsonTree, sink: PackageImportable) -> Optional[FhirCodeSystem]:
        cs_id = cs.get_string("id") or ""
        cs_name = cs.get_string("name") or ""
        status = self.adapter.get_status(cs)

        if not status:
            status = "unknown"
            self.diagnostics.error(f"CodeSystem {cs_name} ({cs_id}): Status field missing", "CodeSystem", cs_id)

        if status == "retired":
            return None

        filters: Dict[str, FhirCodeSystemFilter] = {}
        for cs_filter in cs.get_expando_list("filter"):
            code = cs_filter.get_string("code")
            if not code:
                continue
            filters[code] = FhirCodeSystemFilter(
                code=code,
                description=cs_filter.get_string("description") or "",
                operators=cs_filter.get_string_array("operator") or [],
                value=cs_filter.get_string("value") or "",
            )

        properties: Dict[str, FhirCodeSystemProperty] = {}
        for prop in cs.get_expando_list("property"):
            code = prop.get_string("code")
            if not code:
                continue
            if code in properties:
                self.diagnostics.warning(
                    f"CodeSystem {cs_name} ({cs_id}): Duplicate proprety found: {code}",
                    "CodeSystem",
                    cs_id,
                )
                continue
            properties[code] = FhirCodeSystemProperty(
                code=code,
                uri=prop.get_string("uri") or "",
                description=prop.get_string("description") or "",
                type=PropertyType.from_value(prop.get_string("type")),
            )

        code_system = FhirCodeSystem(
            id=cs_id,
            name=cs_name,
            url=cs.get_string("url") or "",
            version=cs.get_string("version") or "",
            title=cs.get_string("title") or "",
            status=status,
            standard_status=cs.get_extension_value_code(EXT_STANDARDS_STATUS) or "",
            fhir_maturity_level=cs.get_extension_value_integer(EXT_FMM),
            description=cs.get_string("description") or "",
            content=cs.get_string("content") or "",
            filters=filters,
            properties=properties,
        )

        self.add_concept_tree(
            code_system.url,
            cs_id,
            cs.get_expando_list("concept"),
            code_system.root_concept,
            code_system.concept_lookup,
            properties,
        )

        sink.add_code_system(code_system)
        return code_system

    def add_concept_tree(
        self,
        system: str,
        code_system_id: str,
        concepts: List[JsonTree],
        parent: FhirConceptTreeNode,
        lookup: Dict[str, FhirConceptTreeNode],
        properties: Dict[str, FhirCodeSystemProperty],
    ) -> None:
        """
        Depth-first walk of a concept array.

        A code enters the lookup only after its own subtree was walked, so
        the first occurrence of a code wins and later duplicates are skipped.
        """
        for concept in concepts:
            fhir_concept = self.build_concept(system, code_system_id, concept, properties, lookup)
            if fhir_concept is None:
                continue

            node = parent.add_child(fhir_concept)
            self.add_concept_tree(
                system,
                code_system_id,
                concept.get_expando_list("concept"),
                node,
                lookup,
                properties,
            )

            if fhir_concept.code not in lookup:
                lookup[fhir_concept.code] = node

    @staticmethod
    def build_concept(
        system: str,
        code_system_id: str,
        concept: JsonTree,
        properties: Dict[str, FhirCodeSystemProperty],
        lookup: Dict[str, FhirConceptTreeNode],
    ) -> Optional[FhirConcept]:
        """A concept, or None if the code is empty, already known or deprecated."""
        code = concept.get_string("code")
        if not code or code in lookup:
            return None

        deprecated = concept.get_extension(EXT_VALUESET_DEPRECATED)
        if deprecated is not None and deprecated.get_bool("valueBoolean") is True:
            return None

        fhir_concept = FhirConcept(
            system=system,
            code=code,
            display=concept.get_string("display") or "",
            definition=concept.get_string("definition") or "",
            code_system_id=code_system_id,
        )

        for prop in concept.get_expando_list("property"):
            prop_code = prop.get_string("code")
            if not prop_code:
                continue

            if prop_code == "status" and prop.get_string("valueCode") == "deprecated":
                return None

            if prop_code not in properties:
                continue

            _add_typed_property(fhir_concept, prop_code, properties[prop_code].type, prop)

        return fhir_concept

    def process_embedded_code_system(
        self,
        embedded: JsonTree,
        value_set_id: str,
        sink: PackageImportable,
    ) -> FhirCodeSystem:
        """DSTU2 ValueSet.codeSystem."""
        system = embedded.get_string("system") or ""
        cs_id = embedded.get_string("id") or ""

        if not cs_id and value_set_id:
            cs_id = value_set_id.replace("-", "_")
        if not cs_id:
            cs_id = system.replace(FHIR_BASE_URL, "").replace("/", "_").replace("-", "_")

        code_system = FhirCodeSystem(
            id=cs_id,
            url=system,
            version=embedded.get_string("version") or "",
        )
        self.add_concept_tree(
            system,
            cs_id,
            embedded.get_expando_list("concept"),
            code_system.root_concept,
            code_system.concept_lookup,
            {},
        )
        sink.add_code_system(code_system)
        return code_system

    # ========================================================================
    # ValueSet
    # ========================================================================

    def process_value_set(self, vs: JsonTree, sink: PackageImportable) -> Optional[FhirValueSet]:
        """
        Register a value set. Returns None when it is retired, has no url,
        or a value set with the same url is already in the sink.
        """
        vs_id = vs.get_string("id") or ""
        vs_name = vs.get_string("name") or ""
        vs_url = vs.get_string("url") or ""
        status = self.adapter.get_status(vs) or "unknown"

        if status == "retired":
            return None

        embedded = vs.get_expando("codeSystem")
        if embedded is not None:
            self.process_embedded_code_system(embedded, vs_id, sink)

        if not vs_url:
            self.diagnostics.error(f"ValueSet {vs_name} ({vs_id}): Cannot be indexed - missing URL", "ValueSet", vs_id)
            return None

        if sink.has_value_set(vs_url):
            logger.debug("ValueSet %s already loaded, skipping", vs_url)
            return None

        version = vs.get_string("version") or ""
        if not version:
            self.diagnostics.warning(f"ValueSet {vs_name} ({vs_id}): No Version present", "ValueSet", vs_id)
            version = sink.version_string

        if version in BALLOT_VERSIONS and vs_name in BALLOT_VALUE_SET_RENAMES:
            renamed = BALLOT_VALUE_SET_RENAMES[vs_name]
            self.diagnostics.warning(f"ValueSet {vs_name} renamed to {renamed}", "ValueSet", vs_id)
            vs_name = renamed

        includes = None
        excludes = None
        compose = vs.get_expando("compose")
        if compose is not None:
            if "include" in compose:
                includes = [self.build_composition(c) for c in compose.get_expando_list("include")]
            if "exclude" in compose:
                excludes = [self.build_composition(c) for c in compose.get_expando_list("exclude")]

        expansion = None
        if "expansion" in vs:
            expansion = self.build_expansion(vs.get_expando("expansion"))

        if includes is None and expansion is None and embedded is not None:
            includes = [self._embedded_composition(embedded)]

        value_set = FhirValueSet(
            id=vs_id,
            name=vs_name,
            url=vs_url,
            version=version,
            title=vs.get_string("title") or vs_name,
            status=status,
            standard_status=vs.get_extension_value_code(EXT_STANDARDS_STATUS) or "",
            fhir_maturity_level=vs.get_extension_value_integer(EXT_FMM),
            description=vs.get_string("description") or vs_name,
            includes=includes,
            excludes=excludes,
            expansion=expansion,
        )
        sink.add_value_set(value_set)
        return value_set

    @staticmethod
    def build_composition(compose: JsonTree) -> FhirValueSetComposition:
        system = compose.get_string("system") or ""

        concepts = None
        if "concept" in compose:
            concepts = [
                FhirConcept(
                    system=system,
                    code=concept.get_string("code") or "",
                    display=concept.get_string("display") or "",
                )
                for concept in compose.get_expando_list("concept")
            ]

        filters = None
        if "filter" in compose:
            filters = [
                FhirValueSetFilter(
                    property=vs_filter.get_string("property") or "",
                    operation=vs_filter.get_string("op") or "",
                    value=vs_filter.get_string("value") or "",
                )
                for vs_filter in compose.get_expando_list("filter")
            ]

        linked_value_sets = None
        if "valueSet" in compose:
            linked_value_sets = compose.get_string_array("valueSet") or []

        return FhirValueSetComposition(
            system=system,
            version=compose.get_string("version") or "",
            concepts=concepts,
            filters=filters,
            linked_value_sets=linked_value_sets,
        )

    @staticmethod
    def _embedded_composition(embedded: JsonTree) -> FhirValueSetComposition:
        system = embedded.get_string("system") or ""
        version = embedded.get_string("version") or ""
        return FhirValueSetComposition(
            system=system,
            version=version,
            concepts=[
                FhirConcept(
                    system=system,
                    code=concept.get_string("code") or "",
                    display=concept.get_string("display") or "",
                    version=version,
                    definition=concept.get_string("definition") or "",
                )
                for concept in embedded.get_expando_list("concept")
            ],
        )

    def build_expansion(self, expansion: JsonTree) -> FhirValueSetExpansion:
        parameters = None
        if "parameter" in expansion:
            parameters = {}
            for param in expansion.get_expando_list("parameter"):
                name = param.get_string("name")
                if not name or name in parameters:
                    continue
                for key in param.keys():
                    if key != "name":
                        parameters[name] = param[key]
                        break

        contains = None
        if "contains" in expansion:
            contains = []
            for entry in expansion.get_expando_list("contains"):
                self.add_contains(contains, entry)

        return FhirValueSetExpansion(
            id=expansion.get_string("id") or "",
            timestamp=expansion.get_string("timestamp") or "",
            total=expansion.get_int("total"),
            offset=expansion.get_int("offset"),
            parameters=parameters,
            contains=contains,
        )

    def add_contains(self, contains: List[FhirConcept], entry: JsonTree) -> None:
        """Flatten one expansion.contains entry and its nested entries (no dedupe)."""
        concept = FhirConcept(
            system=entry.get_string("system") or "",
            code=entry.get_string("code") or "",
            display=entry.get_string("display") or "",
            version=entry.get_string("version") or "",
        )

        for prop in entry.get_expando_list("property"):
            prop_code = prop.get_string("code")
            if not prop_code:
                continue
            for key in prop.keys():
                if key == "code":
                    continue
                _add_keyed_property(concept, prop_code, key, prop)

        if concept.system or concept.code:
            contains.append(concept)

        for nested in entry.get_expando_list("contains"):
            self.add_contains(contains, nested)


def _coding_value(prop: JsonTree) -> Dict[str, str]:
    return {
        "system": prop.get_string("valueCoding", "system") or "",
        "code": prop.get_string("valueCoding", "code") or "",
        "version": prop.get_string("valueCoding", "version") or "",
    }


def _add_coding(concept: FhirConcept, prop_code: str, prop: JsonTree) -> None:
    coding = _coding_value(prop)
    concept.add_property(
        prop_code,
        coding,
        FhirConcept.get_canonical(coding["system"], coding["code"], coding["version"]),
    )


def _as_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _add_typed_property(concept: FhirConcept, prop_code: str, prop_type: PropertyType, prop: JsonTree) -> None:
    """Concept property read according to the code system's declared type."""
    if prop_type == PropertyType.CODE:
        value = prop.get_string("valueCode")
    elif prop_type == PropertyType.CODING:
        if "valueCoding" in prop:
            _add_coding(concept, prop_code, prop)
        return
    elif prop_type == PropertyType.STRING:
        value = prop.get_string("valueString")
    elif prop_type == PropertyType.INTEGER:
        value = prop.get_int("valueInteger")
    elif prop_type == PropertyType.BOOLEAN:
        value = prop.get_bool("valueBoolean")
    elif prop_type == PropertyType.DATE_TIME:
        value = prop.get_string("valueDateTime")
    elif prop_type == PropertyType.DECIMAL:
        value = prop.get_decimal("valueDecimal")
    else:
        return

    concept.add_property(prop_code, value, _as_string(value))


def _add_keyed_property(concept: FhirConcept, prop_code: str, key: str, prop: JsonTree) -> None:
    """Expansion property read according to which value[x] key is present."""
    if key == "valueCoding":
        _add_coding(concept, prop_code, prop)
        return

    if key in ("valueCode", "valueString", "valueDateTime"):
        value = prop.get_string(key)
    elif key == "valueInteger":
        value = prop.get_int(key)
    elif key == "valueDecimal":
        value = prop.get_decimal(key)
    else:
        value = prop.get(key)

    concept.add_property(prop_code, value, _as_string(value))
