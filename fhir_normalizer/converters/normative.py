"""
Generic JSON-tree converter.

Works on any release: resources stay JsonTrees and every shape difference
is probed in priority order by the adapter. Given a release, it uses that
release's adapter instead so release-specific quirks (DSTU2 slice ids,
inherited elements) still apply.
"""
from typing import Any, Dict, Optional, Tuple

from ..diagnostics import Diagnostics
from ..json_tree import JsonTree
from ..releases import FhirSequence
from .adapters import ADAPTERS, ReleaseAdapter
from .base import FhirConverter, ResourceObject


class NormativeConverter(FhirConverter):

    def __init__(self, release: Optional[FhirSequence] = None, diagnostics: Optional[Diagnostics] = None):
        self.release = release
        adapter = ADAPTERS[release]() if release is not None else ReleaseAdapter()
        super().__init__(diagnostics=diagnostics, adapter=adapter)

    @property
    def capability_resource_types(self) -> Tuple[str, ...]:
        return ("CapabilityStatement", "Conformance")

    def parse_json(self, data: Dict[str, Any]) -> JsonTree:
        return JsonTree(data)

    def get_resource_type(self, resource: ResourceObject) -> str:
        return self.to_tree(resource).get_string("resourceType") or ""
