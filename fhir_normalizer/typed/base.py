"""
Shared pieces of the per-release typed models.

Every typed resource keeps unknown keys (extra="allow") so the converters
see the complete document after dumping; only the fields whose shape
differs between releases are declared, so validation catches a resource
parsed with the wrong release.
"""
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, Field


class TypedElement(BaseModel):
    """Base for nested typed structures."""
    model_config = {"extra": "allow", "populate_by_name": True}


class Reference(TypedElement):
    reference: Optional[str] = None
    display: Optional[str] = None


class Coding(TypedElement):
    system: Optional[str] = None
    version: Optional[str] = None
    code: Optional[str] = None
    display: Optional[str] = None


class ElementList(TypedElement):
    """snapshot / differential: elements stay as raw dicts."""
    element: List[Dict[str, Any]] = Field(default_factory=list)


class TypedResource(BaseModel):
    """Fields every conformance resource shares across releases."""
    resource_type: str = Field(alias="resourceType")
    id: Optional[str] = None
    url: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None
    status: Optional[str] = None
    experimental: Optional[bool] = None
    extension: Optional[List[Dict[str, Any]]] = None

    model_config = {"extra": "allow", "populate_by_name": True}

    def to_json_dict(self) -> Dict[str, Any]:
        """The resource as FHIR JSON (wire names, nulls dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class GenericResource(TypedResource):
    """Any resource type the release module does not model."""


def parse_typed(models: Dict[str, Type[TypedResource]], data: Dict[str, Any]) -> TypedResource:
    """
    Validate a parsed JSON object into the release model for its resourceType.

    Raises:
        pydantic.ValidationError: If the document does not fit the release shape
    """
    model = models.get(data.get("resourceType") or "", GenericResource)
    return model.model_validate(data)
