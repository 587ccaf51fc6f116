"""
Per-Release Typed Models

Pydantic models for the conformance resources of each FHIR release.
The typed converters validate input against these before processing.

Components:
- base: shared TypedResource, parse_typed
- r2, r3, r4, r4b, r5: one module per release (RESOURCE_MODELS, parse_resource)
"""
from . import r2, r3, r4, r4b, r5
from .base import GenericResource, TypedResource, parse_typed

__all__ = [
    "r2",
    "r3",
    "r4",
    "r4b",
    "r5",
    "GenericResource",
    "TypedResource",
    "parse_typed",
]
