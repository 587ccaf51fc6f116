"""
Wire-type lookup tables for FHIR primitive and element type codes.
"""
from typing import Optional

XML_TYPES = {
    "xsd:token": "code",
    "xsd:string": "string",
    "xs:string": "string",
    "xhtml:div": "string",
    "xs:anyURI": "uri",
    "xsd:anyURI": "uri",
    "xsd:base64Binary": "base64Binary",
    "xs:base64Binary": "base64Binary",
    "xsd:int": "integer",
    "xs:int": "integer",
    "xsd:positiveInteger": "positiveInt",
    "xs:positiveInteger": "positiveInt",
    "xsd:nonNegativeInteger": "unsignedInt",
    "xs:nonNegativeInteger": "unsignedInt",
    "xsd:gYear OR xsd:gYearMonth OR xsd:date": "date",
    "xs:gYear, xs:gYearMonth, xs:date": "date",
    "xsd:gYear OR xsd:gYearMonth OR xsd:date OR xsd:dateTime": "dateTime",
    "xs:gYear, xs:gYearMonth, xs:date, xs:dateTime": "dateTime",
    "xsd:time": "time",
    "xs:time": "time",
    "xsd:dateTime": "instant",
    "xs:dateTime": "instant",
    "xsd:boolean": "boolean",
    "xs:boolean": "boolean",
    "xsd:decimal": "decimal",
    "xs:decimal": "decimal",
    "xsd:decimal OR xsd:double": "decimal",
    "xs:decimal, xs:double": "decimal",
}

XML_BASE_TYPES = {
    "xsd:token": "code",
    "xs:token": "code",
    "xsd:string": "string",
    "xs:string": "string",
    "xs:string+": "string",
    "xhtml:div": "string",
    "xs:anyURI": "string",
    "xs:anyURI+": "string",
    "xsd:anyURI": "string",
    "anyURI": "string",
    "xsd:base64Binary": "string",
    "xs:base64Binary": "string",
    "base64Binary": "string",
    "xsd:int": "int",
    "xs:int": "int",
    "xsd:positiveInteger": "int",
    "xs:positiveInteger": "int",
    "xsd:nonNegativeInteger": "int",
    "xs:nonNegativeInteger": "int",
    "xsd:gYear OR xsd:gYearMonth OR xsd:date": "date",
    "xs:gYear, xs:gYearMonth, xs:date": "date",
    "xsd:date": "date",
    "xsd:gYear OR xsd:gYearMonth OR xsd:date OR xsd:dateTime": "dateTime",
    "xs:gYear, xs:gYearMonth, xs:date, xs:dateTime": "dateTime",
    "xsd:time": "time",
    "xs:time": "time",
    "time": "time",
    "xsd:dateTime": "dateTime",
    "xs:dateTime": "dateTime",
    "xsd:boolean": "boolean",
    "xs:boolean": "boolean",
    "xsd:decimal": "decimal",
    "xs:decimal": "decimal",
    "xsd:decimal OR xsd:double": "decimal",
    "xs:decimal, xs:double": "decimal",
}

FHIRPATH_TYPES = {
    "http://hl7.org/fhirpath/System.String": "string",
    "http://hl7.org/fhirpath/System.Boolean": "boolean",
    "http://hl7.org/fhirpath/System.Date": "date",
    "http://hl7.org/fhirpath/System.DateTime": "dateTime",
    "http://hl7.org/fhirpath/System.Decimal": "decimal",
    "http://hl7.org/fhirpath/System.Integer": "int",
    "http://hl7.org/fhirpath/System.Time": "time",
}


def xml_type(code: str) -> Optional[str]:
    return XML_TYPES.get(code)


def xml_base_type(code: str) -> Optional[str]:
    return XML_BASE_TYPES.get(code)


def fhirpath_type(code: str) -> Optional[str]:
    return FHIRPATH_TYPES.get(code)


def normalize_type_code(code: Optional[str]) -> str:
    """
    Resolve an element type code to a FHIR type name.

    xml wire types first, then FHIRPath system types, then the last
    segment of a URL-valued code ('http://.../StructureDefinition/Foo' -> 'Foo').
    """
    if not code:
        return ""

    found = xml_type(code) or fhirpath_type(code)
    if found:
        return found

    if "/" in code:
        return code.rsplit("/", 1)[-1]

    return code


def primitive_base_type(code: Optional[str]) -> Optional[str]:
    """
    Base (wire) type for a primitive's `.value` element type code:
    FHIRPath system types first, then the xml base table.
    """
    if not code:
        return None
    return fhirpath_type(code) or xml_base_type(code)
