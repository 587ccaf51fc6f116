"""
Typed accessor over loosely-typed FHIR JSON.

JsonTree wraps a parsed JSON object and exposes getters that walk a path
of keys (and list indexes) and return None instead of raising when a
step is missing or has the wrong shape. The release converters read
resources through it so the null-propagation lives in one place.

Components:
- JsonTree: the accessor (get_string, get_int, get_bool, get_expando, ...)
- extension helpers: lookup of `extension` entries by url
"""
import json
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterator, List, Optional, Union

PathKey = Union[str, int]


class JsonTree:
    """
    Thin view over a JSON object (dict).

    The underlying dict is shared, not copied: writes through a JsonTree
    (including one returned by get_expando) are visible to every other
    view of the same document.

    Usage:
        tree = JsonTree.parse(text)
        name = tree.get_string("name")
        for element in tree.get_expando_list("snapshot", "element"):
            ...
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TypeError(f"JsonTree requires a JSON object, got {type(data).__name__}")
        self._data = data

    @classmethod
    def parse(cls, text: str) -> "JsonTree":
        """
        Parse JSON text into a tree.

        Raises:
            json.JSONDecodeError: If the text is not valid JSON
            TypeError: If the top-level value is not an object
        """
        return cls(json.loads(text))

    @property
    def data(self) -> Dict[str, Any]:
        """The wrapped dictionary."""
        return self._data

    def __getitem__(self, key: str) -> Any:
        return self._data.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __contains__(self, key: str) -> bool:
        return self._data.get(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JsonTree):
            return self._data == other._data
        return NotImplemented

    def __repr__(self) -> str:
        resource_type = self._data.get("resourceType")
        if resource_type:
            return f"<JsonTree {resource_type}/{self._data.get('id', '')}>"
        return f"<JsonTree keys={list(self._data)[:5]}>"

    # ========================================================================
    # Raw access
    # ========================================================================

    def get(self, *path: PathKey) -> Any:
        """
        Walk a path and return the raw value found there.

        String keys index objects; integer keys (or digit strings) index
        arrays. Returns None as soon as a step cannot be taken.
        """
        current: Any = self._data

        for key in path:
            if current is None:
                return None

            if isinstance(current, dict):
                current = current.get(key) if isinstance(key, str) else None
                continue

            if isinstance(current, list):
                try:
                    index = int(key)
                except (TypeError, ValueError):
                    return None
                if index < 0 or index >= len(current):
                    return None
                current = current[index]
                continue

            return None

        return current

    def has(self, *path: PathKey) -> bool:
        """True if a non-null value exists at the path."""
        return self.get(*path) is not None

    # ========================================================================
    # Scalar getters
    # ========================================================================

    def get_string(self, *path: PathKey) -> Optional[str]:
        value = self.get(*path)
        if isinstance(value, str):
            return value
        return None

    def get_int(self, *path: PathKey) -> Optional[int]:
        value = self.get(*path)
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, int):
            return value
        try:
            return int(str(value))
        except ValueError:
            return None

    def get_long(self, *path: PathKey) -> Optional[int]:
        """Same as get_int; Python ints are unbounded, kept for integer64 values."""
        return self.get_int(*path)

    def get_decimal(self, *path: PathKey) -> Optional[Decimal]:
        value = self.get(*path)
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, Decimal):
            return value
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return None

    def get_bool(self, *path: PathKey) -> Optional[bool]:
        value = self.get(*path)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
        return None

    def get_byte_array(self, *path: PathKey) -> Optional[bytes]:
        value = self.get(*path)
        if isinstance(value, bytes):
            return value
        if isinstance(value, str):
            return value.encode("utf-8")
        return None

    def get_string_array(self, *path: PathKey) -> Optional[List[str]]:
        """
        Read a string array. A scalar is promoted to a one-item list and
        non-string items are converted with str(). Returns None if absent.
        """
        value = self.get(*path)
        if value is None:
            return None
        if isinstance(value, list):
            return [item if isinstance(item, str) else str(item) for item in value if item is not None]
        if isinstance(value, str):
            return [value]
        if isinstance(value, dict):
            return None
        return [str(value)]

    # ========================================================================
    # Object getters
    # ========================================================================

    def get_expando(self, *path: PathKey) -> Optional["JsonTree"]:
        value = self.get(*path)
        if isinstance(value, dict):
            return JsonTree(value)
        return None

    def get_expando_list(self, *path: PathKey) -> List["JsonTree"]:
        """
        Read an array of objects as JsonTrees. A single object is promoted
        to a one-item list; null and non-object items are skipped.
        """
        value = self.get(*path)
        if isinstance(value, dict):
            return [JsonTree(value)]
        if isinstance(value, list):
            return [JsonTree(item) for item in value if isinstance(item, dict)]
        return []

    # ========================================================================
    # Extensions
    # ========================================================================

    def _extension_host(self, path: tuple) -> Optional["JsonTree"]:
        if not path:
            return self
        return self.get_expando(*path)

    def get_extensions(self, url: str, *path: PathKey) -> List["JsonTree"]:
        """All `extension` entries with a matching url on the node at path."""
        host = self._extension_host(path)
        if host is None:
            return []
        return [ext for ext in host.get_expando_list("extension") if ext.get_string("url") == url]

    def get_extension(self, url: str, *path: PathKey) -> Optional["JsonTree"]:
        """First `extension` entry with a matching url, or None."""
        matches = self.get_extensions(url, *path)
        return matches[0] if matches else None

    def get_extension_value_string(self, url: str, *path: PathKey) -> Optional[str]:
        ext = self.get_extension(url, *path)
        return ext.get_string("valueString") if ext is not None else None

    def get_extension_value_code(self, url: str, *path: PathKey) -> Optional[str]:
        ext = self.get_extension(url, *path)
        return ext.get_string("valueCode") if ext is not None else None

    def get_extension_value_integer(self, url: str, *path: PathKey) -> Optional[int]:
        ext = self.get_extension(url, *path)
        return ext.get_int("valueInteger") if ext is not None else None

    def get_extension_value_code_list(self, url: str, *path: PathKey) -> List[str]:
        """
        Read one extension code per entry of a primitive-array shadow
        element (e.g. `_format`). Entries without the extension give "".
        """
        value = self.get(*path)
        if not isinstance(value, list):
            return []

        codes = []
        for entry in value:
            if not isinstance(entry, dict):
                codes.append("")
                continue
            codes.append(JsonTree(entry).get_extension_value_code(url) or "")
        return codes

    def get_sub_extension_strings(self, url: str) -> List[str]:
        """valueString of every nested extension with the given (relative) url."""
        values = []
        for ext in self.get_extensions(url):
            value = ext.get_string("valueString")
            if value is not None:
                values.append(value)
        return values

    def to_dict(self) -> Dict[str, Any]:
        return self._data
