"""API description data structures."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from restlint.errors import StructuralError

HTTP_METHODS = ("GET", "PUT", "POST", "DELETE", "OPTIONS", "HEAD", "PATCH", "TRACE")

EMPTY_MAPPING: Mapping[str, Any] = MappingProxyType({})


def freeze(value: Any) -> Any:
    """Return a read-only deep copy of decoded JSON/YAML data.

    Mappings become ``MappingProxyType`` objects with string keys and lists
    become tuples. The input is never modified.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class Parameter:
    """A declared operation or path-level parameter."""

    name: str
    location: str  # query, path, header, cookie, body, formData
    required: bool = False
    schema: Mapping[str, Any] = field(default_factory=lambda: EMPTY_MAPPING)

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the parameter within an operation."""
        return (self.name, self.location)


@dataclass(frozen=True)
class MediaTypeSpec:
    """One media type entry of a response or request body."""

    media_type: str
    schema: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class ResponseSpec:
    """A declared response of an operation."""

    status_code: str  # "200", "4XX", "default"
    method: str
    media_types: tuple[MediaTypeSpec, ...] = ()
    headers: Mapping[str, Any] = field(default_factory=lambda: EMPTY_MAPPING)
    description: str = ""

    @property
    def status_class(self) -> str:
        """First digit of the status code, or "" for ``default``."""
        code = self.status_code.strip()
        return code[0] if code[:1].isdigit() else ""

    @property
    def is_error(self) -> bool:
        """Whether this is a 4xx or 5xx response."""
        return self.status_class in ("4", "5")

    def get_media_type(self, media_type: str) -> MediaTypeSpec | None:
        """Find a media type entry, ignoring parameters such as charset."""
        for entry in self.media_types:
            if entry.media_type.split(";")[0].strip().lower() == media_type:
                return entry
        return None

    def get_header(self, name: str) -> Any:
        """Case-insensitive header lookup."""
        for header_name, header in self.headers.items():
            if header_name.lower() == name.lower():
                return header
        return None


@dataclass(frozen=True)
class Operation:
    """An HTTP operation declared on a path."""

    method: str
    operation_id: str = ""
    parameters: tuple[Parameter, ...] = ()
    request_body: Mapping[str, Any] | None = None
    responses: tuple[ResponseSpec, ...] = ()
    deprecated: bool = False

    def all_parameters(self, path_item: PathItem) -> tuple[Parameter, ...]:
        """Merge path-level and operation-level parameters.

        Operation parameters override path-level ones with the same name and
        location. Path-level parameters come first.
        """
        overridden = {p.key for p in self.parameters}
        inherited = tuple(p for p in path_item.parameters if p.key not in overridden)
        return inherited + self.parameters

    def get_response(self, status_code: str) -> ResponseSpec | None:
        """Find a response by its declared status code."""
        for response in self.responses:
            if response.status_code == status_code:
                return response
        return None


@dataclass(frozen=True)
class PathItem:
    """A path template and the operations declared on it."""

    path: str
    operations: tuple[Operation, ...] = ()
    parameters: tuple[Parameter, ...] = ()

    @property
    def segments(self) -> list[str]:
        """Path segments, without the leading empty segment.

        A trailing slash produces a trailing empty segment.
        """
        return self.path.split("/")[1:] if self.path.startswith("/") else self.path.split("/")

    def get_operation(self, method: str) -> Operation | None:
        """Find an operation by HTTP method."""
        for operation in self.operations:
            if operation.method == method.upper():
                return operation
        return None


@dataclass(frozen=True)
class ApiDocument:
    """Parsed, immutable view of an API description.

    Paths and operations keep the order in which they appear in the source
    document. ``raw`` holds a read-only copy of the whole document and is the
    target of local ``$ref`` pointers.
    """

    openapi_version: str
    title: str = ""
    version: str = ""
    info: Mapping[str, Any] = field(default_factory=lambda: EMPTY_MAPPING)
    servers: tuple[str, ...] = ()
    paths: tuple[PathItem, ...] = ()
    raw: Mapping[str, Any] = field(default_factory=lambda: EMPTY_MAPPING, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> ApiDocument:
        """Create a document from decoded JSON/YAML data.

        Raises:
            StructuralError: If the data cannot be interpreted as an API description.
        """
        from restlint.spec.parser import DocumentParser

        return DocumentParser().parse(data)

    @property
    def is_swagger(self) -> bool:
        """Whether the source was a Swagger 2.0 document."""
        return self.openapi_version.startswith("2")

    def get_path(self, path: str) -> PathItem | None:
        """Find a path item by its template."""
        for item in self.paths:
            if item.path == path:
                return item
        return None

    def iter_operations(self):
        """Yield ``(path_item, operation)`` pairs in document order."""
        for item in self.paths:
            for operation in item.operations:
                yield item, operation

    def resolve(self, node: Any) -> Any:
        """Follow local ``$ref`` pointers until a concrete node is reached.

        Non-reference nodes are returned unchanged.

        Raises:
            StructuralError: If a reference is external, dangling or cyclic.
        """
        seen: set[str] = set()
        while isinstance(node, Mapping) and isinstance(node.get("$ref"), str):
            ref = node["$ref"]
            if ref in seen:
                raise StructuralError(f"Cyclic reference '{ref}'", ref)
            seen.add(ref)
            node = self._lookup_pointer(ref)
        return node

    def _lookup_pointer(self, ref: str) -> Any:
        """Resolve a single ``#/a/b`` JSON pointer against the raw document."""
        if not ref.startswith("#/"):
            raise StructuralError(f"External reference '{ref}' is not supported", ref)

        node: Any = self.raw
        for token in ref[2:].split("/"):
            token = token.replace("~1", "/").replace("~0", "~")
            if isinstance(node, Mapping) and token in node:
                node = node[token]
            elif isinstance(node, Sequence) and not isinstance(node, str) and token.isdigit() \
                    and int(token) < len(node):
                node = node[int(token)]
            else:
                raise StructuralError(f"Unresolvable reference '{ref}'", ref)
        return node
