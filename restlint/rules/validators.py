"""Built-in rule checks derived from the REST API guidelines.

Every check is a plain function taking the parsed document and the active
configuration and yielding ``Finding`` objects. The engine attributes findings
to the owning rule, so checks never build violations themselves.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterator
from urllib.parse import urlsplit

from restlint.rules.schemas import Finding, Location, Rule, RuleCategory, RuleSeverity

if TYPE_CHECKING:
    from restlint.config import LintConfig
    from restlint.spec.schemas import ApiDocument, Operation, PathItem, ResponseSpec

SEGMENT_RE = re.compile(r"^[a-z0-9:._-]+$")
VERSION_RE = re.compile(r"^v?\d+(\.\d+){0,2}$")
CAMEL_CASE_RE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
UUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
HTTP_DATE_RE = re.compile(
    r"^(Mon|Tue|Wed|Thu|Fri|Sat|Sun), (\d{2}) "
    r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec) (\d{4}) "
    r"(\d{2}):(\d{2}):(\d{2}) GMT$"
)
STRUCTURED_DATE_RE = re.compile(r"^@\d+$")

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

API_PREFIX = "api"
MAX_SUBRESOURCE_DEPTH = 3

BODYLESS_METHODS = frozenset({"GET", "DELETE", "HEAD"})
STATUS_CODE_METHODS = {
    "201": frozenset({"POST", "PUT"}),
    "204": frozenset({"HEAD", "PUT", "PATCH", "DELETE"}),
}

PAGINATION_FIELDS = ("items", "total", "page", "size")
PAGINATED_STATUS_CODES = ("200", "206")
PROBLEM_MEDIA_TYPE = "application/problem+json"
PROBLEM_FIELDS = ("type", "title", "status", "detail", "instance")

IRREGULAR_PLURALS = frozenset({
    "people", "children", "men", "women", "data", "media", "criteria", "feet",
    "teeth", "mice", "geese", "indices", "matrices", "analyses", "series", "news",
    "metadata", "feedback", "equipment", "information",
})

MAX_SCHEMA_DEPTH = 32


# --- path helpers ---------------------------------------------------------


def is_parameter(segment: str) -> bool:
    """Whether a path segment is a template parameter such as ``{id}``."""
    return segment.startswith("{")


def resource_segments(path: str) -> list[str]:
    """Return the non-empty segments following an ``/api`` prefix and version."""
    segments = [s for s in path.split("/") if s]
    if segments and segments[0].lower() == API_PREFIX:
        segments = segments[1:]
    if segments and VERSION_RE.match(segments[0]):
        segments = segments[1:]
    return segments


def is_plural(segment: str) -> bool:
    """Heuristic plural check for an English, hyphen-separated resource name."""
    word = segment.split(":")[0]
    last = re.split(r"[-_.]", word)[-1].lower()
    if not last or not any(c.isalpha() for c in last):
        return True
    if last in IRREGULAR_PLURALS:
        return True
    return last.endswith("s") and not last.endswith("ss")


def is_collection_position(segments: Sequence[str], index: int) -> bool:
    """Whether a resource segment names a collection.

    The first resource segment and any segment followed by a path parameter
    are collections. Other segments are sub-resources of an item.
    """
    if is_parameter(segments[index]):
        return False
    return index == 0 or (index + 1 < len(segments) and is_parameter(segments[index + 1]))


def _ends_with_collection(path: str, config: LintConfig) -> bool:
    segments = resource_segments(path)
    if not segments:
        return False
    last = segments[-1]
    if is_parameter(last) or ":" in last or last in config.singleton_resources:
        return False
    return is_collection_position(segments, len(segments) - 1) or is_plural(last)


# --- schema helpers -------------------------------------------------------


def _is_json(media_type: str) -> bool:
    base = media_type.split(";")[0].strip().lower()
    return base == "application/json" or base.endswith("+json")


def resolve_schema(document: ApiDocument, schema: Any) -> Mapping[str, Any] | None:
    """Resolve a schema reference.

    Returns ``None`` for schemas that cannot be inspected: non-mappings and
    references to other files.
    """
    if not isinstance(schema, Mapping):
        return None
    ref = schema.get("$ref")
    if isinstance(ref, str) and not ref.startswith("#"):
        return None
    resolved = document.resolve(schema)
    return resolved if isinstance(resolved, Mapping) else None


def schema_properties(document: ApiDocument, schema: Any, _depth: int = 0) -> dict[str, Any]:
    """Collect declared properties of an object schema, merging ``allOf`` parts."""
    schema = resolve_schema(document, schema)
    if schema is None or _depth > MAX_SCHEMA_DEPTH:
        return {}

    properties = dict(schema.get("properties") or {})
    for part in schema.get("allOf") or ():
        for name, value in schema_properties(document, part, _depth + 1).items():
            properties.setdefault(name, value)
    return properties


def _schema_type(document: ApiDocument, schema: Any) -> str:
    schema = resolve_schema(document, schema)
    if schema is None:
        return ""
    schema_type = schema.get("type", "")
    # OpenAPI 3.1 allows a list of types, e.g. ["array", "null"]
    if isinstance(schema_type, Sequence) and not isinstance(schema_type, str):
        non_null = [t for t in schema_type if t != "null"]
        return str(non_null[0]) if non_null else ""
    return str(schema_type)


def iter_property_names(document: ApiDocument, schema: Any) -> Iterator[str]:
    """Yield every property name reachable from a schema, each reference visited once."""
    seen_refs: set[str] = set()
    stack = [(schema, 0)]

    while stack:
        node, depth = stack.pop()
        if not isinstance(node, Mapping) or depth > MAX_SCHEMA_DEPTH:
            continue
        ref = node.get("$ref")
        if isinstance(ref, str):
            if ref in seen_refs:
                continue
            seen_refs.add(ref)
        node = resolve_schema(document, node)
        if node is None:
            continue

        properties = node.get("properties") or {}
        children = []
        for name, value in properties.items():
            yield name
            children.append(value)
        for key in ("allOf", "oneOf", "anyOf"):
            children.extend(node.get(key) or ())
        for key in ("items", "additionalProperties"):
            if isinstance(node.get(key), Mapping):
                children.append(node[key])

        stack.extend((child, depth + 1) for child in reversed(children))


def _is_collection_schema(
    document: ApiDocument, schema: Mapping[str, Any], path: str, config: LintConfig
) -> bool:
    if _schema_type(document, schema) == "array":
        return True
    properties = schema_properties(document, schema)
    if "items" in properties:
        return True
    if _ends_with_collection(path, config):
        return any(_schema_type(document, prop) == "array" for prop in properties.values())
    return False


def _json_schemas(response: ResponseSpec) -> Iterator[Any]:
    for entry in response.media_types:
        if _is_json(entry.media_type) and entry.schema is not None:
            yield entry.schema


def _header_values(document: ApiDocument, header: Any) -> list[Any]:
    """Example and default values declared for a response header."""
    header = document.resolve(header)
    if not isinstance(header, Mapping):
        return []

    values = []
    if "example" in header:
        values.append(header["example"])
    for example in (header.get("examples") or {}).values():
        example = document.resolve(example)
        if isinstance(example, Mapping) and "value" in example:
            values.append(example["value"])

    schema = resolve_schema(document, header.get("schema"))
    if schema is not None:
        values.extend(schema[key] for key in ("example", "default") if key in schema)
    # Swagger 2 headers carry their default directly
    if "default" in header:
        values.append(header["default"])
    return values


def is_http_date(value: str) -> bool:
    """Whether ``value`` is an IMF-fixdate such as ``Sun, 06 Nov 1994 08:49:37 GMT``."""
    match = HTTP_DATE_RE.match(value)
    if not match:
        return False
    weekday, day, month, year, hour, minute, second = match.groups()
    try:
        parsed = datetime(
            int(year), MONTHS.index(month) + 1, int(day), int(hour), int(minute), int(second)
        )
    except ValueError:
        return False
    return WEEKDAYS[parsed.weekday()] == weekday


def _op_location(item: PathItem, operation: Operation, field: str | None = None) -> Location:
    return Location(path=item.path, method=operation.method, field=field)


# --- checks ---------------------------------------------------------------


def check_document_structure(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    """Path templates start with '/' and every operation declares a response."""
    for item in document.paths:
        if not item.path.startswith("/"):
            yield Finding(
                Location(path=item.path),
                f"Path '{item.path}' does not start with '/'",
                "Path templates are relative to the server URL and must start with '/'",
            )
        for operation in item.operations:
            if not operation.responses:
                yield Finding(_op_location(item, operation), "Operation declares no responses")


def check_resource_naming(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    """Path segments are lowercase and hyphen-separated."""
    for item in document.paths:
        for segment in item.segments:
            if not segment or is_parameter(segment):
                continue
            if not SEGMENT_RE.match(segment):
                yield Finding(
                    Location(path=item.path),
                    f"Path segment '{segment}' must match [a-z0-9:._-]+",
                    f"Use lowercase, hyphen-separated names (e.g. '{_kebab(segment)}')",
                )


def check_plural_resources(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    """Collection resources use plural nouns."""
    for item in document.paths:
        segments = resource_segments(item.path)
        for index, segment in enumerate(segments):
            if not is_collection_position(segments, index):
                continue
            if segment.split(":")[0] in config.singleton_resources:
                continue
            if not is_plural(segment):
                yield Finding(
                    Location(path=item.path),
                    f"Resource '{segment}' should be a plural noun",
                    "Name collections in the plural or add the resource to singleton_resources",
                )


def check_no_trailing_slash(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    for item in document.paths:
        if item.path != "/" and item.path.endswith("/"):
            yield Finding(
                Location(path=item.path),
                "Path must not end with '/'",
                f"Use '{item.path.rstrip('/') or '/'}'",
            )


def check_no_api_prefix(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    if config.api_prefix_allowed:
        return
    for item in document.paths:
        segments = [s for s in item.path.split("/") if s]
        if segments and segments[0].lower() == API_PREFIX:
            yield Finding(
                Location(path=item.path),
                "Path must not begin with '/api'",
                "Serve the API from a dedicated host or base URL instead",
            )


def check_query_param_casing(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    """Query parameter names are camelCase."""
    for item in document.paths:
        # Redeclared parameters are reported on the overriding operation.
        overridden = {p.key for op in item.operations for p in op.parameters}
        for param in item.parameters:
            if param.key in overridden:
                continue
            if param.location == "query" and not CAMEL_CASE_RE.match(param.name):
                yield Finding(
                    Location(path=item.path, field=f"parameters.{param.name}"),
                    f"Query parameter '{param.name}' must be camelCase",
                    f"Rename to '{_camel(param.name)}'",
                )
        for operation in item.operations:
            for param in operation.parameters:
                if param.location == "query" and not CAMEL_CASE_RE.match(param.name):
                    yield Finding(
                        _op_location(item, operation, f"parameters.{param.name}"),
                        f"Query parameter '{param.name}' must be camelCase",
                        f"Rename to '{_camel(param.name)}'",
                    )


def check_method_no_body(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    for item, operation in document.iter_operations():
        if operation.method in BODYLESS_METHODS and operation.request_body is not None:
            yield Finding(
                _op_location(item, operation, "requestBody"),
                f"{operation.method} operations must not declare a request body",
            )


def check_status_code_method_pairing(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    for item, operation in document.iter_operations():
        for response in operation.responses:
            allowed = STATUS_CODE_METHODS.get(response.status_code)
            if allowed is not None and operation.method not in allowed:
                yield Finding(
                    _op_location(item, operation, f"responses.{response.status_code}"),
                    f"Status {response.status_code} is not valid for {operation.method}",
                    f"Status {response.status_code} is reserved for {', '.join(sorted(allowed))}",
                )


def check_version_in_path(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    """Paths start with a version segment, unless every server URL carries one."""
    if document.servers and all(_server_has_version(url) for url in document.servers):
        return

    for item in document.paths:
        segments = [s for s in item.path.split("/") if s]
        if segments and segments[0].lower() == API_PREFIX:
            segments = segments[1:]
        if not segments or not VERSION_RE.match(segments[0]):
            yield Finding(
                Location(path=item.path),
                "Path does not begin with a version segment",
                "Prefix the path with a version such as '/v1'",
            )


def _server_has_version(url: str) -> bool:
    segments = [s for s in urlsplit(url).path.split("/") if s]
    return bool(segments) and bool(VERSION_RE.match(segments[-1]))


def check_pagination_envelope(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    """Collection responses of GET operations use the paging envelope."""
    for item, operation in document.iter_operations():
        if operation.method != "GET":
            continue
        for response in operation.responses:
            if response.status_code not in PAGINATED_STATUS_CODES:
                continue
            for schema in _json_schemas(response):
                resolved = resolve_schema(document, schema)
                if resolved is None or not _is_collection_schema(document, resolved, item.path, config):
                    continue
                properties = schema_properties(document, resolved)
                missing = [f for f in PAGINATION_FIELDS if f not in properties]
                if missing:
                    yield Finding(
                        _op_location(item, operation, f"responses.{response.status_code}"),
                        f"Collection response is missing pagination fields: {', '.join(missing)}",
                        f"Wrap collections in an object with {', '.join(PAGINATION_FIELDS)}",
                    )
                break


def check_problem_json_on_error(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    """Error responses are RFC 7807 problem details."""
    for item, operation in document.iter_operations():
        if operation.method == "HEAD":
            continue
        for response in operation.responses:
            if not response.is_error:
                continue
            location = _op_location(item, operation, f"responses.{response.status_code}")
            entry = response.get_media_type(PROBLEM_MEDIA_TYPE)

            if entry is None:
                declared = ", ".join(m.media_type for m in response.media_types)
                if declared:
                    message = f"Error response uses {declared} instead of {PROBLEM_MEDIA_TYPE}"
                else:
                    message = f"Error response declares no {PROBLEM_MEDIA_TYPE} body"
                yield Finding(location, message, f"Declare content of type {PROBLEM_MEDIA_TYPE}")
                continue

            if entry.schema is not None and resolve_schema(document, entry.schema) is None:
                continue
            properties = schema_properties(document, entry.schema)
            missing = [f for f in PROBLEM_FIELDS if f not in properties]
            if missing:
                yield Finding(
                    location,
                    f"Problem schema is missing fields: {', '.join(missing)}",
                    f"Problem details declare {', '.join(PROBLEM_FIELDS)}",
                )


def check_max_subresource_depth(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    for item in document.paths:
        depth = sum(1 for s in resource_segments(item.path) if not is_parameter(s))
        if depth > MAX_SUBRESOURCE_DEPTH:
            yield Finding(
                Location(path=item.path),
                f"Path nests {depth} resource levels (maximum {MAX_SUBRESOURCE_DEPTH})",
                "Expose deeply nested resources as top-level collections",
            )


def check_unique_api_id(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    location = Location(field="info.x-api-id")
    api_id = document.info.get("x-api-id")
    if api_id is None:
        yield Finding(location, "info.x-api-id is missing", "Add a UUID identifying this API")
    elif not isinstance(api_id, str) or not UUID_RE.match(api_id):
        yield Finding(location, f"info.x-api-id '{api_id}' is not a valid UUID")


def check_deprecation_header_format(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    """Deprecation and Sunset header examples are well-formed dates."""
    for item, operation in document.iter_operations():
        for response in operation.responses:
            for name in ("Deprecation", "Sunset"):
                header = response.get_header(name)
                if header is None:
                    continue
                for value in _header_values(document, header):
                    if _valid_header_date(name, value):
                        continue
                    yield Finding(
                        _op_location(item, operation, f"responses.{response.status_code}.headers.{name}"),
                        f"{name} header value '{value}' is not a valid HTTP-date",
                        "Use the IMF-fixdate format, e.g. 'Sun, 06 Nov 1994 08:49:37 GMT'",
                    )


def _valid_header_date(name: str, value: Any) -> bool:
    if name == "Deprecation":
        if value is True or str(value).lower() == "true":
            return True
        if isinstance(value, str) and STRUCTURED_DATE_RE.match(value):
            return True
    return isinstance(value, str) and is_http_date(value)


def check_deprecated_operation_sunset(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    for item, operation in document.iter_operations():
        if not operation.deprecated:
            continue
        if not any(r.get_header("Sunset") is not None for r in operation.responses):
            yield Finding(
                _op_location(item, operation),
                "Deprecated operation does not declare a Sunset header",
                "Announce the removal date with a Sunset response header",
            )


def check_property_casing(document: ApiDocument, config: LintConfig) -> Iterator[Finding]:
    """Body property names are camelCase."""
    for item, operation in document.iter_operations():
        schemas = []
        if operation.request_body is not None:
            content = operation.request_body.get("content") or {}
            schemas.extend(
                entry.get("schema") for media_type, entry in content.items()
                if _is_json(media_type) and isinstance(entry, Mapping)
            )
        for response in operation.responses:
            schemas.extend(_json_schemas(response))

        reported: set[str] = set()
        for schema in schemas:
            for name in iter_property_names(document, schema):
                if name in reported or name.startswith("_") or CAMEL_CASE_RE.match(name):
                    continue
                reported.add(name)
                yield Finding(
                    _op_location(item, operation, f"properties.{name}"),
                    f"Property '{name}' must be camelCase",
                    f"Rename to '{_camel(name)}'",
                )


def _kebab(segment: str) -> str:
    segment = re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", segment)
    return re.sub(r"[^a-z0-9:.-]+", "-", segment.lower()).strip("-")


def _camel(name: str) -> str:
    parts = [p for p in re.split(r"[-_.\s]+", name) if p]
    if not parts:
        return name
    head = parts[0][:1].lower() + parts[0][1:]
    return head + "".join(p[:1].upper() + p[1:] for p in parts[1:])


# --- catalog --------------------------------------------------------------

STRUCTURE_RULE_ID = "document-structure"

# Registration order is part of the report ordering contract.
RULES: tuple[Rule, ...] = (
    Rule(
        id=STRUCTURE_RULE_ID,
        name="Document Structure",
        severity=RuleSeverity.ERROR,
        category=RuleCategory.STRUCTURE,
        description="The document is an interpretable API description",
        check_fn=check_document_structure,
    ),
    Rule(
        id="resource-naming",
        name="Resource Naming",
        severity=RuleSeverity.ERROR,
        category=RuleCategory.NAMING,
        description="Path segments are lowercase and hyphen-separated",
        check_fn=check_resource_naming,
    ),
    Rule(
        id="plural-resources",
        name="Plural Resources",
        severity=RuleSeverity.WARNING,
        category=RuleCategory.NAMING,
        description="Collection resources use plural nouns",
        check_fn=check_plural_resources,
    ),
    Rule(
        id="no-trailing-slash",
        name="No Trailing Slash",
        severity=RuleSeverity.ERROR,
        category=RuleCategory.NAMING,
        description="Paths do not end with '/'",
        check_fn=check_no_trailing_slash,
    ),
    Rule(
        id="no-api-prefix",
        name="No API Prefix",
        severity=RuleSeverity.WARNING,
        category=RuleCategory.NAMING,
        description="Paths do not begin with '/api'",
        check_fn=check_no_api_prefix,
    ),
    Rule(
        id="query-param-casing",
        name="Query Parameter Casing",
        severity=RuleSeverity.ERROR,
        category=RuleCategory.NAMING,
        description="Query parameter names are camelCase",
        check_fn=check_query_param_casing,
    ),
    Rule(
        id="method-get-no-body",
        name="No Body On GET/DELETE/HEAD",
        severity=RuleSeverity.ERROR,
        category=RuleCategory.METHODS,
        description="GET, DELETE and HEAD operations declare no request body",
        check_fn=check_method_no_body,
    ),
    Rule(
        id="status-code-method-pairing",
        name="Status Code / Method Pairing",
        severity=RuleSeverity.ERROR,
        category=RuleCategory.METHODS,
        description="201 only for POST/PUT, 204 only for HEAD/PUT/PATCH/DELETE",
        check_fn=check_status_code_method_pairing,
    ),
    Rule(
        id="version-in-path",
        name="Version In Path",
        severity=RuleSeverity.WARNING,
        category=RuleCategory.VERSIONING,
        description="Paths begin with a version segment such as 'v1'",
        check_fn=check_version_in_path,
    ),
    Rule(
        id="pagination-envelope",
        name="Pagination Envelope",
        severity=RuleSeverity.WARNING,
        category=RuleCategory.PAGINATION,
        description="Collection GET responses declare items, total, page and size",
        check_fn=check_pagination_envelope,
    ),
    Rule(
        id="problem-json-on-error",
        name="Problem Details On Error",
        severity=RuleSeverity.ERROR,
        category=RuleCategory.ERRORS,
        description="4xx/5xx responses use application/problem+json with the standard fields",
        check_fn=check_problem_json_on_error,
    ),
    Rule(
        id="max-subresource-depth",
        name="Maximum Sub-resource Depth",
        severity=RuleSeverity.ERROR,
        category=RuleCategory.NAMING,
        description=f"Paths nest at most {MAX_SUBRESOURCE_DEPTH} resource levels",
        check_fn=check_max_subresource_depth,
    ),
    Rule(
        id="unique-api-id",
        name="Unique API Identifier",
        severity=RuleSeverity.ERROR,
        category=RuleCategory.METADATA,
        description="info.x-api-id is present and is a UUID",
        check_fn=check_unique_api_id,
    ),
    Rule(
        id="deprecation-header-format",
        name="Deprecation Header Format",
        severity=RuleSeverity.WARNING,
        category=RuleCategory.DEPRECATION,
        description="Deprecation and Sunset header values are HTTP-dates",
        check_fn=check_deprecation_header_format,
    ),
    Rule(
        id="deprecated-operation-sunset",
        name="Sunset For Deprecated Operations",
        severity=RuleSeverity.INFO,
        category=RuleCategory.DEPRECATION,
        description="Deprecated operations announce a Sunset header",
        check_fn=check_deprecated_operation_sunset,
    ),
    Rule(
        id="property-casing",
        name="Property Casing",
        severity=RuleSeverity.WARNING,
        category=RuleCategory.DATA_FORMATS,
        description="Request and response body property names are camelCase",
        check_fn=check_property_casing,
    ),
)

_RULES_BY_ID = {rule.id: rule for rule in RULES}


def get_rule(rule_id: str) -> Rule | None:
    """Get a rule by id."""
    return _RULES_BY_ID.get(rule_id)
