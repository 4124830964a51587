"""Pytest fixtures for restlint tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from restlint.config import LintConfig
from restlint.rules.engine import RuleEngine

VALID_API_ID = "d0184f38-b98d-11e7-9c56-68f728c1ba70"


def problem_ref() -> dict[str, Any]:
    """Reference to the shared problem response."""
    return {"$ref": "#/components/responses/Problem"}


def json_content(schema: dict[str, Any]) -> dict[str, Any]:
    """Build an OpenAPI 3 ``content`` object for application/json."""
    return {"application/json": {"schema": schema}}


def make_document(
    paths: dict[str, Any] | None = None,
    info: dict[str, Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a minimal OpenAPI 3 document sharing the standard components."""
    document: dict[str, Any] = {
        "openapi": "3.0.3",
        "info": info if info is not None else {
            "title": "Employee API",
            "version": "1.0.0",
            "x-api-id": VALID_API_ID,
        },
        "paths": paths if paths is not None else {},
        "components": {
            "schemas": {
                "Employee": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "firstName": {"type": "string"},
                        "hiredAt": {"type": "string", "format": "date-time"},
                    },
                },
                "EmployeePage": {
                    "type": "object",
                    "properties": {
                        "items": {"type": "array", "items": {"$ref": "#/components/schemas/Employee"}},
                        "total": {"type": "integer"},
                        "page": {"type": "integer"},
                        "size": {"type": "integer"},
                    },
                },
                "Problem": {
                    "type": "object",
                    "properties": {
                        "type": {"type": "string", "format": "uri"},
                        "title": {"type": "string"},
                        "status": {"type": "integer"},
                        "detail": {"type": "string"},
                        "instance": {"type": "string"},
                    },
                },
            },
            "responses": {
                "Problem": {
                    "description": "Problem details",
                    "content": {
                        "application/problem+json": {"schema": {"$ref": "#/components/schemas/Problem"}},
                    },
                },
            },
        },
    }
    document.update(extra)
    return document


def clean_paths() -> dict[str, Any]:
    """Paths that satisfy every rule."""
    employee = {"$ref": "#/components/schemas/Employee"}
    return {
        "/v1/employees": {
            "get": {
                "operationId": "listEmployees",
                "parameters": [
                    {"name": "pageSize", "in": "query", "schema": {"type": "integer"}},
                ],
                "responses": {
                    "200": {
                        "description": "A page of employees",
                        "content": json_content({"$ref": "#/components/schemas/EmployeePage"}),
                    },
                    "400": problem_ref(),
                },
            },
            "post": {
                "operationId": "createEmployee",
                "requestBody": {"content": json_content(employee)},
                "responses": {
                    "201": {"description": "Created", "content": json_content(employee)},
                    "400": problem_ref(),
                },
            },
        },
        "/v1/employees/{employeeId}": {
            "parameters": [
                {"name": "employeeId", "in": "path", "required": True, "schema": {"type": "string"}},
            ],
            "get": {
                "responses": {
                    "200": {"description": "An employee", "content": json_content(employee)},
                    "404": problem_ref(),
                },
            },
            "delete": {
                "responses": {
                    "204": {"description": "Deleted"},
                    "404": problem_ref(),
                },
            },
        },
        "/v1/status": {
            "get": {
                "responses": {
                    "200": {
                        "description": "Service status",
                        "content": json_content({
                            "type": "object",
                            "properties": {"healthy": {"type": "boolean"}},
                        }),
                    },
                },
            },
        },
    }


@pytest.fixture
def clean_document() -> dict[str, Any]:
    """A document with no violations."""
    return make_document(clean_paths())


@pytest.fixture
def engine() -> RuleEngine:
    """Engine with the default configuration."""
    return RuleEngine()


@pytest.fixture
def config() -> LintConfig:
    """Default configuration."""
    return LintConfig()


@pytest.fixture
def write_document(tmp_path: Path):
    """Write a document to a YAML file and return its path."""

    def _write(document: dict[str, Any], name: str = "openapi.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(document, sort_keys=False))
        return path

    return _write


@pytest.fixture
def build_document():
    """Factory for documents sharing the standard components."""
    return make_document


@pytest.fixture
def paths() -> dict[str, Any]:
    """Fresh copy of the clean paths, safe to modify."""
    return clean_paths()
