"""
Schema validation for the documents Quay Scanner reads from disk.

Two documents are validated: the YAML configuration file (only its ``quay``
section is interpreted) and the JSON/YAML image list given with ``--file``.
``SchemaValidator.validate_data`` returns human-readable messages such as
``images[2]: 42 is not of type 'string'``; an empty list means the document is
valid.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError

logger = logging.getLogger(__name__)


# {"images": ["quay.io/ns/repo:tag", ...]}
IMAGE_LIST_SCHEMA = {
    "type": "object",
    "properties": {
        "images": {
            "type": ["array", "null"],
            "items": {"type": "string", "minLength": 1},
        },
    },
}

_OPTIONAL_STRING = {"type": ["string", "null"]}

# quay: {api_base_url, timeout_seconds, user_agent, registry_host}
CONFIG_FILE_SCHEMA = {
    "type": "object",
    "properties": {
        "quay": {
            "type": ["object", "null"],
            "properties": {
                "api_base_url": _OPTIONAL_STRING,
                "timeout_seconds": {"type": ["integer", "null"]},
                "user_agent": _OPTIONAL_STRING,
                "registry_host": _OPTIONAL_STRING,
            },
        },
    },
}


class SchemaValidator:
    """Draft 7 validator that reports every violation as a readable string."""

    def __init__(self, schema: dict) -> None:
        Draft7Validator.check_schema(schema)
        self.schema = schema
        self._validator = Draft7Validator(schema)

    def validate_data(self, data: Any) -> List[str]:
        violations = sorted(self._validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
        messages = [_describe(err) for err in violations]
        if messages:
            logger.debug("Schema validation found %d problem(s)", len(messages))
        return messages


def _describe(err: ValidationError) -> str:
    location = _json_path(err.absolute_path)
    return f"{location}: {err.message}" if location else err.message


def _json_path(path: Iterable[Any]) -> str:
    """Render a jsonschema path as ``quay.timeout_seconds`` or ``images[0]``."""
    rendered = ""
    for part in path:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered += f".{part}" if rendered else str(part)
    return rendered
