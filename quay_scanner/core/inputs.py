"""
Image list loading for Quay Scanner.

Images come either from a single ``--image`` reference or from a JSON/YAML
document of the form ``{"images": [...]}``.
"""

import json
import logging
from pathlib import Path
from typing import Any, List

import yaml

from .validator import SchemaValidator, IMAGE_LIST_SCHEMA

logger = logging.getLogger(__name__)

JSON_EXTENSIONS = ('.json',)
YAML_EXTENSIONS = ('.yaml', '.yml')


class InputError(Exception):
    """Raised when the list of images cannot be loaded."""


def _parse_document(path: Path, content: str) -> Any:
    ext = path.suffix.lower()
    if ext in JSON_EXTENSIONS:
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise InputError(f"parsing JSON file '{path}': {e}")
    if ext in YAML_EXTENSIONS:
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise InputError(f"parsing YAML file '{path}': {e}")
    raise InputError(f"unsupported file extension '{ext}'. Use .json, .yaml, or .yml")


def load_image_list(file_path: str) -> List[str]:
    """Read the image references listed in a JSON or YAML file.

    A document without an ``images`` key (or with ``images: null``) yields an
    empty list.

    Raises:
        InputError: If the file cannot be read, has an unsupported extension,
            is malformed, or does not match the expected shape
    """
    path = Path(file_path)
    logger.info("Reading image list from file: %s", path)
    try:
        content = path.read_text(encoding='utf-8')
    except OSError as e:
        raise InputError(f"reading input file '{path}': {e}")

    data = _parse_document(path, content)
    if data is None:
        return []

    errors = SchemaValidator(IMAGE_LIST_SCHEMA).validate_data(data)
    if errors:
        raise InputError(f"invalid input file '{path}': {'; '.join(errors)}")

    images = data.get('images') or []
    logger.info("Found %d images to process from file.", len(images))
    return list(images)


def resolve_image_refs(image: str | None = None, input_file: str | None = None) -> List[str]:
    """Return the images to scan from exactly one of ``image`` / ``input_file``.

    Raises:
        InputError: If neither or both sources are given, or the file cannot be loaded
    """
    if image and input_file:
        raise InputError("--image and --file are mutually exclusive")
    if image:
        logger.info("Processing single image: %s", image)
        return [image]
    if input_file:
        return load_image_list(input_file)
    raise InputError("either --image or --file is required")
