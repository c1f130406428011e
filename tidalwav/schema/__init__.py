"""Provides JSON Schema validation tools."""

import json
import os
from typing import Any, Callable

import jsonschema

RESOURCES = os.path.join(os.path.dirname(os.path.realpath(__file__)),
                         'resources')


def load(schema_path: str) -> Callable[[Any], None]:
    """
    Load a JSON Schema from ``schema_path``.

    Parameters
    ----------
    schema_path : str
        Location of the target schema. Relative paths are resolved against
        the bundled ``resources`` directory.

    Returns
    -------
    callable
        A validator function; when called with deserialized JSON, validates
        the data against the schema.

    """
    if not os.path.isabs(schema_path):
        schema_path = os.path.join(RESOURCES, schema_path)
    with open(schema_path) as f:
        schema = json.load(f)
    validator = jsonschema.Draft7Validator(schema)

    def validate(data: Any) -> None:
        """
        Validate ``data`` against the enclosed schema.

        Raises
        ------
        :class:`.ValidationError`

        """
        validator.validate(data)
    return validate


ValidationError = jsonschema.exceptions.ValidationError
