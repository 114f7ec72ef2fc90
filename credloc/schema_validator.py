"""
JSON Schema validation for credloc location configs.

Validates configs against the bundled locations.schema.json before they are
compiled, so every structural problem is reported at once, at load time.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path(__file__).parent / "schemas"
LOCATIONS_SCHEMA = SCHEMAS_DIR / "locations.schema.json"


@dataclass
class ValidationResult:
    """Result of schema validation."""

    valid: bool
    errors: list[str]

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(valid=True, errors=[])

    @classmethod
    def failure(cls, errors: list[str]) -> ValidationResult:
        return cls(valid=False, errors=errors)


class SchemaValidator:
    """
    Validates JSON data against schemas.

    Schemas and validators are cached per path.
    """

    _schemas: dict[str, dict] = {}
    _validators: dict[str, Any] = {}

    @classmethod
    def load_schema(cls, schema_path: Path | str) -> dict:
        """
        Load a JSON schema from file.

        Raises:
            OSError, json.JSONDecodeError: if the schema cannot be read
        """
        schema_path = Path(schema_path)
        cache_key = str(schema_path)

        if cache_key in cls._schemas:
            return cls._schemas[cache_key]

        with open(schema_path) as f:
            schema = json.load(f)
        cls._schemas[cache_key] = schema
        return schema

    @classmethod
    def _get_validator(cls, schema_path: Path | str) -> Draft202012Validator:
        """Get or create a validator for a schema."""
        cache_key = str(Path(schema_path))

        if cache_key in cls._validators:
            return cls._validators[cache_key]

        validator = Draft202012Validator(cls.load_schema(schema_path))
        cls._validators[cache_key] = validator
        return validator

    @classmethod
    def validate(
        cls,
        data: Any,
        schema_path: Path | str,
        context: str = "",
    ) -> ValidationResult:
        """
        Validate data against a JSON schema.

        Args:
            data: The data to validate
            schema_path: Path to the JSON schema file
            context: Optional context string for error messages (e.g., config file name)

        Returns:
            ValidationResult with valid=True if valid, or valid=False with error messages
        """
        return cls._collect(cls._get_validator(schema_path), data, context)

    @classmethod
    def _collect(cls, validator: Draft202012Validator, data: Any, context: str) -> ValidationResult:
        errors: list[str] = []
        for error in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path]):
            path = ".".join(str(p) for p in error.path) or "(root)"
            prefix = f"{context}: " if context else ""
            errors.append(f"{prefix}{path}: {error.message}")

        if errors:
            for error in errors:
                logger.debug(f"Schema validation error: {error}")
            return ValidationResult.failure(errors)

        return ValidationResult.success()

    @classmethod
    def _get_definition_validator(cls, definition: str) -> Draft202012Validator:
        """Get a validator for one of the $defs of locations.schema.json."""
        cache_key = f"{LOCATIONS_SCHEMA}#{definition}"

        if cache_key in cls._validators:
            return cls._validators[cache_key]

        schema = cls.load_schema(LOCATIONS_SCHEMA)
        validator = Draft202012Validator(
            {"$defs": schema["$defs"], "$ref": f"#/$defs/{definition}"}
        )
        cls._validators[cache_key] = validator
        return validator

    @classmethod
    def validate_definition(cls, data: Any, definition: str) -> ValidationResult:
        """Validate data against one definition, e.g. "location" or "operations"."""
        return cls._collect(cls._get_definition_validator(definition), data, "")

    @classmethod
    def validate_locations_config(
        cls,
        config: Any,
        config_path: Path | str | None = None,
    ) -> ValidationResult:
        """
        Validate a credentials config against locations.schema.json.

        Args:
            config: The config dict to validate
            config_path: Optional path for context in error messages

        Returns:
            ValidationResult
        """
        context = Path(config_path).name if config_path else ""
        return cls.validate(config, LOCATIONS_SCHEMA, context)


def validate_config(config: Any, config_path: Path | str | None = None) -> ValidationResult:
    """Convenience function to validate a credentials config."""
    return SchemaValidator.validate_locations_config(config, config_path)
