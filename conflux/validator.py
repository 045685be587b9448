"""
Configuration validation framework.

Validation runs against a freshly merged aggregate before it is committed:
first the optional schema validator, then the custom validator functions in
registration order. The first failure stops the pipeline.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import jsonschema
import yaml

from conflux.core.exceptions import SchemaValidationError, ValidationError
from conflux.logger import get_conflux_logger

CustomValidator = Callable[[Dict[str, Any]], Any]


class SchemaValidator(ABC):
    """Abstract base class for schema validators."""

    @abstractmethod
    def validate(self, config: Dict[str, Any]) -> None:
        """
        Validate configuration data.

        Raises:
            SchemaValidationError: If the data does not satisfy the schema
        """
        pass


class JSONSchemaValidator(SchemaValidator):
    """
    JSON Schema validator backed by the ``jsonschema`` package.

    The schema is checked once at construction; the validator class is picked
    from the schema's ``$schema`` keyword.

    Args:
        schema: Schema as a mapping, or as JSON/YAML text or bytes
    """

    def __init__(self, schema: Union[Mapping[str, Any], str, bytes]):
        self.logger = get_conflux_logger(component="JSONSchemaValidator")
        self.schema = self._parse(schema)
        validator_cls = jsonschema.validators.validator_for(self.schema)
        try:
            validator_cls.check_schema(self.schema)
        except jsonschema.SchemaError as e:
            raise SchemaValidationError("json_schema", "compile", e)
        self._validator = validator_cls(self.schema)

    @staticmethod
    def _parse(schema: Union[Mapping[str, Any], str, bytes]) -> Dict[str, Any]:
        if isinstance(schema, Mapping):
            return dict(schema)
        text = schema.decode("utf-8") if isinstance(schema, (bytes, bytearray)) else schema
        try:
            parsed = json.loads(text)
        except ValueError:
            try:
                parsed = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise SchemaValidationError("json_schema", "parse", e)
        if not isinstance(parsed, dict):
            raise SchemaValidationError(
                "json_schema", "parse", TypeError(f"schema must be an object, got {type(parsed).__name__}"))
        return parsed

    def validate(self, config: Dict[str, Any]) -> None:
        error = jsonschema.exceptions.best_match(self._validator.iter_errors(config))
        if error is not None:
            field = ".".join(str(part) for part in error.absolute_path) or None
            self.logger.debug("Schema validation failed", field=field, error=error.message)
            raise SchemaValidationError("json_schema", "validate", error, field=field)


class ValidationPipeline:
    """
    Runs the schema validator and the custom validators against an aggregate.

    A custom validator signals failure by raising, or by returning an
    exception instance or ``False``. Anything raised inside a validator is
    turned into a ``ValidationError``; it never escapes as-is.
    """

    def __init__(self, schema_validator: Optional[SchemaValidator] = None,
                 validators: Optional[List[CustomValidator]] = None):
        self.logger = get_conflux_logger(component="ValidationPipeline")
        self.schema_validator = schema_validator
        self.validators: List[CustomValidator] = list(validators or [])

    def add_validator(self, validator: CustomValidator):
        self.validators.append(validator)

    def validate(self, config: Dict[str, Any]) -> None:
        """
        Validate ``config``.

        Raises:
            SchemaValidationError: If the schema validator rejects the data
            ValidationError: If a custom validator fails or raises
        """
        if self.schema_validator is not None:
            try:
                self.schema_validator.validate(config)
            except SchemaValidationError:
                raise
            except Exception as e:
                raise SchemaValidationError("schema", "validate", e)

        for index, validator in enumerate(self.validators):
            name = getattr(validator, "__name__", type(validator).__name__)
            label = f"validator[{index}]"
            try:
                result = validator(config)
            except Exception as e:
                self.logger.warning("Validator raised", validator=name, error=str(e))
                raise ValidationError(label, "validate", e, field=name)

            if isinstance(result, BaseException):
                raise ValidationError(label, "validate", result, field=name)
            if result is False:
                raise ValidationError(label, "validate", ValueError(f"validator {name} failed"), field=name)
