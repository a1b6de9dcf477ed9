"""JSON Schema checkers for mapped handler input.

Compiles a schema once into a checker callable::

    check = create_schema_checker({"type": "object", "required": ["id"]})
    check({"id": 1})           # True
    check({})                  # False
    check({}, True)            # raises SchemaValidationError

Validation is delegated to ``jsonschema``; the validator class is picked
from the schema's ``$schema`` keyword (latest draft when absent).
"""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from jsonschema.exceptions import SchemaError, ValidationError
from jsonschema.validators import validator_for

from waypoint.errors import ConfigurationError, SchemaValidationError

# (candidate, throw_on_error) -> bool
SchemaChecker: TypeAlias = Callable[[Any, bool], bool]


def _describe(error: ValidationError) -> str:
    location = "/".join(str(part) for part in error.absolute_path) or "<root>"
    return f"{location}: {error.message}"


def create_schema_checker(schema: Mapping[str, Any]) -> SchemaChecker:
    """Compile *schema* into a checker.

    Raises ``ConfigurationError`` if the schema itself is invalid, so a
    broken route table fails at assembly time rather than per request.
    """
    validator_cls = validator_for(schema)
    try:
        validator_cls.check_schema(schema)
    except SchemaError as exc:
        msg = f"Invalid input schema: {exc.message}"
        raise ConfigurationError(msg) from exc

    validator = validator_cls(schema)

    def check(candidate: Any, throw_on_error: bool = False) -> bool:
        errors = sorted(
            validator.iter_errors(candidate),
            key=lambda e: [str(part) for part in e.absolute_path],
        )
        if not errors:
            return True
        if throw_on_error:
            messages = tuple(_describe(error) for error in errors)
            msg = f"Schema validation failed: {messages[0]}"
            raise SchemaValidationError(msg, messages)
        return False

    return check
