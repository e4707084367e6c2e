"""
JSON Schema checks for taskboard's machine-written files.

Schemas live in taskboard/schemas/<name>.schema.json. Every problem in a
record is reported at once so a hand-edited settings file can be fixed in
one pass.
"""

import json
from pathlib import Path

import jsonschema

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class SchemaError(Exception):
    """A record does not match its schema (or the schema is missing)."""

    def __init__(self, schema_name: str, message: str, problems: list[str] | None = None):
        self.schema_name = schema_name
        self.problems = problems or []
        super().__init__(f"[{schema_name}] {message}")


_validators: dict = {}


def _validator_for(schema_name: str):
    if schema_name not in _validators:
        schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise SchemaError(schema_name, f"Schema file not found: {schema_path}")
        schema = json.loads(schema_path.read_text())
        validator_cls = jsonschema.validators.validator_for(schema)
        validator_cls.check_schema(schema)
        _validators[schema_name] = validator_cls(schema)
    return _validators[schema_name]


def _describe(error: jsonschema.ValidationError) -> str:
    location = ".".join(str(p) for p in error.absolute_path) or "(root)"
    return f"{location}: {error.message}"


def validate(data: dict, schema_name: str) -> None:
    """
    Check data against the named schema.

    Raises:
        SchemaError: listing every violation, ordered by location
    """
    errors = sorted(_validator_for(schema_name).iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        problems = [_describe(e) for e in errors]
        raise SchemaError(schema_name, "; ".join(problems), problems)


def validate_before_write(data: dict, schema_name: str, filepath: Path) -> None:
    """Gate a write: raises SchemaError instead of letting bad data reach filepath."""
    try:
        validate(data, schema_name)
    except SchemaError as e:
        raise SchemaError(
            schema_name,
            f"Refusing to write invalid data to {filepath}: {'; '.join(e.problems) or e}",
            e.problems,
        ) from None
