"""Schema validation for grammars and fuzzing configurations."""

import json
from pathlib import Path
from typing import Dict, Any

from jsonschema import validate, ValidationError


SCHEMA_DIR = Path(__file__).parent / 'schemas'


class SchemaValidator:
    """Validates JSON documents against one of the bundled schemas"""

    def __init__(self, schema_path: Path):
        with open(schema_path, 'r', encoding='utf-8') as f:
            self.schema = json.load(f)

    @classmethod
    def for_grammar(cls) -> 'SchemaValidator':
        return cls(SCHEMA_DIR / 'grammar.schema.json')

    @classmethod
    def for_config(cls) -> 'SchemaValidator':
        return cls(SCHEMA_DIR / 'config.schema.json')

    def validate(self, path: Path) -> Dict[str, Any]:
        """Validate a JSON file and return parsed data"""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return self.validate_data(data)

    def validate_data(self, data: Any) -> Any:
        """Validate already-parsed data and return it unchanged"""
        try:
            validate(instance=data, schema=self.schema)
        except ValidationError as e:
            location = '/'.join(str(p) for p in e.absolute_path)
            where = f" at '{location}'" if location else ""
            raise ValueError(f"Invalid configuration{where}: {e.message}")

        return data
