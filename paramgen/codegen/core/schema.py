"""
Core schema representation for parameter generation.

Converts the user-authored parameter document into a normalized internal
format that generators and the orchestrator can work with consistently.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Any
from enum import Enum

from .errors import InvalidSpecError, MissingClassNameError


class TypeTag(Enum):
    """Parameter types understood by the value converter."""

    FLOAT = "float"
    INT = "int"
    STRING = "string"
    VECTOR3 = "Vector3"
    VECTOR2 = "Vector2"

    @classmethod
    def parse(cls, name: str) -> Optional["TypeTag"]:
        """Return the tag for a wire name, or None for an opaque type."""
        try:
            return cls(name)
        except ValueError:
            return None


# Order offered by editing surfaces
SUPPORTED_TYPE_NAMES = [tag.value for tag in TypeTag]

# Wire names, with the aliases accepted when reading
SOURCE_PATH_KEYS = ("csharpPath", "sourceOutputPath")
ASSET_PATH_KEYS = ("assetPath", "assetOutputPath")


@dataclass
class ParameterEntry:
    """A single named, typed parameter."""

    key: str = ""
    type: str = ""
    value: str = ""

    @property
    def type_tag(self) -> Optional[TypeTag]:
        return TypeTag.parse(self.type)

    def is_well_formed(self) -> bool:
        """True when key, type and value are all non-empty."""
        return bool(self.key) and bool(self.type) and bool(self.value)


@dataclass
class GenerationSpec:
    """Everything needed to generate one class and, optionally, its asset."""

    parameters: List[ParameterEntry] = field(default_factory=list)
    class_name: str = ""
    namespace: str = ""
    source_output_path: str = ""
    asset_output_path: str = ""

    @property
    def qualified_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}.{self.class_name}"
        return self.class_name

    def well_formed_parameters(self) -> List[ParameterEntry]:
        """Parameters that will be emitted, in insertion order."""
        return [p for p in self.parameters if p.is_well_formed()]

    def malformed_count(self) -> int:
        return sum(1 for p in self.parameters if not p.is_well_formed())

    def add_parameter(self, entry: ParameterEntry) -> None:
        self.parameters.append(entry)

    def get_parameter(self, key: str) -> Optional[ParameterEntry]:
        """Get the first parameter with this key."""
        for entry in self.parameters:
            if entry.key == key:
                return entry
        return None

    def remove_parameter(self, key: str) -> bool:
        """Remove the first parameter with this key. Returns False if absent."""
        for index, entry in enumerate(self.parameters):
            if entry.key == key:
                del self.parameters[index]
                return True
        return False

    def validate(self) -> None:
        """Raise MissingClassNameError if there is nothing to name the class."""
        if not self.class_name:
            raise MissingClassNameError("Not found class name")


def _text(value: Any) -> str:
    """Coerce a document scalar to the text form the converter expects."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _first_present(data: Dict[str, Any], keys) -> str:
    for key in keys:
        if data.get(key) is not None:
            return _text(data[key])
    return ""


def spec_from_dict(data: Any) -> GenerationSpec:
    """
    Build a GenerationSpec from a parsed parameter document.

    Missing fields default to empty values. Structural problems raise
    InvalidSpecError; an empty class name is only checked at emission time.
    """
    if not isinstance(data, dict):
        raise InvalidSpecError(
            f"Parameter document must be a JSON object, got {type(data).__name__}"
        )

    raw_parameters = data.get("parameters")
    if raw_parameters is None:
        raw_parameters = []
    if not isinstance(raw_parameters, list):
        raise InvalidSpecError("'parameters' must be a list")

    parameters = []
    for index, row in enumerate(raw_parameters):
        if not isinstance(row, dict):
            raise InvalidSpecError(f"Parameter #{index} must be a JSON object")
        parameters.append(
            ParameterEntry(
                key=_text(row.get("key")),
                type=_text(row.get("type")),
                value=_text(row.get("value")),
            )
        )

    return GenerationSpec(
        parameters=parameters,
        class_name=_text(data.get("className")),
        namespace=_text(data.get("nameSpace")),
        source_output_path=_first_present(data, SOURCE_PATH_KEYS),
        asset_output_path=_first_present(data, ASSET_PATH_KEYS),
    )


def spec_to_dict(spec: GenerationSpec) -> Dict[str, Any]:
    """Serialize a GenerationSpec using the canonical wire names."""
    return {
        "parameters": [
            {"key": p.key, "type": p.type, "value": p.value} for p in spec.parameters
        ],
        "csharpPath": spec.source_output_path,
        "className": spec.class_name,
        "nameSpace": spec.namespace,
        "assetPath": spec.asset_output_path,
    }


def new_template_spec() -> GenerationSpec:
    """An empty document, as written by ``paramgen new``."""
    return GenerationSpec()


def class_name_from_path(path: str) -> str:
    """Class name implied by a source output path (its file stem)."""
    if not path:
        return ""
    return Path(path).stem
