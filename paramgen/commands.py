"""Editing commands for parameter documents.

Front ends (the CLI, the interactive editor) never mutate a spec directly;
they build commands and hand them to an :class:`EditSession`.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .codegen.core.schema import (
    GenerationSpec,
    ParameterEntry,
    class_name_from_path,
)
from .codegen.orchestrator import ApplyResult, GenerationOrchestrator, load_spec, save_spec
from .logging_config import get_logger

logger = get_logger(__name__)


class CommandError(Exception):
    """Raised when a command cannot be applied to the current spec."""

    pass


# Editable document fields, keyed by both Python and wire names
FIELD_ALIASES = {
    "class_name": "class_name",
    "className": "class_name",
    "namespace": "namespace",
    "nameSpace": "namespace",
    "source_output_path": "source_output_path",
    "csharpPath": "source_output_path",
    "sourceOutputPath": "source_output_path",
    "asset_output_path": "asset_output_path",
    "assetPath": "asset_output_path",
    "assetOutputPath": "asset_output_path",
}


@dataclass
class AddParameter:
    key: str = ""
    type: str = "float"
    value: str = ""


@dataclass
class RemoveParameter:
    key: str


@dataclass
class SetParameter:
    key: str
    type: str | None = None
    value: str | None = None
    new_key: str | None = None


@dataclass
class SetField:
    name: str
    value: str
    sync_class_name: bool = False


@dataclass
class Apply:
    pass


Command = Union[AddParameter, RemoveParameter, SetParameter, SetField, Apply]


def apply_command(spec: GenerationSpec, command: Command) -> None:
    """Mutate ``spec`` according to an editing command.

    Args:
        spec: The spec being edited.
        command: Any command other than :class:`Apply`.

    Raises:
        CommandError: If the command refers to something that does not exist.
    """
    if isinstance(command, AddParameter):
        spec.add_parameter(ParameterEntry(command.key, command.type, command.value))
        logger.debug("Added parameter %r", command.key)

    elif isinstance(command, RemoveParameter):
        if not spec.remove_parameter(command.key):
            raise CommandError(f"No parameter named '{command.key}'")
        logger.debug("Removed parameter %r", command.key)

    elif isinstance(command, SetParameter):
        entry = spec.get_parameter(command.key)
        if entry is None:
            raise CommandError(f"No parameter named '{command.key}'")
        if command.type is not None:
            entry.type = command.type
        if command.value is not None:
            entry.value = command.value
        if command.new_key is not None:
            entry.key = command.new_key
        logger.debug("Updated parameter %r", command.key)

    elif isinstance(command, SetField):
        attribute = FIELD_ALIASES.get(command.name)
        if attribute is None:
            raise CommandError(
                f"Unknown field '{command.name}'. "
                f"Expected one of: class_name, namespace, source_output_path, asset_output_path"
            )
        setattr(spec, attribute, command.value)
        if attribute == "source_output_path" and command.sync_class_name:
            spec.class_name = class_name_from_path(command.value)
        logger.debug("Set %s to %r", attribute, command.value)

    else:
        raise CommandError(f"Unsupported command: {command!r}")


def parse_command(text: str | list[str]) -> Command:
    """Parse a one-line textual command.

    Supported forms::

        add KEY [TYPE [VALUE]]
        remove KEY
        set KEY TYPE VALUE
        rename KEY NEW_KEY
        field NAME VALUE
        apply

    Raises:
        CommandError: If the text is not a known command.
    """
    words = shlex.split(text) if isinstance(text, str) else list(text)
    if not words:
        raise CommandError("Empty command")

    verb, args = words[0].lower(), words[1:]

    if verb == "add" and 1 <= len(args) <= 3:
        return AddParameter(*args)
    if verb == "remove" and len(args) == 1:
        return RemoveParameter(args[0])
    if verb == "set" and len(args) == 3:
        return SetParameter(args[0], type=args[1], value=args[2])
    if verb == "rename" and len(args) == 2:
        return SetParameter(args[0], new_key=args[1])
    if verb == "field" and len(args) == 2:
        return SetField(args[0], args[1])
    if verb == "apply" and not args:
        return Apply()

    raise CommandError(f"Cannot parse command: {' '.join(words)}")


class EditSession:
    """An editable, in-memory copy of one parameter document."""

    def __init__(self, spec_path: str | Path, orchestrator: GenerationOrchestrator | None = None):
        self.spec_path = Path(spec_path)
        self.orchestrator = orchestrator
        self.spec = load_spec(self.spec_path)
        self.dirty = False
        logger.debug("Editing %s", self.spec_path)

    def execute(self, command: Command) -> ApplyResult | None:
        """Run a command; returns the apply result for :class:`Apply`."""
        if isinstance(command, Apply):
            return self.apply()

        apply_command(self.spec, command)
        self.dirty = True
        return None

    def save(self) -> Path:
        """Write the edited spec back without generating."""
        path = save_spec(self.spec_path, self.spec)
        self.dirty = False
        return path

    def revert(self) -> None:
        """Discard edits and reload the document."""
        self.spec = load_spec(self.spec_path)
        self.dirty = False
        logger.info("Reverted edits to %s", self.spec_path)

    def apply(self) -> ApplyResult:
        """Save the edited spec and run generation on it."""
        if self.orchestrator is None:
            raise CommandError("No generator configured for this session")

        result = self.orchestrator.apply(self.spec_path, spec=self.spec)
        if result.success:
            self.dirty = False
        return result
