"""
Build and type-lookup collaborators for post-build instantiation.

The orchestrator only talks to the abstract interfaces here:

  - ``BuildBackend``: start a rebuild, report whether one is in flight.
  - ``TypeRegistry``: find a loaded type by qualified name.
  - ``AssetWriter``: persist an instance of a found type.

The concrete classes cover the command-line use case: an optional build
command run in the background, and a registry that reads the generated
C# sources back in.
"""

import re
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .core.config import ConfigError
from .core.schema import TypeTag
from ..logging_config import get_logger
from ..utils import write_json

logger = get_logger(__name__)


class BuildBackend(ABC):
    """Triggers compilation and reports its progress."""

    @abstractmethod
    def request_build(self) -> None:
        """Start compiling the freshly written sources."""
        pass

    @abstractmethod
    def is_compiling(self) -> bool:
        """True while a build is in flight."""
        pass

    def last_build_failed(self) -> bool:
        """True if the most recent build is known to have failed."""
        return False


class NullBuildBackend(BuildBackend):
    """Backend for setups where sources need no build step."""

    def request_build(self) -> None:
        logger.debug("No build command configured; skipping build")

    def is_compiling(self) -> bool:
        return False


class SubprocessBuildBackend(BuildBackend):
    """Runs a build command in the background."""

    def __init__(self, command: str, cwd: Optional[Union[str, Path]] = None):
        try:
            self.argv = shlex.split(command)
        except ValueError as e:
            raise ConfigError(f"Invalid build command {command!r}: {e}") from e
        if not self.argv:
            raise ConfigError("Build command is empty")

        self.command = command
        self.cwd = str(cwd) if cwd else None
        self._process: Optional[subprocess.Popen] = None
        self._reported = False

    def request_build(self) -> None:
        if self.is_compiling():
            logger.warning("Build already running; not starting another")
            return

        logger.info("Starting build: %s", self.command)
        self._reported = False
        self._process = subprocess.Popen(
            self.argv,
            cwd=self.cwd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    def is_compiling(self) -> bool:
        if self._process is None:
            return False

        returncode = self._process.poll()
        if returncode is None:
            return True

        if not self._reported:
            self._reported = True
            if returncode == 0:
                logger.info("Build finished")
            else:
                logger.error("Build failed with exit code %d", returncode)
        return False

    def last_build_failed(self) -> bool:
        if self._process is None:
            return False
        returncode = self._process.poll()
        return returncode is not None and returncode != 0


@dataclass
class GeneratedType:
    """A type discovered after a build, with its field initialisers."""

    qualified_name: str
    is_static: bool = False
    # field name -> (declared type, literal)
    fields: Dict[str, tuple] = field(default_factory=dict)

    def instantiate(self) -> Dict[str, Any]:
        """Build the serialized form of a default instance."""
        return {
            "type": self.qualified_name,
            "fields": {
                name: literal_to_value(type_name, literal)
                for name, (type_name, literal) in self.fields.items()
            },
        }


class TypeRegistry(ABC):
    """Lookup of currently loaded types."""

    @abstractmethod
    def find_by_qualified_name(self, name: str) -> Optional[GeneratedType]:
        pass


NAMESPACE_PATTERN = re.compile(r"^\s*namespace\s+([\w.]+)")
CLASS_PATTERN = re.compile(r"^\s*public\s+(static\s+)?class\s+(\w+)")
FIELD_PATTERN = re.compile(
    r"^\s*public\s+(?:static\s+readonly\s+)?(\S+)\s+(\w+)\s*=\s*(.+?);\s*$"
)


class SourceTypeRegistry(TypeRegistry):
    """Discovers types by reading generated ``.cs`` files under some roots."""

    def __init__(self, roots: Iterable[Union[str, Path]]):
        self.roots = [Path(root) for root in roots]

    def find_by_qualified_name(self, name: str) -> Optional[GeneratedType]:
        for generated in self.scan():
            if generated.qualified_name == name:
                return generated
        return None

    def scan(self) -> List[GeneratedType]:
        """Parse every source file under the roots."""
        types = []
        for source in self._source_files():
            try:
                text = source.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning("Cannot read %s: %s", source, e)
                continue
            types.extend(parse_source(text))
        return types

    def _source_files(self) -> List[Path]:
        files = []
        for root in self.roots:
            if root.is_file() and root.suffix == ".cs":
                files.append(root)
            elif root.is_dir():
                files.extend(sorted(root.rglob("*.cs")))
        return files


def parse_source(text: str) -> List[GeneratedType]:
    """Extract class declarations and field initialisers from C# source."""
    namespace = ""
    current: Optional[GeneratedType] = None
    types = []

    for line in text.splitlines():
        match = NAMESPACE_PATTERN.match(line)
        if match:
            namespace = match.group(1)
            continue

        match = CLASS_PATTERN.match(line)
        if match:
            class_name = match.group(2)
            qualified = f"{namespace}.{class_name}" if namespace else class_name
            current = GeneratedType(qualified, is_static=bool(match.group(1)))
            types.append(current)
            continue

        match = FIELD_PATTERN.match(line)
        if match and current is not None:
            type_name, field_name, literal = match.groups()
            current.fields[field_name] = (type_name, literal)

    return types


VECTOR_AXES = ("x", "y", "z")


def literal_to_value(type_name: str, literal: str) -> Any:
    """
    Turn a C# initialiser back into a JSON value.

    Literals that do not parse are kept as text.
    """
    tag = TypeTag.parse(type_name)

    try:
        if tag == TypeTag.FLOAT:
            return float(literal.rstrip("fF"))
        if tag == TypeTag.INT:
            return int(literal)
        if tag == TypeTag.STRING and len(literal) >= 2 and literal[0] == literal[-1] == '"':
            return literal[1:-1]
        if tag in (TypeTag.VECTOR2, TypeTag.VECTOR3):
            inner = literal[literal.index("(") + 1 : literal.rindex(")")]
            components = [float(part.strip().rstrip("fF")) for part in inner.split(",")]
            return dict(zip(VECTOR_AXES, components))
    except ValueError:
        pass

    return literal


class AssetWriter:
    """Persists instances as JSON documents."""

    def write(self, instance: Dict[str, Any], destination: Union[str, Path]) -> Path:
        path = write_json(destination, instance)
        logger.info("Asset written to %s", path)
        return path
