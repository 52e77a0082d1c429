"""
Durable record of a pending post-build instantiation.

The record bridges the two phases of an apply: it is written right after
the source file, and read back (possibly by a new process) once the
external build has finished.
"""

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class PendingRequest:
    """A type waiting to be instantiated once compilation completes."""

    class_name: str
    namespace_prefix: str
    destination_path: str
    pending: bool = True

    @property
    def qualified_name(self) -> str:
        if self.namespace_prefix:
            return f"{self.namespace_prefix}.{self.class_name}"
        return self.class_name

    def to_dict(self) -> dict:
        return {
            "pending": self.pending,
            "className": self.class_name,
            "namespacePrefix": self.namespace_prefix,
            "destinationPath": self.destination_path,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PendingRequest":
        return cls(
            class_name=str(data.get("className") or ""),
            namespace_prefix=str(data.get("namespacePrefix") or ""),
            destination_path=str(data.get("destinationPath") or ""),
            pending=bool(data.get("pending", False)),
        )


class PendingInstantiationStore:
    """Single-slot JSON store for the pending instantiation request."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[PendingRequest]:
        """Return the pending request, or None if there is none."""
        if not self.path.exists():
            return None

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Ignoring unreadable pending state %s: %s", self.path, e)
            return None

        if not isinstance(data, dict):
            logger.error("Ignoring malformed pending state in %s", self.path)
            return None

        request = PendingRequest.from_dict(data)
        if not request.pending or not request.class_name:
            return None
        return request

    def is_pending(self) -> bool:
        return self.load() is not None

    def save(self, request: PendingRequest) -> None:
        """Persist a request, replacing any previous one atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=self.path.name, suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(request.to_dict(), f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.debug("Recorded pending instantiation of %s", request.qualified_name)

    def clear(self) -> None:
        """Drop the pending request."""
        if self.path.exists():
            self.path.unlink()
            logger.debug("Cleared pending state %s", self.path)
