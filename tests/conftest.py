import json
import logging

import pytest

from paramgen.codegen.build import BuildBackend, GeneratedType, TypeRegistry
from paramgen.codegen.core.config import GeneratorConfig
from paramgen.codegen.languages.csharp import CSharpGenerator
from paramgen.codegen.pending import PendingInstantiationStore


@pytest.fixture(autouse=True)
def _reset_paramgen_logger():
    yield
    logger = logging.getLogger("paramgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture()
def write_doc(tmp_path):
    """Write a parameter document and return its path."""

    def _write(document, name="Stats.json"):
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def stats_doc(tmp_path):
    return {
        "parameters": [
            {"key": "speed", "type": "float", "value": "3.5"},
            {"key": "lives", "type": "int", "value": "3"},
        ],
        "csharpPath": str(tmp_path / "Assets" / "Scripts" / "Stats.cs"),
        "className": "Stats",
        "nameSpace": "",
        "assetPath": "",
    }


@pytest.fixture()
def generator():
    return CSharpGenerator(GeneratorConfig())


@pytest.fixture()
def store(tmp_path):
    return PendingInstantiationStore(tmp_path / "state" / "pending.json")


class FakeBuild(BuildBackend):
    """Reports ``compiling`` for a fixed number of polls after each request."""

    def __init__(self, busy_polls=0, failed=False):
        self.busy_polls = busy_polls
        self.failed = failed
        self.requests = 0
        self._remaining = 0

    def request_build(self):
        self.requests += 1
        self._remaining = self.busy_polls

    def is_compiling(self):
        if self._remaining > 0:
            self._remaining -= 1
            return True
        return False

    def last_build_failed(self):
        return self.failed


class FakeRegistry(TypeRegistry):
    def __init__(self, *types: GeneratedType):
        self.types = {t.qualified_name: t for t in types}
        self.lookups = []

    def find_by_qualified_name(self, name):
        self.lookups.append(name)
        return self.types.get(name)


@pytest.fixture()
def make_build():
    return FakeBuild


@pytest.fixture()
def make_registry():
    return FakeRegistry
