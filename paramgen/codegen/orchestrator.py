"""
Generation orchestrator.

Runs an apply in two phases:

1. ``apply``: load the parameter document, emit the class, write it and,
   when an asset path is given, record a pending instantiation and ask
   the build backend to compile.
2. ``resume``: called on every idle tick until the build is done; then
   looks up the compiled type, persists an instance and clears the record.

Failures in phase 1 never raise to the caller; they are logged and
reported through ``ApplyResult``.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from .build import (
    AssetWriter,
    BuildBackend,
    NullBuildBackend,
    SourceTypeRegistry,
    SubprocessBuildBackend,
    TypeRegistry,
)
from .core.config import GeneratorConfig
from .core.errors import (
    GeneratorError,
    InvalidSpecError,
    InstantiationNotFoundError,
    PendingRequestError,
)
from .core.generator import CodeGenerator
from .core.schema import GenerationSpec, spec_from_dict, spec_to_dict
from .pending import PendingInstantiationStore, PendingRequest
from ..logging_config import get_logger
from ..utils import DocumentIOError, read_json, write_json

logger = get_logger(__name__)


class ResumeStatus(Enum):
    """Outcome of one resume tick."""

    IDLE = "idle"
    WAITING = "waiting"
    CREATED = "created"
    NOT_FOUND = "not_found"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self not in (ResumeStatus.WAITING,)


@dataclass
class ApplyResult:
    """What phase 1 did."""

    success: bool
    source_path: Optional[Path] = None
    code: str = ""
    warnings: List[str] = field(default_factory=list)
    pending: Optional[PendingRequest] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, message: str) -> "ApplyResult":
        return cls(success=False, error=message)


def load_spec(source: Union[str, Path]) -> GenerationSpec:
    """
    Load a parameter document from a file path or URL.

    Raises:
        InvalidSpecError: If the document cannot be read or has the wrong shape
    """
    try:
        data = read_json(source)
    except (DocumentIOError, FileNotFoundError) as e:
        raise InvalidSpecError(str(e)) from e

    return spec_from_dict(data)


def save_spec(path: Union[str, Path], spec: GenerationSpec) -> Path:
    """Write a spec back to its document."""
    return write_json(path, spec_to_dict(spec))


class GenerationOrchestrator:
    """Sequences emission, file output and post-build instantiation."""

    def __init__(
        self,
        generator: CodeGenerator,
        store: PendingInstantiationStore,
        build: Optional[BuildBackend] = None,
        registry: Optional[TypeRegistry] = None,
        writer: Optional[AssetWriter] = None,
        config: Optional[GeneratorConfig] = None,
    ):
        self.generator = generator
        self.store = store
        self.build = build or NullBuildBackend()
        self.registry = registry or SourceTypeRegistry([])
        self.writer = writer or AssetWriter()
        self.config = config or generator.config

    # Phase 1

    def apply(
        self,
        spec_path: Union[str, Path],
        source_output_path: Optional[Union[str, Path]] = None,
        asset_output_path: Optional[Union[str, Path]] = None,
        spec: Optional[GenerationSpec] = None,
    ) -> ApplyResult:
        """
        Generate the class described by a parameter document.

        Args:
            spec_path: Parameter document (file path or URL)
            source_output_path: Overrides the document's source path
            asset_output_path: Overrides the document's asset path
            spec: Edited in-memory spec, saved to ``spec_path`` first

        Returns:
            ApplyResult; ``success`` is True once the source is written
        """
        try:
            if self.config.pending_policy == "reject" and self.store.is_pending():
                raise PendingRequestError(
                    "An instantiation is still pending; run resume first"
                )

            if spec is not None:
                save_spec(spec_path, spec)

            loaded = load_spec(spec_path)
            code = self.generator.format_code(self.generator.emit(loaded))
            warnings = self.generator.validate_spec(loaded)

            source = source_output_path or loaded.source_output_path
            if not source:
                raise InvalidSpecError("No source output path given")

            source_path = Path(source)
            source_path.parent.mkdir(parents=True, exist_ok=True)
            source_path.write_text(code, encoding="utf-8")
            logger.info("Wrote %s to %s", loaded.qualified_name, source_path)

        except (GeneratorError, OSError) as e:
            logger.error("Generation failed for %s: %s", spec_path, e)
            return ApplyResult.failure(str(e))

        for warning in warnings:
            logger.warning(warning)

        result = ApplyResult(
            success=True, source_path=source_path, code=code, warnings=warnings
        )

        asset = asset_output_path or loaded.asset_output_path
        if asset:
            result.pending = self._request_instantiation(loaded, str(asset))

        return result

    def _request_instantiation(
        self, spec: GenerationSpec, destination: str
    ) -> Optional[PendingRequest]:
        if not self.generator.can_instantiate():
            logger.warning(
                "%s cannot be instantiated; asset %s not requested",
                spec.qualified_name,
                destination,
            )
            return None

        previous = self.store.load()
        if previous is not None:
            logger.warning(
                "Replacing pending instantiation of %s", previous.qualified_name
            )

        request = PendingRequest(
            class_name=spec.class_name,
            namespace_prefix=spec.namespace,
            destination_path=destination,
        )

        try:
            self.store.save(request)
        except OSError as e:
            logger.error("Could not schedule instantiation of %s: %s", spec.qualified_name, e)
            return None

        try:
            self.build.request_build()
        except OSError as e:
            logger.error("Could not start the build for %s: %s", spec.qualified_name, e)
            self.store.clear()
            return None

        return request

    # Phase 2

    def resume(self) -> ResumeStatus:
        """Run one idle tick of the post-build step."""
        request = self.store.load()
        if request is None:
            return ResumeStatus.IDLE

        if self.build.is_compiling():
            return ResumeStatus.WAITING

        name = request.qualified_name
        generated = None
        if self.build.last_build_failed():
            logger.error("Build failed; %s was not compiled", name)
        else:
            generated = self.registry.find_by_qualified_name(name)

        if generated is None:
            logger.error(str(InstantiationNotFoundError(name)))
            self.store.clear()
            return ResumeStatus.NOT_FOUND

        if generated.is_static:
            logger.error("%s is a static class and cannot be instantiated", name)
            self.store.clear()
            return ResumeStatus.FAILED

        try:
            self.writer.write(generated.instantiate(), request.destination_path)
        except OSError as e:
            logger.error("Could not write asset %s: %s", request.destination_path, e)
            self.store.clear()
            return ResumeStatus.FAILED

        logger.info("Generated type: %s", name)
        logger.info("Asset path: %s", request.destination_path)
        self.store.clear()
        return ResumeStatus.CREATED

    def wait_for_completion(
        self,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> ResumeStatus:
        """Tick ``resume`` until it reaches a terminal status or times out."""
        poll_interval = self.config.poll_interval if poll_interval is None else poll_interval
        timeout = self.config.build_timeout if timeout is None else timeout
        deadline = clock() + timeout

        while True:
            status = self.resume()
            if status.is_terminal:
                return status
            if clock() >= deadline:
                logger.warning("Build still running after %.1fs; request kept", timeout)
                return status
            sleep(poll_interval)


def create_orchestrator(
    generator: CodeGenerator, config: Optional[GeneratorConfig] = None
) -> GenerationOrchestrator:
    """Wire an orchestrator from configuration."""
    config = config or generator.config

    if config.build_command:
        build = SubprocessBuildBackend(config.build_command)
    else:
        build = NullBuildBackend()

    return GenerationOrchestrator(
        generator=generator,
        store=PendingInstantiationStore(config.state_file),
        build=build,
        registry=SourceTypeRegistry(config.type_roots or ["."]),
        writer=AssetWriter(),
        config=config,
    )
