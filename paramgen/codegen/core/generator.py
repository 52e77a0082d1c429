"""
Base class for language generators, and the ``generate_code`` entry point
that wraps a generator call with validation and error reporting.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import GeneratorConfig
from .errors import GeneratorError
from .schema import GenerationSpec
from .templates import TemplateEngine, create_template_engine
from ...logging_config import get_logger

logger = get_logger(__name__)

_TRAILING_SPACE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN = re.compile(r"\n{4,}")


class CodeGenerator(ABC):
    """
    Turns a GenerationSpec into the text of one source file.

    Subclasses set ``template_dir`` when they render through Jinja2
    templates, and implement ``emit``.
    """

    template_dir: Optional[Path] = None

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config or GeneratorConfig()
        self.template_engine: TemplateEngine = create_template_engine(self.template_dir)

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Registry name of the target language (e.g. 'csharp')."""

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Extension of generated files, dot included."""

    @abstractmethod
    def emit(self, spec: GenerationSpec) -> str:
        """
        Generate the complete source file for a spec.

        Raises:
            MissingClassNameError: If the spec has no class name
        """

    def can_instantiate(self) -> bool:
        """Whether the emitted type can be instantiated after a build."""
        return True

    def validate_spec(self, spec: GenerationSpec) -> List[str]:
        """Language-neutral warnings; subclasses extend the list."""
        complete = spec.well_formed_parameters()
        warnings = []

        if not complete:
            warnings.append(f"Class '{spec.class_name}' has no complete parameters")

        skipped = spec.malformed_count()
        if skipped:
            warnings.append(f"{skipped} incomplete parameter(s) will be skipped")

        keys = [entry.key for entry in complete]
        for key in dict.fromkeys(k for i, k in enumerate(keys) if k in keys[:i]):
            warnings.append(f"Duplicate parameter key '{key}'")

        for entry in complete:
            if entry.type_tag is None:
                warnings.append(
                    f"Unknown type '{entry.type}' for '{entry.key}' is passed through as-is"
                )

        return warnings

    def format_code(self, code: str) -> str:
        """Strip trailing whitespace and cap blank-line runs at two."""
        return _BLANK_RUN.sub("\n\n\n", _TRAILING_SPACE.sub("", code))

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        return self.template_engine.render_template(template_name, context)


@dataclass
class GenerationResult:
    """Generated code plus what the validator had to say about it."""

    code: str
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error_message: Optional[str] = None
    exception: Optional[Exception] = None

    @classmethod
    def error(cls, message: str, exception: Optional[Exception] = None) -> "GenerationResult":
        return cls(code="", success=False, error_message=message, exception=exception)


def generate_code(generator: CodeGenerator, spec: GenerationSpec) -> GenerationResult:
    """
    Emit, validate and format ``spec`` without raising.

    Generator errors are returned as a failed GenerationResult.
    """
    try:
        code = generator.format_code(generator.emit(spec))
    except GeneratorError as e:
        logger.error("Code generation failed: %s", e)
        return GenerationResult.error(f"Code generation failed: {e}", exception=e)

    metadata = {
        "language": generator.language_name,
        "file_extension": generator.file_extension,
        "class_name": spec.class_name,
        "qualified_name": spec.qualified_name,
        "class_kind": generator.config.class_kind,
        "parameter_count": len(spec.well_formed_parameters()),
        "skipped_count": spec.malformed_count(),
    }
    return GenerationResult(code, generator.validate_spec(spec), metadata)
