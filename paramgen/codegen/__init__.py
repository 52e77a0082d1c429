"""
paramgen code generation module.

Generates source code from parameter documents and instantiates the
generated types after an external build.
"""

import json

from .registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_language_info,
    list_all_language_info,
    list_supported_languages,
)
from .core.errors import (
    GeneratorError,
    InvalidSpecError,
    MissingClassNameError,
    InstantiationNotFoundError,
    PendingRequestError,
)
from .core.generator import CodeGenerator, GenerationResult, generate_code
from .core.schema import (
    GenerationSpec,
    ParameterEntry,
    TypeTag,
    spec_from_dict,
    spec_to_dict,
)
from .core.config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .orchestrator import (
    ApplyResult,
    GenerationOrchestrator,
    ResumeStatus,
    create_orchestrator,
    load_spec,
    save_spec,
)
from .pending import PendingInstantiationStore, PendingRequest


def generate_from_spec(spec, language="csharp", config=None):
    """
    Generate code for an in-memory spec without touching the filesystem.

    ``spec`` may be a GenerationSpec or an already parsed parameter
    document. ``config`` is anything ``get_generator`` accepts.
    """
    if isinstance(spec, dict):
        spec = spec_from_dict(spec)
    return generate_code(get_generator(language, config), spec)


def quick_generate(document, language="csharp", **options):
    """
    Return the generated source for a parameter document.

    ``document`` is a dict or a JSON string; keyword options override
    generator settings. Raises GeneratorError if generation fails.
    """
    if isinstance(document, str):
        document = json.loads(document)

    result = generate_from_spec(document, language, options or None)
    if not result.success:
        raise GeneratorError(result.error_message)
    return result.code


__all__ = [
    "GeneratorRegistry",
    "RegistryError",
    "CodeGenerator",
    "GenerationResult",
    "GenerationSpec",
    "ParameterEntry",
    "TypeTag",
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "GeneratorError",
    "InvalidSpecError",
    "MissingClassNameError",
    "InstantiationNotFoundError",
    "PendingRequestError",
    "ApplyResult",
    "GenerationOrchestrator",
    "ResumeStatus",
    "PendingInstantiationStore",
    "PendingRequest",
    "create_orchestrator",
    "generate_code",
    "generate_from_spec",
    "quick_generate",
    "get_generator",
    "get_language_info",
    "list_all_language_info",
    "list_supported_languages",
    "load_config",
    "load_spec",
    "save_spec",
    "spec_from_dict",
    "spec_to_dict",
]
