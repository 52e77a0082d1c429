"""
Core code generation components.

Provides base classes and utilities used by all language generators.
"""

from .errors import (
    GeneratorError,
    InvalidSpecError,
    MissingClassNameError,
    InstantiationNotFoundError,
    PendingRequestError,
)
from .generator import CodeGenerator, GenerationResult, generate_code
from .schema import (
    GenerationSpec,
    ParameterEntry,
    TypeTag,
    SUPPORTED_TYPE_NAMES,
    spec_from_dict,
    spec_to_dict,
    new_template_spec,
    class_name_from_path,
)
from .naming import NameSanitizer, split_words
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Errors
    "GeneratorError",
    "InvalidSpecError",
    "MissingClassNameError",
    "InstantiationNotFoundError",
    "PendingRequestError",
    # Base generator interface
    "CodeGenerator",
    "GenerationResult",
    "generate_code",
    # Schema system - core data structures
    "GenerationSpec",
    "ParameterEntry",
    "TypeTag",
    "SUPPORTED_TYPE_NAMES",
    "spec_from_dict",
    "spec_to_dict",
    "new_template_spec",
    "class_name_from_path",
    # Naming utilities
    "NameSanitizer",
    "split_words",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
