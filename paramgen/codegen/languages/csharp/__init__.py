"""
C# code generator module.

Generates Unity C# parameter classes from parameter documents.
"""

from .generator import (
    CSharpGenerator,
    create_csharp_generator,
    create_scriptable_object_generator,
    create_plain_class_generator,
    create_static_readonly_generator,
)
from .config import CSharpConfig, ClassKind
from .converter import convert_value, parse_vector, format_vector, suffix_decimals
from .naming import create_csharp_sanitizer, CSHARP_RESERVED_WORDS

__all__ = [
    # Generator
    "CSharpGenerator",
    "create_csharp_generator",
    "create_scriptable_object_generator",
    "create_plain_class_generator",
    "create_static_readonly_generator",
    # Configuration
    "CSharpConfig",
    "ClassKind",
    # Value conversion
    "convert_value",
    "parse_vector",
    "format_vector",
    "suffix_decimals",
    # Naming
    "create_csharp_sanitizer",
    "CSHARP_RESERVED_WORDS",
]
