"""
Language-specific code generators.

This module contains generators for different target languages.
"""

from .csharp import (
    CSharpGenerator,
    create_csharp_generator,
    create_scriptable_object_generator,
    create_plain_class_generator,
    create_static_readonly_generator,
)

__all__ = [
    "CSharpGenerator",
    "create_csharp_generator",
    "create_scriptable_object_generator",
    "create_plain_class_generator",
    "create_static_readonly_generator",
]
