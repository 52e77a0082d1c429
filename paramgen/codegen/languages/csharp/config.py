"""
C#-specific configuration.

Maps the configured class kind onto the declaration shapes used
by the C# template.
"""

from enum import Enum
from typing import List

from ...core.config import GeneratorConfig


class ClassKind(Enum):
    """Declaration shape of the generated class."""

    SCRIPTABLE_OBJECT = "scriptable_object"
    PLAIN = "plain"
    STATIC_READONLY = "static_readonly"


# "public class Name" + suffix
CLASS_DECLARATIONS = {
    ClassKind.SCRIPTABLE_OBJECT: "public class {name} : ScriptableObject",
    ClassKind.PLAIN: "public class {name}",
    ClassKind.STATIC_READONLY: "public static class {name}",
}

FIELD_MODIFIERS = {
    ClassKind.SCRIPTABLE_OBJECT: "public",
    ClassKind.PLAIN: "public",
    ClassKind.STATIC_READONLY: "public static readonly",
}


class CSharpConfig:
    """C#-specific view of a GeneratorConfig."""

    def __init__(self, config: GeneratorConfig):
        kind = config.class_kind
        if isinstance(kind, ClassKind):
            self.class_kind = kind
        else:
            try:
                self.class_kind = ClassKind(kind)
            except ValueError:
                raise ValueError(
                    f"Unknown class kind '{kind}'. "
                    f"Expected one of: {', '.join(k.value for k in ClassKind)}"
                )

        self.indent = config.indent_unit
        self.usings: List[str] = list(config.usings)
        self.add_comments = config.add_comments

    def class_declaration(self, class_name: str) -> str:
        return CLASS_DECLARATIONS[self.class_kind].format(name=class_name)

    @property
    def field_modifiers(self) -> str:
        return FIELD_MODIFIERS[self.class_kind]

    @property
    def instantiable(self) -> bool:
        """Static classes have no instances to persist."""
        return self.class_kind != ClassKind.STATIC_READONLY
