"""
C# code generator implementation.

Generates a Unity C# class holding one initialised field per parameter.
"""

from typing import List, Optional
from pathlib import Path

from ...core.generator import CodeGenerator
from ...core.config import GeneratorConfig
from ...core.schema import GenerationSpec, ParameterEntry, TypeTag
from ....logging_config import get_logger
from .config import CSharpConfig, ClassKind
from .converter import convert_value, parse_vector, vector_size, is_number
from .naming import create_csharp_sanitizer

logger = get_logger(__name__)

CLASS_TEMPLATE = "class.cs.j2"


class CSharpGenerator(CodeGenerator):
    """Code generator for Unity C# parameter classes."""

    template_dir = Path(__file__).parent / "templates"

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize C# generator with configuration."""
        super().__init__(config)

        self.sanitizer = create_csharp_sanitizer()
        self.csharp_config = CSharpConfig(self.config)

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "csharp"

    @property
    def file_extension(self) -> str:
        """Return C# file extension."""
        return ".cs"

    @property
    def class_kind(self) -> ClassKind:
        return self.csharp_config.class_kind

    def can_instantiate(self) -> bool:
        return self.csharp_config.instantiable

    def emit(self, spec: GenerationSpec) -> str:
        """Generate the complete C# source file for a spec."""
        spec.validate()

        fields = [self._field_declaration(entry) for entry in spec.well_formed_parameters()]
        skipped = spec.malformed_count()
        if skipped:
            logger.debug("Skipping %d incomplete parameter(s) in %s", skipped, spec.class_name)

        context = {
            "header_comment": self._header_comment(spec),
            "usings": self.csharp_config.usings,
            "namespace": spec.namespace,
            "pad": self.csharp_config.indent if spec.namespace else "",
            "indent": self.csharp_config.indent,
            "declaration": self.csharp_config.class_declaration(spec.class_name),
            "fields": fields,
        }

        return self.render_template(CLASS_TEMPLATE, context)

    def _field_declaration(self, entry: ParameterEntry) -> str:
        """One ``modifiers type key = literal;`` line."""
        literal = convert_value(entry.type, entry.value)
        return f"{self.csharp_config.field_modifiers} {entry.type} {entry.key} = {literal};"

    def _header_comment(self, spec: GenerationSpec) -> Optional[str]:
        if not self.csharp_config.add_comments:
            return None
        return (
            f"<auto-generated>\n"
            f"Generated by paramgen for {spec.qualified_name}.\n"
            f"Changes to this file will be lost on the next apply.\n"
            f"</auto-generated>"
        )

    def validate_spec(self, spec: GenerationSpec) -> List[str]:
        """Validate a spec for C# generation."""
        warnings = super().validate_spec(spec)

        if spec.class_name and not self.sanitizer.is_valid_identifier(spec.class_name):
            suggestion = self.sanitizer.suggest_class_name(spec.class_name)
            warnings.append(
                f"Class name '{spec.class_name}' is not a valid C# identifier "
                f"(suggested: {suggestion})"
            )
        elif self.sanitizer.shadows_builtin(spec.class_name):
            warnings.append(f"Class name '{spec.class_name}' shadows a Unity type")

        if spec.namespace:
            for segment in spec.namespace.split("."):
                if not self.sanitizer.is_valid_identifier(segment):
                    warnings.append(f"Namespace '{spec.namespace}' is not valid C#")
                    break

        for entry in spec.well_formed_parameters():
            warnings.extend(self._validate_entry(entry))

        return warnings

    def _validate_entry(self, entry: ParameterEntry) -> List[str]:
        warnings = []

        if not self.sanitizer.is_valid_identifier(entry.key):
            warnings.append(
                f"Parameter key '{entry.key}' is not a valid C# identifier "
                f"(suggested: {self.sanitizer.suggest_field_name(entry.key)})"
            )

        tag = entry.type_tag
        if tag == TypeTag.FLOAT and not is_number(entry.value):
            warnings.append(f"Value '{entry.value}' of '{entry.key}' is not a float")
        elif tag == TypeTag.INT and not is_number(entry.value, integral=True):
            warnings.append(f"Value '{entry.value}' of '{entry.key}' is not an int")
        elif tag in (TypeTag.VECTOR2, TypeTag.VECTOR3):
            size = vector_size(entry.type)
            if parse_vector(entry.value, size) is None:
                warnings.append(
                    f"Value '{entry.value}' of '{entry.key}' is not a {entry.type}"
                )

        return warnings


# Factory functions
def create_csharp_generator(
    config: GeneratorConfig = None, class_kind: str = "scriptable_object"
) -> CSharpGenerator:
    """Create a C# generator with the given class kind."""
    if config is None:
        config = GeneratorConfig(class_kind=class_kind)

    return CSharpGenerator(config)


def create_scriptable_object_generator() -> CSharpGenerator:
    """Create generator for ScriptableObject-derived parameter classes."""
    return create_csharp_generator(class_kind=ClassKind.SCRIPTABLE_OBJECT.value)


def create_plain_class_generator() -> CSharpGenerator:
    """Create generator for plain data-holder classes."""
    return create_csharp_generator(class_kind=ClassKind.PLAIN.value)


def create_static_readonly_generator() -> CSharpGenerator:
    """Create generator for static classes with readonly fields."""
    return create_csharp_generator(class_kind=ClassKind.STATIC_READONLY.value)
