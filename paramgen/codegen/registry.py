"""
Language registry.

Maps language names and their aliases to generator classes, and builds
configured generator instances on request.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from .core.config import GeneratorConfig, load_config
from .core.generator import CodeGenerator

ConfigSource = Union[GeneratorConfig, Dict[str, Any], str, Path, None]


class RegistryError(Exception):
    """Unknown language, bad registration or a generator that won't build."""


@dataclass
class LanguageEntry:
    name: str
    generator_class: Type[CodeGenerator]
    aliases: Tuple[str, ...] = field(default_factory=tuple)


class GeneratorRegistry:
    """Name and alias lookup for generator classes."""

    def __init__(self):
        self._entries: Dict[str, LanguageEntry] = {}
        self._alias_index: Dict[str, str] = {}

    def register(
        self,
        language: str,
        generator_class: Type[CodeGenerator],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register ``generator_class`` under ``language`` and its aliases.

        A second registration of the same name is ignored unless
        ``replace`` is set.

        Raises:
            RegistryError: If the class is not a CodeGenerator, or an alias
                is already taken by another language
        """
        if not (isinstance(generator_class, type) and issubclass(generator_class, CodeGenerator)):
            raise RegistryError(f"{generator_class!r} is not a CodeGenerator subclass")

        name = language.lower()
        if name in self._entries and not replace:
            return

        alias_keys = tuple(
            sorted({alias.lower() for alias in aliases or ()} - {name})
        )
        for alias in alias_keys:
            owner = self._alias_index.get(alias)
            if alias in self._entries or (owner and owner != name):
                if not replace:
                    raise RegistryError(
                        f"Alias '{alias}' is already used by '{owner or alias}'"
                    )

        if name in self._entries:
            self.unregister(name)
        self._entries[name] = LanguageEntry(name, generator_class, alias_keys)
        for alias in alias_keys:
            self._alias_index[alias] = name

    def unregister(self, language: str):
        """Drop a language and every alias pointing at it."""
        entry = self._entries.pop(self.resolve(language), None)
        if entry is not None:
            for alias in entry.aliases:
                self._alias_index.pop(alias, None)

    def resolve(self, language: str) -> str:
        """Primary name for ``language``, which may be an alias."""
        key = language.lower()
        return self._alias_index.get(key, key)

    def entry(self, language: str) -> LanguageEntry:
        try:
            return self._entries[self.resolve(language)]
        except KeyError:
            raise RegistryError(
                f"No generator registered for language: {language}. "
                f"Available: {', '.join(self.list_languages())}"
            ) from None

    def is_supported(self, language: str) -> bool:
        return self.resolve(language) in self._entries

    def list_languages(self) -> List[str]:
        return sorted(self._entries)

    def create_generator(self, language: str, config: ConfigSource = None) -> CodeGenerator:
        """
        Build a generator for ``language``.

        Args:
            language: Language name or alias
            config: A GeneratorConfig, a dict of overrides, a config file
                path, or None for the defaults

        Raises:
            RegistryError: If the language is unknown or the generator
                rejects its configuration
        """
        entry = self.entry(language)

        if isinstance(config, GeneratorConfig):
            final_config = config
        elif isinstance(config, dict):
            final_config = load_config(entry.name, custom_config=config)
        elif isinstance(config, (str, Path)):
            final_config = load_config(entry.name, config_file=config)
        elif config is None:
            final_config = load_config(entry.name)
        else:
            raise RegistryError(f"Invalid config type: {type(config).__name__}")

        try:
            return entry.generator_class(final_config)
        except (ValueError, TypeError) as e:
            raise RegistryError(f"Failed to create {entry.name} generator: {e}") from e

    def get_language_info(self, language: str) -> Dict[str, Any]:
        entry = self.entry(language)
        generator = self.create_generator(entry.name)
        return {
            "name": generator.language_name,
            "class": entry.generator_class.__name__,
            "file_extension": generator.file_extension,
            "aliases": list(entry.aliases),
            "module": entry.generator_class.__module__,
        }


_registry: Optional[GeneratorRegistry] = None


def get_registry() -> GeneratorRegistry:
    """Process-wide registry with the built-in generators registered."""
    global _registry
    if _registry is None:
        from .languages.csharp import CSharpGenerator

        _registry = GeneratorRegistry()
        _registry.register("csharp", CSharpGenerator, aliases=["cs", "c#", "unity"])
    return _registry


def get_generator(language: str = "csharp", config: ConfigSource = None) -> CodeGenerator:
    return get_registry().create_generator(language, config)


def list_supported_languages() -> List[str]:
    return get_registry().list_languages()


def is_language_supported(language: str) -> bool:
    return get_registry().is_supported(language)


def get_language_info(language: str) -> Dict[str, Any]:
    return get_registry().get_language_info(language)


def list_all_language_info() -> Dict[str, Dict[str, Any]]:
    registry = get_registry()
    return {name: registry.get_language_info(name) for name in registry.list_languages()}
