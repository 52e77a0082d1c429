"""
Generator and pipeline settings.

Settings are merged in layers: language defaults, then an optional JSON
config file, then explicit overrides (usually from the command line).
Keys that aren't GeneratorConfig fields are kept in ``custom``.
"""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...utils import DocumentIOError, read_json_file, write_json


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


CLASS_KINDS = ("scriptable_object", "plain", "static_readonly")
PENDING_POLICIES = ("overwrite", "reject")

LANGUAGE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "csharp": {"usings": ["UnityEngine"]},
}


@dataclass
class GeneratorConfig:
    """Settings for one generator and the pipeline around it."""

    # Code style settings
    indent_size: int = 4
    use_tabs: bool = False

    # Declaration shape
    class_kind: str = "scriptable_object"
    usings: List[str] = field(default_factory=lambda: ["UnityEngine"])
    add_comments: bool = False

    # Post-build instantiation
    state_file: str = ".paramgen/pending.json"
    build_command: Optional[str] = None
    type_roots: List[str] = field(default_factory=list)
    poll_interval: float = 0.5
    build_timeout: float = 300.0
    pending_policy: str = "overwrite"

    # Custom settings (language-specific)
    custom: Dict[str, Any] = field(default_factory=dict)

    @property
    def indent_unit(self) -> str:
        """One level of indentation."""
        return "\t" if self.use_tabs else " " * self.indent_size

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "GeneratorConfig":
        """Build a config, moving unknown keys into ``custom``."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in values.items() if k in known}
        extra = {k: v for k, v in values.items() if k not in known}
        if extra:
            kwargs["custom"] = {**kwargs.get("custom", {}), **extra}
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Flat dict with ``custom`` entries promoted to top-level keys."""
        values = asdict(self)
        values.update(values.pop("custom"))
        return values


class ConfigManager:
    """Merges defaults, config files and overrides into GeneratorConfig."""

    def __init__(self, defaults: Optional[Dict[str, Dict[str, Any]]] = None):
        self.defaults = dict(LANGUAGE_DEFAULTS if defaults is None else defaults)

    def get_config(self, language: str = "csharp",
                   custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
        """
        Get complete configuration for a language.

        Args:
            language: Target language name
            custom_config: Overrides applied last
            config_file: Path to a JSON configuration file

        Raises:
            ConfigError: If the config file is missing or malformed
        """
        merged: Dict[str, Any] = dict(self.defaults.get(language, {}))
        if config_file:
            merged.update(self.read_file(config_file))
        if custom_config:
            merged.update(custom_config)
        return GeneratorConfig.from_dict(merged)

    def read_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        path = Path(config_path)
        if path.suffix.lower() != ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            values = read_json_file(path)
        except FileNotFoundError:
            raise ConfigError(f"Configuration file not found: {path}") from None
        except DocumentIOError as e:
            raise ConfigError(str(e)) from e

        if not isinstance(values, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")
        return values

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Write ``config`` so that ``get_config(config_file=...)`` reads it back."""
        try:
            write_json(output_path, config.to_dict())
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {output_path}: {e}") from e

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """Return a warning for each setting outside its allowed range."""
        checks = [
            ("class_kind", config.class_kind in CLASS_KINDS),
            ("pending_policy", config.pending_policy in PENDING_POLICIES),
            ("indent_size", config.use_tabs or config.indent_size >= 1),
            ("poll_interval", config.poll_interval > 0),
            ("build_timeout", config.build_timeout > 0),
        ]
        return [
            f"Invalid {name}: {getattr(config, name)}" for name, ok in checks if not ok
        ]


_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(language: str = "csharp",
                custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """Shorthand for ``get_config_manager().get_config(...)``."""
    return get_config_manager().get_config(language, custom_config, config_file)
