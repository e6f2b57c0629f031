# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading, saving, and validating mailsieve configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/mailsieve/  (default: ~/.config/mailsieve/)
#   - Data:    $XDG_DATA_HOME/mailsieve/    (default: ~/.local/share/mailsieve/)
#
# Files:
#   - config.toml: User defaults for the tokenizer, model path and logging
#   - mail.stat: Default trained model (in data directory)
#
# Every setting can be overridden on the command line.
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in all XDG paths
APP_NAME = "mailsieve"

# Log levels accepted in [logging] level
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for mailsieve.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/mailsieve/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


def get_xdg_data_home() -> Path:
    """
    Returns the XDG data directory for mailsieve.

    Respects $XDG_DATA_HOME if set, otherwise uses ~/.local/share/mailsieve/
    This is where trained models live by default.
    """
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        base = Path(xdg_data)
    else:
        base = Path.home() / ".local" / "share"
    return base / APP_NAME


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class TokenizerSettings:
    """
    Default tokenizer for training and testing.

    Attributes:
        name: Registry name ("whitespace", "html", "ngram"). Empty means
              it must be given on the command line.
        ngram_width: Characters per n-gram; only used by "ngram".
        keep_punctuation: Count punctuation characters as content.
        keep_whitespace: Keep spaces inside n-grams.
    """
    name: str = ""
    ngram_width: int = 0
    keep_punctuation: bool = False
    keep_whitespace: bool = False


@dataclass
class ModelSettings:
    """
    Attributes:
        path: Default model file. Empty means it must be given with -m.
    """
    path: str = ""


@dataclass
class LoggingSettings:
    """
    Attributes:
        level: Root log level name; --debug overrides it.
    """
    level: str = "WARNING"


@dataclass
class Config:
    """
    Main configuration container for mailsieve.

    Usage:
        >>> config = Config.load()
        >>> config.tokenizer.name          # no config file yet
        ''
        >>> Config.starter().tokenizer.name
        'whitespace'
    """
    tokenizer: TokenizerSettings = field(default_factory=TokenizerSettings)
    model: ModelSettings = field(default_factory=ModelSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    # -------------------------------------------------------------------------
    # File Paths
    # -------------------------------------------------------------------------

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    @staticmethod
    def default_model_path() -> Path:
        """Returns the path suggested for a model in a fresh config file."""
        return get_xdg_data_home() / "mail.stat"

    @property
    def model_path(self) -> Path | None:
        """The configured model file, or None if not set."""
        return Path(self.model.path).expanduser() if self.model.path else None

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from a config file.

        If the config file doesn't exist, returns default configuration.

        Args:
            path: Config file to read. Defaults to the XDG location.

        Returns:
            Loaded Config object.

        Raises:
            ConfigError: If the config file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            # No config file yet - return defaults
            return cls()

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> Path:
        """
        Save configuration to a config file.

        Creates the config directory if it doesn't exist.

        Returns:
            The path written.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

        return config_path

    @classmethod
    def starter(cls) -> "Config":
        """A config with a usable tokenizer and model path filled in."""
        config = cls()
        config.tokenizer.name = "whitespace"
        config.model.path = str(cls.default_model_path())
        config.logging.level = "INFO"
        return config

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create a Config object from a dictionary (parsed TOML).

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        config = cls()

        # Tokenizer settings
        tokenizer = _section(data, "tokenizer")
        config.tokenizer = TokenizerSettings(
            name=_typed(tokenizer, "name", str, ""),
            ngram_width=_typed(tokenizer, "ngram_width", int, 0),
            keep_punctuation=_typed(tokenizer, "keep_punctuation", bool, False),
            keep_whitespace=_typed(tokenizer, "keep_whitespace", bool, False),
        )
        if config.tokenizer.ngram_width < 0:
            raise ConfigError("[tokenizer] ngram_width cannot be negative")

        # Model settings
        model = _section(data, "model")
        config.model = ModelSettings(
            path=_typed(model, "path", str, ""),
        )

        # Logging settings
        logging_data = _section(data, "logging")
        level = _typed(logging_data, "level", str, "WARNING").upper()
        if level not in LOG_LEVELS:
            raise ConfigError(
                f"[logging] level must be one of {', '.join(LOG_LEVELS)}, not {level!r}"
            )
        config.logging = LoggingSettings(level=level)

        return config

    def _to_dict(self) -> dict[str, Any]:
        """
        Convert Config to a dictionary for TOML serialization.
        """
        data: dict[str, Any] = {}

        data["tokenizer"] = {
            "name": self.tokenizer.name,
            "ngram_width": self.tokenizer.ngram_width,
            "keep_punctuation": self.tokenizer.keep_punctuation,
            "keep_whitespace": self.tokenizer.keep_whitespace,
        }

        data["model"] = {
            "path": self.model.path,
        }

        data["logging"] = {
            "level": self.logging.level,
        }

        return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table, got {section!r}")
    return section


def _typed(section: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = section.get(key, default)
    # bool is an int subclass; keep "true" out of integer settings
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"{key} must be of type {kind.__name__}, got {value!r}")
    return value


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(Exception):
    """Raised when there's an error loading or parsing configuration."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def print_paths() -> None:
    """
    Print all XDG paths for debugging.
    Useful for users wondering where their config and models are stored.
    """
    print(f"Config:  {get_xdg_config_home()}")
    print(f"Data:    {get_xdg_data_home()}")
    print()
    print(f"Config file:    {Config.config_file_path()}")
    print(f"Default model:  {Config.default_model_path()}")
