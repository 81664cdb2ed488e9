"""Typed configuration loading for ``.bumpkin.toml``.

Example file:

    prefix = "v"
    remote = "origin"

    [hooks]
    pre-tag = ["pytest -q"]
    post-tag = ["echo tagged $BUMPKIN_TAG"]
    post-push = ["./scripts/publish.sh"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_PREFIX",
    "DEFAULT_REMOTE",
    "Config",
    "ConfigError",
    "HooksConfig",
    "load_config",
    "load_config_or_default",
    "render_default_config",
]

CONFIG_FILE_NAME = ".bumpkin.toml"
DEFAULT_PREFIX = "v"
DEFAULT_REMOTE = "origin"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class HooksConfig:
    """Hook command lists, one per release phase."""

    pre_tag: tuple[str, ...] = ()
    post_tag: tuple[str, ...] = ()
    post_push: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    prefix: str = DEFAULT_PREFIX
    remote: str = DEFAULT_REMOTE
    hooks: HooksConfig = field(default_factory=HooksConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Missing or empty values fall back to defaults, so an explicit
        ``prefix = ""`` still yields "v".
        """
        hooks: StrDict = get_table(data, "hooks") or {}
        return cls(
            prefix=get_str(data, "prefix") or DEFAULT_PREFIX,
            remote=get_str(data, "remote") or DEFAULT_REMOTE,
            hooks=HooksConfig(
                pre_tag=get_str_list(hooks, "pre-tag") or (),
                post_tag=get_str_list(hooks, "post-tag") or (),
                post_push=get_str_list(hooks, "post-push") or (),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the config file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    hooks = result.value.get("hooks")
    if hooks is not None and as_str_dict(hooks) is None:
        return Err(ConfigError("[hooks] must be a table", path=path))

    return Ok(Config.from_dict(result.value))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or return defaults if the file does not exist.

    Other failures (bad syntax, unreadable file) are still reported.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)


def render_default_config() -> str:
    """Starter config written by ``bumpkin init``."""
    return f"""# bumpkin configuration

# Tag prefix
prefix = "{DEFAULT_PREFIX}"

# Git remote to push tags to
remote = "{DEFAULT_REMOTE}"

[hooks]
# Commands run before the tag is created (a failure aborts the release)
# pre-tag = ["pytest -q"]

# Commands run after the tag is created (a failure is reported, the tag stays)
# post-tag = ["echo Tagged $BUMPKIN_TAG"]

# Commands run after the tag is pushed (failures are only warnings)
# post-push = ["./scripts/publish.sh"]
"""
