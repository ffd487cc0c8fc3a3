"""Viewer commands used to open generated logs, stored in ``commands.json``."""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, field
from os import PathLike
from pathlib import Path

CONFIG_FILE_NAME = "commands.json"
FILE_PLACEHOLDER = "{file}"


class ConfigError(Exception):
    """Raised when the command configuration cannot be read or written."""


@dataclass
class CommandConfig:
    """An external program that can open a log file."""

    description: str
    executable: str
    args: list[str] = field(default_factory=list)

    def expand_args(self, path: str | PathLike[str]) -> list[str]:
        """Return the arguments with every ``{file}`` replaced by ``path``."""
        text = str(path)
        return [arg.replace(FILE_PLACEHOLDER, text) for arg in self.args]

    @classmethod
    def from_dict(cls, data: object) -> CommandConfig:
        if not isinstance(data, dict):
            raise ConfigError(f"Command entry must be an object, got: {data!r}")
        try:
            description = data["description"]
            executable = data["executable"]
            args = data["args"]
        except KeyError as exc:
            raise ConfigError(f"Command entry is missing field {exc.args[0]!r}") from exc
        if not isinstance(description, str) or not isinstance(executable, str):
            raise ConfigError("Command description and executable must be strings")
        if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
            raise ConfigError("Command args must be a list of strings")
        return cls(description, executable, list(args))


def default_commands() -> list[CommandConfig]:
    """The commands written to a fresh configuration file."""
    return [
        CommandConfig("Use klogg (Windows)", "klogg.exe", [FILE_PLACEHOLDER]),
        CommandConfig("Use Notepad (Windows)", "notepad.exe", [FILE_PLACEHOLDER]),
        CommandConfig("Use TextEdit (macOS)", "open", [FILE_PLACEHOLDER]),
        CommandConfig("Use gedit (Linux)", "gedit", [FILE_PLACEHOLDER]),
    ]


def _default_config_dir() -> Path:
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().parent
    return Path.cwd()


def load_commands(config_dir: str | PathLike[str] | None = None) -> list[CommandConfig]:
    """Read ``commands.json`` from ``config_dir``, creating it with defaults if absent.

    Without a directory, the one holding the running program is used.
    """
    directory = Path(config_dir) if config_dir is not None else _default_config_dir()
    config_path = directory / CONFIG_FILE_NAME

    if not config_path.exists():
        commands = default_commands()
        text = json.dumps([asdict(c) for c in commands], indent=2)
        try:
            config_path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to write {config_path}: {exc}") from exc
        return commands

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Failed to read {config_path}: {exc}") from exc
    except ValueError as exc:
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc

    if not isinstance(raw, list):
        raise ConfigError(f"{config_path} must hold a list of commands")
    return [CommandConfig.from_dict(entry) for entry in raw]