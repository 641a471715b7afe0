"""TOML config loading for bytelox.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "bytelox.toml"


@dataclass
class VMConfig:
    trace: bool = False


@dataclass
class ReplConfig:
    prompt: str = "> "
    persist_globals: bool = True


@dataclass
class ByteloxConfig:
    vm: VMConfig = field(default_factory=VMConfig)
    repl: ReplConfig = field(default_factory=ReplConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find bytelox.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> ByteloxConfig:
    """Parse a bytelox.toml file into a ByteloxConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = ByteloxConfig()

    if "vm" in data:
        vm = data["vm"]
        config.vm = VMConfig(
            trace=vm.get("trace", False),
        )

    if "repl" in data:
        repl = data["repl"]
        config.repl = ReplConfig(
            prompt=repl.get("prompt", "> "),
            persist_globals=repl.get("persist_globals", True),
        )

    return config


def discover_config(start_path: Path | None = None) -> ByteloxConfig:
    """Load the nearest bytelox.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return ByteloxConfig()
