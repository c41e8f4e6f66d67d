"""CLI utility functions and decorators."""

import asyncio
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

import yaml


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def async_command(f: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to run async click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs) -> Any:
        return asyncio.run(f(*args, **kwargs))

    return wrapper


T = TypeVar("T", bound="ConfigFromDict")


@dataclass
class ConfigFromDict:
    """Base class for configurations that can be created from dictionaries."""

    @classmethod
    def from_dict(cls: type[T], data: dict[str, Any]) -> T:
        """Create configuration from dictionary, ignoring unknown keys."""
        field_types = {f.name: f.type for f in cls.__dataclass_fields__.values()}
        processed_data = {}

        for key, value in data.items():
            if key in field_types:
                field_type = field_types[key]
                if hasattr(field_type, "from_dict") and isinstance(value, dict):
                    processed_data[key] = field_type.from_dict(value)
                else:
                    processed_data[key] = value

        return cls(**processed_data)


def resolve_env_vars(data: Any) -> Any:
    """Recursively replace ``$NAME`` strings with environment values.

    Unset variables are left as written.
    """
    if isinstance(data, dict):
        return {key: resolve_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [resolve_env_vars(value) for value in data]
    if isinstance(data, str) and data.startswith("$"):
        return os.environ.get(data[1:], data)
    return data


def load_yaml_config(path: Path | str) -> dict[str, Any]:
    """Load and process YAML configuration file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    return resolve_env_vars(data)
