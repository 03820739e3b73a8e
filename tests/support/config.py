"""Build test configuration for ldapverify."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ldapverify.config import Config

__all__ = [
    "config_path",
    "configure",
]


def config_path(filename: str) -> Path:
    """Return the path to a test configuration file.

    Parameters
    ----------
    filename
        The base name of a test configuration file.

    Returns
    -------
    Path
        The path to that file.
    """
    return (
        Path(__file__).parent.parent / "data" / "config" / (filename + ".yaml")
    )


def configure(filename: str, **overrides: Any) -> Config:
    """Load a test configuration file.

    Parameters
    ----------
    filename
        Configuration file to use.
    **overrides
        Settings to change, using the snake-case setting names.

    Returns
    -------
    Config
        The new configuration. Logging will have been configured from it.
    """
    with config_path(filename).open("r") as f:
        settings = yaml.safe_load(f)
    config = Config.model_validate(settings)
    if overrides:
        settings = {**config.model_dump(), **overrides}
        config = Config.model_validate(settings)
    config.configure_logging()
    return config
