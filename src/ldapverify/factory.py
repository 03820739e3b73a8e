"""Create ldapverify components."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Self

import structlog
from structlog.stdlib import BoundLogger

from .config import Config
from .constants import CONFIG_PATH
from .services.verify import VerifyService

__all__ = ["Factory"]


class Factory:
    """Build ldapverify components.

    Creating the factory and the components it builds never contacts the LDAP
    server. All network activity happens inside
    `~ldapverify.services.verify.VerifyService.verify`, which reports
    failures as return values, so a broken LDAP configuration cannot prevent
    the surrounding application from starting.

    Parameters
    ----------
    config
        ldapverify configuration.
    logger
        Logger to use. If not given, the ``ldapverify`` logger is used.
    """

    def __init__(
        self, config: Config, logger: BoundLogger | None = None
    ) -> None:
        self._config = config
        self._logger = logger or structlog.get_logger("ldapverify")

    @classmethod
    def from_config_path(cls, path: Path | None = None) -> Self:
        """Create a factory from a configuration file.

        Logging is configured from the loaded configuration.

        Parameters
        ----------
        path
            Path to the configuration file. Defaults to the value of the
            ``LDAPVERIFY_CONFIG_PATH`` environment variable or, if that is not
            set, :file:`/etc/ldapverify/ldapverify.yaml`.

        Returns
        -------
        Factory
            The new factory.
        """
        if not path:
            path = Path(os.getenv("LDAPVERIFY_CONFIG_PATH", CONFIG_PATH))
        config = Config.from_file(path)
        config.configure_logging()
        return cls(config)

    @property
    def config(self) -> Config:
        """ldapverify configuration."""
        return self._config

    def create_verify_service(self) -> VerifyService:
        """Create a service for verifying credentials.

        Returns
        -------
        VerifyService
            Newly-created service.
        """
        return VerifyService(self._config, self._logger)
