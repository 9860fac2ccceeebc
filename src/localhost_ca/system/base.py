"""Interface shared by the platform trust store installers."""

import subprocess
from pathlib import Path
from typing import Protocol

from loguru import logger

from localhost_ca.errors import InstallError


class TrustInstaller(Protocol):
    """Registers a certificate as trusted at the operating system level."""

    def install(self, certificate_path: str | Path) -> None:
        """
        Install a certificate into the system trust store.

        Args:
            certificate_path: Path to a PEM certificate

        Raises:
            InstallError: If a trust store command fails
        """
        ...


class CommandRunner:
    """Runs trust store commands, optionally through sudo."""

    def __init__(self, use_sudo: bool = True):
        self.use_sudo = use_sudo

    def run(self, *command: str) -> None:
        """
        Run a command, raising InstallError on a non-zero exit status.

        Args:
            *command: Program and arguments
        """
        argv = ["sudo", *command] if self.use_sudo else list(command)

        logger.info(f"Running {' '.join(argv)}")
        try:
            result = subprocess.run(argv, check=False)
        except OSError as e:
            logger.error(f"Could not run {argv[0]}: {e}")
            # 127 is the shell status for a command that cannot be found
            raise InstallError(argv, 127) from e

        if result.returncode != 0:
            logger.error(f"{argv[0]} exited with status {result.returncode}")
            raise InstallError(argv, result.returncode)
