"""Stack constants and path resolution.

This module centralizes the fixed names and host paths used throughout
the task runner, derived from the project root and the loaded StackConfig.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from wpstack.config import StackConfig
from wpstack.utils.paths import resolve_under


@dataclass(frozen=True)
class StackConstants:
    """Fixed identifiers of the stack."""

    # Subdirectory MariaDB creates on first initialization of a data dir
    MARKER_DIR: str = "mysql"

    # Schemas every MariaDB server carries; anything else is user data
    SYSTEM_SCHEMAS: frozenset[str] = frozenset(
        {"information_schema", "mysql", "performance_schema", "sys"}
    )

    # Health monitoring after `up`
    HEALTH_TIMEOUT: float = 90.0
    HEALTH_INTERVAL: float = 3.0


class StackPaths:
    """Path resolver for host-side files and directories of the stack."""

    def __init__(self, project_root: Path, config: StackConfig) -> None:
        """Initialize stack paths.

        Args:
            project_root: Path to the project root directory
            config: Loaded stack configuration
        """
        self._project_root = project_root
        self._config = config

        self.compose_file = resolve_under(project_root, config.compose_file)
        self.secrets_dir = resolve_under(project_root, config.secrets_dir)
        self.data_root = resolve_under(project_root, config.data_root)

    @property
    def project_root(self) -> Path:
        return self._project_root

    @property
    def data_dirs(self) -> list[Path]:
        """Host bind directories, one per persistent volume."""
        return [self.data_root / name for name in self._config.data_subdirs]

    @property
    def volume_dirs(self) -> list[Path]:
        """Data directories holding container state (everything but ssl)."""
        return [d for d in self.data_dirs if d != self.ssl_dir]

    @property
    def ssl_dir(self) -> Path:
        return self.data_root / "ssl"

    @property
    def cert_path(self) -> Path:
        return self.ssl_dir / self._config.certificate.cert_name

    @property
    def key_path(self) -> Path:
        return self.ssl_dir / self._config.certificate.key_name


DEFAULT_CONSTANTS = StackConstants()
