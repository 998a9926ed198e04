"""MariaDB bootstrap, connection and verification."""

from .bootstrap import (
    BootstrapOutcome,
    MariaDBBootstrapper,
    is_initialized,
    provisioning_statements,
)
from .connection import DbSettings, MariaDBConnection
from .errors import BootstrapError, EngineNotReadyError
from .server import MariaDBServer
from .verify import ProvisioningVerifier

__all__ = [
    "BootstrapError",
    "BootstrapOutcome",
    "DbSettings",
    "EngineNotReadyError",
    "MariaDBBootstrapper",
    "MariaDBConnection",
    "MariaDBServer",
    "ProvisioningVerifier",
    "is_initialized",
    "provisioning_statements",
]
