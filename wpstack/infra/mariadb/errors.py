"""Errors raised while bootstrapping MariaDB."""


class BootstrapError(Exception):
    """Raised when any step of the first-boot provisioning fails."""


class EngineNotReadyError(BootstrapError):
    """Raised when the temporary engine never accepts local connections.

    Distinct from a rejected provisioning statement: the engine either
    exited during startup or did not answer before the readiness deadline.
    """
