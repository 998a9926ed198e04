from .config_data import (
    AppConfig,
    CertificateConfig,
    DatabaseConfig,
    EdgeConfig,
    StackConfig,
)
from .config_loader import get_config, load_config

__all__ = [
    "AppConfig",
    "CertificateConfig",
    "DatabaseConfig",
    "EdgeConfig",
    "StackConfig",
    "get_config",
    "load_config",
]
