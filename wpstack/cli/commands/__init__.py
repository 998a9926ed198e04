"""CLI command groups.

Command Groups:
- stack: Docker Compose stack lifecycle (host)
- certs: Edge certificate generation and inspection (host)
- secrets: Database credential files (host)
- db: MariaDB bootstrap and verification (mariadb container)
- entrypoint: Edge and application entrypoints (nginx, wordpress containers)
"""

from .certs import certs_app
from .db import db_app
from .entrypoint import entrypoint_app
from .secrets import secrets_app
from .stack import stack_app

__all__ = [
    "certs_app",
    "db_app",
    "entrypoint_app",
    "secrets_app",
    "stack_app",
]
