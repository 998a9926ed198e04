"""Configuration templates for the edge and application containers.

Both containers render their configuration at start-up and then hand off
to the real server process:

- nginx: the domain name and certificate paths go into the server blocks
- wordpress: database coordinates and credentials go into wp-config.php
"""

from __future__ import annotations

import os
import secrets
import shutil
import string
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined
from loguru import logger

from wpstack.config import StackConfig
from wpstack.infra.secrets import Credentials

NGINX_TEMPLATE = "nginx.conf.j2"
WP_CONFIG_TEMPLATE = "wp-config.php.j2"

WP_SALT_KEYS = (
    "AUTH_KEY",
    "SECURE_AUTH_KEY",
    "LOGGED_IN_KEY",
    "NONCE_KEY",
    "AUTH_SALT",
    "SECURE_AUTH_SALT",
    "LOGGED_IN_SALT",
    "NONCE_SALT",
)

# Printable, but nothing that needs escaping inside a PHP single-quoted string
_SALT_ALPHABET = string.ascii_letters + string.digits + "!#$%&()*+,-./:;<=>?@[]^_{|}~"


def php_str(value: Any) -> str:
    """Escape a value for a PHP single-quoted string literal."""
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def get_template_env() -> Environment:
    """Get the Jinja2 environment for the packaged templates."""
    env = Environment(
        loader=PackageLoader("wpstack", "templates"),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["php_str"] = php_str
    return env


def generate_salts() -> dict[str, str]:
    return {
        key: "".join(secrets.choice(_SALT_ALPHABET) for _ in range(64))
        for key in WP_SALT_KEYS
    }


def render_template(template_name: str, context: dict[str, Any]) -> str:
    return get_template_env().get_template(template_name).render(**context)


def write_atomically(path: Path, content: str, mode: int = 0o644) -> None:
    """Write ``content`` to a sibling temp file, then rename it over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(f".{path.name}.tmp")
    temp_path.write_text(content)
    os.chmod(temp_path, mode)
    temp_path.replace(path)


def render_nginx_config(config: StackConfig) -> str:
    ssl_dir = Path(config.edge.ssl_dir)
    return render_template(
        NGINX_TEMPLATE,
        {
            "domain_name": config.domain_name,
            "edge": config.edge,
            "cert_path": ssl_dir / config.certificate.cert_name,
            "key_path": ssl_dir / config.certificate.key_name,
        },
    )


def render_wp_config(
    config: StackConfig, credentials: Credentials, salts: dict[str, str] | None = None
) -> str:
    return render_template(
        WP_CONFIG_TEMPLATE,
        {
            "domain_name": config.domain_name,
            "db_name": config.database.name,
            "db_user": credentials.user,
            "db_password": credentials.password.get_secret_value(),
            "db_host": config.database.host,
            "db_port": config.database.port,
            "table_prefix": config.app.table_prefix,
            "salts": salts or generate_salts(),
        },
    )


def write_nginx_config(config: StackConfig, target: Path | None = None) -> Path:
    """Render the edge configuration; runs on every container start."""
    path = target or Path(config.edge.conf_path)
    write_atomically(path, render_nginx_config(config))
    logger.info(f"Wrote NGINX configuration for {config.domain_name} to {path}")
    return path


def write_wp_config(
    config: StackConfig, credentials: Credentials, target: Path | None = None
) -> bool:
    """Render wp-config.php unless the volume already holds one.

    An existing file is kept so the salts (and therefore user sessions)
    survive container restarts.

    Returns:
        True if the file was written
    """
    path = target or Path(config.app.wp_config_path)
    if path.exists():
        logger.info(f"{path} already present; keeping it")
        return False
    write_atomically(path, render_wp_config(config, credentials), mode=0o640)
    logger.info(f"Wrote {path}")
    return True


def install_wordpress_core(source: Path, web_root: Path) -> bool:
    """Copy the WordPress core from the image into an empty web root.

    Returns:
        True if files were copied, False if the web root already has a core
    """
    if (web_root / "wp-load.php").exists():
        return False
    if not source.is_dir():
        raise FileNotFoundError(f"WordPress core not found at {source}")
    shutil.copytree(source, web_root, dirs_exist_ok=True)
    logger.info(f"Installed WordPress core into {web_root}")
    return True
