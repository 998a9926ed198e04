"""Typed configuration for the WordPress stack.

Every section has defaults matching the shipped Compose file, so the
in-container entrypoints can run with no config.yaml at all.
"""

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """MariaDB service and bootstrap settings."""

    service: str = "mariadb"
    host: str = "mariadb"
    port: int = 3306
    name: str = "wordpress"
    data_dir: str = "/var/lib/mysql"
    run_dir: str = "/var/run/mysqld"
    log_dir: str = "/var/log/mysql"
    socket: str = "/var/run/mysqld/mysqld.sock"
    os_user: str = "mysql"
    bind_address: str = "0.0.0.0"
    secrets_dir: str = "/run/secrets"
    root_password_secret: str = "mariadb_root_password"
    user_secret: str = "mariadb_user"
    password_secret: str = "mariadb_password"
    ready_timeout: float = Field(default=30.0, gt=0)
    ready_initial_delay: float = Field(default=0.2, gt=0)
    ready_max_delay: float = Field(default=2.0, gt=0)
    stop_timeout: float = Field(default=30.0, gt=0)


class EdgeConfig(BaseModel):
    """NGINX edge service settings."""

    service: str = "nginx"
    https_port: int = 443
    http_port: int = 80
    upstream_host: str = "wordpress"
    upstream_port: int = 9000
    ssl_dir: str = "/etc/nginx/ssl"
    conf_path: str = "/etc/nginx/conf.d/default.conf"
    web_root: str = "/var/www/html"
    tls_protocols: str = "TLSv1.2 TLSv1.3"


class AppConfig(BaseModel):
    """WordPress / PHP-FPM application service settings."""

    service: str = "wordpress"
    web_root: str = "/var/www/html"
    wp_config_path: str = "/var/www/html/wp-config.php"
    table_prefix: str = "wp_"
    fpm_binary: str = "php-fpm"
    # WordPress core unpacked in the image; copied into the volume on first start
    core_source: str = "/usr/src/wordpress"
    os_user: str = "www-data"


class CertificateConfig(BaseModel):
    """Self-signed certificate subject and shape.

    Only the common name varies between deployments.
    """

    country: str = "ES"
    state: str = "Madrid"
    locality: str = "Madrid"
    organization: str = "42"
    unit: str = "student"
    days: int = 365
    key_bits: int = 2048
    cert_name: str = "nginx.crt"
    key_name: str = "nginx.key"

    def subject(self, common_name: str) -> str:
        return (
            f"/C={self.country}/ST={self.state}/L={self.locality}"
            f"/O={self.organization}/OU={self.unit}/CN={common_name}"
        )


class StackConfig(BaseModel):
    """Top-level stack configuration (the ``config:`` key of config.yaml)."""

    project_name: str = "inception"
    domain_name: str = "luisanch.42.fr"
    login: str = "luisanch"
    data_root: str = "/home/luisanch/data"
    compose_file: str = "infra/docker/docker-compose.yml"
    secrets_dir: str = "infra/secrets"
    data_subdirs: list[str] = Field(default_factory=lambda: ["mariadb", "wordpress", "ssl"])
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    edge: EdgeConfig = Field(default_factory=EdgeConfig)
    app: AppConfig = Field(default_factory=AppConfig)
    certificate: CertificateConfig = Field(default_factory=CertificateConfig)

    @property
    def https_url(self) -> str:
        return f"https://{self.domain_name}"
