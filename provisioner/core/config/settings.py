"""
Settings loader — reads operator overrides into a validated model.

The process environment is read ONCE, by the entrypoint, and turned
into a frozen ``Settings`` value. Core services receive it through
``ProvisionContext`` and never look at ``os.environ`` themselves.

Recognised variables:

    LISTEN_PORT           listen port written to config.yaml (default 1080)
    UPSTREAM_PORT         upstream SOCKS port for the default proxy (default 9080)
    PB_OVERWRITE_CONFIG   regenerate config.yaml even if it exists (default off)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from provisioner.core.errors import ConfigError
from provisioner.core.models.layout import InstalledLayout, ServiceIdentity

logger = logging.getLogger(__name__)

DEFAULT_LISTEN_PORT = 1080
DEFAULT_UPSTREAM_PORT = 9080
REPO_URL = "https://github.com/sepgh/dnstt-client-balancer"
REQUIRED_JAVA_MAJOR = 21

# (env var, help text) — shown by --help
ENV_OVERRIDES: tuple[tuple[str, str], ...] = (
    ("LISTEN_PORT", f"Port to listen on (default: {DEFAULT_LISTEN_PORT})"),
    ("UPSTREAM_PORT", f"Upstream SOCKS port (default: {DEFAULT_UPSTREAM_PORT})"),
    ("PB_OVERWRITE_CONFIG", "Regenerate an existing config.yaml (default: keep it)"),
    ("PB_LOG_LEVEL", "Log level: DEBUG, INFO, WARNING, ERROR (default: INFO)"),
    ("PB_LOG_FILE", "Also write full logs to this file"),
)

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Operator-tunable values, fixed for the life of the process."""

    model_config = ConfigDict(frozen=True)

    listen_host: str = "127.0.0.1"
    listen_port: int = Field(default=DEFAULT_LISTEN_PORT, ge=1, le=65535)
    upstream_port: int = Field(default=DEFAULT_UPSTREAM_PORT, ge=1, le=65535)
    overwrite_config: bool = False

    repo_url: str = REPO_URL
    required_java_major: int = REQUIRED_JAVA_MAJOR

    layout: InstalledLayout = Field(default_factory=InstalledLayout)
    identity: ServiceIdentity = Field(default_factory=ServiceIdentity)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from an environment mapping.

    Args:
        environ: Variables to read. Defaults to ``os.environ``.

    Returns:
        Validated, frozen Settings.

    Raises:
        ConfigError: If a port override is not an integer in 1-65535.
    """
    env = os.environ if environ is None else environ

    values: dict = {}
    for field, var in (("listen_port", "LISTEN_PORT"), ("upstream_port", "UPSTREAM_PORT")):
        raw = env.get(var, "").strip()
        if not raw:
            continue
        try:
            values[field] = int(raw)
        except ValueError as e:
            raise ConfigError(f"Invalid {var}", f"expected an integer, got {raw!r}") from e

    values["overwrite_config"] = env.get("PB_OVERWRITE_CONFIG", "").strip().lower() in _TRUTHY

    try:
        settings = Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigError("Invalid environment override", _first_error(e)) from e

    logger.debug(
        "Settings: listen_port=%d upstream_port=%d overwrite_config=%s",
        settings.listen_port, settings.upstream_port, settings.overwrite_config,
    )
    return settings


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg', 'invalid value')}"
