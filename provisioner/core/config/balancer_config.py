"""
Generated balancer configuration — the config.yaml written at install.

Fixed schema; only the listen port and the default proxy's upstream
port come from operator overrides. Keys are emitted in schema order so
the file reads the same on every host.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from provisioner.core.config.settings import Settings
from provisioner.core.errors import ConfigError

_HEADER = """\
# SOCKS Proxy Load Balancer Configuration
# Generated by proxy-balancer-install
#
# Edit freely: re-running the installer keeps this file unless
# PB_OVERWRITE_CONFIG=1 is set.

"""


class ProxyEntry(BaseModel):
    """One upstream proxy the balancer can route through."""

    type: str
    name: str
    enabled: bool = True
    config: dict[str, Any] = Field(default_factory=dict)


class BalancerConfig(BaseModel):
    """Top-level config.yaml document."""

    listen_host: str = "127.0.0.1"
    listen_port: int = 1080
    health_check_interval_seconds: int = 30
    current_proxy_check_interval_seconds: int = 10
    connection_timeout_ms: int = 5000
    test_url: str = "http://www.google.com"
    test_rounds: int = 3
    log_subprocess_output: bool = False
    proxies: list[ProxyEntry] = Field(default_factory=list)


def default_config(settings: Settings) -> BalancerConfig:
    """The install-time default: one direct proxy to the local upstream."""
    return BalancerConfig(
        listen_host=settings.listen_host,
        listen_port=settings.listen_port,
        proxies=[
            ProxyEntry(
                type="direct",
                name="local-socks",
                enabled=True,
                config={"host": "127.0.0.1", "port": settings.upstream_port},
            ),
        ],
    )


def render_config(config: BalancerConfig) -> str:
    """Serialize to YAML with the generated-file header."""
    body = yaml.safe_dump(
        config.model_dump(),
        sort_keys=False,
        default_flow_style=False,
    )
    return _HEADER + body


def load_config(path: Path) -> BalancerConfig:
    """Read a config.yaml back into the model.

    Raises:
        ConfigError: If the file is unreadable or does not match the schema.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", str(e)) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}", type(data).__name__)

    try:
        return BalancerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid balancer configuration in {path}", str(e)) from e
