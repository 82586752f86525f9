"""
Provision context — the single source of truth for one run.

Built ONCE by the install use case, right after environment
detection, and passed explicitly to every component:

    settings    (read from the environment by the entrypoint)
  + environment (produced by the detector)
  = ProvisionContext

Frozen: nothing downstream can change what the run is targeting.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from provisioner.core.config.settings import Settings
from provisioner.core.models.environment import Environment, PackageManagerKind
from provisioner.core.models.layout import InstalledLayout, ServiceIdentity


class ProvisionContext(BaseModel):
    """Immutable per-run context."""

    model_config = ConfigDict(frozen=True)

    settings: Settings
    environment: Environment

    @property
    def package_manager(self) -> PackageManagerKind:
        return self.environment.package_manager

    @property
    def layout(self) -> InstalledLayout:
        return self.settings.layout

    @property
    def identity(self) -> ServiceIdentity:
        return self.settings.identity
