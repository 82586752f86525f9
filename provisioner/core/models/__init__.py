"""
Domain models — Pydantic types for the provisioner.

All models are re-exported here for convenient access:

    from provisioner.core.models import Environment, Receipt, InstalledLayout
"""

from provisioner.core.models.dependency import (
    DependencySpec,
    InstallChannel,
    InstallStep,
    Resolution,
    ResolutionState,
    StepKind,
    VersionCheck,
)
from provisioner.core.models.environment import Environment, PackageManagerKind
from provisioner.core.models.layout import (
    BuildOutput,
    InstalledLayout,
    ServiceIdentity,
    UnitState,
)
from provisioner.core.models.receipt import Receipt

__all__ = [
    # layout.py
    "BuildOutput",
    # dependency.py
    "DependencySpec",
    # environment.py
    "Environment",
    "InstallChannel",
    "InstallStep",
    "InstalledLayout",
    "PackageManagerKind",
    # receipt.py
    "Receipt",
    "Resolution",
    "ResolutionState",
    "ServiceIdentity",
    "StepKind",
    "UnitState",
    "VersionCheck",
]
