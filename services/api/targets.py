"""
Target database resolution for the API.

Provisioning and credential storage live outside this service; the API
only needs a way to turn a project id into a :class:`ConnectionDescriptor`.
"""
from typing import Callable, Dict, Optional, Protocol

from config import CONFIG
from core.executor import MigrationRunner
from models.target import ConnectionDescriptor


class TargetResolver(Protocol):
    """Maps a project id to its connection descriptor; KeyError if unknown."""

    def __call__(self, project_id: str) -> ConnectionDescriptor:
        ...


class StaticTargetResolver:
    """Resolver backed by a fixed project id → database URL mapping."""

    def __init__(self, targets: Optional[Dict[str, str]] = None):
        self._targets = dict(CONFIG.api.targets if targets is None else targets)

    def __call__(self, project_id: str) -> ConnectionDescriptor:
        return ConnectionDescriptor.from_url(self._targets[project_id])


RunnerFactory = Callable[[ConnectionDescriptor], MigrationRunner]

_resolver: Optional[TargetResolver] = None


def get_target_resolver() -> TargetResolver:
    """Dependency: resolver built from ``TARGET_DATABASES`` on first use."""
    global _resolver
    if _resolver is None:
        _resolver = StaticTargetResolver()
    return _resolver


def get_runner_factory() -> RunnerFactory:
    """Dependency: opens a dedicated, verified runner per request."""
    return MigrationRunner.from_descriptor
