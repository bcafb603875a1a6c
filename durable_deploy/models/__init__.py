"""Durable Deploy data models."""

from durable_deploy.models.deployment import DeployResults, FinalizeStep, NamespaceAction
from durable_deploy.models.namespace import (
    ImplementedNamespace,
    NamespaceRecord,
    UsedBinding,
)

__all__ = [
    "DeployResults",
    "FinalizeStep",
    "ImplementedNamespace",
    "NamespaceAction",
    "NamespaceRecord",
    "UsedBinding",
]
