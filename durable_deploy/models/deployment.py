"""Deployment outcomes."""

from enum import Enum
from typing import List

from pydantic import BaseModel


class NamespaceAction(str, Enum):
    CREATE = "create"   # Name unknown to the registry
    UPDATE = "update"   # Known, but script or class differs from the declaration
    NONE = "none"       # Already associated with this script and class


class FinalizeStep(BaseModel):
    """The action chosen for one implemented namespace during finalization."""

    namespace_name: str
    action: NamespaceAction
    namespace_id: str = ""          # Empty until the create call returns


class DeployResults(BaseModel):
    """What a publish run deployed."""

    urls: List[str] = []
    schedules: List[str] = []
    durable_object_namespaces: List[str] = []
