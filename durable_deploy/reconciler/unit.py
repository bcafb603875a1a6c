"""Deployment unit — one script, its namespace declarations and its registry."""

from typing import List, Optional

from durable_deploy.models.namespace import ImplementedNamespace, UsedBinding
from durable_deploy.registry.store import NamespaceRegistry


class DeploymentUnit:
    """
    Everything one publish invocation reconciles for a single script.

    Owns exactly one NamespaceRegistry. Units deployed in the same batch
    must each have their own.
    """

    def __init__(
        self,
        account_id: str,
        script_name: str,
        implemented: Optional[List[ImplementedNamespace]] = None,
        used: Optional[List[UsedBinding]] = None,
        registry: Optional[NamespaceRegistry] = None,
    ):
        if not account_id:
            raise ValueError("account_id is required")
        if not script_name:
            raise ValueError("script_name is required")

        self.account_id = account_id
        self.script_name = script_name
        self.implemented = list(implemented or [])
        self.used = list(used or [])
        self.registry = registry if registry is not None else NamespaceRegistry()

        seen = set()
        for ns in self.implemented:
            if ns.namespace_name in seen:
                raise ValueError(
                    f"namespace {ns.namespace_name!r} is implemented more than once "
                    f"by script {script_name!r}"
                )
            seen.add(ns.namespace_name)

    @property
    def implemented_names(self) -> List[str]:
        return [ns.namespace_name for ns in self.implemented]

    @property
    def used_names(self) -> List[str]:
        """Names of bindings still waiting for an id, in declaration order."""
        return [
            b.namespace_name for b in self.used
            if b.namespace_name and not b.resolved
        ]

    def __repr__(self) -> str:
        return (
            f"DeploymentUnit(account_id={self.account_id!r}, "
            f"script_name={self.script_name!r}, "
            f"implemented={len(self.implemented)}, used={len(self.used)})"
        )
