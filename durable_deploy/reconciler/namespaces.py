"""
Namespace Reconciler — brings an account's Durable Object namespaces in
line with what a script implements and binds to.

A script that both implements and binds to a namespace needs the
namespace id before it can be uploaded, but the namespace can only point
at the script once the script exists. Reconciliation therefore runs in
two phases around the upload:

  Pre-upload:  REFRESH → BREAK CYCLES (create placeholders) → RESOLVE BINDINGS
  Post-upload: FINALIZE (create | update | leave each implemented namespace)

Behavioral Contract:
- Never creates a name the registry already knows.
- Never deletes a namespace and never rolls back a call already made.
- Any error aborts the unit; re-running converges on the declared state.
"""

import logging
from typing import List

from durable_deploy.control_plane.client import ControlPlaneClient
from durable_deploy.errors import NamespaceNotFound
from durable_deploy.models.deployment import FinalizeStep, NamespaceAction
from durable_deploy.models.namespace import NamespaceRecord, UsedBinding
from durable_deploy.reconciler.unit import DeploymentUnit
from durable_deploy.util.timing import timed

logger = logging.getLogger(__name__)


class NamespaceReconciler:
    """Runs both reconciliation phases for one deployment unit."""

    def __init__(self, client: ControlPlaneClient, unit: DeploymentUnit):
        self.client = client
        self.unit = unit

    @property
    def registry(self):
        return self.unit.registry

    # --- Pre-upload ---

    def refresh_registry(self) -> None:
        """List the account's namespaces unless the registry already holds a snapshot."""
        if not self.registry.refreshed:
            self.registry.refresh(self.client, self.unit.account_id)

    def placeholders_needed(self) -> List[str]:
        """
        Names both implemented and used by this unit that the registry does
        not know yet, in binding declaration order.
        """
        implemented = set(self.unit.implemented_names)
        needed: List[str] = []
        for name in self.unit.used_names:
            if name in implemented and name not in self.registry and name not in needed:
                needed.append(name)
        return needed

    def break_cycles(self) -> List[NamespaceRecord]:
        """Create a placeholder for every self-referential namespace not yet known."""
        created = []
        for name in self.placeholders_needed():
            record = self.client.create_namespace(self.unit.account_id, name)
            self.registry.insert(record)
            created.append(record)
            logger.info(
                "namespace.placeholder name=%s id=%s script=%s",
                name, record.id, self.unit.script_name,
            )
        return created

    def resolve_bindings(self) -> List[UsedBinding]:
        """
        Attach a namespace id to every binding that declares only a name.
        Raises NamespaceNotFound on the first name the registry cannot resolve.
        """
        for binding in self.unit.used:
            if binding.resolved or not binding.namespace_name:
                continue
            record = self.registry.get(binding.namespace_name)
            if record is None:
                logger.error(
                    "binding.unresolved binding=%s namespace=%s script=%s",
                    binding.binding, binding.namespace_name, self.unit.script_name,
                )
                raise NamespaceNotFound(binding.namespace_name, binding.binding)
            binding.namespace_id = record.id
            logger.debug(
                "binding.resolved binding=%s namespace=%s id=%s",
                binding.binding, binding.namespace_name, record.id,
            )
        return self.unit.used

    def reconcile(self) -> List[UsedBinding]:
        """Run the pre-upload phase. Returns the unit's bindings, all resolved."""
        with timed(logger, "namespaces.reconcile", script=self.unit.script_name):
            self.refresh_registry()
            self.break_cycles()
            return self.resolve_bindings()

    # --- Post-upload ---

    def plan_finalize(self) -> List[FinalizeStep]:
        """Classify each implemented namespace against the registry."""
        steps = []
        for ns in self.unit.implemented:
            record = self.registry.get(ns.namespace_name)
            if record is None:
                action = NamespaceAction.CREATE
            elif record.implemented_by(self.unit.script_name, ns.class_name):
                action = NamespaceAction.NONE
            else:
                action = NamespaceAction.UPDATE
            steps.append(FinalizeStep(
                namespace_name=ns.namespace_name,
                action=action,
                namespace_id=record.id if record else "",
            ))
        return steps

    def finalize(self) -> List[str]:
        """
        Run the post-upload phase. Returns the names created or updated,
        in declaration order.
        """
        account_id = self.unit.account_id
        script = self.unit.script_name
        touched: List[str] = []

        with timed(logger, "namespaces.finalize", script=script):
            self.refresh_registry()
            classes = {ns.namespace_name: ns.class_name for ns in self.unit.implemented}

            for step in self.plan_finalize():
                name = step.namespace_name
                class_name = classes[name]

                if step.action == NamespaceAction.NONE:
                    logger.debug("namespace.unchanged name=%s id=%s", name, step.namespace_id)
                    continue

                if step.action == NamespaceAction.CREATE:
                    record = self.client.create_namespace(
                        account_id, name, script=script, class_name=class_name
                    )
                else:
                    self.client.update_namespace(
                        account_id, step.namespace_id, script, class_name, name=name
                    )
                    record = self.registry.get(name).model_copy(
                        update={"script": script, "class_name": class_name}
                    )

                self.registry.insert(record)
                touched.append(name)

        return touched


def reconcile(client: ControlPlaneClient, unit: DeploymentUnit) -> List[UsedBinding]:
    """Pre-upload phase: make sure every binding of `unit` has a namespace id."""
    return NamespaceReconciler(client, unit).reconcile()


def finalize(client: ControlPlaneClient, unit: DeploymentUnit) -> List[str]:
    """Post-upload phase: point every implemented namespace at the uploaded script."""
    return NamespaceReconciler(client, unit).finalize()
