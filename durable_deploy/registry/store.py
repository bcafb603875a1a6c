"""
Namespace Registry — the deployment run's view of the account's namespaces.

Updated by: refresh from the control plane + namespaces created during the run
Queried by: Cycle-Breaker, Binding Resolver, Finalizer
"""

import logging
from typing import Dict, List, Optional

from durable_deploy.control_plane.client import ControlPlaneClient
from durable_deploy.models.namespace import NamespaceRecord

logger = logging.getLogger(__name__)


class NamespaceRegistry:
    """
    In-memory, name-keyed cache of namespace records for one deployment unit.
    Never persisted and never shared between units. Entries are only ever
    replaced, never removed, except by a wholesale refresh.
    """

    def __init__(self, records: Optional[List[NamespaceRecord]] = None):
        self._records: Dict[str, NamespaceRecord] = {}
        self._refreshed = False
        if records is not None:
            self.replace(records)

    @property
    def refreshed(self) -> bool:
        """Whether the registry holds a directory snapshot (listed or seeded)."""
        return self._refreshed

    def refresh(self, client: ControlPlaneClient, account_id: str) -> None:
        """Replace the registry contents with a fresh listing of the account."""
        records = client.list_namespaces(account_id)
        self.replace(records)
        logger.info(
            "registry.refreshed account=%s namespaces=%d", account_id, len(self._records)
        )

    def replace(self, records: List[NamespaceRecord]) -> None:
        """Bulk replace with a directory snapshot."""
        self._records = {record.name: record for record in records}
        self._refreshed = True

    def insert(self, record: NamespaceRecord) -> None:
        """Record a namespace created or updated during this run."""
        self._records[record.name] = record

    def get(self, name: str) -> Optional[NamespaceRecord]:
        return self._records.get(name)

    def names(self) -> List[str]:
        return list(self._records)

    def records(self) -> List[NamespaceRecord]:
        return list(self._records.values())

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)
