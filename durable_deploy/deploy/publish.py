"""
Publish — upload a script together with the Durable Object namespaces it
implements and binds to, then deploy any further targets.

States:
  RECONCILE → UPLOAD → FINALIZE → TARGETS → DONE
Any error stops the run where it happened; nothing already done is undone.
"""

import logging
from typing import Callable, Iterable, Optional, Protocol

import httpx

from durable_deploy.config.settings import Settings, settings as default_settings
from durable_deploy.control_plane.client import ControlPlaneClient, build_http_client
from durable_deploy.models.deployment import DeployResults
from durable_deploy.reconciler.namespaces import NamespaceReconciler
from durable_deploy.reconciler.unit import DeploymentUnit
from durable_deploy.util.logger import init_logger
from durable_deploy.util.timing import timed

logger = logging.getLogger(__name__)


class DeployTarget(Protocol):
    """Something deployed once the script and its namespaces are in place."""

    def deploy(
        self,
        client: ControlPlaneClient,
        unit: DeploymentUnit,
        results: DeployResults,
    ) -> None:
        ...


def publish(
    client: ControlPlaneClient,
    unit: DeploymentUnit,
    upload: Callable[[DeploymentUnit], None],
    targets: Iterable[DeployTarget] = (),
) -> DeployResults:
    """
    Publish one deployment unit.

    `upload` is called with the unit once every binding carries a namespace
    id; finalization only runs if it returns without raising.
    """
    results = DeployResults()
    reconciler = NamespaceReconciler(client, unit)

    with timed(logger, "publish", script=unit.script_name):
        reconciler.reconcile()

        with timed(logger, "publish.upload", script=unit.script_name):
            upload(unit)

        results.durable_object_namespaces.extend(reconciler.finalize())

        for target in targets:
            target.deploy(client, unit, results)

    logger.info(
        "publish.complete script=%s namespaces=%d schedules=%d urls=%d",
        unit.script_name,
        len(results.durable_object_namespaces),
        len(results.schedules),
        len(results.urls),
    )
    return results


def publish_from_settings(
    unit: DeploymentUnit,
    upload: Callable[[DeploymentUnit], None],
    targets: Iterable[DeployTarget] = (),
    settings: Optional[Settings] = None,
    http: Optional[httpx.Client] = None,
) -> DeployResults:
    """
    Process entry point: set up logging, connect to the configured control
    plane and publish `unit`. `http` replaces the client built from settings.
    """
    settings = settings or default_settings
    init_logger(settings)
    if http is None:
        with build_http_client(settings) as http:
            return publish(ControlPlaneClient(http), unit, upload, targets)
    return publish(ControlPlaneClient(http), unit, upload, targets)
