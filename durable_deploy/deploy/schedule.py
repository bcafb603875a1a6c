"""Cron triggers for a script."""

import logging
from datetime import datetime, timezone
from typing import List

from croniter import croniter

from durable_deploy.control_plane.client import ControlPlaneClient
from durable_deploy.errors import ScheduleConfigError
from durable_deploy.models.deployment import DeployResults
from durable_deploy.reconciler.unit import DeploymentUnit

logger = logging.getLogger(__name__)


class ScheduleTarget:
    """Replaces the script's cron triggers with the declared ones."""

    def __init__(self, crons: List[str]):
        for cron in crons:
            if not croniter.is_valid(cron):
                raise ScheduleConfigError(cron)
        self.crons = list(crons)

    def next_runs(self, now: datetime) -> List[datetime]:
        """First fire time of each trigger after `now`, for reporting."""
        return [croniter(cron, now).get_next(datetime) for cron in self.crons]

    def deploy(
        self,
        client: ControlPlaneClient,
        unit: DeploymentUnit,
        results: DeployResults,
    ) -> None:
        schedules = client.update_schedules(unit.account_id, unit.script_name, self.crons)
        logger.info(
            "schedules.updated script=%s crons=%s", unit.script_name, ",".join(schedules)
        )
        # Triggers fire in UTC
        now = datetime.now(timezone.utc)
        for cron, next_run in zip(self.crons, self.next_runs(now)):
            logger.info(
                "schedule.next script=%s cron=%r at=%s",
                unit.script_name, cron, next_run.isoformat(),
            )
        results.schedules.extend(schedules)
