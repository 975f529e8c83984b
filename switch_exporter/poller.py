"""Device poller module.

This module handles:
- Scheduling a fetch-decode-publish cycle every POLL_INTERVAL_SECONDS
- Logging and skipping failed cycles so gauges keep their last good values
- Recording poll success and duration on the exporter
"""

import logging
import time
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from switch_exporter.client import SwitchClient, SwitchError
from switch_exporter.report import parse_report, ReportParseError
from switch_exporter.exporter import SwitchExporter

# Configure module logger
logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 10

JOB_ID = "device_poll"


class SwitchPoller:
    """Background poller publishing switch reports into the exporter.

    Attributes:
        client: Client used to fetch reports
        exporter: Exporter whose gauges receive the decoded values
    """

    def __init__(
        self,
        client: SwitchClient,
        exporter: SwitchExporter,
        scheduler: Optional[BackgroundScheduler] = None
    ):
        self.client = client
        self.exporter = exporter
        self._scheduler = scheduler if scheduler is not None else BackgroundScheduler()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def poll_once(self) -> bool:
        """Execute one fetch, decode and publish cycle.

        Failures are logged and leave the device gauges untouched.

        Returns:
            True if the report was published, False otherwise
        """
        start_time = time.time()

        try:
            content = self.client.fetch_report()
            report = parse_report(content)
            self.exporter.update_metrics(report)
            self.exporter.set_poll_success(True, time.time() - start_time)
            logger.debug("Poll completed successfully")
            return True

        except SwitchError as e:
            logger.error(f"Error fetching metrics: {e}")

        except ReportParseError as e:
            logger.error(f"Error decoding report: {e}")

        except Exception as e:
            logger.error(f"Poll failed (unexpected error): {e}")

        self.exporter.set_poll_success(False, time.time() - start_time)
        return False

    def start(self) -> None:
        """Schedule the poll job and start the scheduler.

        The first cycle runs immediately, then every POLL_INTERVAL_SECONDS.
        """
        if self._scheduler.running:
            logger.warning("Poller already started")
            return

        self._scheduler.add_job(
            self.poll_once,
            trigger=IntervalTrigger(seconds=POLL_INTERVAL_SECONDS),
            id=JOB_ID,
            name=f"Poll {self.client.report_url} every {POLL_INTERVAL_SECONDS}s",
            next_run_time=datetime.now(),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(f"Polling {self.client.report_url} every {POLL_INTERVAL_SECONDS}s")

    def shutdown(self, wait: bool = True) -> None:
        """Stop scheduling polls.

        Args:
            wait: Wait for a cycle that is currently running to finish
        """
        if not self._scheduler.running:
            return

        self._scheduler.shutdown(wait=wait)
        logger.info("Poller stopped")
