"""Periodic background pass over due saved searches."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import structlog

from saved_searches.application.new_results_check_service import NewResultsCheckService
from saved_searches.domain.entities.results import DueCheckReport
from saved_searches.domain.utils.clock import utc_now

logger = structlog.get_logger(__name__)


class PeriodicNewResultsCheck:
    """
    Runs ``NewResultsCheckService.run_due_checks`` on a fixed interval.

    A failing pass is logged and the loop carries on with the next one.
    """

    def __init__(
        self,
        check_service: NewResultsCheckService,
        interval_seconds: int = 300,
        batch_size: int = 100,
    ):
        """
        Initialize the periodic check.

        Args:
            check_service: Service performing the checks
            interval_seconds: Pause between two passes
            batch_size: Maximum number of due searches per pass
        """
        self._check_service = check_service
        self._interval = interval_seconds
        self._batch_size = batch_size
        self._check_task: Optional[asyncio.Task] = None
        self._shutdown = False
        self._passes = 0
        self._last_report: Optional[DueCheckReport] = None
        self._last_run_at = None

    def start(self) -> None:
        """Start the periodic check task."""
        if self._check_task is None or self._check_task.done():
            self._shutdown = False
            self._check_task = asyncio.create_task(self._check_loop())
            logger.info(
                "Periodic new results check started",
                interval_seconds=self._interval,
                batch_size=self._batch_size,
            )

    async def _check_loop(self) -> None:
        """Main check loop."""
        while not self._shutdown:
            try:
                await self.run_once()
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error during periodic new results check", error=str(e))
                await asyncio.sleep(self._interval)

    async def run_once(self) -> DueCheckReport:
        """Run a single pass immediately."""
        self._last_run_at = utc_now()
        report = await self._check_service.run_due_checks(
            now=self._last_run_at, limit=self._batch_size
        )
        self._passes += 1
        self._last_report = report
        return report

    def get_status(self) -> Dict[str, Any]:
        return {
            "service": "PeriodicNewResultsCheck",
            "status": "running" if self.is_running else "stopped",
            "interval_seconds": self._interval,
            "batch_size": self._batch_size,
            "passes": self._passes,
            "last_run_at": self._last_run_at.isoformat() if self._last_run_at else None,
            "last_summary": self._last_report.summary() if self._last_report else None,
        }

    @property
    def is_running(self) -> bool:
        return self._check_task is not None and not self._check_task.done()

    async def shutdown(self) -> None:
        """Stop the periodic check."""
        self._shutdown = True

        if self._check_task and not self._check_task.done():
            self._check_task.cancel()
            try:
                await self._check_task
            except asyncio.CancelledError:
                pass

        self._check_task = None
        logger.info("Periodic new results check shutdown completed")


__all__ = ["PeriodicNewResultsCheck"]
