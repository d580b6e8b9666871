"""
Promotion scheduler — daily cross-tenant sweep of due promotions.

``PromotionScheduler.start()`` registers a Celery beat entry that runs
the ``promotions.sweep_all_tenants`` task once a day (midnight in the
configured timezone by default) and then sweeps every tenant once right
away, so promotions that fell due while the process was down are not
left waiting a day.

The running state lives on the scheduler instance and on the
``SchedulerHandle`` it returns.  The application factory owns the
scheduler (``app.extensions["promotion_scheduler"]``); calling
``start()`` again while it is running logs and returns the existing
handle instead of registering a second entry.

Tenants are swept one after another and a failure in one tenant never
stops the others.  ``stop()`` only removes the beat entry; a sweep that
is already running finishes.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from celery import Celery
from celery.schedules import crontab
from sqlalchemy.exc import SQLAlchemyError

from hrcore.extensions import db
from hrcore.models.organization import Company
from hrcore.services import promotion_service
from hrcore.services.results import SweepResult

logger = logging.getLogger(__name__)

BEAT_ENTRY_NAME = "promotions-daily-sweep"
SWEEP_ALL_TASK = "promotions.sweep_all_tenants"
SWEEP_TENANT_TASK = "promotions.sweep_tenant"


@dataclass
class SchedulerHandle:
    """Registration of the daily sweep, returned by ``start()``."""

    entry_name: str
    schedule: crontab
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    running: bool = True


def process_all_company_promotions() -> SweepResult:
    """
    Sweep due promotions for every active company.

    Returns:
        Totals across all tenants.  Zero active companies is a no-op.
    """
    totals = SweepResult()

    try:
        company_ids = [
            row.id
            for row in db.session.query(Company.id)
            .filter(Company.is_active == True)  # noqa: E712
            .order_by(Company.id)
            .all()
        ]
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Could not list active companies: %s", exc, exc_info=True)
        return totals

    logger.info("Found %d active companies", len(company_ids))

    for company_id in company_ids:
        try:
            totals += promotion_service.process_pending_promotions(company_id)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            db.session.rollback()
            logger.error(
                "Error processing promotions for company %s: %s",
                company_id,
                exc,
                exc_info=True,
            )

    logger.info(
        "Promotion sweep completed: %d promotions applied, %d failed",
        totals.applied,
        totals.failed,
    )
    return totals


def manual_trigger_promotion(company_id: int) -> SweepResult:
    """Sweep one tenant on demand (operator and test escape hatch)."""
    logger.info("Manual promotion sweep for company %s", company_id)
    return promotion_service.process_pending_promotions(company_id)


class PromotionScheduler:
    """
    Owns the daily promotion sweep registration on a Celery app.

    Args:
        celery_app:   Celery application whose beat schedule receives
                      the daily entry.
        hour:         Hour of the daily sweep (beat timezone).
        minute:       Minute of the daily sweep.
        run_on_start: Sweep all tenants immediately when started.
    """

    def __init__(
        self,
        celery_app: Celery,
        hour: int = 0,
        minute: int = 0,
        run_on_start: bool = True,
    ):
        self.celery_app = celery_app
        self.hour = hour
        self.minute = minute
        self.run_on_start = run_on_start
        self._handle: SchedulerHandle | None = None

    @property
    def is_running(self) -> bool:
        return self._handle is not None and self._handle.running

    def start(self) -> SchedulerHandle:
        """
        Register the daily sweep and run the startup sweep.

        Returns:
            The handle for this registration.  If the scheduler is
            already running, or the entry is already registered on the
            Celery app, nothing is registered and the existing handle is
            returned.
        """
        if self.is_running:
            logger.info("Promotion scheduler already running")
            return self._handle

        beat_schedule = dict(self.celery_app.conf.beat_schedule or {})
        if BEAT_ENTRY_NAME in beat_schedule:
            logger.warning(
                "Promotion sweep already registered on Celery app %s; "
                "not registering again",
                self.celery_app.main,
            )
            self._handle = SchedulerHandle(
                entry_name=BEAT_ENTRY_NAME,
                schedule=beat_schedule[BEAT_ENTRY_NAME]["schedule"],
            )
            return self._handle

        schedule = crontab(hour=self.hour, minute=self.minute)
        beat_schedule[BEAT_ENTRY_NAME] = {
            "task": SWEEP_ALL_TASK,
            "schedule": schedule,
            # A sweep that missed its day is superseded by the next one.
            "options": {"expires": 23 * 60 * 60},
        }
        self.celery_app.conf.beat_schedule = beat_schedule
        self._handle = SchedulerHandle(entry_name=BEAT_ENTRY_NAME, schedule=schedule)

        logger.info(
            "Promotion scheduler started; daily sweep at %02d:%02d %s",
            self.hour,
            self.minute,
            self.celery_app.conf.timezone or "UTC",
        )

        if self.run_on_start:
            logger.info("Running initial promotion sweep on startup")
            process_all_company_promotions()

        return self._handle

    def stop(self, handle: SchedulerHandle | None) -> None:
        """
        Remove the daily sweep registration.

        An in-flight sweep is not interrupted.  Stopping a handle that
        is already stopped does nothing.
        """
        if handle is None or not handle.running:
            logger.debug("Promotion scheduler stop requested but not running")
            return

        beat_schedule = dict(self.celery_app.conf.beat_schedule or {})
        beat_schedule.pop(handle.entry_name, None)
        self.celery_app.conf.beat_schedule = beat_schedule

        handle.running = False
        if self._handle is handle:
            self._handle = None
        logger.info("Promotion scheduler stopped")

    def trigger_manually(self, company_id: int) -> SweepResult:
        """Sweep one tenant now, independent of the daily schedule."""
        return manual_trigger_promotion(company_id)
