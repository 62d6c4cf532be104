"""APScheduler integration for per-session order sync polling."""

import logging
import threading
import time
from datetime import datetime, timezone

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from buyer_orders.errors import FetchError, IdentityLost
from buyer_orders.services.identity import identity_still_valid
from buyer_orders.services.reconcile import ReconcileService
from buyer_orders.services.store import OrderStore
from buyer_orders.services.visibility import DerivedView, derive_snapshot_view

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler(timezone="UTC")
_JOB_PREFIX = "order_sync"


def init_app(app) -> None:
    """Start the scheduler. Session jobs are added by OrderSyncWorker.start()."""
    if not _scheduler.running:
        _scheduler.start()
        logger.info("Order sync scheduler started.")


def get_scheduler() -> BackgroundScheduler:
    return _scheduler


def _run_sync_tick(worker) -> None:
    try:
        worker.tick()
    except Exception:
        logger.exception("Order sync tick failed for %s", worker.job_id)


class OrderSyncWorker:
    """Polls, heals and re-derives the order view for one buyer session.

    Each cycle is: fetch snapshot -> reconcile -> re-fetch if anything was
    healed -> derive. Cycles never overlap; a timer tick that finds one in
    flight is dropped. After stop() no further reads, writes or view
    updates happen.

    The worker holds a lease that readers renew through touch(). A tick that
    finds the lease expired stops the worker, so sessions whose client went
    away without stopping sync do not poll forever.
    """

    def __init__(
        self,
        app,
        context,
        store=None,
        interval: int = None,
        identity_check=identity_still_valid,
        lease_seconds: int = None,
        on_stop=None,
        clock=time.monotonic,
    ) -> None:
        self._app = app
        self.context = context
        self._store = store or OrderStore()
        self._reconciler = ReconcileService(
            self._store, actor=app.config.get("HEAL_ACTOR", "auto-sync")
        )
        self._interval = interval
        self._identity_check = identity_check
        self._scheduler = None
        self._on_stop = on_stop
        self._clock = clock
        if lease_seconds is None:
            lease_seconds = app.config.get("ORDER_SYNC_LEASE_SECONDS", 60)
        self.lease_seconds = lease_seconds
        self.last_seen = clock()

        self._cycle_lock = threading.Lock()
        self._stopped = threading.Event()

        self._last_snapshot = None
        self._view = DerivedView.empty()
        self.last_heal = None
        self.last_error = None
        self.cycles = 0
        self.dropped_ticks = 0

        self.job_id = f"{_JOB_PREFIX}:{context.session_key}"

    @property
    def view(self) -> DerivedView:
        return self._view

    @property
    def has_view(self) -> bool:
        return self._last_snapshot is not None

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def lease_expired(self) -> bool:
        if not self.lease_seconds:
            return False
        return self._clock() - self.last_seen > self.lease_seconds

    def touch(self) -> None:
        """Renew the lease; called whenever the session reads from this worker."""
        self.last_seen = self._clock()

    def start(self, scheduler=None) -> None:
        """Schedule the polling job; the first tick fires immediately."""
        self.touch()
        if self._interval is None:
            with self._app.app_context():
                from buyer_orders.models import Settings
                self._interval = Settings.get_sync_interval()

        self._scheduler = scheduler or _scheduler
        self._scheduler.add_job(
            _run_sync_tick,
            trigger=IntervalTrigger(seconds=self._interval),
            id=self.job_id,
            args=[self],
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )
        logger.info("Order sync started: %s every %ss", self.job_id, self._interval)

    def reschedule(self, interval: int) -> None:
        self._interval = interval
        if self._scheduler is None or self.stopped:
            return
        try:
            self._scheduler.reschedule_job(self.job_id, trigger=IntervalTrigger(seconds=interval))
        except JobLookupError:
            logger.debug("Order sync job %s already gone", self.job_id)

    def stop(self) -> None:
        """Cancel the timer and discard any in-flight cycle's results."""
        if self._stopped.is_set():
            return
        self._stopped.set()
        if self._scheduler is not None:
            try:
                self._scheduler.remove_job(self.job_id)
            except JobLookupError:
                pass
        logger.info("Order sync stopped: %s", self.job_id)
        if self._on_stop is not None:
            self._on_stop(self)

    def tick(self) -> bool:
        """Timer entry point. Returns False when the tick was dropped."""
        if self.stopped:
            return False
        if self.lease_expired:
            logger.info("Order sync %s not read for %ss; stopping", self.job_id, self.lease_seconds)
            self.stop()
            return False
        if not self._cycle_lock.acquire(blocking=False):
            self.dropped_ticks += 1
            logger.debug("Order sync %s still in flight; tick dropped", self.job_id)
            return False
        try:
            self._run_cycle()
        finally:
            self._cycle_lock.release()
        return True

    def refresh(self) -> DerivedView:
        """Run one cycle now, after any in-flight cycle, and return the view."""
        if self.stopped:
            return self._view
        with self._cycle_lock:
            self._run_cycle()
        return self._view

    def _run_cycle(self) -> None:
        with self._app.app_context():
            try:
                self._cycle()
            except IdentityLost as err:
                logger.info("Order sync %s: %s", self.job_id, err)
                self._last_snapshot = None
                self._view = DerivedView.empty()
                self.stop()

    def _cycle(self) -> None:
        buyer_id = self.context.buyer_id
        try:
            if not self._identity_check(self.context):
                raise IdentityLost(f"buyer {buyer_id} no longer resolvable")
            snapshot = self._store.fetch_snapshot(buyer_id)
        except FetchError as err:
            self.last_error = err
            logger.warning("Order sync fetch failed for buyer %s; keeping last view: %s", buyer_id, err)
            if not self.stopped and self._last_snapshot is None:
                self._view = DerivedView.empty()
            return

        if self.stopped:
            return
        self.last_error = None

        result = self._reconciler.reconcile(snapshot, should_continue=lambda: not self.stopped)
        self.last_heal = result

        if result.healed_count > 0 and not self.stopped:
            try:
                snapshot = self._store.fetch_snapshot(buyer_id)
            except FetchError as err:
                # Derive from the pre-heal snapshot; the next tick catches up
                self.last_error = err
                logger.warning("Re-fetch after heal failed for buyer %s: %s", buyer_id, err)

        if self.stopped:
            return

        self.cycles += 1
        self._last_snapshot = snapshot
        self._view = derive_snapshot_view(snapshot)
