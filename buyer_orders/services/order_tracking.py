import logging
import threading

from buyer_orders.errors import FetchError
from buyer_orders.services import scheduler as scheduler_service
from buyer_orders.services.scheduler import OrderSyncWorker
from buyer_orders.services.store import OrderStore
from buyer_orders.services.visibility import DerivedView, derive_snapshot_view

logger = logging.getLogger(__name__)


class OrderTrackingService:
    """Entry point for the buyer order view.

    Owns one OrderSyncWorker per login session. A principal has at most one
    running worker; switching the buyer being viewed (impersonation) replaces
    it.
    """

    def __init__(self, app, store=None, scheduler=None, identity_check=None) -> None:
        self._app = app
        self._store = store or OrderStore()
        self._scheduler = scheduler
        self._identity_check = identity_check
        self._workers: dict[int, OrderSyncWorker] = {}
        self._lock = threading.RLock()

    def _new_worker(self, context, scheduled=True) -> OrderSyncWorker:
        kwargs = {}
        if scheduled:
            kwargs["on_stop"] = self._forget
        if self._identity_check is not None:
            kwargs["identity_check"] = self._identity_check
        return OrderSyncWorker(self._app, context, store=self._store, **kwargs)

    def _forget(self, worker) -> None:
        with self._lock:
            if self._workers.get(worker.context.principal_id) is worker:
                del self._workers[worker.context.principal_id]

    def worker_for(self, context):
        """Return the live worker for *context*, if any."""
        worker = self._workers.get(context.principal_id)
        if worker is None or worker.stopped or worker.context != context:
            return None
        return worker

    def start_session(self, context) -> OrderSyncWorker:
        """Start polling for *context*, replacing the principal's previous worker."""
        with self._lock:
            existing = self._workers.get(context.principal_id)
            if existing is not None and not existing.stopped and existing.context == context:
                return existing
            if existing is not None:
                existing.stop()

            worker = self._new_worker(context)
            worker.start(self._scheduler or scheduler_service.get_scheduler())
            self._workers[context.principal_id] = worker
            return worker

    def stop_session(self, principal_id: int) -> bool:
        """Stop the principal's worker. Returns False if none was running."""
        with self._lock:
            worker = self._workers.pop(principal_id, None)
        if worker is None:
            return False
        worker.stop()
        return True

    def stop_all(self) -> None:
        with self._lock:
            workers = list(self._workers.values())
            self._workers.clear()
        for worker in workers:
            worker.stop()

    def apply_interval(self, seconds: int) -> None:
        """Move every running worker to a new polling interval."""
        with self._lock:
            workers = list(self._workers.values())
        for worker in workers:
            worker.reschedule(seconds)
        logger.info("Order sync interval set to %ss for %d sessions", seconds, len(workers))

    def get_derived_view(self, context) -> DerivedView:
        """Current view for the buyer.

        Served from the session worker when it has polled at least once;
        otherwise read directly (without healing). A store failure yields an
        empty view.
        """
        if context is None:
            return DerivedView.empty()

        worker = self.worker_for(context)
        if worker is not None:
            worker.touch()
            if worker.has_view:
                return worker.view

        try:
            snapshot = self._store.fetch_snapshot(context.buyer_id)
        except FetchError as err:
            logger.warning("Order view unavailable for buyer %s: %s", context.buyer_id, err)
            return DerivedView.empty()
        return derive_snapshot_view(snapshot)

    def trigger_manual_refresh(self, context) -> DerivedView:
        """Fetch, heal and derive right now, for feedback after a user action."""
        if context is None:
            return DerivedView.empty()

        worker = self.worker_for(context)
        if worker is None:
            # One-shot cycle; the worker is never scheduled
            worker = self._new_worker(context, scheduled=False)
        else:
            worker.touch()
        return worker.refresh()
