from flask import Blueprint, current_app, session
from flask_login import login_required, current_user

from buyer_orders.services.identity import BuyerContext

bp = Blueprint("orders", __name__)


def _tracking():
    return current_app.extensions["order_tracking"]


def _context() -> BuyerContext:
    return BuyerContext.resolve(current_user, session)


def _view_response(context, view) -> dict:
    data = view.to_dict()
    data["buyer_id"] = context.buyer_id
    data["is_impersonating"] = context.is_impersonating
    return data


@bp.route("/")
@login_required
def index():
    """Buyer order view: active and past pickups plus spend totals."""
    context = _context()
    view = _tracking().get_derived_view(context)
    return _view_response(context, view)


@bp.route("/refresh", methods=["POST"])
@login_required
def refresh():
    """Sync and re-derive immediately, e.g. after the buyer confirms a pickup."""
    context = _context()
    view = _tracking().trigger_manual_refresh(context)
    return _view_response(context, view)


@bp.route("/sync/start", methods=["POST"])
@login_required
def start_sync():
    """Start background polling for this session."""
    context = _context()
    worker = _tracking().start_session(context)
    return {
        "running": True,
        "buyer_id": context.buyer_id,
        "interval": worker.interval,
    }


@bp.route("/sync/stop", methods=["POST"])
@login_required
def stop_sync():
    stopped = _tracking().stop_session(current_user.id)
    return {"running": False, "stopped": stopped}


@bp.route("/sync/status")
@login_required
def sync_status():
    context = _context()
    worker = _tracking().worker_for(context)
    if worker is None:
        return {"running": False, "buyer_id": context.buyer_id}

    worker.touch()
    last_heal = worker.last_heal
    return {
        "running": True,
        "buyer_id": context.buyer_id,
        "interval": worker.interval,
        "cycles": worker.cycles,
        "dropped_ticks": worker.dropped_ticks,
        "last_healed": last_heal.healed_count if last_heal else 0,
        "last_failed": last_heal.failed_ids if last_heal else [],
        "last_error": str(worker.last_error) if worker.last_error else None,
    }
