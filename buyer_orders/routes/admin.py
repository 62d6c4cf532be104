from flask import Blueprint, current_app, request, session
from flask_login import login_required, current_user

from buyer_orders import db
from buyer_orders.models import Settings, User, admin_required
from buyer_orders.services.identity import IMPERSONATE_USER_EMAIL, IMPERSONATE_USER_ID

bp = Blueprint("admin", __name__)


@bp.route("/impersonate/<int:user_id>", methods=["POST"])
@login_required
@admin_required
def impersonate(user_id):
    """Act as another buyer. The previous sync session for this login is stopped."""
    target = db.session.get(User, user_id)
    if target is None:
        return {"error": "User not found"}, 404

    current_app.extensions["order_tracking"].stop_session(current_user.id)
    session[IMPERSONATE_USER_ID] = target.id
    session[IMPERSONATE_USER_EMAIL] = target.email
    current_app.logger.info("Admin %s acting as buyer %s", current_user.id, target.id)
    return {"impersonating": True, "buyer_id": target.id, "email": target.email}


@bp.route("/impersonate/stop", methods=["POST"])
@login_required
@admin_required
def stop_impersonation():
    current_app.extensions["order_tracking"].stop_session(current_user.id)
    session.pop(IMPERSONATE_USER_ID, None)
    session.pop(IMPERSONATE_USER_EMAIL, None)
    return {"impersonating": False, "buyer_id": current_user.id}


@bp.route("/settings/sync-interval", methods=["POST"])
@login_required
@admin_required
def sync_interval():
    """Change the order polling interval for new and running sessions."""
    data = request.get_json(silent=True) or request.form
    try:
        seconds = int(data.get("seconds", ""))
    except (TypeError, ValueError):
        return {"error": "Interval must be a number of seconds"}, 400
    if seconds <= 0:
        return {"error": "Interval must be positive"}, 400

    Settings.set_sync_interval(seconds)
    current_app.extensions["order_tracking"].apply_interval(seconds)
    return {"interval": seconds}
