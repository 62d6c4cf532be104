from flask import Blueprint, current_app, request, session
from flask_login import login_user, logout_user, login_required, current_user

from buyer_orders.models import User
from buyer_orders.services.identity import IMPERSONATE_USER_EMAIL, IMPERSONATE_USER_ID

bp = Blueprint("auth", __name__)


@bp.route("/login", methods=["POST"])
def login():
    if current_user.is_authenticated:
        return {"user_id": current_user.id, "role": current_user.role}

    data = request.get_json(silent=True) or request.form
    email = data.get("email")
    password = data.get("password")

    user = User.query.filter_by(email=email).first()

    if user and user.is_active and user.check_password(password):
        login_user(user)
        return {"user_id": user.id, "role": user.role}

    return {"error": "Invalid email or password"}, 401


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    # Ending the login session ends its order polling too
    current_app.extensions["order_tracking"].stop_session(current_user.id)
    session.pop(IMPERSONATE_USER_ID, None)
    session.pop(IMPERSONATE_USER_EMAIL, None)
    logout_user()
    return {"logged_out": True}
