from functools import wraps

from flask import abort
from flask_login import UserMixin, current_user
from werkzeug.security import generate_password_hash, check_password_hash

from buyer_orders import db, login_manager


class UserRole:
    """User role constants."""
    BUYER = "buyer"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    CHOICES = [
        (BUYER, "Buyer"),
        (ADMIN, "Administrator"),
        (SUPER_ADMIN, "Super Administrator"),
    ]


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256))
    display_name = db.Column(db.String(100))
    role = db.Column(db.String(20), default=UserRole.BUYER, nullable=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        # super_admin implicitly includes admin privileges
        return self.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN)

    def __repr__(self):
        return f"<User {self.email}>"


def admin_required(f):
    """Decorator to require admin role for a route."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not current_user.is_admin:
            abort(403)
        return f(*args, **kwargs)
    return decorated_function


@login_manager.user_loader
def load_user(id):
    return db.session.get(User, int(id))
