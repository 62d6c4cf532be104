from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate

from buyer_orders.config import Config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Register blueprints
    from buyer_orders.routes.auth import bp as auth_bp
    from buyer_orders.routes.orders import bp as orders_bp
    from buyer_orders.routes.admin import bp as admin_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(orders_bp, url_prefix="/orders")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    with app.app_context():
        from buyer_orders.models import User, Batch, Order, Seller, Show, Settings  # noqa: F401

    # One tracking service per app; it owns the per-session sync workers
    from buyer_orders.services.order_tracking import OrderTrackingService
    app.extensions["order_tracking"] = OrderTrackingService(app)

    # Start the order sync scheduler (session jobs are added on demand)
    if app.config.get("ORDER_SYNC_SCHEDULER_ENABLED", True):
        from buyer_orders.services.scheduler import init_app as init_scheduler
        init_scheduler(app)

    return app
