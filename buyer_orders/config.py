import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "postgresql://localhost:5432/buyer_orders"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"connect_timeout": 5},
    }

    # Order sync settings
    ORDER_SYNC_INTERVAL_SECONDS = int(os.environ.get("ORDER_SYNC_INTERVAL_SECONDS", "5"))
    # Polling stops when the session has not read its view for this long
    ORDER_SYNC_LEASE_SECONDS = int(os.environ.get("ORDER_SYNC_LEASE_SECONDS", "60"))
    ORDER_SYNC_SCHEDULER_ENABLED = os.environ.get("ORDER_SYNC_SCHEDULER_ENABLED", "true").lower() != "false"
    HEAL_ACTOR = "auto-sync"  # Recorded in orders.picked_up_by for healed rows
