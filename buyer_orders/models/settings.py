from flask import current_app

from buyer_orders import db


class Settings(db.Model):
    """Application settings stored in the database."""

    __tablename__ = "settings"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    @classmethod
    def get(cls, key: str, default: str = None) -> str:
        """Get a setting value by key."""
        setting = cls.query.filter_by(key=key).first()
        return setting.value if setting else default

    @classmethod
    def set(cls, key: str, value: str) -> None:
        """Set a setting value."""
        setting = cls.query.filter_by(key=key).first()
        if setting:
            setting.value = value
        else:
            setting = cls(key=key, value=value)
            db.session.add(setting)
        db.session.commit()

    @classmethod
    def get_sync_interval(cls) -> int:
        """Get the order sync polling interval in seconds.

        Falls back to ORDER_SYNC_INTERVAL_SECONDS when unset or invalid.
        """
        default = current_app.config.get("ORDER_SYNC_INTERVAL_SECONDS", 5)
        value = cls.get("order_sync_interval")
        try:
            interval = int(value) if value else default
        except (ValueError, TypeError):
            return default
        return interval if interval > 0 else default

    @classmethod
    def set_sync_interval(cls, seconds: int) -> None:
        """Set the order sync polling interval."""
        cls.set("order_sync_interval", str(seconds))

    def __repr__(self):
        return f"<Settings {self.key}={self.value}>"
