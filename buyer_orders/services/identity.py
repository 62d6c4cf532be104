"""Effective buyer resolution, including admin "acting as buyer" sessions."""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from buyer_orders import db
from buyer_orders.errors import FetchError

# Flask session keys used while an admin acts as another user
IMPERSONATE_USER_ID = "admin_impersonate_user_id"
IMPERSONATE_USER_EMAIL = "admin_impersonate_user_email"


@dataclass(frozen=True)
class BuyerContext:
    """The buyer every read, heal and view is scoped to."""
    buyer_id: int
    principal_id: int
    is_impersonating: bool = False
    impersonated_email: Optional[str] = None

    @property
    def session_key(self) -> str:
        """Identifies one principal/buyer pairing; a change of either starts a new sync session."""
        return f"{self.principal_id}:{self.buyer_id}"

    @classmethod
    def resolve(cls, user, session=None) -> Optional["BuyerContext"]:
        """Return the context for *user*, or None when logged out.

        Only admins may act as another buyer; the impersonation keys are
        ignored for everyone else.
        """
        if user is None or not getattr(user, "is_authenticated", False):
            return None

        session = session or {}
        target = session.get(IMPERSONATE_USER_ID)
        if target is not None and user.is_admin:
            return cls(
                buyer_id=int(target),
                principal_id=user.id,
                is_impersonating=True,
                impersonated_email=session.get(IMPERSONATE_USER_EMAIL),
            )
        return cls(buyer_id=user.id, principal_id=user.id)


def identity_still_valid(context: BuyerContext) -> bool:
    """Re-check a context against the users table.

    Used by background sync workers, which have no request to read the
    login session from. Must run inside an application context.
    """
    from buyer_orders.models import User

    try:
        principal = db.session.get(User, context.principal_id)
        if principal is None or not principal.is_active:
            return False
        if not context.is_impersonating:
            return True
        if not principal.is_admin:
            return False
        buyer = db.session.get(User, context.buyer_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise FetchError("identity check failed", buyer_id=context.buyer_id) from exc
    return bool(buyer is not None and buyer.is_active)
