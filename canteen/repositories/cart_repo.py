# canteen/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from canteen.models.cart import SavedCart


class CartRepository:
    """
    Persisted cart snapshots (one document per user).
    """

    def get(self, session: Session, user_id: uuid.UUID) -> SavedCart | None:
        return session.get(SavedCart, user_id)

    def replace(
        self,
        session: Session,
        user_id: uuid.UUID,
        items: list[dict],
    ) -> SavedCart:
        """
        Whole-document replace of the user's saved cart.
        """
        doc = session.get(SavedCart, user_id)
        if doc is None:
            doc = SavedCart(user_id=user_id)
        # Reassign instead of mutating so SQLAlchemy sees the JSON change
        doc.items = list(items)
        doc.updated_at = datetime.now(timezone.utc)
        session.add(doc)
        session.commit()
        return doc
