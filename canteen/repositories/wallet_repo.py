# canteen/repositories/wallet_repo.py
import uuid

from sqlmodel import Session, select

from canteen.models.wallet import WalletTransaction


class WalletRepository:
    """
    Append-only access to the wallet ledger. Never commits.
    """

    def add(self, session: Session, entry: WalletTransaction) -> WalletTransaction:
        session.add(entry)
        session.flush()
        return entry

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.user_id == user_id)
            .order_by(WalletTransaction.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())
