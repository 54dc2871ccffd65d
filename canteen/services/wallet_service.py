# canteen/services/wallet_service.py
import logging
import uuid

from sqlmodel import Session

from canteen.core.errors import InsufficientFundsError, NotFoundError, ValidationError
from canteen.models.user import User
from canteen.models.wallet import WalletTransaction
from canteen.repositories.user_repo import UserRepository
from canteen.repositories.wallet_repo import WalletRepository

logger = logging.getLogger(__name__)


class WalletService:
    """
    Wallet balance changes through a signed ledger.

    Every change updates User.wallet_balance and appends one
    WalletTransaction in the same session; nothing here commits unless
    asked to, so checkout can fold the debit into its own transaction.
    """

    def __init__(self, user_repo: UserRepository, wallet_repo: WalletRepository):
        self.user_repo = user_repo
        self.wallet_repo = wallet_repo

    def _get_user(self, session: Session, user_id: uuid.UUID) -> User:
        user = self.user_repo.get_by_id(session, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def _apply(
        self,
        session: Session,
        user: User,
        tx_type: str,
        delta: float,
        description: str,
        order_id: uuid.UUID | None = None,
        admin_id: uuid.UUID | None = None,
        commit: bool = False,
    ) -> WalletTransaction:
        new_balance = self.user_repo.adjust_wallet_balance(session, user.id, delta)
        if new_balance is None:
            session.refresh(user)
            raise InsufficientFundsError(
                f"Insufficient wallet balance: have {user.wallet_balance:.2f}, need {abs(delta):.2f}"
            )
        previous = round(new_balance - delta, 2)

        entry = self.wallet_repo.add(
            session,
            WalletTransaction(
                user_id=user.id,
                type=tx_type,
                amount=round(delta, 2),
                previous_balance=previous,
                new_balance=new_balance,
                description=description,
                order_id=order_id,
                admin_id=admin_id,
            ),
        )

        if commit:
            session.commit()
            session.refresh(user)

        logger.info("Wallet %s for %s: %+.2f -> %.2f", tx_type, user.id, delta, new_balance)
        return entry

    @staticmethod
    def _check_amount(amount: float) -> float:
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        return round(amount, 2)

    # ---- public operations ----

    def get_balance(self, session: Session, user_id: uuid.UUID) -> float:
        return self._get_user(session, user_id).wallet_balance

    def credit(
        self,
        session: Session,
        user_id: uuid.UUID,
        amount: float,
        description: str = "Wallet top-up",
        admin_id: uuid.UUID | None = None,
        commit: bool = True,
    ) -> WalletTransaction:
        amount = self._check_amount(amount)
        user = self._get_user(session, user_id)
        return self._apply(session, user, "credit", amount, description, admin_id=admin_id, commit=commit)

    def debit(
        self,
        session: Session,
        user_id: uuid.UUID,
        amount: float,
        description: str,
        order_id: uuid.UUID | None = None,
        commit: bool = True,
    ) -> WalletTransaction:
        """
        Take money out of the wallet.

        Raises:
            InsufficientFundsError: if the balance would go below 0.
        """
        amount = self._check_amount(amount)
        user = self._get_user(session, user_id)
        return self._apply(session, user, "debit", -amount, description, order_id=order_id, commit=commit)

    def refund(
        self,
        session: Session,
        user_id: uuid.UUID,
        amount: float,
        description: str,
        order_id: uuid.UUID | None = None,
        commit: bool = True,
    ) -> WalletTransaction:
        amount = self._check_amount(amount)
        user = self._get_user(session, user_id)
        return self._apply(session, user, "refund", amount, description, order_id=order_id, commit=commit)

    def list_transactions(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[WalletTransaction]:
        return self.wallet_repo.list_for_user(session, user_id, skip=skip, limit=limit)

    def search_students(
        self,
        session: Session,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[User]:
        return self.user_repo.list_users(session, role="student", search=search, skip=skip, limit=limit)
