# canteen/services/credit_service.py
import logging

from sqlmodel import Session

from canteen.core.errors import NotFoundError, ValidationError
from canteen.models.credit import CreditAccount, CreditTransaction
from canteen.repositories.credit_repo import CreditRepository
from canteen.schemas.credit import (
    CreditAccountCreate,
    CreditAccountDetailRead,
    CreditAccountRead,
    CreditAccountUpdate,
    CreditOverview,
    CreditTransactionCreate,
    CreditTransactionRead,
)

logger = logging.getLogger(__name__)

# Accounts above this share of their limit are flagged overdue
OVERDUE_UTILIZATION = 80.0


def utilization(account: CreditAccount) -> float:
    """Outstanding balance as a percentage of the credit limit."""
    if account.credit_limit <= 0:
        return 0.0
    return round(account.current_balance / account.credit_limit * 100, 2)


def account_status(account: CreditAccount) -> str:
    """
    overdue: utilization > 80%
    active : balance > 0 and utilization <= 80%
    clear  : nothing owed
    """
    if account.current_balance <= 0:
        return "clear"
    if utilization(account) > OVERDUE_UTILIZATION:
        return "overdue"
    return "active"


class CreditService:
    """
    Credit sales: student tabs with purchases and repayments.

    purchase / credit raise the balance owed, payment lowers it.
    """

    def __init__(self, repo: CreditRepository):
        self.repo = repo

    @staticmethod
    def to_read(account: CreditAccount) -> CreditAccountRead:
        return CreditAccountRead(
            id=account.id,
            student_name=account.student_name,
            email=account.email,
            credit_limit=account.credit_limit,
            current_balance=account.current_balance,
            utilization=utilization(account),
            status=account_status(account),
        )

    def get_account(self, session: Session, account_id: int) -> CreditAccount:
        account = self.repo.get_by_id(session, account_id)
        if not account:
            raise NotFoundError("Credit account not found")
        return account

    def get_account_detail(self, session: Session, account_id: int) -> CreditAccountDetailRead:
        account = self.get_account(session, account_id)
        return CreditAccountDetailRead(
            **self.to_read(account).model_dump(),
            transactions=[
                CreditTransactionRead.model_validate(tx)
                for tx in self.repo.list_transactions(session, account.id)
            ],
        )

    def overview(self, session: Session, status: str | None = None) -> CreditOverview:
        """
        All accounts (optionally filtered by status) with portfolio totals.
        Totals always cover every account, not just the filtered ones.
        """
        accounts = self.repo.list_accounts(session)
        reads = [self.to_read(a) for a in accounts]
        return CreditOverview(
            accounts=[r for r in reads if status is None or r.status == status],
            total_limit=round(sum(a.credit_limit for a in accounts), 2),
            total_outstanding=round(sum(a.current_balance for a in accounts), 2),
            overdue_count=sum(1 for r in reads if r.status == "overdue"),
        )

    def create_account(self, session: Session, payload: CreditAccountCreate) -> CreditAccount:
        account = self.repo.save(
            session,
            CreditAccount(
                student_name=payload.student_name,
                email=str(payload.email),
                credit_limit=payload.credit_limit,
                current_balance=0.0,
            ),
            commit=False,
        )

        if payload.initial_balance > 0:
            self._apply(session, account, "credit", payload.initial_balance, "Opening balance")

        session.commit()
        session.refresh(account)
        logger.info("Credit account opened for %s", account.email)
        return account

    def update_account(self, session: Session, account_id: int, payload: CreditAccountUpdate) -> CreditAccount:
        account = self.get_account(session, account_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(account, field, str(value) if field == "email" else value)
        return self.repo.save(session, account)

    def delete_account(self, session: Session, account_id: int) -> None:
        self.repo.delete(session, self.get_account(session, account_id))

    def _apply(
        self,
        session: Session,
        account: CreditAccount,
        tx_type: str,
        amount: float,
        description: str,
    ) -> CreditTransaction:
        if amount <= 0:
            raise ValidationError("Amount must be greater than 0")

        delta = -amount if tx_type == "payment" else amount
        account.current_balance = round(account.current_balance + delta, 2)
        self.repo.save(session, account, commit=False)

        return self.repo.add_transaction(
            session,
            CreditTransaction(
                account_id=account.id,
                type=tx_type,
                amount=round(amount, 2),
                description=description,
            ),
        )

    def add_transaction(
        self,
        session: Session,
        account_id: int,
        payload: CreditTransactionCreate,
    ) -> CreditTransaction:
        account = self.get_account(session, account_id)
        tx = self._apply(session, account, payload.type, payload.amount, payload.description)
        session.commit()
        session.refresh(tx)
        return tx
