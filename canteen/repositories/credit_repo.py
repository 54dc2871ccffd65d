# canteen/repositories/credit_repo.py
from sqlmodel import Session, select

from canteen.models.credit import CreditAccount, CreditTransaction


class CreditRepository:

    def get_by_id(self, session: Session, account_id: int) -> CreditAccount | None:
        return session.get(CreditAccount, account_id)

    def list_accounts(self, session: Session) -> list[CreditAccount]:
        stmt = select(CreditAccount).order_by(CreditAccount.student_name)
        return list(session.exec(stmt).all())

    def save(self, session: Session, account: CreditAccount, commit: bool = True) -> CreditAccount:
        session.add(account)
        if commit:
            session.commit()
            session.refresh(account)
        else:
            session.flush()
        return account

    def delete(self, session: Session, account: CreditAccount) -> None:
        for tx in self.list_transactions(session, account.id):
            session.delete(tx)
        session.delete(account)
        session.commit()

    def list_transactions(self, session: Session, account_id: int) -> list[CreditTransaction]:
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.account_id == account_id)
            .order_by(CreditTransaction.transaction_date.desc(), CreditTransaction.id.desc())
        )
        return list(session.exec(stmt).all())

    def add_transaction(self, session: Session, tx: CreditTransaction) -> CreditTransaction:
        session.add(tx)
        session.flush()
        return tx
