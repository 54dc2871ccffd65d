# canteen/repositories/user_repo.py
import uuid

from sqlalchemy import func, or_, update
from sqlmodel import Session, select

from canteen.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Basic CRUD -----

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email (case-insensitive), or None."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return session.exec(stmt).first()

    def list_users(
        self,
        session: Session,
        role: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[User]:
        """
        Paginated user listing.

        Args:
            role: only users with this role
            search: case-insensitive substring of name or email
        """
        stmt = select(User)
        if role:
            stmt = stmt.where(User.role == role)
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(User.name).like(pattern),
                    func.lower(User.email).like(pattern),
                )
            )
        stmt = stmt.order_by(User.name).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User, commit: bool = True) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        if commit:
            session.commit()
            session.refresh(user)
        else:
            session.flush()
        return user

    def adjust_wallet_balance(
        self,
        session: Session,
        user_id: uuid.UUID,
        delta: float,
    ) -> float | None:
        """
        Add `delta` to a wallet in a single guarded UPDATE.

        The balance check runs inside the statement, so two concurrent
        debits can't both spend the same money. Does not commit.

        Returns:
            The new balance, or None if the user is unknown or the
            balance would drop below zero.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .where(User.wallet_balance + delta >= -0.005)
            .values(wallet_balance=User.wallet_balance + delta)
        )
        result = session.connection().execute(stmt)
        if result.rowcount == 0:
            return None

        user = session.get(User, user_id)
        session.refresh(user)
        if user.wallet_balance != round(user.wallet_balance, 2):
            user.wallet_balance = round(user.wallet_balance, 2)
            session.add(user)
            session.flush()
        return user.wallet_balance
