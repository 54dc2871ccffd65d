# canteen/services/user_service.py
import logging
import uuid

from sqlmodel import Session

from canteen.core.auth import create_access_token
from canteen.core.errors import ConflictError, NotFoundError
from canteen.models.user import User
from canteen.repositories.user_repo import UserRepository
from canteen.schemas.user import (
    LoginRequest,
    SignupRequest,
    TokenRead,
    UserRead,
    UserRoleUpdate,
    UserUpdate,
)

logger = logging.getLogger(__name__)


def default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email when none is given.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - mocked sign-up / login (token issuing)
      - enforce app rules (no email change, role constraints)
      - orchestrate repository operations
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Auth -----

    def _token_for(self, user: User) -> TokenRead:
        return TokenRead(
            access_token=create_access_token(user),
            user=UserRead.model_validate(user),
        )

    def signup(self, session: Session, payload: SignupRequest) -> TokenRead:
        """
        Create a student account with an empty wallet and log it in.

        Raises:
            ConflictError: if the email is already registered.
        """
        email = str(payload.email).strip().lower()
        if self.repo.get_by_email(session, email) is not None:
            raise ConflictError("An account with this email already exists")

        user = self.repo.create(
            session,
            User(
                email=email,
                name=payload.name or default_name_from_email(email),
                role="student",
                wallet_balance=0.0,
            ),
        )
        logger.info("New student account: %s", user.email)
        return self._token_for(user)

    def login(self, session: Session, payload: LoginRequest) -> TokenRead:
        """
        Mock login: any known email gets a token, the password is not checked.

        Raises:
            NotFoundError: if no account uses this email.
        """
        user = self.repo.get_by_email(session, str(payload.email))
        if not user:
            raise NotFoundError("No account found for this email")
        return self._token_for(user)

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Currently, only `name` is editable.
        """
        if payload.name is not None:
            current_user.name = payload.name

        return self.repo.update(session, current_user)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        role: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list_users(session, role=role, search=search, skip=skip, limit=limit)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id (admin only).

        Raises:
            NotFoundError: if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_role(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        user = self.get_user(session, user_id)
        user.role = payload.role
        return self.repo.update(session, user)
