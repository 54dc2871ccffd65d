# canteen/routers/admin_wallets.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from canteen.core.auth import require_admin
from canteen.database import get_session
from canteen.models.user import User
from canteen.repositories.user_repo import UserRepository
from canteen.repositories.wallet_repo import WalletRepository
from canteen.schemas.wallet import (
    StudentWalletRead,
    WalletTopUp,
    WalletTransactionRead,
)
from canteen.services.wallet_service import WalletService

router = APIRouter(prefix="/admin/wallets", tags=["Admin Wallets"])

service = WalletService(UserRepository(), WalletRepository())


@router.get("", response_model=list[StudentWalletRead], dependencies=[Depends(require_admin)])
def search_student_wallets(
    session: Session = Depends(get_session),
    search: str | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    Students with their balances, optionally filtered by name/email.
    """
    return service.search_students(session, search=search, skip=skip, limit=limit)


@router.post("/{user_id}/top-up", response_model=WalletTransactionRead)
def top_up_wallet(
    user_id: uuid.UUID,
    payload: WalletTopUp,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Add money to a student's wallet. Recorded in the ledger with the admin id.
    """
    return service.credit(
        session,
        user_id,
        payload.amount,
        description=payload.description,
        admin_id=admin.id,
    )


@router.get(
    "/{user_id}/transactions",
    response_model=list[WalletTransactionRead],
    dependencies=[Depends(require_admin)],
)
def list_student_transactions(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    return service.list_transactions(session, user_id, skip=skip, limit=limit)
