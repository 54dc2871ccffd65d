# canteen/routers/wallet.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from canteen.core.auth import require_student
from canteen.database import get_session
from canteen.models.user import User
from canteen.repositories.user_repo import UserRepository
from canteen.repositories.wallet_repo import WalletRepository
from canteen.schemas.wallet import WalletRead, WalletTransactionRead
from canteen.services.wallet_service import WalletService

router = APIRouter(prefix="/wallet", tags=["Wallet"])

service = WalletService(UserRepository(), WalletRepository())


@router.get("/me", response_model=WalletRead)
def read_my_wallet(current_user: User = Depends(require_student)):
    """
    Current wallet balance.
    """
    return WalletRead(user_id=current_user.id, balance=current_user.wallet_balance)


@router.get("/me/transactions", response_model=list[WalletTransactionRead])
def list_my_transactions(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
    skip: int = 0,
    limit: int = 50,
):
    """
    Wallet ledger, newest first.
    """
    return service.list_transactions(session, current_user.id, skip=skip, limit=limit)
