# canteen/routers/admin_credit.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from canteen.core.auth import require_admin
from canteen.database import get_session
from canteen.repositories.credit_repo import CreditRepository
from canteen.schemas.credit import (
    CreditAccountCreate,
    CreditAccountDetailRead,
    CreditAccountRead,
    CreditAccountUpdate,
    CreditOverview,
    CreditStatus,
    CreditTransactionCreate,
    CreditTransactionRead,
)
from canteen.services.credit_service import CreditService

router = APIRouter(
    prefix="/admin/credit-accounts",
    tags=["Admin Credit"],
    dependencies=[Depends(require_admin)],
)

repo = CreditRepository()
service = CreditService(repo)


@router.get("", response_model=CreditOverview)
def list_credit_accounts(
    status: CreditStatus | None = None,
    session: Session = Depends(get_session),
):
    """
    Credit accounts with totals.

    status filter:
      - overdue: more than 80% of the limit used
      - active : something owed, up to 80% of the limit
      - clear  : nothing owed
    """
    return service.overview(session, status=status)


@router.post("", response_model=CreditAccountRead, status_code=status.HTTP_201_CREATED)
def create_credit_account(
    payload: CreditAccountCreate,
    session: Session = Depends(get_session),
):
    return service.to_read(service.create_account(session, payload))


@router.get("/{account_id}", response_model=CreditAccountDetailRead)
def get_credit_account(
    account_id: int,
    session: Session = Depends(get_session),
):
    return service.get_account_detail(session, account_id)


@router.patch("/{account_id}", response_model=CreditAccountRead)
def update_credit_account(
    account_id: int,
    payload: CreditAccountUpdate,
    session: Session = Depends(get_session),
):
    return service.to_read(service.update_account(session, account_id, payload))


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_credit_account(
    account_id: int,
    session: Session = Depends(get_session),
):
    service.delete_account(session, account_id)


@router.post(
    "/{account_id}/transactions",
    response_model=CreditTransactionRead,
    status_code=status.HTTP_201_CREATED,
)
def add_credit_transaction(
    account_id: int,
    payload: CreditTransactionCreate,
    session: Session = Depends(get_session),
):
    """
    Record a purchase/credit (raises the balance owed) or a payment (lowers it).
    """
    return service.add_transaction(session, account_id, payload)
