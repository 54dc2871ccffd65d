import uuid

import pytest

from canteen.core.errors import InsufficientFundsError, NotFoundError, ValidationError
from canteen.repositories.user_repo import UserRepository
from canteen.repositories.wallet_repo import WalletRepository
from canteen.services.wallet_service import WalletService


@pytest.fixture
def wallet_service():
    return WalletService(UserRepository(), WalletRepository())


@pytest.fixture
def student(seeded):
    return UserRepository().get_by_email(seeded, "student@test.com")


class TestWalletLedger:
    def test_seeded_balance_has_a_ledger_entry(self, seeded, student, wallet_service):
        entries = wallet_service.list_transactions(seeded, student.id)

        assert len(entries) == 1
        assert entries[0].type == "credit"
        assert entries[0].new_balance == student.wallet_balance == 500

    def test_every_entry_chains_balances(self, seeded, student, wallet_service):
        admin = UserRepository().get_by_email(seeded, "admin@test.com")
        wallet_service.credit(seeded, student.id, 120.5, admin_id=admin.id)
        wallet_service.debit(seeded, student.id, 80, "Cold Coffee")
        wallet_service.refund(seeded, student.id, 80, "Cold Coffee refund")

        entries = wallet_service.list_transactions(seeded, student.id)

        assert len(entries) == 4
        for entry in entries:
            assert round(entry.previous_balance + entry.amount, 2) == entry.new_balance
        assert entries[0].new_balance == wallet_service.get_balance(seeded, student.id) == 620.5
        top_up = next(e for e in entries if e.admin_id is not None)
        assert top_up.admin_id == admin.id

    def test_overdraft_is_refused_without_side_effects(self, seeded, student, wallet_service):
        with pytest.raises(InsufficientFundsError):
            wallet_service.debit(seeded, student.id, 500.01, "Too much")
        seeded.rollback()

        assert wallet_service.get_balance(seeded, student.id) == 500
        assert len(wallet_service.list_transactions(seeded, student.id)) == 1

    def test_spending_the_exact_balance_is_allowed(self, seeded, student, wallet_service):
        wallet_service.debit(seeded, student.id, 500, "Everything")
        assert wallet_service.get_balance(seeded, student.id) == 0

    @pytest.mark.parametrize("amount", [0, -10])
    def test_non_positive_amounts_are_rejected(self, seeded, student, wallet_service, amount):
        with pytest.raises(ValidationError):
            wallet_service.credit(seeded, student.id, amount)

    def test_unknown_user(self, seeded, wallet_service):
        with pytest.raises(NotFoundError):
            wallet_service.credit(seeded, uuid.uuid4(), 10)

    def test_search_only_returns_students(self, seeded, wallet_service):
        found = wallet_service.search_students(seeded, search="test")

        assert [u.email for u in found] == ["student@test.com"]
