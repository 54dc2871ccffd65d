from datetime import date, time, timedelta

import pytest
from sqlmodel import Session, select

from canteen.core.errors import InsufficientFundsError, ValidationError
from canteen.models.order import Order
from canteen.models.user import User
from canteen.repositories.menu_repo import MenuRepository
from canteen.repositories.order_repo import OrderRepository
from canteen.repositories.user_repo import UserRepository
from canteen.repositories.wallet_repo import WalletRepository
from canteen.schemas.cart import CartItemInput
from canteen.schemas.order import CheckoutRequest
from canteen.services.cart_engine import CartEngine
from canteen.services.checkout_service import CheckoutService
from canteen.services.order_service import OrderService
from canteen.services.wallet_service import WalletService

from conftest import tomorrow_noon

CHAI = CartItemInput(id="chai", name="Masala Chai", price=25)
SAMOSA = CartItemInput(id="samosa", name="Vegetable Samosa", price=30)


@pytest.fixture
def wallet_service():
    return WalletService(UserRepository(), WalletRepository())


@pytest.fixture
def checkout_service(wallet_service):
    return CheckoutService(
        OrderService(OrderRepository(), wallet_service),
        wallet_service,
        MenuRepository(),
    )


@pytest.fixture
def student(seeded):
    return UserRepository().get_by_email(seeded, "student@test.com")


def chai_cart(quantity: int = 3) -> CartEngine:
    engine = CartEngine()
    engine.add_item(CHAI)
    engine.update_quantity("chai", quantity)
    return engine


def request(payment_method: str = "wallet") -> CheckoutRequest:
    pickup_date, pickup_time = tomorrow_noon()
    return CheckoutRequest(
        pickup_date=pickup_date,
        pickup_time=pickup_time,
        payment_method=payment_method,
    )


def order_count(session) -> int:
    return len(session.exec(select(Order)).all())


class TestCheckout:
    def test_wallet_checkout_debits_and_clears_cart(self, seeded, student, checkout_service, wallet_service):
        engine = chai_cart(3)

        dto = checkout_service.checkout(seeded, student, engine, request())

        assert dto.total_amount == 75
        assert dto.status == "pending"
        assert dto.payment_method == "wallet"
        assert engine.lines == []
        assert engine.get_total_price() == 0
        assert wallet_service.get_balance(seeded, student.id) == 425

        debit = wallet_service.list_transactions(seeded, student.id)[0]
        assert debit.type == "debit"
        assert debit.amount == -75
        assert debit.order_id == dto.id

    def test_checkout_updates_stock_and_sales(self, seeded, student, checkout_service):
        checkout_service.checkout(seeded, student, chai_cart(3), request())

        chai = MenuRepository().get_by_id(seeded, "chai")
        assert chai.stock_quantity == 97
        assert chai.sales_count == 123

    def test_insufficient_balance_changes_nothing(self, seeded, checkout_service, wallet_service):
        poor = UserRepository().create(
            seeded, User(email="poor@campus.edu", name="Poor Student", role="student")
        )
        wallet_service.credit(seeded, poor.id, 50)
        engine = chai_cart(3)

        with pytest.raises(InsufficientFundsError):
            checkout_service.checkout(seeded, poor, engine, request())

        assert order_count(seeded) == 0
        assert engine.get_total_items() == 3
        assert engine.get_total_price() == 75
        assert wallet_service.get_balance(seeded, poor.id) == 50
        assert MenuRepository().get_by_id(seeded, "chai").stock_quantity == 100

    def test_cash_checkout_leaves_wallet_alone(self, seeded, student, checkout_service, wallet_service):
        dto = checkout_service.checkout(seeded, student, chai_cart(2), request("cash"))

        assert dto.payment_method == "cash"
        assert wallet_service.get_balance(seeded, student.id) == 500

    def test_empty_cart_is_rejected(self, seeded, student, checkout_service):
        with pytest.raises(ValidationError):
            checkout_service.checkout(seeded, student, CartEngine(), request())
        assert order_count(seeded) == 0

    def test_pickup_slot_is_required(self, seeded, student, checkout_service):
        engine = chai_cart(1)
        with pytest.raises(ValidationError):
            checkout_service.checkout(seeded, student, engine, CheckoutRequest(payment_method="cash"))
        assert engine.get_total_items() == 1

    def test_pickup_in_the_past_is_rejected(self, seeded, student, checkout_service):
        payload = CheckoutRequest(
            pickup_date=date.today() - timedelta(days=1),
            pickup_time=time(12, 0),
        )
        with pytest.raises(ValidationError):
            checkout_service.checkout(seeded, student, chai_cart(1), payload)

    def test_pickup_too_far_ahead_is_rejected(self, seeded, student, checkout_service):
        payload = CheckoutRequest(
            pickup_date=date.today() + timedelta(days=30),
            pickup_time=time(12, 0),
        )
        with pytest.raises(ValidationError):
            checkout_service.checkout(seeded, student, chai_cart(1), payload)

    def test_each_checkout_gets_its_own_order(self, seeded, student, checkout_service):
        first = checkout_service.checkout(seeded, student, chai_cart(1), request())
        second = checkout_service.checkout(seeded, student, chai_cart(1), request())

        assert first.order_number != second.order_number
        assert order_count(seeded) == 2

    def test_overlapping_checkouts_cannot_overspend(self, seeded, db_engine, checkout_service):
        # Two requests that both loaded the student before either paid
        with Session(db_engine) as first, Session(db_engine) as second:
            first_user = UserRepository().get_by_email(first, "student@test.com")
            second_user = UserRepository().get_by_email(second, "student@test.com")
            assert first_user.wallet_balance == second_user.wallet_balance == 500

            checkout_service.checkout(first, first_user, chai_cart(12), request())
            late_cart = chai_cart(12)
            with pytest.raises(InsufficientFundsError):
                checkout_service.checkout(second, second_user, late_cart, request())

            assert late_cart.get_total_items() == 12

        with Session(db_engine) as fresh:
            student = UserRepository().get_by_email(fresh, "student@test.com")
            assert order_count(fresh) == 1
            assert student.wallet_balance == 200
            debits = [t for t in WalletRepository().list_for_user(fresh, student.id) if t.type == "debit"]
            assert [(t.previous_balance, t.new_balance) for t in debits] == [(500, 200)]

    def test_items_added_during_checkout_stay_in_the_cart(self, seeded, student, checkout_service, monkeypatch):
        engine = chai_cart(2)
        apply_sales = checkout_service._apply_sales

        def add_while_paying(session, lines):
            engine.add_item(CHAI)
            engine.add_item(SAMOSA)
            apply_sales(session, lines)

        monkeypatch.setattr(checkout_service, "_apply_sales", add_while_paying)

        dto = checkout_service.checkout(seeded, student, engine, request())

        assert dto.item_count == 2
        assert [(l.item_id, l.quantity) for l in engine.lines] == [("chai", 1), ("samosa", 1)]
        assert engine.get_total_price() == 55
