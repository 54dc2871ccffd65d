from datetime import date, datetime, time, timedelta, timezone

import pytest

from canteen.core.errors import ConflictError, NotFoundError, ValidationError
from canteen.repositories.credit_repo import CreditRepository
from canteen.repositories.menu_repo import MenuRepository
from canteen.repositories.order_repo import OrderRepository
from canteen.repositories.staff_repo import StaffRepository
from canteen.repositories.stats_repo import StatsRepository
from canteen.repositories.user_repo import UserRepository
from canteen.repositories.wallet_repo import WalletRepository
from canteen.schemas.cart import CartItemInput
from canteen.schemas.credit import CreditAccountCreate, CreditTransactionCreate
from canteen.schemas.menu import ComboCreate, ComboItem, MenuItemCreate
from canteen.schemas.staff import AttendanceCreate, StaffCreate
from canteen.services.cart_engine import CartEngine
from canteen.services.credit_service import CreditService
from canteen.services.menu_service import MenuService
from canteen.services.order_service import OrderService
from canteen.services.staff_service import StaffService, shift_hours
from canteen.services.stats_service import StatsService
from canteen.services.wallet_service import WalletService

SATURDAY = date(2024, 6, 1)
MONDAY = date(2024, 6, 3)


@pytest.fixture
def menu_service():
    return MenuService(MenuRepository())


class TestMenu:
    def test_demo_catalog(self, seeded, menu_service):
        items = menu_service.get_all_menu_items(seeded)

        assert len(items) == 20
        assert "Beverages" in menu_service.list_categories(seeded)
        chai = menu_service.get_menu_item(seeded, "chai")
        assert (chai.name, chai.price) == ("Masala Chai", 25)

    def test_filters(self, seeded, menu_service):
        menu_service.set_availability(seeded, "pizza", False)

        beverages = menu_service.get_all_menu_items(seeded, category="Beverages")
        assert {i.id for i in beverages} == {"chai", "cold-coffee"}

        available = menu_service.get_all_menu_items(seeded, only_available=True)
        assert "pizza" not in {i.id for i in available}

        found = menu_service.get_all_menu_items(seeded, search="chicken")
        assert {"butter-chicken", "burger"} <= {i.id for i in found}

    def test_create_item_generates_unique_slug(self, seeded, menu_service):
        payload = MenuItemCreate(name="Masala Chai", price=30, category="Beverages")

        item = menu_service.create_item(seeded, payload)

        assert item.id == "masala-chai"
        assert menu_service.create_item(seeded, payload).id == "masala-chai-2"

    def test_explicit_id_must_be_free(self, seeded, menu_service):
        with pytest.raises(ConflictError):
            menu_service.create_item(
                seeded, MenuItemCreate(id="chai", name="Another Chai", price=20, category="Beverages")
            )

    def test_review_updates_running_average(self, seeded, menu_service):
        menu_service.add_review(seeded, "paneer-tikka", 3.8, "Bit dry today", "Test Student")

        item = menu_service.get_menu_item(seeded, "paneer-tikka")
        assert item.total_reviews == 2
        assert item.average_rating == 4.3
        detail = menu_service.get_menu_item_detail(seeded, "paneer-tikka")
        assert len(detail.reviews) == 2

    def test_unknown_item(self, seeded, menu_service):
        with pytest.raises(NotFoundError):
            menu_service.get_menu_item(seeded, "caviar")


class TestCombos:
    def test_seeded_combos_follow_weekdays(self, seeded, menu_service):
        weekend = {c.id: c for c in menu_service.get_active_combos(seeded, today=SATURDAY)}
        weekday = {c.id: c for c in menu_service.get_active_combos(seeded, today=MONDAY)}

        assert weekend["combo-1"].available_today is True
        assert weekend["combo-2"].available_today is False
        assert weekday["combo-2"].available_today is True
        assert weekend["combo-1"].savings == 60

    def test_inactive_and_expired_combos_are_hidden(self, seeded, menu_service):
        menu_service.set_combo_active(seeded, "combo-1", False)
        menu_service.create_combo(
            seeded,
            ComboCreate(
                name="Old Deal",
                items=[ComboItem(id="chai", quantity=2)],
                discounted_price=40,
                valid_until=MONDAY - timedelta(days=1),
            ),
        )

        active = {c.id for c in menu_service.get_active_combos(seeded, today=MONDAY)}
        everything = {c.id for c in menu_service.list_combos(seeded, today=MONDAY)}

        assert active == {"combo-2"}
        assert everything == {"combo-1", "combo-2", "old-deal"}

    def test_original_price_defaults_to_catalog(self, seeded, menu_service):
        combo = menu_service.create_combo(
            seeded,
            ComboCreate(
                name="Chai and Samosa",
                items=[ComboItem(id="chai"), ComboItem(id="samosa", quantity=2)],
                discounted_price=70,
            ),
        )
        assert combo.original_price == 85

    def test_combo_with_unknown_item(self, seeded, menu_service):
        with pytest.raises(ValidationError):
            menu_service.create_combo(
                seeded,
                ComboCreate(name="Ghost", items=[ComboItem(id="caviar")], discounted_price=10),
            )

    def test_discount_cannot_exceed_catalog_price(self, seeded, menu_service):
        with pytest.raises(ValidationError):
            menu_service.create_combo(
                seeded,
                ComboCreate(name="Bad Deal", items=[ComboItem(id="chai")], discounted_price=30),
            )


class TestStats:
    def test_inventory(self, seeded):
        stats = StatsService(StatsRepository(), MenuRepository(), low_stock_threshold=20).inventory(seeded)

        assert stats.total_items == 20
        assert stats.out_of_stock_count == 0
        assert [i.id for i in stats.low_stock_items] == ["chocolate-cake"]
        assert stats.low_stock_count == 1
        assert stats.profit == round(stats.revenue - stats.cost, 2)
        beverages = next(c for c in stats.by_category if c.category == "Beverages")
        assert beverages.item_count == 2
        assert beverages.stock == 160

    def test_zero_stock_counts_as_out_of_stock(self, seeded):
        menu_repo = MenuRepository()
        cake = menu_repo.get_by_id(seeded, "chocolate-cake")
        cake.stock_quantity = 0
        menu_repo.update(seeded, cake)

        stats = StatsService(StatsRepository(), menu_repo, low_stock_threshold=20).inventory(seeded)

        assert stats.out_of_stock_count == 1
        assert stats.low_stock_count == 0

    def test_dashboard_skips_cancelled_revenue(self, seeded):
        wallet_service = WalletService(UserRepository(), WalletRepository())
        orders = OrderService(OrderRepository(), wallet_service)
        student = UserRepository().get_by_email(seeded, "student@test.com")
        engine = CartEngine()
        engine.add_item(CartItemInput(id="chai", name="Masala Chai", price=25))
        pickup = datetime.now(timezone.utc) + timedelta(hours=1)

        kept = orders.create_order(seeded, student.id, student.name, engine.lines, 25, "cash", pickup)
        dropped = orders.create_order(seeded, student.id, student.name, engine.lines, 25, "cash", pickup)
        orders.update_status(seeded, dropped.id, "cancelled")

        stats = StatsService(StatsRepository(), MenuRepository()).dashboard(seeded)

        assert stats.total_students == 1
        assert stats.total_orders == 2
        assert stats.total_revenue == 25
        assert stats.active_orders == 1
        assert stats.orders_by_status == {"pending": 1, "cancelled": 1}
        assert {o.id for o in stats.latest_orders} == {kept.id, dropped.id}


class TestStaff:
    def test_shift_hours(self):
        assert shift_hours(time(8, 15), time(16, 30)) == 8.25
        assert shift_hours(time(9, 0), None) == 0

    def test_monthly_summary_of_demo_roster(self, seeded):
        summary = StaffService(StaffRepository()).monthly_summary(seeded, 2024, 1, today=date(2024, 1, 16))

        by_name = {m.name: m for m in summary.members}
        assert by_name["Rajesh Kumar"].total_hours == 16.25
        assert by_name["Rajesh Kumar"].salary == 2437.5
        assert by_name["Priya Sharma"].total_hours == 16.5
        assert by_name["Priya Sharma"].days_worked == 2
        assert summary.total_salary == 4417.5
        assert summary.present_today == 2

    def test_attendance_outside_the_month_is_ignored(self, seeded):
        service = StaffService(StaffRepository())
        member = service.create_staff(seeded, StaffCreate(name="Anil", role="Helper", hourly_rate=100))
        service.add_attendance(
            seeded,
            member.id,
            AttendanceCreate(work_date=date(2024, 2, 1), check_in=time(9, 0), check_out=time(13, 0)),
        )

        january = {m.name: m for m in service.monthly_summary(seeded, 2024, 1).members}
        february = {m.name: m for m in service.monthly_summary(seeded, 2024, 2).members}

        assert january["Anil"].total_hours == 0
        assert february["Anil"].salary == 400

    def test_invalid_month(self, seeded):
        with pytest.raises(ValidationError):
            StaffService(StaffRepository()).monthly_summary(seeded, 2024, 13)


class TestCredit:
    def test_demo_account_is_active(self, seeded):
        overview = CreditService(CreditRepository()).overview(seeded)

        assert len(overview.accounts) == 1
        account = overview.accounts[0]
        assert account.current_balance == 200
        assert account.utilization == 40
        assert account.status == "active"
        assert overview.overdue_count == 0

    def test_purchase_can_push_an_account_overdue(self, seeded):
        service = CreditService(CreditRepository())
        account_id = service.overview(seeded).accounts[0].id

        service.add_transaction(seeded, account_id, CreditTransactionCreate(type="purchase", amount=250))

        overview = service.overview(seeded, status="overdue")
        assert [a.id for a in overview.accounts] == [account_id]
        assert overview.accounts[0].utilization == 90
        assert overview.total_outstanding == 450

    def test_filter_keeps_portfolio_totals(self, seeded):
        service = CreditService(CreditRepository())
        service.create_account(
            seeded,
            CreditAccountCreate(student_name="Meera K.", email="meera@campus.edu", credit_limit=300),
        )

        clear = service.overview(seeded, status="clear")

        assert [a.student_name for a in clear.accounts] == ["Meera K."]
        assert clear.total_limit == 800
        assert clear.total_outstanding == 200

    def test_payment_lowers_balance_and_is_logged(self, seeded):
        service = CreditService(CreditRepository())
        account_id = service.overview(seeded).accounts[0].id

        service.add_transaction(seeded, account_id, CreditTransactionCreate(type="payment", amount=200))

        detail = service.get_account_detail(seeded, account_id)
        assert detail.status == "clear"
        assert len(detail.transactions) == 4

    def test_initial_balance_opens_with_a_credit_entry(self, seeded):
        service = CreditService(CreditRepository())
        account = service.create_account(
            seeded,
            CreditAccountCreate(
                student_name="Arjun S.",
                email="arjun@campus.edu",
                credit_limit=400,
                initial_balance=100,
            ),
        )

        detail = service.get_account_detail(seeded, account.id)
        assert detail.current_balance == 100
        assert [t.type for t in detail.transactions] == ["credit"]
