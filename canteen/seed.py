# canteen/seed.py
"""
Demo data for a fresh database: the Underground Canteen menu, two combos,
kitchen staff, one credit account and the two mock login accounts.

Seeding is idempotent; each block only runs when its table is empty.
"""
import logging
from datetime import date, time

from sqlmodel import Session, select

from canteen.models.credit import CreditAccount, CreditTransaction
from canteen.models.menu import ComboOffer, MenuItem, MenuReview
from canteen.models.staff import AttendanceRecord, StaffMember
from canteen.models.user import User
from canteen.repositories.user_repo import UserRepository
from canteen.repositories.wallet_repo import WalletRepository
from canteen.services.staff_service import shift_hours
from canteen.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

_IMG = "https://images.unsplash.com/photo-{}?auto=format&fit=crop&w=400&q=80"

SPICE = ["Mild", "Medium", "Hot"]
SUGAR = ["No Sugar", "Less Sugar", "Normal", "Extra Sweet"]
MILK = ["Regular Milk", "Almond Milk", "Soy Milk"]

# (id, name, price, category, prep minutes, stock, cost, sales, rating, image id, description, options)
MENU = [
    ("butter-chicken", "Butter Chicken", 180, "Main Course", 15, 50, 120, 45, 4.25, "1565557623262-b51c2513a641",
     "Creamy, rich curry with tender chicken pieces in a tomato-based sauce",
     {"spiceLevel": ["Mild", "Medium", "Hot", "Extra Hot"], "portionSize": ["Regular", "Large"],
      "extras": ["Extra Rice", "Extra Gravy", "Extra Chicken"]}),
    ("paneer-tikka", "Paneer Tikka", 160, "Appetizer", 12, 30, 100, 28, 4.8, "1601050690597-df0568f70950",
     "Grilled cottage cheese marinated in aromatic spices and yogurt",
     {"spiceLevel": SPICE, "portionSize": ["Regular", "Large"], "extras": ["Extra Chutney", "Extra Onions"]}),
    ("biryani", "Biryani", 220, "Main Course", 20, 25, 150, 35, 4.4, "1563379091339-03246963d4a9",
     "Fragrant rice dish with tender meat and aromatic spices",
     {"spiceLevel": SPICE, "portionSize": ["Half", "Full"], "extras": ["Extra Raita", "Extra Pickle", "Extra Meat"]}),
    ("masala-dosa", "Masala Dosa", 120, "Breakfast", 10, 40, 80, 32, 4.0, "1589302168068-964664d93dc0",
     "Crispy rice crepe filled with spiced potato mixture",
     {"spiceLevel": ["Mild", "Medium"], "portionSize": ["Regular", "Large"],
      "extras": ["Extra Chutney", "Extra Sambar", "Extra Potato"]}),
    ("cold-coffee", "Cold Coffee", 80, "Beverages", 5, 60, 50, 55, 4.5, "1461023058943-07fcbe16d735",
     "Rich and creamy cold coffee with ice cream",
     {"sugarLevel": SUGAR, "milkType": MILK, "extras": ["Extra Ice Cream", "Extra Coffee Shot", "Whipped Cream"]}),
    ("chai", "Masala Chai", 25, "Beverages", 3, 100, 15, 120, 4.7, "1544787219-7f47ccb76574",
     "Traditional Indian spiced tea with milk and aromatic spices",
     {"sugarLevel": SUGAR, "milkType": MILK, "extras": ["Extra Ginger", "Extra Cardamom", "Extra Masala"]}),
    ("samosa", "Vegetable Samosa", 30, "Snacks", 8, 80, 20, 75, 4.4, "1601050690597-df0568f70950",
     "Crispy pastry filled with spiced potatoes and peas",
     {"spiceLevel": SPICE, "extras": ["Extra Chutney", "Extra Onions", "Extra Mint"]}),
    ("pizza", "Margherita Pizza", 200, "Fast Food", 15, 20, 120, 18, 4.2, "1565299624946-b28f40a0ca4b",
     "Classic pizza with tomato sauce, mozzarella, and basil",
     {"size": ["Small", "Medium", "Large"], "extras": ["Extra Cheese", "Extra Toppings", "Extra Sauce"]}),
    ("burger", "Chicken Burger", 150, "Fast Food", 10, 35, 90, 30, 4.3, "1568901346375-23c9450c58cd",
     "Juicy chicken patty with fresh vegetables and special sauce",
     {"extras": ["Extra Cheese", "Extra Sauce", "Extra Vegetables", "Extra Patty"]}),
    ("fries", "French Fries", 80, "Snacks", 8, 50, 40, 45, 4.1, "1573080496219-bb080dd4f877",
     "Crispy golden fries served with ketchup",
     {"size": ["Small", "Medium", "Large"], "extras": ["Extra Ketchup", "Extra Mayo", "Cheese Sauce"]}),
    ("ice-cream", "Vanilla Ice Cream", 60, "Desserts", 2, 40, 35, 38, 4.6, "1563805042-7684c019e1cb",
     "Creamy vanilla ice cream with chocolate sauce",
     {"toppings": ["Chocolate Sauce", "Strawberry Sauce", "Nuts", "Sprinkles"],
      "extras": ["Extra Scoop", "Extra Sauce"]}),
    ("chocolate-cake", "Chocolate Cake", 120, "Desserts", 5, 15, 70, 12, 4.7, "1578985545062-69928b1d9587",
     "Rich chocolate cake with chocolate frosting",
     {"extras": ["Extra Frosting", "Extra Chocolate", "Whipped Cream"]}),
    ("pasta", "Pasta Alfredo", 180, "Main Course", 12, 25, 110, 22, 4.4, "1621996346565-e3dbc353d2e5",
     "Creamy pasta with parmesan cheese and garlic",
     {"extras": ["Extra Cheese", "Extra Cream", "Extra Garlic", "Chicken"]}),
    ("noodles", "Chow Mein", 140, "Main Course", 10, 30, 85, 28, 4.3, "1569718212165-3a8278d5f624",
     "Stir-fried noodles with vegetables and soy sauce",
     {"spiceLevel": SPICE, "extras": ["Extra Vegetables", "Extra Noodles", "Chicken", "Egg"]}),
    ("sandwich", "Club Sandwich", 100, "Fast Food", 8, 40, 60, 35, 4.2, "1528735602780-2552fd46c7af",
     "Triple-decker sandwich with chicken, lettuce, and tomato",
     {"extras": ["Extra Chicken", "Extra Cheese", "Extra Vegetables", "Extra Mayo"]}),
    ("salad", "Caesar Salad", 90, "Healthy", 6, 35, 55, 32, 4.5, "1512621776951-a57141f2eefd",
     "Fresh lettuce with croutons, parmesan, and caesar dressing",
     {"extras": ["Extra Chicken", "Extra Cheese", "Extra Croutons", "Extra Dressing"]}),
    ("soup", "Tomato Soup", 70, "Appetizer", 5, 45, 40, 40, 4.3, "1547592166-23ac45744acd",
     "Creamy tomato soup with herbs and croutons",
     {"extras": ["Extra Croutons", "Extra Cream", "Extra Herbs"]}),
    ("rice", "Steamed Rice", 50, "Sides", 15, 60, 25, 55, 4.0, "1603133872878-684f208fb84b",
     "Perfectly cooked basmati rice",
     {"extras": ["Extra Rice", "Ghee Rice", "Jeera Rice"]}),
    ("dal", "Dal Fry", 60, "Main Course", 12, 50, 35, 48, 4.4, "1601050690597-df0568f70950",
     "Spiced lentils with onions and tomatoes",
     {"spiceLevel": SPICE, "extras": ["Extra Dal", "Extra Tadka", "Extra Ghee"]}),
    ("roti", "Butter Roti", 20, "Sides", 5, 80, 12, 75, 4.1, "1601050690597-df0568f70950",
     "Soft whole wheat bread with butter",
     {"extras": ["Extra Butter", "Extra Roti", "Ghee Roti"]}),
]

# item id -> [(rating, comment, user name, date)]
REVIEWS = {
    "butter-chicken": [
        (4.5, "Amazing taste! Perfect spice level.", "Rahul K.", date(2024, 1, 15)),
        (4.0, "Good but could be spicier", "Priya S.", date(2024, 1, 14)),
    ],
    "paneer-tikka": [(4.8, "Best paneer tikka ever!", "Amit P.", date(2024, 1, 16))],
    "cold-coffee": [
        (4.3, "Perfect sweetness!", "Arjun S.", date(2024, 1, 16)),
        (4.7, "Best cold coffee on campus!", "Meera K.", date(2024, 1, 14)),
    ],
    "chai": [
        (4.8, "Perfect masala chai!", "Neha R.", date(2024, 1, 16)),
        (4.6, "Authentic taste!", "Ravi K.", date(2024, 1, 15)),
    ],
}

COMBOS = [
    dict(
        id="combo-1",
        name="Weekend Special Combo",
        description="Perfect for Saturday hangouts",
        items=[{"id": "butter-chicken", "quantity": 1}, {"id": "cold-coffee", "quantity": 1}],
        original_price=260,
        discounted_price=200,
        valid_days=["Saturday", "Sunday"],
    ),
    dict(
        id="combo-2",
        name="Student Budget Combo",
        description="Great value for money",
        items=[{"id": "masala-dosa", "quantity": 1}, {"id": "cold-coffee", "quantity": 1}],
        original_price=200,
        discounted_price=150,
        valid_days=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
    ),
]

# (name, role, hourly rate, [(date, check in, check out)])
STAFF = [
    ("Rajesh Kumar", "Chef", 150, [
        (date(2024, 1, 15), time(8, 0), time(16, 0)),
        (date(2024, 1, 16), time(8, 15), time(16, 30)),
    ]),
    ("Priya Sharma", "Cashier", 120, [
        (date(2024, 1, 15), time(9, 0), time(17, 0)),
        (date(2024, 1, 16), time(8, 45), time(17, 15)),
    ]),
]

# (email, name, role, opening wallet balance)
ACCOUNTS = [
    ("student@test.com", "Test Student", "student", 500.0),
    ("admin@test.com", "Test Admin", "admin", 1000.0),
]


def _has_rows(session: Session, model) -> bool:
    return session.exec(select(model).limit(1)).first() is not None


def seed_accounts(session: Session) -> None:
    user_repo = UserRepository()
    wallet = WalletService(user_repo, WalletRepository())
    for email, name, role, balance in ACCOUNTS:
        if user_repo.get_by_email(session, email) is not None:
            continue
        user = user_repo.create(session, User(email=email, name=name, role=role))
        if balance > 0:
            wallet.credit(session, user.id, balance, description="Opening balance")


def seed_catalog(session: Session) -> None:
    if _has_rows(session, MenuItem):
        return

    for (item_id, name, price, category, prep, stock, cost, sales, rating, image_id,
         description, options) in MENU:
        reviews = REVIEWS.get(item_id, [])
        session.add(
            MenuItem(
                id=item_id,
                name=name,
                description=description,
                price=price,
                category=category,
                image=_IMG.format(image_id),
                preparation_time=prep,
                stock_quantity=stock,
                cost_price=cost,
                customization_options=options,
                average_rating=rating,
                total_reviews=len(reviews) or 1,
                sales_count=sales,
            )
        )
        for r_rating, comment, user_name, reviewed_on in reviews:
            session.add(
                MenuReview(
                    item_id=item_id,
                    rating=r_rating,
                    comment=comment,
                    user_name=user_name,
                    reviewed_on=reviewed_on,
                )
            )

    for combo in COMBOS:
        session.add(ComboOffer(**combo))

    session.commit()


def seed_staff(session: Session) -> None:
    if _has_rows(session, StaffMember):
        return

    for name, role, rate, shifts in STAFF:
        member = StaffMember(name=name, role=role, hourly_rate=rate)
        session.add(member)
        session.flush()
        for work_date, check_in, check_out in shifts:
            session.add(
                AttendanceRecord(
                    staff_id=member.id,
                    work_date=work_date,
                    check_in=check_in,
                    check_out=check_out,
                    hours=shift_hours(check_in, check_out),
                )
            )
    session.commit()


def seed_credit(session: Session) -> None:
    if _has_rows(session, CreditAccount):
        return

    account = CreditAccount(
        student_name="Test Student",
        email="student@test.com",
        credit_limit=500,
        current_balance=200,
    )
    session.add(account)
    session.flush()
    session.add_all(
        [
            CreditTransaction(
                account_id=account.id,
                type="credit",
                amount=120,
                description="Opening balance",
                transaction_date=date(2024, 1, 14),
            ),
            CreditTransaction(
                account_id=account.id,
                type="purchase",
                amount=180,
                description="Butter Chicken + Cold Coffee",
                transaction_date=date(2024, 1, 15),
            ),
            CreditTransaction(
                account_id=account.id,
                type="payment",
                amount=100,
                description="Payment received",
                transaction_date=date(2024, 1, 16),
            ),
        ]
    )
    session.commit()


def seed_demo_data(engine) -> None:
    with Session(engine) as session:
        seed_accounts(session)
        seed_catalog(session)
        seed_staff(session)
        seed_credit(session)
    logger.info("Demo data ready")
