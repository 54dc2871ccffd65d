from conftest import ADMIN_EMAIL, API, STUDENT_EMAIL, login, tomorrow_noon


def checkout_payload(payment_method: str = "wallet") -> dict:
    pickup_date, pickup_time = tomorrow_noon()
    return {
        "pickup_date": pickup_date.isoformat(),
        "pickup_time": pickup_time.strftime("%H:%M"),
        "payment_method": payment_method,
    }


def add(client, headers, item_id, customization=None):
    body = {"item_id": item_id}
    if customization is not None:
        body["customization"] = customization
    return client.post(f"{API}/cart/items", json=body, headers=headers)


class TestPublic:
    def test_health(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert res.json()["status"] == "ok"

    def test_guests_can_browse_the_menu(self, client):
        res = client.get(f"{API}/menu/items")
        assert res.status_code == 200
        assert len(res.json()) == 20

        detail = client.get(f"{API}/menu/items/butter-chicken").json()
        assert detail["price"] == 180
        assert len(detail["reviews"]) == 2

    def test_unknown_menu_item(self, client):
        assert client.get(f"{API}/menu/items/caviar").status_code == 404


class TestAuth:
    def test_signup_creates_an_empty_wallet(self, client):
        res = client.post(
            f"{API}/auth/signup",
            json={"email": "new.student@campus.edu", "password": "secret1"},
        )
        assert res.status_code == 201
        user = res.json()["user"]
        assert user["role"] == "student"
        assert user["wallet_balance"] == 0
        assert user["name"] == "new.student"

    def test_duplicate_signup(self, client):
        res = client.post(
            f"{API}/auth/signup",
            json={"email": STUDENT_EMAIL, "password": "secret1"},
        )
        assert res.status_code == 409

    def test_login_unknown_email(self, client):
        res = client.post(f"{API}/auth/login", json={"email": "ghost@campus.edu", "password": "x"})
        assert res.status_code == 404

    def test_bad_token(self, client):
        res = client.get(f"{API}/users/me", headers={"Authorization": "Bearer nonsense"})
        assert res.status_code == 401


class TestCartApi:
    def test_cart_requires_a_student(self, client):
        assert client.get(f"{API}/cart").status_code == 401
        assert client.get(f"{API}/cart", headers=login(client, ADMIN_EMAIL)).status_code == 403

    def test_add_update_remove(self, client):
        headers = login(client, STUDENT_EMAIL)

        add(client, headers, "butter-chicken")
        cart = add(client, headers, "butter-chicken").json()
        assert cart["total"] == 360
        assert cart["item_count"] == 2

        cart = add(client, headers, "butter-chicken", {"spiceLevel": "Hot"}).json()
        assert len(cart["items"]) == 2
        hot_line = cart["items"][1]["line_id"]

        cart = client.patch(
            f"{API}/cart/items/{hot_line}", json={"quantity": 3}, headers=headers
        ).json()
        assert cart["total"] == 180 * 5

        cart = client.delete(f"{API}/cart/items/butter-chicken", headers=headers).json()
        assert [i["line_id"] for i in cart["items"]] == [hot_line]

        cart = client.delete(f"{API}/cart/items/butter-chicken", headers=headers).json()
        assert cart["item_count"] == 3

        cart = client.delete(f"{API}/cart", headers=headers).json()
        assert cart["items"] == []
        assert cart["total"] == 0

    def test_invalid_additions(self, client):
        headers = login(client, STUDENT_EMAIL)
        admin = login(client, ADMIN_EMAIL)

        assert add(client, headers, "caviar").status_code == 404
        assert add(client, headers, "butter-chicken", {"spiceLevel": "Volcanic"}).status_code == 400
        assert add(client, headers, "chai", {"spiceLevel": "Hot"}).status_code == 400

        client.patch(f"{API}/admin/menu/pizza/availability", json={"available": False}, headers=admin)
        assert add(client, headers, "pizza").status_code == 400

        assert client.get(f"{API}/cart", headers=headers).json()["items"] == []

    def test_cart_is_restored_after_logout(self, client):
        headers = login(client, STUDENT_EMAIL)
        add(client, headers, "samosa")
        add(client, headers, "samosa")
        add(client, headers, "cold-coffee", {"sugarLevel": "Less Sugar"})

        assert client.post(f"{API}/auth/logout", headers=headers).status_code == 200

        headers = login(client, STUDENT_EMAIL)
        cart = client.get(f"{API}/cart", headers=headers).json()
        assert cart["item_count"] == 3
        assert cart["total"] == 140
        assert cart["items"][1]["customization"] == {"sugarLevel": "Less Sugar"}


class TestOrderFlow:
    def test_checkout_to_pickup(self, client):
        student = login(client, STUDENT_EMAIL)
        admin = login(client, ADMIN_EMAIL)
        for _ in range(3):
            add(client, student, "chai")

        res = client.post(f"{API}/orders/checkout", json=checkout_payload(), headers=student)
        assert res.status_code == 201, res.text
        order = res.json()
        assert order["total_amount"] == 75
        assert order["status"] == "pending"
        assert order["items"][0]["quantity"] == 3

        assert client.get(f"{API}/cart", headers=student).json()["items"] == []
        assert client.get(f"{API}/wallet/me", headers=student).json()["balance"] == 425

        mine = client.get(f"{API}/orders/me", headers=student).json()
        assert [o["id"] for o in mine] == [order["id"]]

        # Counter refuses a QR for an order that isn't ready
        scan = client.post(f"{API}/orders/scan", json={"qr_code": order["qr_code"]}, headers=admin)
        assert scan.status_code == 409

        for status in ("preparing", "ready"):
            res = client.patch(
                f"{API}/orders/{order['id']}/status", json={"status": status}, headers=admin
            )
            assert res.status_code == 200
            assert res.json()["status"] == status

        scan = client.post(f"{API}/orders/scan", json={"qr_code": order["qr_code"]}, headers=admin)
        assert scan.status_code == 200
        assert scan.json()["status"] == "completed"

        res = client.patch(
            f"{API}/orders/{order['id']}/status", json={"status": "cancelled"}, headers=admin
        )
        assert res.status_code == 409

    def test_checkout_without_pickup_slot(self, client):
        student = login(client, STUDENT_EMAIL)
        add(client, student, "chai")

        res = client.post(f"{API}/orders/checkout", json={"payment_method": "cash"}, headers=student)

        assert res.status_code == 400
        assert client.get(f"{API}/cart", headers=student).json()["item_count"] == 1

    def test_checkout_with_short_wallet(self, client):
        student = login(client, STUDENT_EMAIL)
        for _ in range(3):
            add(client, student, "biryani")

        res = client.post(f"{API}/orders/checkout", json=checkout_payload(), headers=student)

        assert res.status_code == 402
        assert client.get(f"{API}/orders/me", headers=student).json() == []
        assert client.get(f"{API}/cart", headers=student).json()["total"] == 660

    def test_cancel_refunds_wallet(self, client):
        student = login(client, STUDENT_EMAIL)
        admin = login(client, ADMIN_EMAIL)
        add(client, student, "butter-chicken")
        order = client.post(f"{API}/orders/checkout", json=checkout_payload(), headers=student).json()
        assert client.get(f"{API}/wallet/me", headers=student).json()["balance"] == 320

        client.patch(f"{API}/orders/{order['id']}/status", json={"status": "cancelled"}, headers=admin)

        assert client.get(f"{API}/wallet/me", headers=student).json()["balance"] == 500
        ledger = client.get(f"{API}/wallet/me/transactions", headers=student).json()
        assert [t["type"] for t in ledger] == ["refund", "debit", "credit"]

    def test_students_cannot_use_admin_endpoints(self, client):
        student = login(client, STUDENT_EMAIL)
        assert client.get(f"{API}/orders", headers=student).status_code == 403
        assert client.get(f"{API}/admin/dashboard", headers=student).status_code == 403


class TestAdminApi:
    def test_wallet_top_up(self, client):
        admin = login(client, ADMIN_EMAIL)
        students = client.get(f"{API}/admin/wallets", headers=admin).json()
        student_id = students[0]["id"]

        res = client.post(
            f"{API}/admin/wallets/{student_id}/top-up",
            json={"amount": 100, "description": "Cash at counter"},
            headers=admin,
        )

        assert res.status_code == 200
        assert res.json()["new_balance"] == 600
        assert client.get(f"{API}/wallet/me", headers=login(client, STUDENT_EMAIL)).json()["balance"] == 600

    def test_top_up_limits(self, client):
        admin = login(client, ADMIN_EMAIL)
        student_id = client.get(f"{API}/admin/wallets", headers=admin).json()[0]["id"]

        for amount in (0, -5, 20000):
            res = client.post(
                f"{API}/admin/wallets/{student_id}/top-up", json={"amount": amount}, headers=admin
            )
            assert res.status_code == 422

    def test_dashboard_and_inventory(self, client):
        admin = login(client, ADMIN_EMAIL)

        dashboard = client.get(f"{API}/admin/dashboard", headers=admin).json()
        assert dashboard["total_students"] == 1
        assert dashboard["total_orders"] == 0

        inventory = client.get(f"{API}/admin/inventory", headers=admin).json()
        assert inventory["total_items"] == 20

    def test_menu_crud(self, client):
        admin = login(client, ADMIN_EMAIL)

        res = client.post(
            f"{API}/admin/menu",
            json={
                "name": "Filter Coffee",
                "price": 35,
                "category": "Beverages",
                "customization_options": {"sugarLevel": ["No Sugar", "Normal"]},
            },
            headers=admin,
        )
        assert res.status_code == 201
        assert res.json()["id"] == "filter-coffee"

        res = client.patch(f"{API}/admin/menu/filter-coffee", json={"price": 40}, headers=admin)
        assert res.json()["price"] == 40

        assert client.delete(f"{API}/admin/menu/filter-coffee", headers=admin).status_code == 204
        assert client.get(f"{API}/menu/items/filter-coffee").status_code == 404

    def test_staff_and_credit_routes(self, client):
        admin = login(client, ADMIN_EMAIL)

        staff = client.get(f"{API}/admin/staff", headers=admin).json()
        assert {s["name"] for s in staff} == {"Rajesh Kumar", "Priya Sharma"}

        summary = client.get(
            f"{API}/admin/staff/summary", params={"year": 2024, "month": 1}, headers=admin
        ).json()
        assert summary["total_salary"] == 4417.5

        credit = client.get(f"{API}/admin/credit-accounts", headers=admin).json()
        assert credit["total_outstanding"] == 200
        assert credit["accounts"][0]["status"] == "active"
