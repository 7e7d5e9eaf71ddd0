from tests.conftest import auth, register


def place(client, token, *lines):
    return client.post(
        "/api/orders",
        json={"orderItems": [{"productId": pid, "quantity": qty} for pid, qty in lines]},
        headers=auth(token),
    )


def stock_of(client, product):
    return client.get(f"/api/products/{product['id']}").json()["stock"]


def test_end_to_end_order(client, make_product):
    register(client, "alice")
    login = client.post("/api/auth/login", json={"username": "alice", "password": "Secret123!"})
    token = login.json()["token"]
    product = make_product(price="10.00", stock=5)

    response = place(client, token, (product["id"], 2))
    assert response.status_code == 201
    order = response.json()
    assert order["totalAmount"] == 20.0
    assert order["status"] == "PENDING"
    assert order["username"] == "alice"
    assert order["createdAt"]
    assert stock_of(client, product) == 3


def test_multi_line_order_snapshots_prices(client, admin_token, alice_token, make_product):
    widget = make_product(name="Widget", price="10.00", stock=5)
    gadget = make_product(name="Gadget", price="2.25", stock=10)

    response = place(client, alice_token, (widget["id"], 2), (gadget["id"], 4))
    assert response.status_code == 201
    order = response.json()
    assert order["totalAmount"] == 29.0
    assert [(i["productName"], i["quantity"], i["price"]) for i in order["orderItems"]] == [
        ("Widget", 2, 10.0),
        ("Gadget", 4, 2.25),
    ]
    assert stock_of(client, widget) == 3
    assert stock_of(client, gadget) == 6

    client.put(f"/api/products/{widget['id']}", json={"price": "99.00"}, headers=auth(admin_token))
    again = client.get(f"/api/orders/{order['id']}", headers=auth(alice_token)).json()
    assert again["totalAmount"] == 29.0
    assert again["orderItems"][0]["price"] == 10.0


def test_insufficient_stock_leaves_stock_unchanged(client, alice_token, make_product):
    product = make_product(stock=2)
    response = place(client, alice_token, (product["id"], 3))
    assert response.status_code == 400
    assert response.json()["message"] == "Insufficient stock for product: Widget"
    assert stock_of(client, product) == 2
    assert client.get("/api/orders", headers=auth(alice_token)).json() == []


def test_failure_midway_rolls_back_earlier_lines(client, alice_token, make_product):
    first = make_product(name="First", stock=5)
    second = make_product(name="Second", stock=1)
    third = make_product(name="Third", stock=5)

    response = place(client, alice_token, (first["id"], 2), (second["id"], 2), (third["id"], 1))
    assert response.status_code == 400
    assert [stock_of(client, p) for p in (first, second, third)] == [5, 1, 5]
    assert client.get("/api/orders", headers=auth(alice_token)).json() == []


def test_same_product_twice_cannot_exceed_stock(client, alice_token, make_product):
    product = make_product(stock=3)
    response = place(client, alice_token, (product["id"], 2), (product["id"], 2))
    assert response.status_code == 400
    assert stock_of(client, product) == 3


def test_unknown_product_is_404(client, alice_token, make_product):
    product = make_product(stock=5)
    response = place(client, alice_token, (product["id"], 1), (424242, 1))
    assert response.status_code == 404
    assert response.json()["message"] == "Product not found with id: 424242"
    assert stock_of(client, product) == 5


def test_malformed_order_requests(client, alice_token, make_product):
    product = make_product()
    assert place(client, alice_token).status_code == 400
    assert place(client, alice_token, (product["id"], 0)).status_code == 400
    assert place(client, alice_token, (product["id"], -1)).status_code == 400
    assert client.post("/api/orders", json={}, headers=auth(alice_token)).status_code == 400


def test_orders_require_token(client, make_product):
    product = make_product()
    response = client.post("/api/orders", json={"orderItems": [{"productId": product["id"], "quantity": 1}]})
    assert response.status_code == 401
    assert client.get("/api/orders").status_code == 401


def test_order_visibility(client, admin_token, alice_token, bob_token, make_product):
    product = make_product(stock=10)
    alice_order = place(client, alice_token, (product["id"], 1)).json()
    bob_order = place(client, bob_token, (product["id"], 2)).json()

    url = f"/api/orders/{alice_order['id']}"
    assert client.get(url, headers=auth(bob_token)).status_code == 403
    as_owner = client.get(url, headers=auth(alice_token))
    as_admin = client.get(url, headers=auth(admin_token))
    assert as_owner.status_code == as_admin.status_code == 200
    assert as_owner.json() == as_admin.json() == alice_order

    assert [o["id"] for o in client.get("/api/orders", headers=auth(alice_token)).json()] == [alice_order["id"]]
    assert [o["id"] for o in client.get("/api/orders", headers=auth(bob_token)).json()] == [bob_order["id"]]
    assert [o["id"] for o in client.get("/api/orders", headers=auth(admin_token)).json()] == [
        alice_order["id"],
        bob_order["id"],
    ]
    assert client.get("/api/orders/999", headers=auth(admin_token)).status_code == 404


def test_status_updates_are_admin_only_and_permissive(client, admin_token, alice_token, make_product):
    product = make_product()
    order = place(client, alice_token, (product["id"], 1)).json()
    url = f"/api/admin/orders/{order['id']}/status"

    assert client.put(url, params={"status": "SHIPPED"}, headers=auth(alice_token)).status_code == 403

    for status in ("PROCESSING", "DELIVERED", "PENDING", "CANCELLED"):
        response = client.put(url, params={"status": status}, headers=auth(admin_token))
        assert response.status_code == 200
        assert response.json()["status"] == status

    assert client.get(f"/api/orders/{order['id']}", headers=auth(alice_token)).json()["status"] == "CANCELLED"
    assert client.put(url, params={"status": "LOST"}, headers=auth(admin_token)).status_code == 400
    missing = client.put("/api/admin/orders/999/status", params={"status": "SHIPPED"}, headers=auth(admin_token))
    assert missing.status_code == 404
