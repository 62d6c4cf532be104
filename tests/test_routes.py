from buyer_orders import db
from buyer_orders.models import Order, Settings
from tests.helpers import login


def test_order_view_requires_login(client):
    assert client.get("/orders/").status_code == 401


def test_bad_credentials_rejected(client, users):
    response = login(client, "buyer@example.com", "wrong")
    assert response.status_code == 401


def test_view_is_read_only_and_hides_empty_batches(client, users, drifted_orders):
    login(client, "buyer@example.com")

    data = client.get("/orders/").get_json()

    assert data["buyer_id"] == users["buyer"]
    assert data["total_orders"] == 2
    assert data["total_spent"] == 35.0
    # Drifted order is still paid: the read path never heals
    past = data["past_batches"]
    assert [b["id"] for b in past] == [drifted_orders["completed_batch"]]
    assert past[0]["orders"][0]["status"] == "paid"
    shown = {b["id"] for b in data["active_batches"] + past}
    assert drifted_orders["empty_batch"] not in shown


def test_manual_refresh_heals_and_returns_fresh_view(client, users, drifted_orders):
    login(client, "buyer@example.com")

    data = client.post("/orders/refresh").get_json()

    assert data["total_spent"] == 35.0
    assert data["total_orders"] == 2
    assert data["giveaway_wins"] == 0
    assert [b["id"] for b in data["active_batches"]] == [drifted_orders["pending_batch"]]
    past = data["past_batches"][0]
    assert past["orders"][0]["status"] == "picked_up"
    assert past["seller_name"] == "Corner Cards"

    db.session.expire_all()
    assert db.session.get(Order, drifted_orders["healed_order"]).status == "picked_up"
    assert db.session.get(Order, drifted_orders["untouched_order"]).status == "paid"


def test_sync_session_start_status_stop(app, client, users, drifted_orders):
    login(client, "buyer@example.com")

    started = client.post("/orders/sync/start").get_json()
    assert started["running"]
    assert started["interval"] == app.config["ORDER_SYNC_INTERVAL_SECONDS"]

    status = client.get("/orders/sync/status").get_json()
    assert status["running"]
    assert status["cycles"] == 0

    stopped = client.post("/orders/sync/stop").get_json()
    assert stopped["stopped"]
    assert not client.get("/orders/sync/status").get_json()["running"]


def test_logout_stops_sync_session(app, client, users):
    login(client, "buyer@example.com")
    client.post("/orders/sync/start")

    client.post("/auth/logout")

    tracking = app.extensions["order_tracking"]
    assert tracking.stop_session(users["buyer"]) is False
    assert client.get("/orders/").status_code == 401


def test_admin_acts_as_buyer(client, users, drifted_orders):
    login(client, "admin@example.com")

    response = client.post(f"/admin/impersonate/{users['buyer']}")
    assert response.get_json()["buyer_id"] == users["buyer"]

    data = client.get("/orders/").get_json()
    assert data["is_impersonating"]
    assert data["buyer_id"] == users["buyer"]
    assert data["total_orders"] == 2

    client.post("/admin/impersonate/stop")
    data = client.get("/orders/").get_json()
    assert not data["is_impersonating"]
    assert data["total_orders"] == 0


def test_buyer_cannot_impersonate(client, users):
    login(client, "buyer@example.com")
    assert client.post(f"/admin/impersonate/{users['other']}").status_code == 403


def test_impersonating_unknown_user_is_404(client, users):
    login(client, "admin@example.com")
    assert client.post("/admin/impersonate/9999").status_code == 404


def test_admin_changes_sync_interval(client, users):
    login(client, "admin@example.com")

    assert client.post("/admin/settings/sync-interval", json={"seconds": "abc"}).status_code == 400
    assert client.post("/admin/settings/sync-interval", json={"seconds": 0}).status_code == 400

    response = client.post("/admin/settings/sync-interval", json={"seconds": 15})
    assert response.get_json() == {"interval": 15}
    assert Settings.get_sync_interval() == 15

    started = client.post("/orders/sync/start").get_json()
    assert started["interval"] == 15
