from tests.cash_helpers import ADMIN_PASSWORD, auth_headers, create_admin, create_user, login

URL = "/clinica/settings/cut-schedule"


def test_schedule_defaults_are_returned_and_persisted(client, db_session):
    create_user(db_session, username="recepcion", role="RECEPTIONIST")
    headers = auth_headers(login(client, "recepcion"))

    first = client.get(URL, headers=headers).json()
    assert first == {"first_cut": "14:00", "second_cut": "18:00", "is_default": True}

    second = client.get(URL, headers=headers).json()
    assert second["is_default"] is False


def test_admin_updates_schedule_and_resolver_follows(client, db_session, frozen_clock):
    create_admin(db_session)
    headers = auth_headers(login(client, "supervisor", ADMIN_PASSWORD))

    response = client.put(URL, json={"first_cut": "9:30", "second_cut": "13:00"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["first_cut"] == "09:30"

    client.post("/clinica/pos/cash/opening-balance", json={"amount": "0"}, headers=headers)
    frozen_clock.set(9, 45)
    state = client.get("/clinica/pos/cash/state", headers=headers).json()
    assert state["state"] == "NEEDS_SCHEDULED_CUT"
    assert state["due_label"] == "09:30"
    assert state["scheduled_labels"] == ["09:30", "13:00"]


def test_invalid_schedule_is_rejected(client, db_session):
    create_admin(db_session)
    headers = auth_headers(login(client, "supervisor", ADMIN_PASSWORD))

    response = client.put(URL, json={"first_cut": "18:00", "second_cut": "14:00"}, headers=headers)
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_CUT_SCHEDULE"

    response = client.put(URL, json={"first_cut": "7pm", "second_cut": "20:00"}, headers=headers)
    assert response.status_code == 422
    assert response.json()["details"]["fields"] == ["first_cut"]


def test_only_admin_manages_schedule(client, db_session):
    create_user(db_session, username="recepcion", role="RECEPTIONIST")
    headers = auth_headers(login(client, "recepcion"))
    response = client.put(URL, json={"first_cut": "10:00", "second_cut": "16:00"}, headers=headers)
    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"
