from app.clinica.core.security import decode_token
from tests.cash_helpers import PASSWORD, auth_headers, create_user


def test_login_returns_role_claims(client, db_session):
    create_user(db_session, username="recepcion", role="RECEPTIONIST")
    response = client.post(
        "/clinica/auth/login",
        json={"username_or_email": "recepcion@clinica.test", "password": PASSWORD},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["role"] == "RECEPTIONIST"
    claims = decode_token(payload["access_token"])
    assert claims["username"] == "recepcion"
    assert claims["role"] == "RECEPTIONIST"
    assert claims["is_active"] is True


def test_oauth2_token_form(client, db_session):
    create_user(db_session, username="doctora", role="DOCTOR")
    response = client.post(
        "/clinica/auth/token",
        data={"username": "doctora", "password": PASSWORD},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]
    state = client.get("/clinica/pos/cash/state", headers=auth_headers(token))
    assert state.status_code == 200


def test_invalid_credentials(client, db_session):
    create_user(db_session, username="recepcion", role="RECEPTIONIST")
    response = client.post("/clinica/auth/login", json={"username_or_email": "recepcion", "password": "bad"})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_inactive_user_cannot_login(client, db_session):
    create_user(db_session, username="baja", role="RECEPTIONIST", is_active=False)
    response = client.post("/clinica/auth/login", json={"username_or_email": "baja", "password": PASSWORD})
    assert response.status_code == 403
    assert response.json()["code"] == "USER_INACTIVE"


def test_garbage_token_is_rejected(client):
    response = client.get("/clinica/pos/cash/state", headers=auth_headers("not-a-jwt"))
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"
