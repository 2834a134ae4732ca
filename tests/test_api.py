"""API endpoint tests."""

from sqlalchemy import create_engine, inspect

from pantry_planner import database


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_init_db_creates_tables(monkeypatch, tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'init.db'}")
    monkeypatch.setattr(database, "engine", engine)

    database.init_db()

    tables = set(inspect(engine).get_table_names())
    assert {"users", "pantries", "pantry_items", "receipt_scans"} <= tables


def test_register_user(client):
    """Test user registration."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "newuser@example.com", "password": "password123", "name": "New User"},
    )
    assert response.status_code == 201
    data = response.json()
    assert "access_token" in data
    assert data["user"]["default_pantry_id"] is not None


def test_register_creates_default_pantry(client, auth_headers):
    """Registration creates exactly one default pantry."""
    response = client.get("/api/v1/pantries", headers=auth_headers)
    assert response.status_code == 200
    pantries = response.json()
    assert len(pantries) == 1
    assert pantries[0]["id"] == auth_headers.pantry_id
    assert pantries[0]["is_default"] is True
    assert pantries[0]["name"] == "Despensa principal"


def test_register_duplicate_email(client, auth_headers):
    """Test registration with duplicate email fails."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": auth_headers.email, "password": "password123", "name": "Duplicate"},
    )
    assert response.status_code == 400
    assert "already registered" in response.json()["detail"]


def test_register_short_password(client):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "short@example.com", "password": "short"},
    )
    assert response.status_code == 422


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["user"]["default_pantry_id"] == auth_headers.pantry_id


def test_login_email_is_case_insensitive(client, auth_headers):
    response = client.post(
        "/api/v1/auth/login", json={"email": "Test@Example.com", "password": "testpass123"}
    )
    assert response.status_code == 200
    assert response.json()["user"]["id"] == auth_headers.user_id


def test_token_without_numeric_subject_is_rejected(client, auth_headers):
    from jose import jwt

    from pantry_planner.config import get_settings

    settings = get_settings()
    token = jwt.encode({"sub": "abc"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_login_wrong_password(client, auth_headers):
    """Test login with wrong password."""
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "wrongpass"}
    )
    assert response.status_code == 401


def test_get_current_user(client, auth_headers):
    """Test getting current user info."""
    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email


def test_unauthorized_access(client):
    """Test that protected endpoints require authentication."""
    response = client.get("/api/v1/pantries")
    assert response.status_code in (401, 403)


def test_invalid_token(client):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_logout(client, auth_headers):
    response = client.post("/api/v1/auth/logout", headers=auth_headers)
    assert response.status_code == 200


def test_dietary_profile_defaults(client, auth_headers):
    """A user without a profile gets an empty one."""
    response = client.get("/api/v1/profile/dietary", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"diet_type": None, "allergies": [], "avoid_ingredients": []}


def test_update_dietary_profile(client, auth_headers):
    response = client.put(
        "/api/v1/profile/dietary",
        headers=auth_headers,
        json={
            "diet_type": "vegetariano",
            "allergies": ["nueces"],
            "avoid_ingredients": [" cilantro ", ""],
        },
    )
    assert response.status_code == 200
    assert response.json()["avoid_ingredients"] == ["cilantro"]

    response = client.get("/api/v1/profile/dietary", headers=auth_headers)
    assert response.json()["diet_type"] == "vegetariano"
    assert response.json()["allergies"] == ["nueces"]


def test_update_dietary_profile_unknown_diet(client, auth_headers):
    response = client.put(
        "/api/v1/profile/dietary",
        headers=auth_headers,
        json={"diet_type": "carnivoro"},
    )
    assert response.status_code == 422
