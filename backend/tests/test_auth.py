"""
Authentication tests.

Verifies:
- Default accounts are seeded once, only into an empty table
- Login is an exact, case-sensitive match returning the role
- Registration validates role and rejects duplicate usernames cleanly
- The bcrypt scheme stores hashes and still authenticates
"""

import pytest

from stockledger.extensions import db
from stockledger.models import User
from stockledger.services import auth_service
from stockledger.services.auth_service import DuplicateUsernameError, InvalidCredentialsError
from stockledger.validation import InvalidRoleError, MissingFieldsError


class TestSeeding:

    def test_seed_into_empty_table(self, db_session):
        assert auth_service.seed_default_users() == 4
        usernames = [u.username for u in db.session.query(User).order_by(User.id)]
        assert usernames == ["admin", "teofilo", "daxton", "faith"]

    def test_seed_skipped_when_users_exist(self, db_session):
        auth_service.register_user("solo", "pw", "user")
        assert auth_service.seed_default_users() == 0
        assert db.session.query(User).count() == 1

    def test_seed_is_idempotent(self, default_users):
        assert auth_service.seed_default_users() == 0
        assert db.session.query(User).count() == 4


class TestLogin:

    def test_admin_role(self, default_users):
        assert auth_service.authenticate("admin", "admin") == "admin"

    def test_user_role(self, default_users):
        assert auth_service.authenticate("faith", "faith") == "user"

    def test_wrong_password(self, default_users):
        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate("admin", "wrong")

    def test_case_sensitive(self, default_users):
        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate("Admin", "admin")
        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate("admin", "ADMIN")

    def test_unknown_user(self, default_users):
        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate("nobody", "admin")

    def test_missing(self, default_users):
        with pytest.raises(MissingFieldsError):
            auth_service.authenticate("admin", "")

    def test_route_success(self, client, default_users):
        resp = client.post("/login", json={"username": "teofilo", "password": "teofilo"})
        assert resp.status_code == 200
        assert resp.json == {"role": "user"}

    def test_route_invalid_credentials(self, client, default_users):
        resp = client.post("/login", json={"username": "teofilo", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json == {"error": "Invalid credentials"}

    def test_route_missing(self, client, default_users):
        resp = client.post("/login", json={"username": "teofilo"})
        assert resp.status_code == 400

    @pytest.mark.parametrize("body", [["admin", "admin"], "admin", 7])
    def test_route_non_object_body(self, client, default_users, body):
        resp = client.post("/login", json=body)
        assert resp.status_code == 400
        assert resp.json == {"error": "Invalid JSON payload"}


class TestRegister:

    def test_register_then_login(self, db_session):
        user_id = auth_service.register_user("carol", "s3cret", "admin")
        assert isinstance(user_id, int)
        assert auth_service.authenticate("carol", "s3cret") == "admin"

    def test_invalid_role(self, db_session):
        with pytest.raises(InvalidRoleError):
            auth_service.register_user("carol", "s3cret", "superuser")
        assert db.session.query(User).count() == 0

    def test_duplicate_username(self, default_users):
        with pytest.raises(DuplicateUsernameError):
            auth_service.register_user("daxton", "other", "user")

        assert db.session.query(User).count() == 4
        assert auth_service.authenticate("daxton", "daxton") == "user"

    def test_duplicate_after_lost_race(self, db_session, monkeypatch):
        """Unique constraint hit at commit time still reports a duplicate."""
        def racing_hash(password):
            # A concurrent registration commits between the check and the insert
            db.session.add(User(username="zoe", password="first", role="user"))
            db.session.commit()
            return password

        monkeypatch.setattr(auth_service, "hash_password", racing_hash)

        with pytest.raises(DuplicateUsernameError):
            auth_service.register_user("zoe", "second", "admin")

        assert db.session.query(User).count() == 1
        assert db.session.query(User.role).filter_by(username="zoe").scalar() == "user"

    def test_route_success(self, client, db_session):
        resp = client.post("/register", json={"username": "dan", "password": "pw", "role": "user"})
        assert resp.status_code == 200
        assert resp.json["message"] == "User registered successfully"
        assert isinstance(resp.json["id"], int)

    def test_route_duplicate(self, client, default_users):
        resp = client.post("/register", json={"username": "admin", "password": "x", "role": "admin"})
        assert resp.status_code == 409
        assert resp.json == {"error": "Username already exists"}

    def test_route_invalid_role(self, client, db_session):
        resp = client.post("/register", json={"username": "dan", "password": "pw", "role": "root"})
        assert resp.status_code == 400
        assert resp.json == {"error": "Invalid role"}

    def test_route_missing(self, client, db_session):
        resp = client.post("/register", json={"username": "dan", "role": "user"})
        assert resp.status_code == 400
        assert resp.json == {"error": "Missing required fields"}

    def test_route_non_object_body(self, client, db_session):
        resp = client.post("/register", json=["dan", "pw", "user"])
        assert resp.status_code == 400
        assert resp.json == {"error": "Invalid JSON payload"}
        assert db.session.query(User).count() == 0


class TestBcryptScheme:

    @pytest.fixture
    def bcrypt_scheme(self, app, db_session):
        app.config["PASSWORD_SCHEME"] = "bcrypt"
        yield
        app.config["PASSWORD_SCHEME"] = "plaintext"

    def test_stores_hash_and_authenticates(self, bcrypt_scheme):
        auth_service.register_user("erin", "hunter2", "user")

        stored = db.session.query(User.password).filter_by(username="erin").scalar()
        assert stored != "hunter2"
        assert stored.startswith("$2")
        assert auth_service.authenticate("erin", "hunter2") == "user"

        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate("erin", "hunter3")

    def test_plaintext_rows_do_not_match(self, bcrypt_scheme):
        db.session.add(User(username="legacy", password="legacy", role="user"))
        db.session.commit()

        with pytest.raises(InvalidCredentialsError):
            auth_service.authenticate("legacy", "legacy")
