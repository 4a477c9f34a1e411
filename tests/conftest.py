from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from scout_backend import create_app
from scout_backend.extensions import db
from scout_backend.models import Challenge, User, UserRole
from scout_backend.services.challenge_progress import ChallengeProgressEngine


class FakeClock:
    """Deterministic stand-in for datetime.utcnow."""

    def __init__(self, start=datetime(2024, 1, 1, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(app, clock):
    return ChallengeProgressEngine(db.session, clock=clock)


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make_user(name=None, role=UserRole.PLAYER, password="secret123"):
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            name=name or f"User {counter['n']}",
            role=role,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def make_challenge(app, make_user):
    def _make_challenge(creator=None, title="Run 100km", target_progress=100.0, **extra):
        challenge = Challenge(
            title=title,
            target_progress=target_progress,
            creator_id=(creator or make_user(role=UserRole.SCOUT)).id,
            **extra,
        )
        db.session.add(challenge)
        db.session.commit()
        return challenge

    return _make_challenge


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
