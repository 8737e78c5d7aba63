import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient

from app.core.revalidation import InvalidationBus, RenderCache
from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.deps import get_invalidation_bus, get_render_cache
from app.main import app
from app.modules.posts.models.post import Post
from app.modules.user_management.models.user import User


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    def _make_user(user_id: str, username: str = None, name: str = None, is_active: bool = True) -> User:
        user = User(
            id=user_id,
            username=username or f"user_{user_id}",
            name=name or f"User {user_id}",
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user
    return _make_user


@pytest.fixture
def make_post(db):
    def _make_post(post_id: str, author_id: str, content: str = "hello world", image: str = None) -> Post:
        post = Post(id=post_id, author_id=author_id, content=content, image=image)
        db.add(post)
        db.commit()
        return post
    return _make_post


@pytest.fixture
def seeded(make_user, make_post):
    """u1 and u3 are readers, u2 owns post p1"""
    make_user("u1", username="alice")
    make_user("u2", username="bob")
    make_user("u3", username="carol")
    make_post("p1", "u2")


class RecordingBus(InvalidationBus):
    def __init__(self):
        super().__init__()
        self.paths = []

    def publish(self, event):
        self.paths.append(event.path)
        super().publish(event)


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def render_cache(bus):
    cache = RenderCache(max_size=16)
    bus.subscribe(cache.invalidate)
    return cache


@pytest.fixture
def client(db, bus, render_cache):
    app.dependency_overrides[get_invalidation_bus] = lambda: bus
    app.dependency_overrides[get_render_cache] = lambda: render_cache
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _auth_headers
