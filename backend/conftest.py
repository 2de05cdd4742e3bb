import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mealplan.db.base import Base
from mealplan.db.session import make_engine
from mealplan.db.models.food_item import FoodItem
from mealplan.deps import get_db
from main import app

# fid, name, price per serving, calories per serving
FOODS = [
    (7, "Oatmeal", 2.5, 300.0),
    (8, "Chicken Salad", 6.0, 450.0),
    (9, "Beef Pho", 5.0, 500.0),
]


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    with TestingSession() as db:
        db.add_all([FoodItem(fid=fid, name=name, price=price, calories=calories) for fid, name, price, calories in FOODS])
        db.commit()
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
