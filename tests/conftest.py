"""
Global test configuration for the signage CMS.

Every test gets a fresh in-memory SQLite database; API tests drive the app through
FastAPI's TestClient with the clock pinned by a dependency override.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from signage_cms.api.deps import get_clock
from signage_cms.db import Database
from signage_cms.main import create_app
from signage_cms.models.customer import Customer
from signage_cms.models.layout import Layout
from signage_cms.models.player import Player
from signage_cms.models.site import Site
from signage_cms.schemas.resolution import PlayerIdentity
from signage_cms.seed import seed


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def tenant(db_session):
    """Two customers, each with one site, one player and one layout."""

    def build(name: str, subdomain: str, zone: str = "UTC"):
        customer = Customer(name=name, subdomain=subdomain)
        db_session.add(customer)
        db_session.flush()
        layout = Layout(customer_id=customer.id, name=f"{name} layout")
        site = Site(customer_id=customer.id, name=f"{name} site", site_code="S1", time_zone=zone)
        db_session.add_all([layout, site])
        db_session.flush()
        player = Player(site_id=site.id, name=f"{name} player", player_code="P1")
        db_session.add(player)
        db_session.flush()
        return SimpleNamespace(customer=customer, layout=layout, site=site, player=player)

    own = build("Acme", "acme")
    other = build("Globex", "globex")
    db_session.commit()
    return SimpleNamespace(own=own, other=other)


@pytest.fixture
def seeded(database):
    return SimpleNamespace(**seed(database))


class FrozenClock:
    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 1, 6, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def client(database, clock):
    app = create_app(database)
    app.dependency_overrides[get_clock] = clock
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def player_identity():
    return PlayerIdentity(player_id=11, site_id=21, customer_id=1)
