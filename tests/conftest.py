"""Shared fixtures for marketplace tests."""

import pytest

from app import create_app
from config import TestingConfig
from services.marketplace import Marketplace


CLIENT_PROFILE = {
    "username": "alice",
    "password": "alice-pw",
    "name": "Alice Client",
    "role": "client",
    "email": "alice@example.com",
    "phone": "555-0100",
}

FREELANCER_PROFILE = {
    "username": "bob",
    "password": "bob-pw",
    "name": "Bob Builder",
    "role": "freelancer",
    "email": "bob@example.com",
    "phone": "555-0101",
    "specialization": "Web Development",
    "rating": 4.5,
}

SECOND_FREELANCER_PROFILE = {
    "username": "carol",
    "password": "carol-pw",
    "name": "Carol Writer",
    "role": "freelancer",
    "email": "carol@example.com",
    "specialization": "Content Writing",
    "rating": 4.8,
}


@pytest.fixture
def market():
    """In-memory marketplace with no users."""
    return Marketplace.create(data_dir=None, retry_delay_seconds=0.0)


@pytest.fixture
def populated_market(market):
    """Marketplace with client alice and freelancers bob and carol."""
    market.register_user(dict(CLIENT_PROFILE))
    market.register_user(dict(FREELANCER_PROFILE))
    market.register_user(dict(SECOND_FREELANCER_PROFILE))
    return market


@pytest.fixture
def app():
    """Flask app using the in-memory testing configuration."""
    return create_app(TestingConfig)


@pytest.fixture
def http(app):
    """Flask test client."""
    return app.test_client()
