"""
Pytest configuration and fixtures
"""
from unittest.mock import Mock

import pytest

from storefront import create_app
from storefront.config import TestingConfig
from storefront.ratelimit import InMemoryRateLimiter


class FakeClock:
    """Millisecond clock the tests move by hand"""

    def __init__(self, now=1_700_000_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository():
    """Stand-in for the Mongo enquiry repository"""
    return Mock()


@pytest.fixture
def notifier():
    """Stand-in for the SMTP notifier"""
    return Mock()


@pytest.fixture
def limiter(clock):
    return InMemoryRateLimiter(clock=clock)


@pytest.fixture
def app(limiter, repository, notifier):
    return create_app(TestingConfig, rate_limiter=limiter, repository=repository, notifier=notifier)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def trade_payload():
    return {
        'name': 'Asha Rao',
        'company': 'Rao Foods',
        'email': 'asha@raofoods.in',
        'phone': '+91 98765 43210',
        'country': 'India',
        'role': 'Procurement Head',
        'productInterest': ['California Almonds', 'Walnut Kernels'],
        'quantity': '20 MT',
        'message': 'Please share pricing for a monthly container.',
        'honeypot': '',
    }
