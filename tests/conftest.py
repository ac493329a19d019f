import datetime

import pytest
from django.contrib.auth import get_user_model

from apps.clients.services import create_consumer


@pytest.fixture
def case_manager(db):
    return get_user_model().objects.create_user(
        username="casey", password="testpass123", email="casey@agency.example",
    )


@pytest.fixture
def other_case_manager(db):
    return get_user_model().objects.create_user(
        username="other", password="testpass123", email="other@agency.example",
    )


@pytest.fixture
def make_consumer(case_manager):
    """Factory for consumers owned by ``case_manager`` unless told otherwise."""

    def _make(name="Jane Doe", annual=datetime.date(2025, 3, 15), owner=None, **fields):
        consumer = create_consumer(owner or case_manager, name=name, annual_assessment=annual)
        if fields:
            for field, value in fields.items():
                setattr(consumer, field, value)
            consumer.save()
        return consumer

    return _make
