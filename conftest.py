import pytest


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    from django.core.cache import cache

    # throttle history lives in the cache and would leak between tests
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    from records.models import User
    return User.objects.create_user(username='admin1', password='P@ssw0rd1', email='admin1@example.com')


@pytest.fixture
def admin_client(admin_user):
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def store(db):
    from records.services.store import RecordStore
    return RecordStore()
