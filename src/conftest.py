"""Shared fixtures for all apps."""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.core.cache import cache
from django.utils import timezone

from accounts.models import FelicityUser
from felicity.celery import app as celery_app


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously.

    This ensures that Celery tasks run immediately in the same process,
    allowing tests to verify their side effects without async complications.
    """
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = True


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Clear the cache before each test so rate limits do not leak between tests."""
    cache.clear()


class FelicityUserFactory:
    """Factory for creating FelicityUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> FelicityUser:
        username = kwargs.pop("username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(10)))
        email = kwargs.pop("email", f"{username}@example.com")
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return FelicityUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> FelicityUser:
        return self.create_user(**kwargs)


@pytest.fixture
def felicity_user_factory() -> FelicityUserFactory:
    return FelicityUserFactory()


@pytest.fixture
def user(felicity_user_factory: FelicityUserFactory) -> FelicityUser:
    """A participant without a participant type."""
    return felicity_user_factory()


@pytest.fixture
def superuser(felicity_user_factory: FelicityUserFactory) -> FelicityUser:
    """A superuser."""
    return felicity_user_factory(is_superuser=True, is_staff=True)


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )
