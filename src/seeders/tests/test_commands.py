import pytest
from django.core.management import CommandError, call_command

from src.seals.models import Seal
from src.users.models import User, UserRole

pytestmark = pytest.mark.django_db


def test_seed_demo_is_idempotent():
    call_command("seed_demo")
    call_command("seed_demo")

    assert Seal.objects.count() == 3
    assert User.objects.get(username="admin").role == UserRole.ADMIN
    assert Seal.objects.get(name="Finance seal").keeper.username == "finance_keeper"


def test_superuser_promotes_existing_user(bob):
    call_command("superuser", username="bob", password="new-pass-1")

    bob.refresh_from_db()
    assert bob.role == UserRole.ADMIN
    assert bob.check_password("new-pass-1")


def test_superuser_requires_username(monkeypatch):
    monkeypatch.delenv("ADMIN_USER_NAME", raising=False)
    with pytest.raises(CommandError):
        call_command("superuser", password="x")
