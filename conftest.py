import itertools

import pytest
from django.test import Client
from ninja_jwt.tokens import AccessToken

from src.applications import services as application_services
from src.applications.models import ApplicationKind
from src.seals.models import Seal, SealShape, SealStatus, SealType
from src.users.models import User, UserRole


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(username=None, *, role=UserRole.USER, department="Administration", **extra):
        username = username or f"user{next(counter)}"
        return User.objects.create_user(
            username=username,
            password="pass-1234",
            email=extra.pop("email", f"{username}@example.com"),
            real_name=extra.pop("real_name", username.title()),
            department=department,
            role=role,
            **extra,
        )

    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user("admin", role=UserRole.ADMIN, department="IT")


@pytest.fixture
def alice(make_user):
    """Keeper of the company seal"""
    return make_user("alice", department="Administration")


@pytest.fixture
def bob(make_user):
    """Regular applicant"""
    return make_user("bob", department="Sales")


@pytest.fixture
def carol(make_user):
    """Neither keeper nor admin"""
    return make_user("carol", department="Sales")


@pytest.fixture
def make_seal(db):
    def _make(*, keeper, name="Company seal", status=SealStatus.IN_USE, seal_type=SealType.OFFICIAL):
        return Seal.objects.create(
            name=name,
            type=seal_type,
            shape=SealShape.ROUND,
            status=status,
            owner_department="General Management",
            keeper_department=keeper.department,
            keeper=keeper,
        )

    return _make


@pytest.fixture
def seal(make_seal, alice):
    return make_seal(keeper=alice)


@pytest.fixture
def submit_usage():
    def _submit(applicant, seal, **kw):
        kw.setdefault("purpose", "Sign the supplier contract")
        return application_services.application_submit(
            applicant=applicant,
            kind=ApplicationKind.USAGE,
            seal_id=seal.id,
            **kw,
        )

    return _submit


@pytest.fixture
def submit_creation():
    def _submit(applicant, keeper, **kw):
        kw.setdefault("purpose", "New seal for the HR department")
        kw.setdefault("seal_name", "HR seal")
        kw.setdefault("seal_type", SealType.HR)
        kw.setdefault("seal_shape", SealShape.OVAL)
        return application_services.application_submit(
            applicant=applicant,
            kind=ApplicationKind.CREATION,
            proposed_keeper_id=keeper.id,
            **kw,
        )

    return _submit


@pytest.fixture
def client_for(db):
    def _client(user) -> Client:
        return Client(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")

    return _client
