from django.core.management.base import BaseCommand
from django.db import transaction

from src.seals.models import Seal, SealShape, SealStatus, SealType
from src.users.models import User, UserRole

DEMO_USERS = [
    # username, password, real_name, department, position, role
    ("admin", "admin123", "System Administrator", "IT", "Administrator", UserRole.ADMIN),
    ("keeper", "keeper123", "Office Manager", "Administration", "Manager", UserRole.USER),
    ("finance_keeper", "finance123", "Finance Manager", "Finance", "Manager", UserRole.USER),
    ("test_user", "test123", "Test User", "Administration", "Clerk", UserRole.USER),
]

DEMO_SEALS = [
    # name, type, keeper username, owner department, location
    ("Company seal", SealType.OFFICIAL, "keeper", "General Management", "Administration safe"),
    ("Finance seal", SealType.FINANCE, "finance_keeper", "Finance", "Finance safe"),
    ("Contract seal", SealType.CONTRACT, "keeper", "Legal", "Administration safe"),
]


class Command(BaseCommand):
    help = "Seed demo users and seals (idempotent)."

    @transaction.atomic
    def handle(self, *args, **options):
        users = {}
        for username, password, real_name, department, position, role in DEMO_USERS:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(
                    username=username,
                    password=password,
                    real_name=real_name,
                    email=f"{username}@example.com",
                    department=department,
                    position=position,
                    role=role,
                )
                self.stdout.write(f"Created user {username}/{password}")
            users[username] = user

        for name, seal_type, keeper, owner_department, location in DEMO_SEALS:
            if Seal.objects.filter(name=name).exists():
                continue
            Seal.objects.create(
                name=name,
                type=seal_type,
                shape=SealShape.ROUND,
                status=SealStatus.IN_USE,
                owner_department=owner_department,
                keeper=users[keeper],
                keeper_department=users[keeper].department,
                location=location,
            )
            self.stdout.write(f"Created seal {name}")

        self.stdout.write(self.style.SUCCESS("Demo data ready"))
