import os
from getpass import getpass

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from src.users.models import User, UserRole, UserStatus


class Command(BaseCommand):
    help = "Create or update an administrator account."

    def add_arguments(self, parser):
        parser.add_argument("--username", dest="username", help="Administrator username")
        parser.add_argument("--password", dest="password", help="Administrator password")
        parser.add_argument("--email", dest="email", default="")
        parser.add_argument("--real-name", dest="real_name", default="")
        parser.add_argument("--department", dest="department", default="")

    @transaction.atomic
    def handle(self, *args, **options):
        username = options.get("username") or os.getenv("ADMIN_USER_NAME")
        password = options.get("password") or os.getenv("ADMIN_USER_PASSWORD")
        email = options.get("email") or os.getenv("ADMIN_USER_EMAIL", "")

        if not username:
            raise CommandError("Provide --username or set ADMIN_USER_NAME.")

        # Interactive prompt when neither args nor env carry a password
        if not password:
            self.stdout.write(self.style.WARNING("No password provided."))
            password = getpass("Enter administrator password: ").strip()
            if not password:
                raise CommandError("Password is required.")

        existing = User.objects.filter(username=username).first()
        if existing:
            existing.is_superuser = True
            existing.is_staff = True
            existing.role = UserRole.ADMIN
            existing.status = UserStatus.ACTIVE
            if email:
                existing.email = email
            existing.set_password(password)
            existing.save()
            self.stdout.write(self.style.SUCCESS(f"Updated existing administrator: {username}"))
            return

        user = User.objects.create_superuser(
            username=username,
            password=password,
            email=email,
            real_name=options.get("real_name") or "",
            department=options.get("department") or "",
        )
        self.stdout.write(self.style.SUCCESS(f"Created administrator: {user.username}"))
