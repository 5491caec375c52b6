# core/management/commands/seed_users.py
import os
import secrets

from django.core.management.base import BaseCommand

from core.models import Role, User
from core.services.auth import hash_password

SEED_SET = [
    # (username, role, display name, password env var)
    ("admin", Role.ADMIN, "Administrador", "SEED_ADMIN_PASSWORD"),
    ("usuario", Role.USER, "Personal Médico", "SEED_USER_PASSWORD"),
]


class Command(BaseCommand):
    help = "Create or reset the initial ADMIN and USER accounts (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--admin-password", help="Password for the ADMIN account")
        parser.add_argument("--user-password", help="Password for the USER account")

    def handle(self, *args, **opts):
        given = {
            Role.ADMIN: opts.get("admin_password"),
            Role.USER: opts.get("user_password"),
        }
        for username, role, name, env_var in SEED_SET:
            password = given[role] or os.getenv(env_var)
            generated = not password
            if generated:
                password = secrets.token_urlsafe(12)

            u, created = User.objects.get_or_create(
                username=username,
                defaults={"role": role, "name": name, "is_active": True},
            )
            u.password = hash_password(password)
            u.role = role
            u.is_active = True
            u.save(update_fields=["password", "role", "is_active"])

            verb = "created" if created else "reset"
            self.stdout.write(self.style.SUCCESS(f"{verb}: {username} ({role})"))
            if generated:
                self.stdout.write(f"  generated password: {password}")
        self.stdout.write(self.style.SUCCESS("Seed users ensured."))
