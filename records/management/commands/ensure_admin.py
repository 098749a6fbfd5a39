# records/management/commands/ensure_admin.py
from django.core.management.base import BaseCommand
from records.models import User


class Command(BaseCommand):
    help = "Ensure an administrator account exists with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("username")
        parser.add_argument("password")
        parser.add_argument("--email", default="")

    def handle(self, *args, **opts):
        username, password, email = opts["username"], opts["password"], opts["email"]
        u, created = User.objects.get_or_create(
            username=username,
            defaults={"role": "admin", "email": email, "is_active": True},
        )
        # password, active flag and role are reset on every run
        u.set_password(password)
        u.role = "admin"
        u.is_active = True
        if email:
            u.email = email
        u.save()
        verb = "created" if created else "updated"
        self.stdout.write(self.style.SUCCESS(f"{verb}: {username} (admin)"))
