# outreach/management/commands/ensure_test_users.py
from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from outreach.models import Organization, User

TEST_ORGS = [
    ("org_demo", "Demo Clinic", False),
    ("org_rivvi", "Rivvi", True),
]

TEST_SET = [
    ("member1", User.ROLE_MEMBER, "org_demo"),
    ("admin1", User.ROLE_ADMIN, "org_demo"),
    ("super", User.ROLE_SUPERADMIN, "org_rivvi"),
    ("nobody", User.ROLE_MEMBER, None),
]


class Command(BaseCommand):
    help = "Ensure test organizations and users exist (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="123456")

    def handle(self, *args, **opts):
        if settings.ENV == "prod":
            self.stderr.write(self.style.ERROR("refusing to create test users with ENV=prod"))
            return
        orgs = {}
        for external_id, name, is_super in TEST_ORGS:
            org, _ = Organization.objects.update_or_create(
                external_id=external_id, defaults={"name": name, "is_super_admin": is_super},
            )
            orgs[external_id] = org
        password = make_password(opts["password"])
        for username, role, org_key in TEST_SET:
            User.objects.update_or_create(
                username=username,
                defaults={
                    "role": role,
                    "password": password,
                    "is_active": True,
                    "organization": orgs.get(org_key),
                },
            )
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role}, {org_key or 'no org'})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
