from django.core.management.base import BaseCommand
from django.utils import timezone

from outreach.services.views_cache import revalidate_path

DEFAULT_PATHS = ['/', '/patients', '/campaigns', '/settings', '/admin/organizations', '/admin/campaigns']


class Command(BaseCommand):
    help = "Invalidate cached views for the given paths and broadcast a WebSocket refresh event."

    def add_arguments(self, parser):
        parser.add_argument("paths", nargs="*", help="view paths, e.g. /patients (default: all top-level pages)")

    def handle(self, *args, **options):
        paths = options["paths"] or DEFAULT_PATHS
        revalidate_path(*paths)
        self.stdout.write(self.style.SUCCESS(f"Revalidated {len(paths)} paths at {timezone.now()}"))
