# seo/management/commands/cleanup_redirects.py
from __future__ import annotations

from django.core.management.base import BaseCommand

from seo.services import cleanup, fix_chains


class Command(BaseCommand):
    help = "Delete expired (and optionally inactive/unused) URL redirects; optionally flatten redirect chains."

    def add_arguments(self, parser):
        parser.add_argument("--inactive", action="store_true", help="Also delete inactive redirects.")
        parser.add_argument(
            "--unused",
            action="store_true",
            help="Also delete redirects with fewer than 10 hits not used within --unused-days.",
        )
        parser.add_argument("--unused-days", type=int, default=365, help="Idle window for --unused (default: 365).")
        parser.add_argument("--keep-expired", action="store_true", help="Do not delete expired redirects.")
        parser.add_argument("--fix-chains", action="store_true", help="Point chained redirects at their final URL.")

    def handle(self, *args, **options):
        deleted = cleanup(
            delete_inactive=bool(options.get("inactive")),
            delete_unused=bool(options.get("unused")),
            unused_days=int(options.get("unused_days") or 365),
            delete_expired=not options.get("keep_expired"),
        )
        self.stdout.write(f"Deleted {deleted} redirect(s).")

        if options.get("fix_chains"):
            fixed = fix_chains()
            self.stdout.write(f"Fixed {fixed} redirect chain(s).")

        self.stdout.write(self.style.SUCCESS("Redirect cleanup done."))
