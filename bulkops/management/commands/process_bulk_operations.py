# bulkops/management/commands/process_bulk_operations.py
from __future__ import annotations

from django.core.management.base import BaseCommand

from bulkops.services import pending_operations, process_operation


class Command(BaseCommand):
    help = "Process queued (pending) bulk product operations, oldest first."

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=50,
            help="Maximum number of operations to process in one run (default: 50).",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only list the operations that would be processed.",
        )

    def handle(self, *args, **options):
        limit = int(options.get("limit") or 50)
        dry_run = bool(options.get("dry_run"))

        candidates = list(pending_operations()[:limit])

        if dry_run:
            for op in candidates:
                self.stdout.write(f"[DRY] #{op.pk} {op.type} vendor={op.vendor_id} products={op.product_count}")
            self.stdout.write(f"{len(candidates)} operation(s) would be processed.")
            return

        counts: dict[str, int] = {}
        for op in candidates:
            process_operation(op)
            counts[op.status] = counts.get(op.status, 0) + 1
            self.stdout.write(f"#{op.pk} {op.type}: {op.status} ({op.failed_count} failed)")

        summary = " ".join(f"{k}={v}" for k, v in sorted(counts.items())) or "none"
        self.stdout.write(self.style.SUCCESS(f"Processed {len(candidates)} operation(s): {summary}"))
