# ops_core/visits/management/commands/mark_missed_visits.py
from __future__ import annotations

from uuid import UUID

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from ops_core.visits.services import VisitService


class Command(BaseCommand):
    help = "Mark planned visits dated before today (or --as-of) as missed. Meant for a daily scheduled job."

    def add_arguments(self, parser):
        parser.add_argument("--tenant-id", type=str, default=None, help="Optional tenant UUID filter.")
        parser.add_argument("--as-of", type=str, default=None, help="Reference day (YYYY-MM-DD). Defaults to today.")

    def handle(self, *args, **opts):
        tenant_id = None
        if opts["tenant_id"]:
            try:
                tenant_id = UUID(opts["tenant_id"])
            except ValueError:
                raise CommandError("--tenant-id must be a UUID.")

        as_of = None
        if opts["as_of"]:
            try:
                as_of = parse_date(opts["as_of"])
            except ValueError:
                as_of = None
            if as_of is None:
                raise CommandError("--as-of must be YYYY-MM-DD.")

        try:
            count = VisitService.mark_missed(tenant_id=tenant_id, as_of=as_of)
        except ValidationError as e:
            raise CommandError("; ".join(e.messages))
        self.stdout.write(self.style.SUCCESS(f"Marked as missed: {count}"))
