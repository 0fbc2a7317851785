"""
Management command to rebuild stock levels from the movement ledger.

Usage:
    python manage.py reconcile_stock_levels
    python manage.py reconcile_stock_levels --tenant acme --dry-run

Rows are locked in (warehouse id, id) order, the same order
apply_movement() locks them in.
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from stockledger.conf import stockledger_settings
from stockledger.exceptions import InvariantViolationError
from stockledger.models import StockLevel

LOCK_ORDER = ('warehouse_id', 'pk')


class Command(BaseCommand):
    """Reconcile stock levels command."""

    help = 'Recalculates stock levels from the movement ledger'

    def add_arguments(self, parser):
        parser.add_argument(
            '--tenant',
            help='Only reconcile this tenant',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report drifted stock levels without fixing them'
        )

    def handle(self, *args, **options):
        qs = StockLevel.objects.all()
        if options['tenant']:
            qs = qs.for_tenant(options['tenant'])

        ids = list(qs.order_by(*LOCK_ORDER).values_list('pk', flat=True))
        batch_size = max(1, stockledger_settings.RECONCILE_BATCH_SIZE)
        commit = not options['dry_run']
        drifted = 0
        invalid = 0

        for start in range(0, len(ids), batch_size):
            with transaction.atomic():
                batch = (
                    StockLevel.objects.select_for_update()
                    .filter(pk__in=ids[start:start + batch_size])
                    .order_by(*LOCK_ORDER)
                )
                for level in batch:
                    try:
                        changed = level.recalculate(commit=commit)
                    except InvariantViolationError as e:
                        invalid += 1
                        self.stderr.write(
                            f"invalid: {level} -> ledger quantity={e.data['quantity']} "
                            f"reserved={e.data['reserved']}"
                        )
                        continue
                    if changed:
                        drifted += 1
                        self.stdout.write(f'drift: {level}')

        if options['dry_run']:
            self.stdout.write(f'{drifted} stock level(s) would be corrected')
        else:
            self.stdout.write(
                self.style.SUCCESS(f'{drifted} stock level(s) corrected')
            )
        if invalid:
            self.stdout.write(
                self.style.WARNING(f'{invalid} stock level(s) left unchanged: ledger replays to invalid values')
            )
