"""
Tests for ledger replay (StockLevel.recalculate and reconcile_stock_levels).
"""

from decimal import Decimal
from io import StringIO
from unittest import mock

import pytest
from django.core.management import call_command

from stockledger import InvariantViolationError, inventory
from stockledger.models import StockLevel


pytestmark = pytest.mark.django_db


@pytest.fixture
def history(main, annex, move):
    move('purchase', 20, main)
    move('sale', 5, main)
    move('reservation', 4, main)
    move('release', 1, main)
    move('transfer', 6, annex, related_warehouse_id=main.pk)
    move('adjustment', 2, annex)
    move('count', 12, main)
    return StockLevel.objects.get(warehouse=main), StockLevel.objects.get(warehouse=annex)


class TestRecalculate:

    def test_ledger_matches_cache(self, history):
        main_level, annex_level = history

        assert main_level.replayed_totals() == (Decimal('12'), Decimal('3'))
        assert annex_level.replayed_totals() == (Decimal('2'), Decimal('0'))
        assert main_level.recalculate() is False
        assert annex_level.recalculate() is False

    def test_fixes_drift(self, history):
        main_level, _ = history
        StockLevel.objects.filter(pk=main_level.pk).update(quantity=Decimal('99'))
        main_level.refresh_from_db()

        assert main_level.recalculate() is True

        main_level.refresh_from_db()
        assert main_level.quantity == Decimal('12')
        assert main_level.reserved_quantity == Decimal('3')

    def test_dry_run_leaves_row(self, history):
        main_level, _ = history
        StockLevel.objects.filter(pk=main_level.pk).update(quantity=Decimal('99'))
        main_level.refresh_from_db()

        assert main_level.recalculate(commit=False) is True

        main_level.refresh_from_db()
        assert main_level.quantity == Decimal('99')

    def test_direct_write_shows_as_drift(self, main):
        level = inventory.create_stock_level('acme', 'SKU-9', main.pk, quantity=10)

        assert level.replayed_totals() == (Decimal('0'), Decimal('0'))
        assert level.recalculate(commit=False) is True


class TestReconcileCommand:

    def test_reports_and_corrects(self, history):
        main_level, annex_level = history
        StockLevel.objects.filter(pk=annex_level.pk).update(quantity=Decimal('7'))

        out = StringIO()
        call_command('reconcile_stock_levels', stdout=out)

        assert '1 stock level(s) corrected' in out.getvalue()
        annex_level.refresh_from_db()
        assert annex_level.quantity == Decimal('2')

    def test_dry_run(self, history):
        _, annex_level = history
        StockLevel.objects.filter(pk=annex_level.pk).update(quantity=Decimal('7'))

        out = StringIO()
        call_command('reconcile_stock_levels', '--dry-run', stdout=out)

        assert 'drift:' in out.getvalue()
        assert '1 stock level(s) would be corrected' in out.getvalue()
        annex_level.refresh_from_db()
        assert annex_level.quantity == Decimal('7')

    def test_tenant_filter(self, history, foreign):
        inventory.create_stock_level('globex', 'SKU-1', foreign.pk, quantity=3)

        out = StringIO()
        call_command('reconcile_stock_levels', '--tenant', 'acme', stdout=out)

        assert '0 stock level(s) corrected' in out.getvalue()

    def test_small_batches(self, history, settings):
        settings.STOCKLEDGER = {**settings.STOCKLEDGER, 'RECONCILE_BATCH_SIZE': 1}
        StockLevel.objects.update(quantity=Decimal('50'))

        out = StringIO()
        call_command('reconcile_stock_levels', stdout=out)

        assert '2 stock level(s) corrected' in out.getvalue()

    def test_locks_in_warehouse_order(self, main, annex, move):
        move('purchase', 1, annex, product_id='FLOUR')
        move('purchase', 1, main, product_id='SUGAR')
        seen = []
        recalculate = StockLevel.recalculate

        def record(level, commit=True):
            seen.append(level.warehouse_id)
            return recalculate(level, commit=commit)

        with mock.patch.object(StockLevel, 'recalculate', autospec=True, side_effect=record):
            call_command('reconcile_stock_levels', stdout=StringIO())

        assert seen == [main.pk, annex.pk]


class TestUnreplayableLedger:
    """Opening rows written outside the ledger can replay to impossible values."""

    @pytest.fixture
    def broken(self, stocked, main, move):
        # qty=10/reserved=2 set directly, then reserve 3: ledger says qty=0, reserved=3
        move('reservation', 3, main)
        stocked.refresh_from_db()
        return stocked

    def test_recalculate_refuses(self, broken):
        with pytest.raises(InvariantViolationError) as exc:
            broken.recalculate()

        assert exc.value.data['quantity'] == Decimal('0')
        assert exc.value.data['reserved'] == Decimal('3')
        broken.refresh_from_db()
        assert broken.quantity == Decimal('10')
        assert broken.reserved_quantity == Decimal('5')

    def test_command_reports_and_continues(self, broken, annex, move):
        move('purchase', 4, annex)
        StockLevel.objects.filter(warehouse=annex).update(quantity=Decimal('9'))

        out, err = StringIO(), StringIO()
        call_command('reconcile_stock_levels', stdout=out, stderr=err)

        assert 'invalid:' in err.getvalue()
        assert '1 stock level(s) corrected' in out.getvalue()
        assert '1 stock level(s) left unchanged' in out.getvalue()
        broken.refresh_from_db()
        assert broken.quantity == Decimal('10')
        assert StockLevel.objects.get(warehouse=annex).quantity == Decimal('4')
