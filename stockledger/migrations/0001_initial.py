"""
Initial migration for Stockledger models.
"""

from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Stockledger models: Warehouse, StockLevel, StockMovement."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Warehouse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.CharField(db_index=True, max_length=64, verbose_name='Tenant')),
                ('code', models.CharField(help_text='Unique per tenant (e.g. MAIN, EU-01)', max_length=50, verbose_name='Code')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('description', models.TextField(blank=True, default='', verbose_name='Description')),
                ('address', models.CharField(blank=True, default='', max_length=255, verbose_name='Address')),
                ('city', models.CharField(blank=True, default='', max_length=100, verbose_name='City')),
                ('state', models.CharField(blank=True, default='', max_length=100, verbose_name='State')),
                ('country', models.CharField(blank=True, default='', max_length=100, verbose_name='Country')),
                ('postal_code', models.CharField(blank=True, default='', max_length=20, verbose_name='Postal code')),
                ('phone', models.CharField(blank=True, default='', max_length=50, verbose_name='Phone')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='Email')),
                ('manager_name', models.CharField(blank=True, default='', max_length=100, verbose_name='Manager')),
                ('is_active', models.BooleanField(default=True, help_text='Inactive warehouses reject new movements.', verbose_name='Active')),
                ('is_primary', models.BooleanField(default=False, verbose_name='Primary')),
                ('total_capacity', models.DecimalField(blank=True, decimal_places=3, max_digits=14, null=True, verbose_name='Total capacity')),
                ('current_usage', models.DecimalField(blank=True, decimal_places=3, max_digits=14, null=True, verbose_name='Current usage')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Warehouse',
                'verbose_name_plural': 'Warehouses',
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant_id', 'code'), name='unique_warehouse_code_per_tenant'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockLevel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.CharField(db_index=True, max_length=64, verbose_name='Tenant')),
                ('product_id', models.CharField(max_length=64, verbose_name='Product ID')),
                ('quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='On hand')),
                ('reserved_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='Reserved')),
                ('minimum_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), help_text='Available at or below this value is low stock.', max_digits=12, verbose_name='Reorder point')),
                ('maximum_quantity', models.DecimalField(blank=True, decimal_places=3, max_digits=12, null=True, verbose_name='Overstock ceiling')),
                ('aisle', models.CharField(blank=True, default='', max_length=20, verbose_name='Aisle')),
                ('rack', models.CharField(blank=True, default='', max_length=20, verbose_name='Rack')),
                ('shelf', models.CharField(blank=True, default='', max_length=20, verbose_name='Shelf')),
                ('bin', models.CharField(blank=True, default='', max_length=20, verbose_name='Bin')),
                ('last_counted_at', models.DateTimeField(blank=True, null=True, verbose_name='Last counted at')),
                ('last_counted_quantity', models.DecimalField(blank=True, decimal_places=3, max_digits=12, null=True, verbose_name='Last counted quantity')),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_levels', to='stockledger.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Stock level',
                'verbose_name_plural': 'Stock levels',
                'indexes': [
                    models.Index(fields=['tenant_id', 'product_id'], name='stocklevel_tenant_product_idx'),
                    models.Index(fields=['tenant_id', 'warehouse'], name='stocklevel_tenant_wh_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant_id', 'product_id', 'warehouse'), name='unique_stock_level_per_product_warehouse'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='stock_level_quantity_non_negative'),
                    models.CheckConstraint(condition=models.Q(('reserved_quantity__gte', 0)), name='stock_level_reserved_non_negative'),
                    models.CheckConstraint(condition=models.Q(('reserved_quantity__lte', models.F('quantity'))), name='stock_level_reserved_within_quantity'),
                    models.CheckConstraint(condition=models.Q(('minimum_quantity__gte', 0)), name='stock_level_minimum_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.CharField(db_index=True, max_length=64, verbose_name='Tenant')),
                ('product_id', models.CharField(max_length=64, verbose_name='Product ID')),
                ('movement_type', models.CharField(choices=[('purchase', 'Purchase'), ('sale', 'Sale'), ('transfer_in', 'Transfer in'), ('transfer_out', 'Transfer out'), ('adjustment', 'Adjustment'), ('return', 'Return'), ('production', 'Production'), ('damage', 'Damage'), ('count', 'Physical count'), ('reservation', 'Reservation'), ('release', 'Release')], db_index=True, max_length=20, verbose_name='Type')),
                ('quantity', models.DecimalField(decimal_places=3, help_text='Magnitude of the event, never negative.', max_digits=12, verbose_name='Quantity')),
                ('reference_type', models.CharField(blank=True, default='', max_length=50, verbose_name='Reference type')),
                ('reference_id', models.CharField(blank=True, default='', max_length=64, verbose_name='Reference ID')),
                ('reference_number', models.CharField(blank=True, default='', max_length=100, verbose_name='Reference number')),
                ('unit_cost', models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True, verbose_name='Unit cost')),
                ('total_cost', models.DecimalField(blank=True, decimal_places=4, max_digits=16, null=True, verbose_name='Total cost')),
                ('quantity_before', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity before')),
                ('quantity_after', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity after')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('idempotency_key', models.CharField(blank=True, default='', help_text='Caller-supplied key; re-sending it returns the original movement.', max_length=100, verbose_name='Idempotency key')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Created by')),
                ('related_warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockledger.warehouse', verbose_name='Transfer counterpart')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockledger.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Stock movement',
                'verbose_name_plural': 'Stock movements',
                'ordering': ['created_at', 'pk'],
                'indexes': [
                    models.Index(fields=['tenant_id', 'product_id', 'warehouse'], name='movement_tenant_product_wh_idx'),
                    models.Index(fields=['tenant_id', 'created_at'], name='movement_tenant_created_idx'),
                    models.Index(fields=['reference_type', 'reference_id'], name='movement_reference_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('idempotency_key', ''), _negated=True), fields=('tenant_id', 'idempotency_key'), name='unique_movement_idempotency_key'),
                ],
            },
        ),
    ]
