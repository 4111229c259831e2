# Generated manually for the levy backend

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

OCCUPANCY_CHOICES = [('open_space', 'Open Space'), ('kiosk', 'Kiosk'), ('shop', 'Shop'), ('warehouse', 'Warehouse')]
FREQUENCY_CHOICES = [('daily', 'Daily'), ('weekly', 'Weekly'), ('bi_weekly', 'Bi-Weekly'), ('monthly', 'Monthly'), ('quarterly', 'Quarterly'), ('half_yearly', 'Half-Yearly'), ('yearly', 'Yearly')]
METHOD_CHOICES = [('cash', 'Cash'), ('bank_transfer', 'Bank Transfer'), ('mobile_money', 'Mobile Money'), ('assist_center', 'Assist Center')]
STATUS_CHOICES = [('pending', 'Pending'), ('paid', 'Paid'), ('failed', 'Failed'), ('unpaid', 'Unpaid')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('markets', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='LevySetup',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('occupancy_type', models.CharField(blank=True, choices=OCCUPANCY_CHOICES, max_length=20, null=True)),
                ('frequency', models.CharField(choices=FREQUENCY_CHOICES, max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[MinValueValidator(Decimal('0.01'))])),
                ('is_active', models.BooleanField(default=True)),
                ('deactivated_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('chairman', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='levy_setups', to='markets.chairman')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='levy_setups_created', to=settings.AUTH_USER_MODEL)),
                ('market', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='levy_setups', to='markets.market')),
            ],
            options={
                'db_table': 'levy_setups',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['market', 'is_active', 'occupancy_type'], name='levy_setups_active_idx'),
                    models.Index(fields=['market', 'frequency', 'created_at'], name='levy_setups_history_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('market', 'occupancy_type', 'frequency'), name='unique_active_levy_setup'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LevyPayment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[MinValueValidator(Decimal('0.01'))])),
                ('has_incentive', models.BooleanField(default=False)),
                ('incentive_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('occupancy_type', models.CharField(blank=True, choices=OCCUPANCY_CHOICES, max_length=20, null=True)),
                ('period', models.CharField(choices=FREQUENCY_CHOICES, max_length=20)),
                ('payment_method', models.CharField(choices=METHOD_CHOICES, default='cash', max_length=20)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='pending', max_length=20)),
                ('transaction_reference', models.CharField(max_length=64, unique=True)),
                ('payment_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('due_date', models.DateTimeField(blank=True, null=True)),
                ('collection_date', models.DateTimeField(blank=True, null=True)),
                ('notes', models.CharField(blank=True, max_length=500)),
                ('qr_code_scanned', models.BooleanField(default=False)),
                ('is_setup_record', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('failure_reason', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('chairman', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='levy_payments', to='markets.chairman')),
                ('confirmed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='confirmed_levy_payments', to=settings.AUTH_USER_MODEL)),
                ('good_boy', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='levy_payments', to='markets.goodboy')),
                ('levy_setup', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payments', to='levies.levysetup')),
                ('market', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='levy_payments', to='markets.market')),
                ('trader', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='levy_payments', to='markets.trader')),
            ],
            options={
                'db_table': 'levy_payments',
                'ordering': ['-payment_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['market', 'status', 'payment_date'], name='levy_pay_market_status_idx'),
                    models.Index(fields=['trader', 'payment_date'], name='levy_pay_trader_date_idx'),
                    models.Index(fields=['good_boy', 'payment_date'], name='levy_pay_goodboy_date_idx'),
                    models.Index(fields=['is_setup_record', 'status'], name='levy_pay_setup_status_idx'),
                ],
            },
        ),
    ]
