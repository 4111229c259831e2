# Generated manually for the levy backend

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion

OCCUPANCY_CHOICES = [('open_space', 'Open Space'), ('kiosk', 'Kiosk'), ('shop', 'Shop'), ('warehouse', 'Warehouse')]
FREQUENCY_CHOICES = [('daily', 'Daily'), ('weekly', 'Weekly'), ('bi_weekly', 'Bi-Weekly'), ('monthly', 'Monthly'), ('quarterly', 'Quarterly'), ('half_yearly', 'Half-Yearly'), ('yearly', 'Yearly')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='LocalGovernment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=150, unique=True)),
                ('state', models.CharField(blank=True, max_length=100)),
                ('code', models.CharField(blank=True, max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'local_governments',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Chairman',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(blank=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('local_government', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='chairmen', to='markets.localgovernment')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='chairman_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'chairmen',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Market',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('description', models.TextField(blank=True)),
                ('capacity', models.PositiveIntegerField(default=0)),
                ('total_revenue', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_traders', models.PositiveIntegerField(default=0)),
                ('compliant_traders', models.PositiveIntegerField(default=0)),
                ('non_compliant_traders', models.PositiveIntegerField(default=0)),
                ('compliance_rate', models.DecimalField(decimal_places=1, default=Decimal('0.0'), max_digits=5)),
                ('snapshot_refreshed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('chairman', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='market', to='markets.chairman')),
                ('local_government', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='markets', to='markets.localgovernment')),
            ],
            options={
                'db_table': 'markets',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['name'], name='markets_name_idx'),
                    models.Index(fields=['local_government', 'name'], name='markets_lga_name_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('local_government', 'name'), name='unique_market_name_per_lga'),
                ],
            },
        ),
        migrations.CreateModel(
            name='MarketSection',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('market', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sections', to='markets.market')),
            ],
            options={
                'db_table': 'market_sections',
                'ordering': ['name'],
                'unique_together': {('market', 'name')},
            },
        ),
        migrations.CreateModel(
            name='Caretaker',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('market', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='caretakers', to='markets.market')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='caretaker_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'caretakers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['market', 'created_at'], name='caretakers_market_created_idx'),
                ],
            },
        ),
        migrations.AddField(
            model_name='market',
            name='caretaker',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='lead_markets', to='markets.caretaker'),
        ),
        migrations.CreateModel(
            name='GoodBoy',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('caretaker', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='good_boys', to='markets.caretaker')),
                ('market', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='good_boys', to='markets.market')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='goodboy_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'good_boys',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Trader',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('trader_name', models.CharField(max_length=150)),
                ('business_name', models.CharField(max_length=200)),
                ('business_type', models.CharField(blank=True, max_length=100)),
                ('tin', models.CharField(max_length=20, unique=True)),
                ('occupancy_type', models.CharField(choices=OCCUPANCY_CHOICES, default='open_space', max_length=20)),
                ('levy_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[MinValueValidator(Decimal('0.01'))])),
                ('levy_frequency', models.CharField(blank=True, choices=FREQUENCY_CHOICES, max_length=20, null=True)),
                ('qr_code', models.CharField(blank=True, db_index=True, max_length=64)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('caretaker', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='traders', to='markets.caretaker')),
                ('market', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='traders', to='markets.market')),
                ('section', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='traders', to='markets.marketsection')),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='trader_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'traders',
                'ordering': ['business_name'],
                'indexes': [
                    models.Index(fields=['market', 'occupancy_type'], name='traders_market_occupancy_idx'),
                    models.Index(fields=['market', 'created_at'], name='traders_market_created_idx'),
                    models.Index(fields=['caretaker'], name='traders_caretaker_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(models.Q(('levy_amount__isnull', True), ('levy_frequency__isnull', True)), models.Q(('levy_amount__isnull', False), ('levy_frequency__isnull', False)), _connector='OR'),
                        name='trader_levy_override_complete',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='TraderBuildingType',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('building_type', models.CharField(choices=OCCUPANCY_CHOICES, max_length=20)),
                ('count', models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])),
                ('trader', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='building_types', to='markets.trader')),
            ],
            options={
                'db_table': 'trader_building_types',
                'unique_together': {('trader', 'building_type')},
            },
        ),
    ]
