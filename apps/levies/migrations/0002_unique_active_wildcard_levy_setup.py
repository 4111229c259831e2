# Generated manually for the levy backend

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('levies', '0001_initial'),
    ]

    operations = [
        migrations.AddConstraint(
            model_name='levysetup',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_active', True), ('occupancy_type__isnull', True)),
                fields=('market', 'frequency'),
                name='unique_active_wildcard_levy_setup',
            ),
        ),
    ]
