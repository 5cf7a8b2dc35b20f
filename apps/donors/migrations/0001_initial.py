from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Donor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('org_id', models.CharField(db_index=True, max_length=64)),
                ('donor_id', models.CharField(max_length=32)),
                ('name', models.CharField(max_length=200)),
                ('mobile_masked', models.CharField(blank=True, max_length=20)),
                ('email_masked', models.CharField(blank=True, max_length=254)),
                ('pan_masked', models.CharField(blank=True, max_length=10)),
                ('address', models.JSONField(blank=True, default=dict)),
                ('pan_hash', models.CharField(blank=True, max_length=80)),
                ('email_hash', models.CharField(blank=True, max_length=80)),
                ('phone_e164', models.CharField(blank=True, max_length=16)),
                ('lifetime_total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('last_donation_date', models.DateField(blank=True, null=True)),
                ('donation_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'donors',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['org_id', 'name'], name='donors_org_name_idx')],
                'constraints': [models.UniqueConstraint(fields=('org_id', 'donor_id'), name='uniq_donor_per_org')],
            },
        ),
        migrations.CreateModel(
            name='DonorAlias',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('org_id', models.CharField(max_length=64)),
                ('alias_type', models.CharField(choices=[('PHONE', 'Phone'), ('PAN', 'PAN'), ('EMAIL', 'Email')], max_length=10)),
                ('alias_value', models.CharField(max_length=80)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('donor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='aliases', to='donors.donor')),
            ],
            options={
                'db_table': 'donor_aliases',
                'ordering': ['alias_type'],
                'constraints': [models.UniqueConstraint(fields=('org_id', 'alias_type', 'alias_value'), name='uniq_alias_per_org')],
            },
        ),
    ]
