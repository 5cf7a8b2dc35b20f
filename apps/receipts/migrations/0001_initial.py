import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('donors', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Donation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('org_id', models.CharField(max_length=64)),
                ('receipt_no', models.CharField(max_length=16)),
                ('range_id', models.CharField(max_length=8)),
                ('date', models.DateField()),
                ('donor_name', models.CharField(max_length=200)),
                ('donor_mobile', models.CharField(blank=True, max_length=16)),
                ('donor_email', models.CharField(blank=True, max_length=254)),
                ('donor_pan_masked', models.CharField(blank=True, max_length=10)),
                ('donor_address', models.JSONField(blank=True, default=dict)),
                ('breakup', models.JSONField()),
                ('payment_mode', models.CharField(choices=[('CASH', 'Cash'), ('UPI', 'UPI'), ('CHEQUE', 'Cheque'), ('NEFT', 'NEFT'), ('RTGS', 'RTGS'), ('CARD', 'Card'), ('ONLINE', 'Online')], max_length=10)),
                ('payment_ref', models.CharField(blank=True, max_length=100)),
                ('payment_bank', models.CharField(blank=True, max_length=100)),
                ('eligible_80g', models.BooleanField(default=True)),
                ('total', models.DecimalField(decimal_places=2, max_digits=12)),
                ('created_by', models.CharField(default='system', max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('donor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='donations', to='donors.donor')),
            ],
            options={
                'db_table': 'donations',
                'ordering': ['-date', '-receipt_no'],
                'indexes': [
                    models.Index(fields=['org_id', 'donor', 'date', 'receipt_no'], name='donations_by_donor_idx'),
                    models.Index(fields=['org_id', 'date', 'receipt_no'], name='donations_by_date_idx'),
                    models.Index(fields=['org_id', 'range_id'], name='donations_by_range_idx'),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name='donation',
            constraint=models.UniqueConstraint(fields=('org_id', 'receipt_no'), name='uniq_receipt_per_org'),
        ),
    ]
