from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ReceiptRange',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('org_id', models.CharField(db_index=True, max_length=64)),
                ('range_id', models.CharField(max_length=8)),
                ('alias', models.CharField(max_length=100)),
                ('year', models.PositiveSmallIntegerField()),
                ('start', models.PositiveIntegerField()),
                ('end', models.PositiveIntegerField()),
                ('next_number', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('active', 'Active'), ('locked', 'Locked'), ('exhausted', 'Exhausted'), ('archived', 'Archived')], default='draft', max_length=10)),
                ('version', models.PositiveIntegerField(default=1)),
                ('created_by', models.CharField(default='system', max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('locked_by', models.CharField(blank=True, max_length=150, null=True)),
                ('locked_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'db_table': 'receipt_ranges',
                'ordering': ['-year', 'alias'],
                'indexes': [models.Index(fields=['org_id', 'year', 'status'], name='ranges_org_year_status_idx')],
            },
        ),
        migrations.AddConstraint(
            model_name='receiptrange',
            constraint=models.UniqueConstraint(fields=('org_id', 'range_id'), name='uniq_range_per_org'),
        ),
        migrations.AddConstraint(
            model_name='receiptrange',
            constraint=models.UniqueConstraint(condition=models.Q(('status', 'active')), fields=('org_id', 'year'), name='uniq_active_range_per_year'),
        ),
    ]
