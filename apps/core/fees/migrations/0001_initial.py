import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('students', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='FeeLedger',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('total_fees', models.DecimalField(decimal_places=2, max_digits=12)),
                ('amount_paid', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('due_date', models.DateField()),
                ('student_name', models.CharField(max_length=150)),
                ('college_id', models.CharField(max_length=32)),
                ('program', models.CharField(blank=True, max_length=80)),
                ('branch', models.CharField(blank=True, max_length=80)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('student', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='fee_ledger', to='students.student')),
            ],
            options={
                'ordering': ['college_id'],
            },
        ),
        migrations.CreateModel(
            name='FeePayment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('reference', models.CharField(blank=True, max_length=120)),
                ('date', models.DateTimeField(default=django.utils.timezone.now)),
                ('recorded_by', models.CharField(default='admin', max_length=60)),
                ('notes', models.CharField(blank=True, max_length=255)),
                ('status', models.CharField(choices=[('Success', 'Success'), ('Pending Confirmation', 'Pending Confirmation'), ('Rejected', 'Rejected')], default='Success', max_length=30)),
                ('ledger', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='fees.feeledger')),
            ],
            options={
                'ordering': ['date', 'id'],
            },
        ),
    ]
