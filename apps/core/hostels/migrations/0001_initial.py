import apps.core.hostels.models
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('students', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Hostel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120, unique=True)),
                ('type', models.CharField(choices=[('Boys', 'Boys'), ('Girls', 'Girls'), ('Co-ed', 'Co-ed')], default='Boys', max_length=10)),
                ('status', models.CharField(choices=[('Operational', 'Operational'), ('Under Maintenance', 'Under Maintenance'), ('Closed', 'Closed')], default='Operational', max_length=20)),
                ('warden_name', models.CharField(blank=True, max_length=120)),
                ('warden_contact', models.CharField(blank=True, max_length=20)),
                ('warden_email', models.EmailField(blank=True, max_length=254)),
                ('warden_office_location', models.CharField(blank=True, max_length=120)),
                ('amenities', models.JSONField(blank=True, default=apps.core.hostels.models.default_amenities)),
                ('rules_highlight', models.JSONField(blank=True, default=apps.core.hostels.models.default_rules)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Room',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('room_number', models.CharField(max_length=20)),
                ('capacity', models.PositiveSmallIntegerField(default=2)),
                ('room_type', models.CharField(blank=True, max_length=30)),
                ('floor', models.SmallIntegerField(blank=True, null=True)),
                ('hostel', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rooms', to='hostels.hostel')),
            ],
            options={
                'ordering': ['hostel', 'room_number'],
                'constraints': [
                    models.UniqueConstraint(fields=('hostel', 'room_number'), name='unique_room_number_per_hostel'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RoomResident',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('student_name', models.CharField(max_length=150)),
                ('allocated_at', models.DateTimeField(auto_now_add=True)),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='residents', to='hostels.room')),
                ('student', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='residency', to='students.student')),
            ],
            options={
                'ordering': ['room', 'allocated_at'],
            },
        ),
        migrations.CreateModel(
            name='Complaint',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('student_name', models.CharField(max_length=150)),
                ('college_id', models.CharField(blank=True, max_length=32)),
                ('room_number', models.CharField(blank=True, max_length=20)),
                ('issue', models.TextField()),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('In Progress', 'In Progress'), ('Resolved', 'Resolved')], default='Pending', max_length=20)),
                ('date', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('hostel', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='complaints', to='hostels.hostel')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='hostel_complaints', to='students.student')),
            ],
            options={
                'ordering': ['-date', '-id'],
            },
        ),
    ]
