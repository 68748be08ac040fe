import apps.core.users.models
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('doc_id', models.CharField(default=apps.core.users.models.new_document_id, editable=False, max_length=32, unique=True)),
                ('college_id', models.CharField(max_length=32, unique=True)),
                ('name', models.CharField(max_length=150)),
                ('email', models.EmailField(max_length=254)),
                ('program', models.CharField(max_length=80)),
                ('branch', models.CharField(max_length=80)),
                ('year', models.PositiveSmallIntegerField(default=1)),
                ('semester', models.PositiveSmallIntegerField(default=1)),
                ('section', models.CharField(blank=True, max_length=4)),
                ('batch', models.CharField(blank=True, max_length=20)),
                ('dob', models.DateField(blank=True, null=True)),
                ('gender', models.CharField(blank=True, choices=[('Male', 'Male'), ('Female', 'Female'), ('Other', 'Other')], max_length=10)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('address', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('Active', 'Active'), ('Pending Approval', 'Pending Approval'), ('Inactive', 'Inactive'), ('Graduated', 'Graduated')], default='Active', max_length=20)),
                ('type', models.CharField(choices=[('Day Scholar', 'Day Scholar'), ('Hosteler', 'Hosteler')], default='Day Scholar', max_length=20)),
                ('emergency_contact_name', models.CharField(blank=True, max_length=120)),
                ('emergency_contact_phone', models.CharField(blank=True, max_length=20)),
                ('emergency_contact_address', models.TextField(blank=True)),
                ('initials', models.CharField(blank=True, max_length=4)),
                ('avatar_url', models.URLField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='student_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['college_id'],
                'indexes': [
                    models.Index(fields=['program', 'branch', 'year', 'section'], name='student_cohort_idx'),
                    models.Index(fields=['email'], name='student_email_idx'),
                    models.Index(fields=['status'], name='student_status_idx'),
                ],
            },
        ),
    ]
