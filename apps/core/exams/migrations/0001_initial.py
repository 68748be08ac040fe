import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('academics', '0001_initial'),
        ('students', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ExamSchedule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('exam_session_name', models.CharField(max_length=120)),
                ('course_code', models.CharField(max_length=20)),
                ('course_name', models.CharField(max_length=150)),
                ('program', models.CharField(max_length=80)),
                ('branch', models.CharField(max_length=80)),
                ('year', models.PositiveSmallIntegerField()),
                ('semester', models.PositiveSmallIntegerField()),
                ('date', models.DateField(blank=True, null=True)),
                ('start_time', models.TimeField(blank=True, null=True)),
                ('end_time', models.TimeField(blank=True, null=True)),
                ('room', models.CharField(blank=True, max_length=60)),
                ('status', models.CharField(choices=[('Scheduled', 'Scheduled'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled')], default='Scheduled', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='exams', to='academics.course')),
            ],
            options={
                'ordering': ['-date', 'start_time', 'id'],
                'indexes': [
                    models.Index(fields=['program', 'branch', 'year', 'semester'], name='exam_cohort_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='HallTicket',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('semester', models.PositiveSmallIntegerField()),
                ('exam_session_name', models.CharField(max_length=120)),
                ('college_id', models.CharField(max_length=32)),
                ('student_name', models.CharField(max_length=150)),
                ('program', models.CharField(max_length=80)),
                ('branch', models.CharField(max_length=80)),
                ('year', models.PositiveSmallIntegerField()),
                ('exams', models.JSONField(blank=True, default=list)),
                ('min_attendance', models.DecimalField(decimal_places=2, default=Decimal('75.00'), max_digits=5)),
                ('max_dues', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('generated_at', models.DateTimeField(auto_now=True)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='hall_tickets', to='students.student')),
            ],
            options={
                'ordering': ['-generated_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'semester'), name='unique_hall_ticket_per_semester'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Mark',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('semester', models.PositiveSmallIntegerField()),
                ('internal_marks', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('external_marks', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('total_marks', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('grade', models.CharField(max_length=5)),
                ('credits', models.PositiveSmallIntegerField(default=3)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('college_class', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='marks', to='academics.collegeclass')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='marks', to='academics.course')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_marks', to=settings.AUTH_USER_MODEL)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='marks', to='students.student')),
            ],
            options={
                'ordering': ['semester', 'course__course_id'],
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'course'), name='unique_mark_per_student_course'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Backlog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('semester', models.PositiveSmallIntegerField()),
                ('status', models.CharField(choices=[('Active', 'Active'), ('Cleared', 'Cleared')], default='Active', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('cleared_at', models.DateTimeField(blank=True, null=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='backlogs', to='academics.course')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='backlogs', to='students.student')),
            ],
            options={
                'ordering': ['semester', 'course__course_id'],
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'course'), name='unique_backlog_per_student_course'),
                ],
            },
        ),
    ]
