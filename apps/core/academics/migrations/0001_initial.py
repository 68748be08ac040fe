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
            name='Course',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('course_id', models.CharField(max_length=20, unique=True)),
                ('name', models.CharField(max_length=150)),
                ('program', models.CharField(max_length=80)),
                ('branch', models.CharField(max_length=80)),
                ('semester', models.PositiveSmallIntegerField()),
                ('credits', models.PositiveSmallIntegerField(default=3)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['program', 'branch', 'semester', 'course_id'],
                'indexes': [
                    models.Index(fields=['program', 'branch', 'semester'], name='course_cohort_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CollegeClass',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('program', models.CharField(max_length=80)),
                ('branch', models.CharField(max_length=80)),
                ('section', models.CharField(max_length=4)),
                ('year', models.PositiveSmallIntegerField()),
                ('semester', models.PositiveSmallIntegerField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='classes', to='academics.course')),
                ('students', models.ManyToManyField(blank=True, related_name='enrolled_classes', to=settings.AUTH_USER_MODEL)),
                ('teacher', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='teaching_classes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'classes',
                'ordering': ['program', 'branch', 'year', 'section', 'course__course_id'],
                'indexes': [
                    models.Index(fields=['program', 'branch', 'year', 'section'], name='class_cohort_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('program', 'year', 'semester', 'section', 'course'), name='unique_class_per_course_section'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Material',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('url', models.URLField(max_length=500)),
                ('material_type', models.CharField(choices=[('Notes', 'Notes'), ('Slides', 'Slides'), ('Video', 'Video'), ('Assignment', 'Assignment'), ('Other', 'Other')], default='Notes', max_length=20)),
                ('upload_date', models.DateTimeField(auto_now_add=True)),
                ('college_class', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='materials', to='academics.collegeclass')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='materials', to='academics.course')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='uploaded_materials', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-upload_date', '-id'],
            },
        ),
    ]
