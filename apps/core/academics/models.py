from django.conf import settings
from django.db import models

from apps.core.utils.managers import CohortManager


DAY_CHOICES = (
    ('Monday', 'Monday'),
    ('Tuesday', 'Tuesday'),
    ('Wednesday', 'Wednesday'),
    ('Thursday', 'Thursday'),
    ('Friday', 'Friday'),
    ('Saturday', 'Saturday'),
)


class Course(models.Model):
    course_id = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=150)
    program = models.CharField(max_length=80)
    branch = models.CharField(max_length=80)
    semester = models.PositiveSmallIntegerField()
    credits = models.PositiveSmallIntegerField(default=3)
    description = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CohortManager()

    class Meta:
        ordering = ['program', 'branch', 'semester', 'course_id']
        indexes = [
            models.Index(fields=['program', 'branch', 'semester'], name='course_cohort_idx'),
        ]

    def __str__(self):
        return f"{self.course_id} - {self.name}"


class CollegeClass(models.Model):
    """A course taught to one section. ``students`` is a roster snapshot, refreshed explicitly."""

    program = models.CharField(max_length=80)
    branch = models.CharField(max_length=80)
    section = models.CharField(max_length=4)
    year = models.PositiveSmallIntegerField()
    semester = models.PositiveSmallIntegerField()
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name='classes')
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='teaching_classes',
    )
    students = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name='enrolled_classes',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CohortManager()

    class Meta:
        ordering = ['program', 'branch', 'year', 'section', 'course__course_id']
        verbose_name_plural = 'classes'
        constraints = [
            models.UniqueConstraint(
                fields=['program', 'year', 'semester', 'section', 'course'],
                name='unique_class_per_course_section',
            ),
        ]
        indexes = [
            models.Index(fields=['program', 'branch', 'year', 'section'], name='class_cohort_idx'),
        ]

    def __str__(self):
        return f"{self.course.name} - {self.program} {self.branch} Y{self.year} {self.section}"

    @property
    def display_name(self):
        return f"{self.program} {self.branch} - Section {self.section}"


class Material(models.Model):
    TYPE_NOTES = 'Notes'
    TYPE_SLIDES = 'Slides'
    TYPE_VIDEO = 'Video'
    TYPE_ASSIGNMENT = 'Assignment'
    TYPE_OTHER = 'Other'
    TYPE_CHOICES = (
        (TYPE_NOTES, 'Notes'),
        (TYPE_SLIDES, 'Slides'),
        (TYPE_VIDEO, 'Video'),
        (TYPE_ASSIGNMENT, 'Assignment'),
        (TYPE_OTHER, 'Other'),
    )

    college_class = models.ForeignKey(
        CollegeClass,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='materials',
    )
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='materials')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    url = models.URLField(max_length=500)
    material_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_NOTES)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='uploaded_materials',
    )
    upload_date = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-upload_date', '-id']

    def __str__(self):
        return self.title
