from django.conf import settings
from django.db import models

from apps.core.academics.models import CollegeClass
from apps.core.students.models import Student
from apps.core.utils.managers import CohortManager


def attendance_record_key(class_id, date, period, student_id):
    return f"{class_id}_{date}_{period}_{student_id}"


class AttendanceRecord(models.Model):
    """One student's status for one class period.

    ``record_key`` is deterministic per (class, date, period, student). It is
    indexed rather than unique because bulk imports append rows as-is; the
    aggregation report counts any repeats.
    """

    STATUS_PRESENT = 'Present'
    STATUS_ABSENT = 'Absent'
    STATUS_CHOICES = (
        (STATUS_PRESENT, 'Present'),
        (STATUS_ABSENT, 'Absent'),
    )

    record_key = models.CharField(max_length=120, db_index=True)
    college_class = models.ForeignKey(
        CollegeClass,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_records',
    )
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_marked',
    )
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='attendance_records')
    date = models.DateField()
    period = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, blank=True)

    program = models.CharField(max_length=80, blank=True)
    branch = models.CharField(max_length=80, blank=True)
    year = models.PositiveSmallIntegerField(null=True, blank=True)
    semester = models.PositiveSmallIntegerField(null=True, blank=True)
    course_code = models.CharField(max_length=20, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CohortManager()

    class Meta:
        ordering = ['-date', 'period', 'id']
        indexes = [
            models.Index(fields=['student', 'date'], name='attendance_student_date_idx'),
            models.Index(fields=['college_class', 'date', 'period'], name='attendance_class_slot_idx'),
        ]

    def __str__(self):
        return f"{self.record_key}: {self.status or '?'}"
