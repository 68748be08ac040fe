from decimal import Decimal

from django.conf import settings
from django.db import models

from apps.core.academics.models import CollegeClass, Course
from apps.core.students.models import Student
from apps.core.utils.managers import CohortManager


class ExamSchedule(models.Model):
    STATUS_SCHEDULED = 'Scheduled'
    STATUS_COMPLETED = 'Completed'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_CHOICES = (
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    )

    exam_session_name = models.CharField(max_length=120)
    course = models.ForeignKey(Course, on_delete=models.SET_NULL, null=True, blank=True, related_name='exams')
    course_code = models.CharField(max_length=20)
    course_name = models.CharField(max_length=150)
    program = models.CharField(max_length=80)
    branch = models.CharField(max_length=80)
    year = models.PositiveSmallIntegerField()
    semester = models.PositiveSmallIntegerField()
    date = models.DateField(null=True, blank=True)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    room = models.CharField(max_length=60, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CohortManager()

    class Meta:
        ordering = ['-date', 'start_time', 'id']
        indexes = [
            models.Index(fields=['program', 'branch', 'year', 'semester'], name='exam_cohort_idx'),
        ]

    def __str__(self):
        return f"{self.exam_session_name}: {self.course_code} on {self.date}"


class HallTicket(models.Model):
    """Per-student snapshot taken when exams are published; eligibility is re-checked on every fetch."""

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='hall_tickets')
    semester = models.PositiveSmallIntegerField()
    exam_session_name = models.CharField(max_length=120)
    college_id = models.CharField(max_length=32)
    student_name = models.CharField(max_length=150)
    program = models.CharField(max_length=80)
    branch = models.CharField(max_length=80)
    year = models.PositiveSmallIntegerField()
    exams = models.JSONField(default=list, blank=True)
    min_attendance = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('75.00'))
    max_dues = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    generated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-generated_at']
        constraints = [
            models.UniqueConstraint(fields=['student', 'semester'], name='unique_hall_ticket_per_semester'),
        ]

    def __str__(self):
        return f"{self.ticket_id} ({self.exam_session_name})"

    @property
    def ticket_id(self):
        return f"{self.student.doc_id}_{self.semester}"


class Mark(models.Model):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='marks')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='marks')
    college_class = models.ForeignKey(
        CollegeClass,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='marks',
    )
    semester = models.PositiveSmallIntegerField()
    internal_marks = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    external_marks = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    total_marks = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    grade = models.CharField(max_length=5)
    credits = models.PositiveSmallIntegerField(default=3)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_marks',
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['semester', 'course__course_id']
        constraints = [
            models.UniqueConstraint(fields=['student', 'course'], name='unique_mark_per_student_course'),
        ]

    def __str__(self):
        return f"{self.student.college_id} {self.course.course_id}: {self.grade}"


class Backlog(models.Model):
    STATUS_ACTIVE = 'Active'
    STATUS_CLEARED = 'Cleared'
    STATUS_CHOICES = (
        (STATUS_ACTIVE, 'Active'),
        (STATUS_CLEARED, 'Cleared'),
    )

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='backlogs')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='backlogs')
    semester = models.PositiveSmallIntegerField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    cleared_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['semester', 'course__course_id']
        constraints = [
            models.UniqueConstraint(fields=['student', 'course'], name='unique_backlog_per_student_course'),
        ]

    def __str__(self):
        return f"{self.student.college_id} {self.course.course_id} [{self.status}]"
