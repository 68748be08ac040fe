from django.db import models

from apps.core.students.models import Student


class Opportunity(models.Model):
    """A placement drive or internship posted by the placement cell."""

    TYPE_PLACEMENT = 'placement'
    TYPE_INTERNSHIP = 'internship'
    TYPE_CHOICES = (
        (TYPE_PLACEMENT, 'Placement'),
        (TYPE_INTERNSHIP, 'Internship'),
    )

    STATUS_OPEN = 'Open'
    STATUS_CLOSED = 'Closed'
    STATUS_CHOICES = (
        (STATUS_OPEN, 'Open'),
        (STATUS_CLOSED, 'Closed'),
    )

    type = models.CharField(max_length=12, choices=TYPE_CHOICES)
    company = models.CharField(max_length=150)
    role = models.CharField(max_length=150)
    ctc_stipend = models.CharField(max_length=60, blank=True)
    location = models.CharField(max_length=120, blank=True)
    duration = models.CharField(max_length=60, blank=True)
    description = models.TextField(blank=True)
    skills = models.JSONField(default=list, blank=True)
    eligibility = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_OPEN)
    posted_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-posted_at', '-id']
        indexes = [
            models.Index(fields=['type', 'status'], name='opportunity_type_status_idx'),
        ]

    def __str__(self):
        return f"{self.role} at {self.company}"


class Application(models.Model):
    STATUS_APPLIED = 'Applied'
    STATUS_UNDER_REVIEW = 'Under Review'
    STATUS_SHORTLISTED = 'Shortlisted'
    STATUS_OFFER_EXTENDED = 'Offer Extended'
    STATUS_OFFER_ACCEPTED = 'Offer Accepted'
    STATUS_REJECTED = 'Rejected'
    STATUS_CHOICES = (
        (STATUS_APPLIED, 'Applied'),
        (STATUS_UNDER_REVIEW, 'Under Review'),
        (STATUS_SHORTLISTED, 'Shortlisted'),
        (STATUS_OFFER_EXTENDED, 'Offer Extended'),
        (STATUS_OFFER_ACCEPTED, 'Offer Accepted'),
        (STATUS_REJECTED, 'Rejected'),
    )

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='applications')
    opportunity = models.ForeignKey(
        Opportunity,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='applications',
    )
    # Copied at submission so the history survives a deleted posting.
    opportunity_type = models.CharField(max_length=12, choices=Opportunity.TYPE_CHOICES)
    company = models.CharField(max_length=150)
    role = models.CharField(max_length=150)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_APPLIED)
    applied_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-applied_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['student', 'opportunity'], name='unique_application_per_opportunity'),
        ]

    def __str__(self):
        return f"{self.student.college_id} -> {self.company} ({self.status})"
