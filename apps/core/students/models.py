from django.conf import settings
from django.db import models

from apps.core.users.models import new_document_id
from apps.core.utils.managers import CohortManager


class Student(models.Model):
    STATUS_ACTIVE = 'Active'
    STATUS_PENDING_APPROVAL = 'Pending Approval'
    STATUS_INACTIVE = 'Inactive'
    STATUS_GRADUATED = 'Graduated'
    STATUS_CHOICES = (
        (STATUS_ACTIVE, 'Active'),
        (STATUS_PENDING_APPROVAL, 'Pending Approval'),
        (STATUS_INACTIVE, 'Inactive'),
        (STATUS_GRADUATED, 'Graduated'),
    )

    TYPE_DAY_SCHOLAR = 'Day Scholar'
    TYPE_HOSTELER = 'Hosteler'
    TYPE_CHOICES = (
        (TYPE_DAY_SCHOLAR, 'Day Scholar'),
        (TYPE_HOSTELER, 'Hosteler'),
    )

    GENDER_CHOICES = (
        ('Male', 'Male'),
        ('Female', 'Female'),
        ('Other', 'Other'),
    )

    doc_id = models.CharField(max_length=32, unique=True, default=new_document_id, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='student_profile',
    )
    college_id = models.CharField(max_length=32, unique=True)

    name = models.CharField(max_length=150)
    email = models.EmailField()
    program = models.CharField(max_length=80)
    branch = models.CharField(max_length=80)
    year = models.PositiveSmallIntegerField(default=1)
    semester = models.PositiveSmallIntegerField(default=1)
    section = models.CharField(max_length=4, blank=True)
    batch = models.CharField(max_length=20, blank=True)

    dob = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_DAY_SCHOLAR)

    emergency_contact_name = models.CharField(max_length=120, blank=True)
    emergency_contact_phone = models.CharField(max_length=20, blank=True)
    emergency_contact_address = models.TextField(blank=True)

    initials = models.CharField(max_length=4, blank=True)
    avatar_url = models.URLField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CohortManager()

    class Meta:
        ordering = ['college_id']
        indexes = [
            models.Index(fields=['program', 'branch', 'year', 'section'], name='student_cohort_idx'),
            models.Index(fields=['email'], name='student_email_idx'),
            models.Index(fields=['status'], name='student_status_idx'),
        ]

    def __str__(self):
        return f"{self.college_id} - {self.name}"

    @property
    def is_hosteler(self):
        return self.type == self.TYPE_HOSTELER

    def identity_defaults(self):
        return {
            'name': self.name,
            'email': self.email,
            'role': 'student',
            'role_doc_id': self.doc_id,
            'college_id': self.college_id,
            'staff_id': '',
            'initials': self.initials,
            'avatar_url': self.avatar_url,
            'program': self.program,
            'branch': self.branch,
            'year': self.year,
            'section': self.section,
        }

    def as_profile(self):
        return {
            'id': self.doc_id,
            'college_id': self.college_id,
            'name': self.name,
            'email': self.email,
            'program': self.program,
            'branch': self.branch,
            'year': self.year,
            'semester': self.semester,
            'section': self.section,
            'batch': self.batch,
            'dob': self.dob,
            'gender': self.gender,
            'phone': self.phone,
            'address': self.address,
            'status': self.status,
            'type': self.type,
            'emergency_contact': {
                'name': self.emergency_contact_name,
                'phone': self.emergency_contact_phone,
                'address': self.emergency_contact_address,
            },
            'initials': self.initials,
            'avatar_url': self.avatar_url,
            'uid': self.user.uid if self.user_id else None,
        }
