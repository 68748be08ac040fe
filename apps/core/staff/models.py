from django.conf import settings
from django.db import models

from apps.core.users.models import new_document_id


class StaffProfile(models.Model):
    STATUS_ACTIVE = 'Active'
    STATUS_ON_LEAVE = 'On Leave'
    STATUS_INACTIVE = 'Inactive'
    STATUS_CHOICES = (
        (STATUS_ACTIVE, 'Active'),
        (STATUS_ON_LEAVE, 'On Leave'),
        (STATUS_INACTIVE, 'Inactive'),
    )

    ROLE = ''

    doc_id = models.CharField(max_length=32, unique=True, default=new_document_id, editable=False)
    staff_id = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=150)
    email = models.EmailField()
    department = models.CharField(max_length=120)
    position = models.CharField(max_length=120, blank=True)
    program = models.CharField(max_length=80, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    phone = models.CharField(max_length=20, blank=True)
    office_location = models.CharField(max_length=120, blank=True)
    qualifications = models.CharField(max_length=255, blank=True)
    specialization = models.CharField(max_length=255, blank=True)
    dob = models.DateField(null=True, blank=True)
    date_of_joining = models.DateField(null=True, blank=True)

    initials = models.CharField(max_length=4, blank=True)
    avatar_url = models.URLField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['staff_id']

    def __str__(self):
        return f"{self.staff_id} - {self.name}"

    def identity_defaults(self):
        return {
            'name': self.name,
            'email': self.email,
            'role': self.ROLE,
            'role_doc_id': self.doc_id,
            'college_id': '',
            'staff_id': self.staff_id,
            'initials': self.initials,
            'avatar_url': self.avatar_url,
            'program': self.program,
            'branch': '',
            'year': None,
            'section': '',
        }

    def as_profile(self):
        return {
            'id': self.doc_id,
            'staff_id': self.staff_id,
            'name': self.name,
            'email': self.email,
            'role': self.ROLE,
            'department': self.department,
            'position': self.position,
            'program': self.program,
            'status': self.status,
            'phone': self.phone,
            'office_location': self.office_location,
            'qualifications': self.qualifications,
            'specialization': self.specialization,
            'dob': self.dob,
            'date_of_joining': self.date_of_joining,
            'initials': self.initials,
            'avatar_url': self.avatar_url,
            'uid': self.user.uid if self.user_id else None,
        }


class Teacher(StaffProfile):
    ROLE = 'teacher'

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='teacher_profile',
    )

    class Meta(StaffProfile.Meta):
        indexes = [
            models.Index(fields=['department'], name='teacher_department_idx'),
            models.Index(fields=['email'], name='teacher_email_idx'),
        ]


class Administrator(StaffProfile):
    ROLE = 'admin'

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='admin_profile',
    )

    class Meta(StaffProfile.Meta):
        indexes = [
            models.Index(fields=['email'], name='administrator_email_idx'),
        ]
