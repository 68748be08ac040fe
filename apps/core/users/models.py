import uuid

from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.db import models


def new_uid():
    return uuid.uuid4().hex[:28]


def new_document_id():
    return uuid.uuid4().hex[:20]


class UserManager(DjangoUserManager):
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', 'admin')
        extra_fields.setdefault('email_verified', True)
        return super().create_superuser(username, email=email, password=password, **extra_fields)


class User(AbstractUser):
    """Authentication identity. ``username`` always mirrors the lower-cased email."""

    ROLE_STUDENT = 'student'
    ROLE_TEACHER = 'teacher'
    ROLE_ADMIN = 'admin'

    ROLE_CHOICES = (
        (ROLE_STUDENT, 'Student'),
        (ROLE_TEACHER, 'Teacher'),
        (ROLE_ADMIN, 'Admin'),
    )
    ALL_ROLES = (ROLE_STUDENT, ROLE_TEACHER, ROLE_ADMIN)

    uid = models.CharField(max_length=28, unique=True, default=new_uid, editable=False)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_STUDENT)
    claims = models.JSONField(default=dict, blank=True)
    email_verified = models.BooleanField(default=False)

    objects = UserManager()

    class Meta:
        indexes = [
            models.Index(fields=['role'], name='users_user_role_0b8a1f_idx'),
            models.Index(fields=['email'], name='users_user_email_6f2c3d_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.is_superuser and self.role != self.ROLE_ADMIN:
            self.role = self.ROLE_ADMIN
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.email or self.username} ({self.role})"


class Identity(models.Model):
    """Cross-role account record linking the authentication identity to its role profile."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='identity')
    name = models.CharField(max_length=150)
    email = models.EmailField()
    role = models.CharField(max_length=20, choices=User.ROLE_CHOICES)
    role_doc_id = models.CharField(max_length=32, blank=True)
    college_id = models.CharField(max_length=32, blank=True)
    staff_id = models.CharField(max_length=32, blank=True)
    initials = models.CharField(max_length=4, blank=True)
    avatar_url = models.URLField(blank=True)

    program = models.CharField(max_length=80, blank=True)
    branch = models.CharField(max_length=80, blank=True)
    year = models.PositiveSmallIntegerField(null=True, blank=True)
    section = models.CharField(max_length=4, blank=True)

    notifications_enabled = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'identities'
        indexes = [
            models.Index(fields=['role'], name='users_ident_role_7c9d0e_idx'),
            models.Index(fields=['email'], name='users_ident_email_1a3b5c_idx'),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    @property
    def display_id(self):
        return self.college_id or self.staff_id


class ProvisioningSaga(models.Model):
    """One account-provisioning attempt and its compensation state."""

    STATUS_PENDING = 'pending'
    STATUS_COMPLETED = 'completed'
    STATUS_COMPENSATED = 'compensated'
    STATUS_ORPHANED = 'orphaned'

    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_COMPENSATED, 'Compensated'),
        (STATUS_ORPHANED, 'Orphaned'),
    )

    uid = models.CharField(max_length=28, blank=True)
    email = models.EmailField()
    role = models.CharField(max_length=20, choices=User.ROLE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    error = models.TextField(blank=True)
    attempts = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'updated_at'], name='users_provi_status_4e1a2b_idx'),
        ]

    def __str__(self):
        return f"{self.email} [{self.status}]"


class AuditLog(models.Model):
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True
    )

    action = models.CharField(max_length=100)
    target_model = models.CharField(max_length=100, blank=True)
    target_id = models.CharField(max_length=64, blank=True)
    details = models.TextField(blank=True)

    method = models.CharField(max_length=10, blank=True)
    path = models.CharField(max_length=255, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='users_audit_user_id_8d2e4f_idx'),
            models.Index(fields=['action', '-created_at'], name='users_audit_action_2f6a8b_idx'),
        ]

    def __str__(self):
        return f"{self.action} by {self.user_id or 'system'}"
