from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    TYPE_ALERT = 'alert'
    TYPE_TASK = 'task'
    TYPE_INFO = 'info'
    TYPE_EVENT = 'event'

    TYPE_CHOICES = (
        (TYPE_ALERT, 'Alert'),
        (TYPE_TASK, 'Task'),
        (TYPE_INFO, 'Info'),
        (TYPE_EVENT, 'Event'),
    )

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
    )
    title = models.CharField(max_length=150)
    message = models.TextField()
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_INFO)
    link = models.CharField(max_length=255, blank=True)
    read = models.BooleanField(default=False)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-timestamp', '-id']
        indexes = [
            models.Index(fields=['recipient', 'read'], name='notif_recipient_read_idx'),
        ]

    def __str__(self):
        return f"{self.title} -> {self.recipient_id}"


class DispatchTask(models.Model):
    """A queued side effect (notification fan-out, email, chat room) run after commit.

    While a worker holds a task it is running and available_at marks the end of
    its lease; a running task whose lease has passed may be claimed again.
    """

    STATUS_PENDING = 'pending'
    STATUS_RUNNING = 'running'
    STATUS_DONE = 'done'
    STATUS_FAILED = 'failed'

    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_RUNNING, 'Running'),
        (STATUS_DONE, 'Done'),
        (STATUS_FAILED, 'Failed'),
    )

    kind = models.CharField(max_length=80)
    payload = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    attempts = models.PositiveIntegerField(default=0)
    max_attempts = models.PositiveIntegerField(default=5)
    last_error = models.TextField(blank=True)
    available_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['available_at', 'id']
        indexes = [
            models.Index(fields=['status', 'available_at'], name='dispatch_status_avail_idx'),
        ]

    def __str__(self):
        return f"{self.kind} [{self.status}]"
