from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.academics.models import CollegeClass


class ChatRoom(models.Model):
    college_class = models.OneToOneField(CollegeClass, on_delete=models.CASCADE, related_name='chat_room')
    name = models.CharField(max_length=200)
    description = models.CharField(max_length=255, blank=True)
    participants = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name='chat_rooms')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class ChatMessage(models.Model):
    room = models.ForeignKey(ChatRoom, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='chat_messages',
    )
    sender_name = models.CharField(max_length=150)
    text = models.TextField()
    sent_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['sent_at', 'id']

    def __str__(self):
        return f"{self.sender_name}: {self.text[:30]}"
