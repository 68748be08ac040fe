from apps.core.academics.models import CollegeClass
from apps.core.notifications.dispatch import register

from .services import create_chat_room_for_class


@register('chat.sync_room_for_class')
def sync_room_for_class(*, class_id):
    college_class = CollegeClass.objects.select_related('course').filter(pk=class_id).first()
    if college_class is None:
        # Class deleted before the task ran; its room cascaded with it.
        return
    create_chat_room_for_class(college_class)
