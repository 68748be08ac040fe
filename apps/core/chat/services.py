import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.core.academics.models import CollegeClass
from apps.core.users.models import Identity

from .models import ChatMessage, ChatRoom

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


def _display_name(user):
    identity = Identity.objects.filter(user=user).only('name').first()
    if identity is not None:
        return identity.name
    return user.get_full_name() or user.email


@transaction.atomic
def create_chat_room_for_class(college_class: CollegeClass):
    """Create the class chat room, or bring its name and participants in line with the class."""
    room, created = ChatRoom.objects.get_or_create(
        college_class=college_class,
        defaults={
            'name': college_class.display_name,
            'description': f"Discussion for {college_class.course.name}",
        },
    )
    if not created and room.name != college_class.display_name:
        room.name = college_class.display_name
        room.save(update_fields=['name'])

    participant_ids = set(college_class.students.values_list('pk', flat=True))
    if college_class.teacher_id:
        participant_ids.add(college_class.teacher_id)
    room.participants.set(participant_ids)

    if created:
        logger.info('Created chat room %s for class %s.', room.pk, college_class.pk)
    return room


def room_as_dict(room: ChatRoom):
    last_message = room.messages.order_by('-sent_at', '-id').first()
    return {
        'id': room.pk,
        'name': room.name,
        'description': room.description,
        'class_id': room.college_class_id,
        'participant_count': room.participants.count(),
        'last_message': message_as_dict(last_message) if last_message else None,
    }


def message_as_dict(message: ChatMessage):
    return {
        'id': message.pk,
        'sender_uid': message.sender.uid if message.sender_id else None,
        'sender_name': message.sender_name,
        'text': message.text,
        'sent_at': message.sent_at,
    }


def get_chat_rooms_for_user(user):
    if user.role == 'admin':
        rooms = ChatRoom.objects.all()
    else:
        rooms = user.chat_rooms.all()
    return [room_as_dict(room) for room in rooms.order_by('name')]


def _ensure_member(room: ChatRoom, user):
    if user.role == 'admin':
        return
    if not room.participants.filter(pk=user.pk).exists():
        raise ValidationError('You are not a participant in this chat room.')


def get_chat_participants(*, room: ChatRoom, user):
    _ensure_member(room, user)
    identities = {
        identity.user_id: identity
        for identity in Identity.objects.filter(user__in=room.participants.all())
    }
    participants = []
    for participant in room.participants.order_by('role', 'first_name'):
        identity = identities.get(participant.pk)
        participants.append({
            'uid': participant.uid,
            'name': identity.name if identity else participant.get_full_name(),
            'role': participant.role,
            'avatar_url': identity.avatar_url if identity else '',
        })
    return participants


def get_classes_for_chat_management():
    classes = CollegeClass.objects.select_related('course').prefetch_related('chat_room')
    rows = []
    for college_class in classes:
        room = getattr(college_class, 'chat_room', None)
        rows.append({
            'class_id': college_class.pk,
            'name': college_class.display_name,
            'course_name': college_class.course.name,
            'has_room': room is not None,
            'room_id': room.pk if room else None,
        })
    return rows


def post_message(*, room: ChatRoom, sender, text):
    _ensure_member(room, sender)
    text = (text or '').strip()
    if not text:
        raise ValidationError('Message cannot be empty.')
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters.")

    return ChatMessage.objects.create(
        room=room,
        sender=sender,
        sender_name=_display_name(sender),
        text=text,
    )


def get_messages(*, room: ChatRoom, user, after_id=None, limit=100):
    _ensure_member(room, user)
    messages = room.messages.select_related('sender')
    if after_id:
        messages = messages.filter(pk__gt=after_id)
    latest = list(messages.order_by('-sent_at', '-id')[:limit])
    return [message_as_dict(message) for message in reversed(latest)]
