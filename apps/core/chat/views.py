from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.academics.models import CollegeClass
from apps.core.users.decorators import authenticated_required, role_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import MessageForm, MessageQueryForm
from .models import ChatRoom
from .services import (
    create_chat_room_for_class,
    get_chat_participants,
    get_chat_rooms_for_user,
    get_classes_for_chat_management,
    get_messages,
    message_as_dict,
    post_message,
)


@require_GET
@authenticated_required
@json_action
def room_list(request):
    return action_success(rooms=get_chat_rooms_for_user(request.user))


@require_GET
@authenticated_required
@json_action
def room_messages(request, room_id):
    room = get_object_or_404(ChatRoom, pk=room_id)
    form = MessageQueryForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(
        messages=get_messages(
            room=room,
            user=request.user,
            after_id=form.cleaned_data['after'],
            limit=form.cleaned_data['limit'] or 100,
        ),
    )


@require_POST
@authenticated_required
@json_action
def room_post_message(request, room_id):
    room = get_object_or_404(ChatRoom, pk=room_id)
    form = MessageForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    message = post_message(room=room, sender=request.user, text=form.cleaned_data['text'])
    return action_success(status=201, chat_message=message_as_dict(message))


@require_GET
@authenticated_required
@json_action
def room_participants(request, room_id):
    room = get_object_or_404(ChatRoom, pk=room_id)
    return action_success(participants=get_chat_participants(room=room, user=request.user))


@require_GET
@role_required('admin')
@json_action
def chat_management(request):
    return action_success(classes=get_classes_for_chat_management())


@require_POST
@role_required('admin')
@json_action
def class_room_sync(request, class_id):
    college_class = get_object_or_404(CollegeClass.objects.select_related('course'), pk=class_id)
    room = create_chat_room_for_class(college_class)
    return action_success('Chat room is up to date.', room_id=room.pk)
