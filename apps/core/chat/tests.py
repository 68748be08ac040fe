from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.core.academics.services import add_student_to_class, create_class
from apps.core.utils.testing import make_admin, make_course, make_student, make_teacher

from .models import ChatRoom
from .services import (
    MAX_MESSAGE_LENGTH,
    create_chat_room_for_class,
    get_chat_rooms_for_user,
    get_classes_for_chat_management,
    get_messages,
    post_message,
)
from .tasks import sync_room_for_class


class ChatBaseTestCase(TestCase):
    def setUp(self):
        self.teacher = make_teacher()
        self.student = make_student(name='Asha Rao')
        self.outsider = make_student(name='Other Branch', branch='ECE')
        self.course = make_course('CS101')
        with self.captureOnCommitCallbacks(execute=True):
            self.college_class = create_class(
                program='B.Tech',
                branch='CSE',
                section='A',
                year=1,
                semester=1,
                course=self.course,
                teacher_user=self.teacher.user,
            )
        self.room = ChatRoom.objects.get(college_class=self.college_class)


class ChatRoomSyncTests(ChatBaseTestCase):
    def test_room_is_created_after_the_class_commits(self):
        self.assertEqual(self.room.name, 'B.Tech CSE - Section A')
        self.assertEqual(
            set(self.room.participants.values_list('pk', flat=True)),
            {self.teacher.user_id, self.student.user_id},
        )

    def test_sync_is_idempotent_and_follows_the_roster(self):
        late = make_student(name='Late Joiner')
        with self.captureOnCommitCallbacks(execute=True):
            add_student_to_class(college_class=self.college_class, student=late)

        create_chat_room_for_class(self.college_class)

        self.assertEqual(ChatRoom.objects.count(), 1)
        self.assertTrue(self.room.participants.filter(pk=late.user_id).exists())

    def test_task_for_deleted_class_is_a_no_op(self):
        sync_room_for_class(class_id=999999)
        self.assertEqual(ChatRoom.objects.count(), 1)

    def test_management_listing_reports_rooms(self):
        rows = get_classes_for_chat_management()
        self.assertEqual(rows[0]['room_id'], self.room.pk)
        self.assertTrue(rows[0]['has_room'])


class ChatMessageTests(ChatBaseTestCase):
    def test_participants_post_and_read_messages(self):
        first = post_message(room=self.room, sender=self.student.user, text='  Hello class  ')
        post_message(room=self.room, sender=self.teacher.user, text='Welcome!')

        messages = get_messages(room=self.room, user=self.student.user)
        self.assertEqual([message['text'] for message in messages], ['Hello class', 'Welcome!'])
        self.assertEqual(messages[0]['sender_name'], 'Asha Rao')

        newer = get_messages(room=self.room, user=self.student.user, after_id=first.pk)
        self.assertEqual([message['text'] for message in newer], ['Welcome!'])

    def test_outsiders_cannot_read_or_post(self):
        with self.assertRaisesMessage(ValidationError, 'not a participant'):
            post_message(room=self.room, sender=self.outsider.user, text='Hi')
        with self.assertRaises(ValidationError):
            get_messages(room=self.room, user=self.outsider.user)

    def test_admins_see_every_room(self):
        admin = make_admin()
        self.assertEqual(len(get_chat_rooms_for_user(admin.user)), 1)
        self.assertEqual(get_chat_rooms_for_user(self.outsider.user), [])
        self.assertEqual(get_messages(room=self.room, user=admin.user), [])

    def test_empty_and_oversized_messages_are_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'empty'):
            post_message(room=self.room, sender=self.student.user, text='   ')
        with self.assertRaisesMessage(ValidationError, 'cannot exceed'):
            post_message(room=self.room, sender=self.student.user, text='x' * (MAX_MESSAGE_LENGTH + 1))

    def test_post_message_view(self):
        self.client.force_login(self.student.user)

        response = self.client.post(
            reverse('chat_room_post_message', args=[self.room.pk]),
            data={'text': 'Is the lab open today?'},
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.json()['chat_message']['text'], 'Is the lab open today?')

        self.client.force_login(self.outsider.user)
        response = self.client.get(reverse('chat_room_messages', args=[self.room.pk]))
        self.assertEqual(response.status_code, 400)
