from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.core.users.models import Identity

from .dispatch import enqueue, process_pending_tasks, register, run_task
from .models import DispatchTask, Notification
from .services import create_notifications_for_roles, notify_uids

_calls = []


@register('tests.flaky')
def _flaky_handler(*, fail):
    _calls.append(fail)
    if fail:
        raise RuntimeError('downstream unavailable')


class DispatchQueueTests(TestCase):
    def setUp(self):
        _calls.clear()
        self.user = get_user_model().objects.create_user(
            username='student@example.com',
            email='student@example.com',
            password='pass12345',
            role='student',
        )

    def test_notification_fan_out_runs_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            task = notify_uids([self.user.uid], title='Fee Payment', message='Payment recorded.')
            self.assertEqual(Notification.objects.count(), 0)

        task.refresh_from_db()
        self.assertEqual(task.status, DispatchTask.STATUS_DONE)
        notification = Notification.objects.get(recipient=self.user)
        self.assertEqual(notification.title, 'Fee Payment')
        self.assertFalse(notification.read)

    def test_failed_task_backs_off_then_fails_permanently(self):
        task = DispatchTask.objects.create(kind='tests.flaky', payload={'fail': True}, max_attempts=2)

        run_task(task)
        self.assertEqual(task.status, DispatchTask.STATUS_PENDING)
        self.assertEqual(task.attempts, 1)
        self.assertGreater(task.available_at, timezone.now())
        self.assertIn('downstream unavailable', task.last_error)

        run_task(task)
        self.assertEqual(task.status, DispatchTask.STATUS_FAILED)
        self.assertEqual(_calls, [True, True])

    def test_unknown_kind_is_marked_failed(self):
        task = DispatchTask.objects.create(kind='tests.missing', payload={})
        run_task(task)
        self.assertEqual(task.status, DispatchTask.STATUS_FAILED)
        self.assertIn('No handler', task.last_error)

    @override_settings(DISPATCH_EAGER=False)
    def test_process_pending_tasks_runs_only_due_tasks(self):
        enqueue('tests.flaky', fail=False)
        later = enqueue('tests.flaky', fail=False)
        later.available_at = timezone.now() + timedelta(hours=1)
        later.save(update_fields=['available_at'])

        summary = process_pending_tasks()

        self.assertEqual(summary, {'done': 1, 'retrying': 0, 'failed': 0, 'skipped': 0})
        self.assertEqual(_calls, [False])

    def test_email_task_sends_mail(self):
        with self.captureOnCommitCallbacks(execute=True):
            enqueue('email.send', subject='Hello', body='Body', recipients=['a@example.com'])
        self.assertEqual(len(mail.outbox), 1)

    @override_settings(DISPATCH_EAGER=False)
    def test_overlapping_workers_run_a_task_once(self):
        enqueue('email.send', subject='Hello', body='Body', recipients=['a@example.com'])
        first_copy = DispatchTask.objects.get(kind='email.send')
        second_copy = DispatchTask.objects.get(kind='email.send')

        run_task(first_copy)
        run_task(second_copy)

        self.assertEqual(len(mail.outbox), 1)
        task = DispatchTask.objects.get(pk=first_copy.pk)
        self.assertEqual(task.status, DispatchTask.STATUS_DONE)
        self.assertEqual(task.attempts, 1)

    @override_settings(DISPATCH_EAGER=False)
    def test_running_task_is_skipped_until_its_lease_expires(self):
        task = enqueue('tests.flaky', fail=False)
        DispatchTask.objects.filter(pk=task.pk).update(
            status=DispatchTask.STATUS_RUNNING,
            attempts=1,
            available_at=timezone.now() + timedelta(minutes=5),
        )

        self.assertEqual(process_pending_tasks(), {'done': 0, 'retrying': 0, 'failed': 0, 'skipped': 0})
        run_task(task)
        self.assertEqual(_calls, [])
        self.assertEqual(task.status, DispatchTask.STATUS_RUNNING)

        summary = process_pending_tasks(now=timezone.now() + timedelta(minutes=10))

        self.assertEqual(summary['done'], 1)
        self.assertEqual(_calls, [False])
        task.refresh_from_db()
        self.assertEqual(task.attempts, 2)


class NotificationServiceTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        self.admin_on = user_model.objects.create_user(
            username='on@example.com', email='on@example.com', password='pass12345', role='admin',
        )
        self.admin_off = user_model.objects.create_user(
            username='off@example.com', email='off@example.com', password='pass12345', role='admin',
        )
        Identity.objects.create(user=self.admin_off, name='Off', email='off@example.com', role='admin',
                                notifications_enabled=False)

    def test_role_fan_out_skips_users_who_opted_out(self):
        created = create_notifications_for_roles(roles='admin', title='New complaint', message='Room 101')
        self.assertEqual(created, 1)
        self.assertTrue(Notification.objects.filter(recipient=self.admin_on).exists())
        self.assertFalse(Notification.objects.filter(recipient=self.admin_off).exists())

    def test_list_and_mark_read_views(self):
        Notification.objects.create(recipient=self.admin_on, title='One', message='m')
        Notification.objects.create(recipient=self.admin_on, title='Two', message='m')
        self.client.login(username='on@example.com', password='pass12345')

        response = self.client.get(reverse('notification_list'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['notifications']), 2)

        response = self.client.post(reverse('notification_mark_read'))
        self.assertTrue(response.json()['success'])
        self.assertEqual(response.json()['updated'], 2)
        self.assertFalse(Notification.objects.filter(read=False).exists())

    def test_anonymous_request_is_rejected(self):
        response = self.client.get(reverse('notification_list'))
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])
