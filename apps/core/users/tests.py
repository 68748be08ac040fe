from datetime import timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.core.students.models import Student
from apps.core.utils.testing import make_student, make_teacher, make_user

from .identity import LocalIdentityProvider
from .models import AuditLog, Identity, ProvisioningSaga
from .provisioning import AlreadyRegistered, provision_account, reconcile_orphaned_identities
from .services import send_password_reset_link


class LoginTests(TestCase):
    def test_login_returns_identity_and_records_audit_event(self):
        student = make_student(email='asha@example.com')

        response = self.client.post(
            reverse('login'),
            data={'email': 'ASHA@example.com', 'password': 'pass12345'},
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200, response.content)
        profile = response.json()['profile']
        self.assertEqual(profile['role'], 'student')
        self.assertEqual(profile['college_id'], student.college_id)
        self.assertTrue(AuditLog.objects.filter(action='user.login', user=student.user).exists())

    def test_bad_credentials_are_rejected(self):
        make_user('someone@example.com')
        response = self.client.post(
            reverse('login'),
            data={'email': 'someone@example.com', 'password': 'wrong-password'},
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])
        failed = AuditLog.objects.get(action='user.login_failed')
        self.assertIsNone(failed.user)
        self.assertEqual(failed.details, 'Username=someone@example.com')

    def test_login_links_profile_that_was_never_attached(self):
        user = make_user('late@example.com')
        student = make_student(email='late@example.com', with_user=False)

        response = self.client.post(
            reverse('login'),
            data={'email': 'late@example.com', 'password': 'pass12345'},
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200, response.content)
        student.refresh_from_db()
        self.assertEqual(student.user, user)
        self.assertEqual(Identity.objects.get(user=user).role_doc_id, student.doc_id)

    def test_login_without_any_profile_fails(self):
        make_user('ghost@example.com')
        response = self.client.post(
            reverse('login'),
            data={'email': 'ghost@example.com', 'password': 'pass12345'},
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('profile not found', response.json()['error'])

    def test_profile_requires_authentication(self):
        response = self.client.get(reverse('user_profile'))
        self.assertEqual(response.status_code, 401)


class PasswordResetTests(TestCase):
    def test_reset_link_is_emailed_after_commit(self):
        make_teacher(email='ravi@example.com')

        with self.captureOnCommitCallbacks(execute=True):
            sent = send_password_reset_link(email='ravi@example.com')

        self.assertTrue(sent)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['ravi@example.com'])
        self.assertIn('/auth/reset/', mail.outbox[0].body)

    def test_unknown_email_gets_the_same_response(self):
        response = self.client.post(reverse('password_reset'), data={'email': 'nobody@example.com'})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['success'])
        self.assertEqual(len(mail.outbox), 0)


class NotificationPreferenceTests(TestCase):
    def test_toggle_preferences(self):
        student = make_student()
        self.client.force_login(student.user)

        response = self.client.post(reverse('notification_preferences'), data={})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()['notifications_enabled'])
        self.assertFalse(Identity.objects.get(user=student.user).notifications_enabled)


class ProvisioningTests(TestCase):
    def _write_student(self, user):
        return Student.objects.create(
            user=user,
            college_id='BT24CS0001',
            name='Asha Rao',
            email=user.email,
            program='B.Tech',
            branch='CSE',
        )

    def test_successful_provisioning_sets_claims(self):
        user, student = provision_account(
            email='Asha@Example.com',
            password='secret123',
            display_name='Asha Rao',
            role='student',
            build_claims=lambda user: {'role': 'student'},
            write_profiles=self._write_student,
        )

        user.refresh_from_db()
        self.assertEqual(user.email, 'asha@example.com')
        self.assertEqual(user.claims, {'role': 'student'})
        self.assertEqual(student.user, user)
        self.assertEqual(ProvisioningSaga.objects.get().status, ProvisioningSaga.STATUS_COMPLETED)

    def test_failed_profile_write_deletes_identity(self):
        def broken_write(user):
            raise ValidationError('profile write failed')

        with self.assertRaises(ValidationError):
            provision_account(
                email='asha@example.com',
                password='secret123',
                display_name='Asha Rao',
                role='student',
                build_claims=lambda user: {'role': 'student'},
                write_profiles=broken_write,
            )

        self.assertFalse(get_user_model().objects.filter(email='asha@example.com').exists())
        saga = ProvisioningSaga.objects.get()
        self.assertEqual(saga.status, ProvisioningSaga.STATUS_COMPENSATED)
        self.assertIn('profile write failed', saga.error)

    def test_duplicate_email_is_refused_before_creating_anything(self):
        make_user('taken@example.com')
        with self.assertRaises(AlreadyRegistered):
            provision_account(
                email='taken@example.com',
                password='secret123',
                display_name='Taken',
                role='student',
                build_claims=lambda user: {},
                write_profiles=self._write_student,
            )
        self.assertFalse(ProvisioningSaga.objects.exists())

    def test_orphaned_identity_is_reconciled_later(self):
        def broken_write(user):
            raise ValidationError('profile write failed')

        with mock.patch.object(LocalIdentityProvider, 'delete_user', side_effect=RuntimeError('auth store down')):
            with self.assertRaises(ValidationError):
                provision_account(
                    email='orphan@example.com',
                    password='secret123',
                    display_name='Orphan',
                    role='student',
                    build_claims=lambda user: {},
                    write_profiles=broken_write,
                )

        saga = ProvisioningSaga.objects.get()
        self.assertEqual(saga.status, ProvisioningSaga.STATUS_ORPHANED)
        self.assertTrue(get_user_model().objects.filter(uid=saga.uid).exists())

        summary = reconcile_orphaned_identities()

        self.assertEqual(summary['compensated'], 1)
        self.assertFalse(get_user_model().objects.filter(uid=saga.uid).exists())

    def test_stale_pending_saga_with_identity_is_marked_completed(self):
        student = make_student()
        saga = ProvisioningSaga.objects.create(uid=student.user.uid, email=student.email, role='student')
        ProvisioningSaga.objects.filter(pk=saga.pk).update(updated_at=timezone.now() - timedelta(hours=1))

        summary = reconcile_orphaned_identities()

        self.assertEqual(summary['completed'], 1)
        saga.refresh_from_db()
        self.assertEqual(saga.status, ProvisioningSaga.STATUS_COMPLETED)
