from unittest import mock

from django.test import TestCase
from django.urls import reverse

from apps.core.fees.services import create_fee_ledger
from apps.core.students.models import Student
from apps.core.users.models import AuditLog
from apps.core.utils.testing import make_admin, make_class, make_course, make_student, make_teacher

from .services import get_admin_dashboard_data, get_student_dashboard_data, get_teacher_dashboard_data


class AdminDashboardTests(TestCase):
    def setUp(self):
        self.admin = make_admin()
        make_student(branch='CSE')
        make_student(branch='CSE')
        make_student(branch='ECE')
        make_student(status=Student.STATUS_PENDING_APPROVAL)

    def test_counts_and_distribution(self):
        data = get_admin_dashboard_data()

        self.assertEqual(data['unavailable'], [])
        self.assertEqual(data['counts']['students'], 3)
        self.assertEqual(data['counts']['pending_students'], 1)
        self.assertEqual(
            data['branch_distribution'],
            [
                {'program': 'B.Tech', 'branch': 'CSE', 'students': 2},
                {'program': 'B.Tech', 'branch': 'ECE', 'students': 1},
            ],
        )
        self.assertEqual(len(data['attendance_trend']), 6)

    def test_failing_block_does_not_blank_the_dashboard(self):
        with mock.patch('apps.core.reports.services.get_fee_summary', side_effect=RuntimeError('boom')):
            with self.assertLogs('apps.core.reports.services', level='ERROR'):
                data = get_admin_dashboard_data()

        self.assertIsNone(data['fees'])
        self.assertEqual(data['unavailable'], ['fees'])
        self.assertEqual(data['counts']['students'], 3)

    def test_recent_logins_come_from_audit_log(self):
        AuditLog.objects.create(user=self.admin.user, action='user.login', ip_address='10.0.0.1')
        AuditLog.objects.create(user=self.admin.user, action='user.logout')

        logins = get_admin_dashboard_data()['recent_logins']

        self.assertEqual(len(logins), 1)
        self.assertEqual(logins[0]['name'], self.admin.name)
        self.assertEqual(logins[0]['ip_address'], '10.0.0.1')

    def test_endpoint_is_admin_only(self):
        self.client.force_login(self.admin.user)
        self.assertEqual(self.client.get(reverse('admin_dashboard')).status_code, 200)

        self.client.force_login(make_teacher().user)
        self.assertEqual(self.client.get(reverse('admin_dashboard')).status_code, 403)


class PersonalDashboardTests(TestCase):
    def setUp(self):
        self.teacher = make_teacher()
        self.first = make_student()
        self.second = make_student()
        make_class(course=make_course('CS101'), teacher=self.teacher, students=[self.first, self.second])
        make_class(course=make_course('CS102'), teacher=self.teacher, students=[self.first])

    def test_teacher_counts_distinct_students(self):
        data = get_teacher_dashboard_data(self.teacher.user)

        self.assertEqual(data['student_count'], 2)
        self.assertEqual(len(data['classes']), 2)
        self.assertEqual(data['unavailable'], [])

    def test_student_dashboard_without_ledger(self):
        data = get_student_dashboard_data(self.first)

        self.assertIsNone(data['fees'])
        self.assertIsNone(data['cgpa'])
        self.assertEqual(data['unavailable'], [])

    def test_student_dashboard_endpoint(self):
        create_fee_ledger(student=self.first, total_fees=1000)
        self.client.force_login(self.first.user)

        response = self.client.get(reverse('student_dashboard'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['dashboard']['fees']['balance'], '1000.00')
