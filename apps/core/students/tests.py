from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.core.attendance.models import AttendanceRecord
from apps.core.exams.models import Mark
from apps.core.fees.models import FeeLedger
from apps.core.notifications.models import Notification
from apps.core.sequences.services import ensure_counter_at_least, peek_sequence
from apps.core.users.models import Identity, ProvisioningSaga
from apps.core.users.provisioning import AlreadyRegistered
from apps.core.utils.testing import make_admin, make_class, make_course, make_student, make_teacher, make_user

from .models import Student
from .services import (
    create_student_account,
    delete_student,
    get_sections_for_branch,
    get_student_performance_data,
    get_student_profile_details,
    get_student_profile_for_teacher,
    student_self_register,
    update_student,
)


def _create(**overrides):
    values = {
        'name': 'Asha Rao',
        'email': 'asha@example.com',
        'program': 'B.Tech',
        'branch': 'CSE',
        'batch': '2024-2028',
        'dob': date(2005, 3, 7),
    }
    values.update(overrides)
    return create_student_account(**values)


class CreateStudentTests(TestCase):
    def test_creates_identity_profile_ledger_and_claims(self):
        result = _create()

        student = result['student']
        self.assertEqual(result['college_id'], 'BT24CS0001')
        self.assertEqual(result['initial_password'], 'ASH0703')
        self.assertEqual(student.section, 'A')
        self.assertEqual(student.status, Student.STATUS_ACTIVE)
        self.assertEqual(student.initials, 'AR')

        user = get_user_model().objects.get(email='asha@example.com')
        self.assertTrue(user.check_password('ASH0703'))
        self.assertEqual(user.claims, {'role': 'student', 'student_doc_id': student.doc_id, 'college_id': 'BT24CS0001'})
        self.assertEqual(Identity.objects.get(user=user).college_id, 'BT24CS0001')

        ledger = FeeLedger.objects.get(student=student)
        self.assertEqual(ledger.total_fees, Decimal('150000.00'))
        self.assertEqual(ledger.status, FeeLedger.STATUS_PENDING)

    def test_serials_increase_and_roll_into_next_section(self):
        _create()
        self.assertEqual(_create(name='Vikram Shah', email='vikram@example.com')['college_id'], 'BT24CS0002')

        ensure_counter_at_least('student_BT24CS', 30)
        result = _create(name='Neha Das', email='neha@example.com')

        self.assertEqual(result['college_id'], 'BT24CS0031')
        self.assertEqual(result['student'].section, 'B')

    def test_duplicate_email_does_not_consume_a_serial(self):
        make_user('taken@example.com')

        with self.assertRaises(AlreadyRegistered):
            _create(email='taken@example.com')

        self.assertEqual(peek_sequence('student_BT24CS'), 0)

    def test_missing_date_of_birth_is_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'date of birth'):
            _create(dob=None)

    def test_failed_profile_write_rolls_back_the_identity(self):
        with mock.patch('apps.core.students.services.create_fee_ledger', side_effect=RuntimeError('ledger write failed')):
            with self.assertRaises(RuntimeError):
                _create()

        self.assertFalse(get_user_model().objects.filter(email='asha@example.com').exists())
        self.assertFalse(Student.objects.exists())
        self.assertEqual(ProvisioningSaga.objects.get().status, ProvisioningSaga.STATUS_COMPENSATED)


class SelfRegistrationTests(TestCase):
    def test_registration_is_pending_and_bumps_counter(self):
        admin = make_admin()

        with self.captureOnCommitCallbacks(execute=True):
            student = student_self_register(
                name='Kiran Patel',
                email='kiran@example.com',
                password='secret123',
                college_id='bt24cs0040',
                program='B.Tech',
                branch='CSE',
                batch='2024-2028',
            )

        self.assertEqual(student.college_id, 'BT24CS0040')
        self.assertEqual(student.status, Student.STATUS_PENDING_APPROVAL)
        self.assertEqual(student.section, 'B')
        self.assertEqual(peek_sequence('student_BT24CS'), 40)
        self.assertTrue(Notification.objects.filter(recipient=admin.user, title='New Student Registration').exists())
        self.assertEqual(_create(email='next@example.com')['college_id'], 'BT24CS0041')

    def test_taken_college_id_is_rejected(self):
        make_student(college_id='BT24CS0005')
        with self.assertRaises(AlreadyRegistered):
            student_self_register(
                name='Kiran Patel',
                email='kiran@example.com',
                password='secret123',
                college_id='BT24CS0005',
                program='B.Tech',
                branch='CSE',
                batch='2024-2028',
            )


class UpdateStudentTests(TestCase):
    def setUp(self):
        self.student = _create()['student']

    def test_branch_change_regenerates_college_id_everywhere(self):
        student = update_student(student=self.student, branch='ECE')

        self.assertEqual(student.college_id, 'BT24EC0001')
        self.assertEqual(peek_sequence('student_BT24EC'), 1)
        student.user.refresh_from_db()
        self.assertEqual(student.user.claims['college_id'], 'BT24EC0001')
        self.assertEqual(Identity.objects.get(user=student.user).branch, 'ECE')
        self.assertEqual(FeeLedger.objects.get(student=student).college_id, 'BT24EC0001')

    def test_taken_serial_in_new_cohort_draws_a_fresh_one(self):
        make_student(college_id='BT24EC0001', branch='ECE')
        ensure_counter_at_least('student_BT24EC', 1)

        student = update_student(student=self.student, branch='ECE')

        self.assertEqual(student.college_id, 'BT24EC0002')

    def test_email_change_updates_login(self):
        update_student(student=self.student, email='Asha.Rao@Example.com', name='Asha R. Rao')

        user = get_user_model().objects.get(pk=self.student.user_id)
        self.assertEqual(user.email, 'asha.rao@example.com')
        self.assertEqual(user.username, 'asha.rao@example.com')
        self.assertEqual(user.first_name, 'Asha')
        self.assertEqual(Identity.objects.get(user=user).name, 'Asha R. Rao')

    def test_email_taken_by_another_account_is_rejected(self):
        make_user('other@example.com')
        with self.assertRaises(AlreadyRegistered):
            update_student(student=self.student, email='other@example.com')

    def test_unknown_fields_are_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'college_id'):
            update_student(student=self.student, college_id='XX')


class DeleteStudentTests(TestCase):
    def test_removes_profile_identity_and_enrollments(self):
        student = _create()['student']
        course = make_course('CS101')
        college_class = make_class(course=course, teacher=make_teacher(), students=[student])
        user_id = student.user_id

        delete_student(student=student)

        self.assertFalse(Student.objects.exists())
        self.assertFalse(FeeLedger.objects.exists())
        self.assertFalse(Identity.objects.filter(user_id=user_id).exists())
        self.assertFalse(get_user_model().objects.filter(pk=user_id).exists())
        self.assertEqual(college_class.students.count(), 0)


class StudentQueryTests(TestCase):
    def test_sections_are_counted_per_branch(self):
        make_student(section='A')
        make_student(section='A')
        make_student(section='B')
        make_student(branch='ECE', section='A')

        sections = get_sections_for_branch(program='B.Tech', branch='CSE')

        self.assertEqual(sections, [{'section': 'A', 'student_count': 2}, {'section': 'B', 'student_count': 1}])

    def test_profile_details_tolerate_missing_records(self):
        student = make_student()

        details = get_student_profile_details(student)

        self.assertIsNone(details['attendance_percentage'])
        self.assertIsNone(details['cgpa'])
        self.assertIsNone(details['fees'])
        self.assertFalse(details['hostel']['allocated'])
        self.assertEqual(details['enrolled_courses'], [])

    def test_teacher_only_sees_students_they_teach(self):
        student = make_student()
        teacher = make_teacher()
        stranger = make_teacher(name='Other Teacher')
        make_class(course=make_course('CS101'), teacher=teacher, students=[student])

        details = get_student_profile_for_teacher(teacher_user=teacher.user, student=student)
        self.assertEqual(details['college_id'], student.college_id)
        with self.assertRaises(ValidationError):
            get_student_profile_for_teacher(teacher_user=stranger.user, student=student)


class StudentViewTests(TestCase):
    def test_admin_creates_student_over_json(self):
        self.client.force_login(make_admin().user)

        response = self.client.post(
            reverse('student_create'),
            data={
                'name': 'Asha Rao',
                'email': 'asha@example.com',
                'program': 'B.Tech',
                'branch': 'CSE',
                'batch': '2024-2028',
                'dob': '2005-03-07',
            },
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.json()['college_id'], 'BT24CS0001')
        self.assertEqual(response.json()['initial_password'], 'ASH0703')

    def test_students_cannot_list_students(self):
        student = make_student()
        self.client.force_login(student.user)
        response = self.client.get(reverse('student_list'))
        self.assertEqual(response.status_code, 403)

    def test_partial_update_only_touches_submitted_fields(self):
        student = make_student(phone='111')
        self.client.force_login(make_admin().user)

        response = self.client.post(
            reverse('student_update', args=[student.doc_id]),
            data={'semester': 3},
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200, response.content)
        student.refresh_from_db()
        self.assertEqual(student.semester, 3)
        self.assertEqual(student.phone, '111')


class StudentPerformanceTests(TestCase):
    def setUp(self):
        self.student = make_student()
        Mark.objects.create(
            student=self.student,
            course=make_course('CS101', credits=4),
            semester=1,
            internal_marks=Decimal('24.00'),
            external_marks=Decimal('58.00'),
            total_marks=Decimal('82.00'),
            grade='A',
            credits=4,
        )
        Mark.objects.create(student=self.student, course=make_course('CS102'), semester=1, grade='B', credits=3)

        today = timezone.localdate()
        last_month = today.replace(day=1) - timedelta(days=1)
        statuses = [(today, 'Present'), (today, 'Present'), (today, 'Absent'), (last_month, 'Present')]
        for period, (day, status) in enumerate(statuses, start=1):
            AttendanceRecord.objects.create(
                record_key=f"perf_{period}",
                student=self.student,
                date=day,
                period=period,
                status=status,
            )
        self.labels = (last_month.strftime('%b'), today.strftime('%b'))

    def test_marks_per_course_and_attendance_by_month(self):
        performance = get_student_performance_data(self.student)

        self.assertEqual(
            [(row['subject'], row['total'], row['credits']) for row in performance['marks_data']],
            [('CS101', Decimal('82.00'), 4), ('CS102', Decimal('0.00'), 3)],
        )
        self.assertEqual(performance['marks_data'][1]['internals'], Decimal('0.00'))
        self.assertEqual(
            performance['attendance_data'],
            [{'month': self.labels[0], 'percentage': 100}, {'month': self.labels[1], 'percentage': 67}],
        )

    def test_performance_endpoints(self):
        self.client.force_login(self.student.user)
        mine = self.client.get(reverse('student_my_performance'))

        self.assertEqual(mine.status_code, 200)
        self.assertEqual(len(mine.json()['performance']['marks_data']), 2)
        self.assertEqual(self.client.get(reverse('student_performance', args=[self.student.doc_id])).status_code, 403)

        self.client.force_login(make_admin().user)
        response = self.client.get(reverse('student_performance', args=[self.student.doc_id]))
        self.assertEqual(response.json()['performance']['marks_data'][0]['subject'], 'CS101')
