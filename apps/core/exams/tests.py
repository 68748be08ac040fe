from datetime import date, time
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.core.attendance.models import AttendanceRecord
from apps.core.fees.services import create_fee_ledger
from apps.core.notifications.models import Notification
from apps.core.utils.testing import make_class, make_course, make_student, make_teacher

from .models import Backlog, ExamSchedule, HallTicket, Mark
from .services import (
    HallTicketBlocked,
    academic_year_for_semester,
    calculate_cgpa,
    fetch_student_backlogs,
    generate_hall_ticket_pdf,
    get_exam_schedules,
    get_hall_ticket,
    get_marks_for_class,
    grade_point,
    save_marks_for_class,
    schedule_exams_and_setup_hall_tickets,
)


class GradeHelperTests(TestCase):
    def test_academic_year_rounds_semesters_up(self):
        self.assertEqual(academic_year_for_semester(1), 1)
        self.assertEqual(academic_year_for_semester(2), 1)
        self.assertEqual(academic_year_for_semester(3), 2)
        self.assertEqual(academic_year_for_semester(8), 4)
        with self.assertRaises(ValidationError):
            academic_year_for_semester(0)

    def test_grade_points(self):
        self.assertEqual(grade_point(' a+ '), 9)
        self.assertEqual(grade_point('fail'), 0)
        self.assertIsNone(grade_point('Z'))


class ExamScheduleBaseTestCase(TestCase):
    def setUp(self):
        self.course = make_course('CS101', semester=1)
        self.second_course = make_course('CS102', name='Discrete Maths', semester=1)
        self.student = make_student()
        self.inactive = make_student(name='Left College', status='Inactive')

    def _publish(self, **overrides):
        values = {
            'exam_session_name': 'Mid Semester 2026',
            'program': 'B.Tech',
            'branch': 'CSE',
            'year': 1,
            'semester': 1,
            'exams': [
                {'course_id': 'CS102', 'date': date(2026, 3, 12), 'start_time': time(10), 'end_time': time(13)},
                {'course_id': 'CS101', 'date': date(2026, 3, 10), 'start_time': time(10), 'end_time': time(13), 'room': 'LH-1'},
            ],
        }
        values.update(overrides)
        return schedule_exams_and_setup_hall_tickets(**values)


class ScheduleExamsTests(ExamScheduleBaseTestCase):
    def test_creates_exams_and_hall_tickets_for_active_students(self):
        with self.captureOnCommitCallbacks(execute=True):
            result = self._publish()

        self.assertEqual(result, {'exams': 2, 'hall_tickets': 1})
        ticket = HallTicket.objects.get(student=self.student, semester=1)
        self.assertEqual([exam['course_code'] for exam in ticket.exams], ['CS101', 'CS102'])
        self.assertEqual(ticket.exams[0]['room'], 'LH-1')
        self.assertFalse(HallTicket.objects.filter(student=self.inactive).exists())
        self.assertTrue(Notification.objects.filter(recipient=self.student.user, title='Exam Schedule Published').exists())

    def test_republishing_replaces_the_hall_ticket(self):
        self._publish()
        self._publish(exam_session_name='Mid Semester 2026 (revised)')

        ticket = HallTicket.objects.get(student=self.student, semester=1)
        self.assertEqual(ticket.exam_session_name, 'Mid Semester 2026 (revised)')

    def test_unknown_courses_and_missing_times_are_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'Unknown courses: XX999'):
            self._publish(exams=[{'course_id': 'XX999', 'date': date(2026, 3, 10), 'start_time': time(10), 'end_time': time(13)}])
        with self.assertRaisesMessage(ValidationError, 'start time'):
            self._publish(exams=[{'course_id': 'CS101', 'date': date(2026, 3, 10), 'start_time': None, 'end_time': time(13)}])
        self.assertFalse(ExamSchedule.objects.exists())

    def test_malformed_rows_are_skipped_when_listing(self):
        self._publish()
        ExamSchedule.objects.create(
            exam_session_name='Broken',
            course_code='CS101',
            course_name='Data Structures',
            program='B.Tech',
            branch='CSE',
            year=1,
            semester=1,
        )

        with self.assertLogs('apps.core.exams.services', level='WARNING'):
            rows = get_exam_schedules(program='B.Tech', branch='CSE', year=1)

        self.assertEqual(len(rows), 2)


class HallTicketTests(ExamScheduleBaseTestCase):
    def setUp(self):
        super().setUp()
        self._publish()

    def test_no_attendance_and_no_ledger_is_eligible(self):
        ticket = get_hall_ticket(student=self.student)

        self.assertEqual(ticket['academic_year'], 1)
        self.assertEqual(ticket['eligibility']['attendance_percentage'], 100)
        self.assertEqual(ticket['eligibility']['fee_balance'], Decimal('0.00'))

    def test_outstanding_fees_block_the_ticket(self):
        create_fee_ledger(student=self.student, total_fees=1000)

        with self.assertRaises(HallTicketBlocked) as blocked:
            get_hall_ticket(student=self.student)

        self.assertIn('outstanding fees of INR 1000.00', blocked.exception.messages[0])

    def test_low_attendance_blocks_the_ticket(self):
        for period, status in enumerate(['Present', 'Absent', 'Absent', 'Absent'], start=1):
            AttendanceRecord.objects.create(
                record_key=f"k{period}",
                student=self.student,
                date=date(2026, 2, 2),
                period=period,
                status=status,
            )

        with self.assertRaises(HallTicketBlocked) as blocked:
            get_hall_ticket(student=self.student)

        self.assertEqual(len(blocked.exception.messages), 1)
        self.assertIn('Your attendance is 25%', blocked.exception.messages[0])

    def test_missing_ticket(self):
        with self.assertRaisesMessage(ValidationError, 'No hall ticket'):
            get_hall_ticket(student=self.student, semester=5)

    def test_pdf_is_rendered(self):
        pdf_bytes = generate_hall_ticket_pdf(student=self.student)
        self.assertTrue(pdf_bytes.startswith(b'%PDF'))

    def test_blocked_ticket_view_returns_403(self):
        create_fee_ledger(student=self.student, total_fees=500)
        self.client.force_login(self.student.user)

        response = self.client.get(reverse('exam_my_hall_ticket'))

        self.assertEqual(response.status_code, 403)
        self.assertIn('outstanding fees', response.json()['error'])


class MarksTests(TestCase):
    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course('CS101', credits=4)
        self.other_course = make_course('CS102', credits=2)
        self.student = make_student()
        self.college_class = make_class(course=self.course, teacher=self.teacher, students=[self.student])
        self.other_class = make_class(course=self.other_course, teacher=self.teacher, students=[self.student])

    def _grade(self, college_class, grade, **marks):
        return save_marks_for_class(
            college_class=college_class,
            recorded_by=self.teacher.user,
            entries=[{'student_id': self.student.doc_id, 'grade': grade, **marks}],
        )

    def test_fail_opens_backlog_and_pass_clears_it(self):
        self._grade(self.college_class, 'F')
        self.assertEqual([row['course_id'] for row in fetch_student_backlogs(self.student)], ['CS101'])

        self._grade(self.college_class, 'B+')

        self.assertEqual(fetch_student_backlogs(self.student), [])
        self.assertEqual(Backlog.objects.get().status, Backlog.STATUS_CLEARED)
        self.assertEqual(Mark.objects.count(), 1)

    def test_cgpa_is_credit_weighted(self):
        self.assertIsNone(calculate_cgpa(self.student))

        self._grade(self.college_class, 'O', internal_marks='28', external_marks='62.5')
        self._grade(self.other_class, 'C')

        self.assertEqual(calculate_cgpa(self.student), Decimal('8.00'))
        self.assertEqual(Mark.objects.get(course=self.course).total_marks, Decimal('90.50'))

    def test_rejects_bad_grades_strangers_and_other_teachers(self):
        with self.assertRaisesMessage(ValidationError, 'Invalid grade'):
            self._grade(self.college_class, 'Z')

        stranger = make_student(name='Not Enrolled')
        with self.assertRaisesMessage(ValidationError, 'not enrolled'):
            save_marks_for_class(
                college_class=self.college_class,
                recorded_by=self.teacher.user,
                entries=[{'student_id': stranger.doc_id, 'grade': 'A'}],
            )

        with self.assertRaisesMessage(ValidationError, 'not assigned'):
            save_marks_for_class(
                college_class=self.college_class,
                recorded_by=make_teacher(name='Other Teacher').user,
                entries=[{'student_id': self.student.doc_id, 'grade': 'A'}],
            )

    def test_negative_marks_are_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'negative'):
            self._grade(self.college_class, 'A', internal_marks=-1)

    def test_class_marks_are_keyed_by_student_for_prefill(self):
        self.assertEqual(get_marks_for_class(self.college_class), {})

        self._grade(self.college_class, 'A', internal_marks='25', external_marks='55')
        self._grade(self.other_class, 'B')

        entries = get_marks_for_class(self.college_class)
        mark = Mark.objects.get(course=self.course)
        self.assertEqual(list(entries), [self.student.doc_id])
        self.assertEqual(entries[self.student.doc_id]['record_id'], mark.pk)
        self.assertEqual(entries[self.student.doc_id]['total_marks'], Decimal('80.00'))
        self.assertEqual(entries[self.student.doc_id]['grade'], 'A')

    def test_class_marks_endpoint_returns_entries_to_the_assigned_teacher(self):
        self._grade(self.college_class, 'A')
        self.client.force_login(self.teacher.user)

        response = self.client.get(reverse('exam_class_marks', args=[self.college_class.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['entries'][self.student.doc_id]['grade'], 'A')
        self.client.force_login(make_teacher(name='Other Teacher').user)
        self.assertEqual(self.client.get(reverse('exam_class_marks', args=[self.college_class.pk])).status_code, 403)
