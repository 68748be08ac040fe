from datetime import date

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.core.utils.testing import make_admin, make_class, make_course, make_student, make_teacher

from .models import AttendanceRecord
from .services import (
    calculate_percentage,
    fold_attendance_records,
    get_aggregated_attendance,
    get_attendance_trend,
    import_attendance_records,
    save_attendance,
    student_attendance_percentage,
)


def _row(key, status='Present', program='B.Tech', branch='CSE', year=1, student_id=1):
    return {
        'record_key': key,
        'student_id': student_id,
        'status': status,
        'program': program,
        'branch': branch,
        'year': year,
    }


class PercentageTests(TestCase):
    def test_rounds_half_up_and_handles_zero_total(self):
        self.assertEqual(calculate_percentage(0, 0), 0)
        self.assertEqual(calculate_percentage(1, 8), 13)
        self.assertEqual(calculate_percentage(2, 3), 67)
        self.assertEqual(calculate_percentage(1, 3), 33)


class FoldAttendanceTests(TestCase):
    def test_duplicates_and_incomplete_rows_are_counted_and_excluded(self):
        rows = [
            _row('k1', 'Present'),
            _row('k2', 'Absent'),
            _row('k1', 'Absent'),
            _row('k3', status=None),
        ]

        report = fold_attendance_records(rows)

        self.assertEqual(report['duplicate_count'], 1)
        self.assertEqual(report['incomplete_count'], 1)
        self.assertEqual(report['total_records'], 4)
        self.assertEqual(report['overall']['total_classes'], 2)
        self.assertEqual(report['overall']['total_present'], 1)
        self.assertEqual(report['overall']['percentage'], 50)

    def test_groups_by_program_branch_and_year(self):
        rows = [
            _row('a', 'Present', branch='CSE', year=1),
            _row('b', 'Absent', branch='CSE', year=1),
            _row('c', 'Present', branch='CSE', year=2),
            _row('d', 'Present', branch='ECE', year=1),
            _row('e', 'Present', program='MBA', branch='Finance', year=1),
        ]

        report = fold_attendance_records(rows)

        btech = report['by_program']['B.Tech']
        self.assertEqual(btech['total_classes'], 4)
        self.assertEqual(btech['branches']['CSE']['years']['1']['percentage'], 50)
        self.assertEqual(btech['branches']['CSE']['years']['2']['percentage'], 100)
        self.assertEqual(btech['branches']['ECE']['total_present'], 1)
        self.assertEqual(report['by_program']['MBA']['branches']['Finance']['percentage'], 100)
        self.assertEqual(report['overall']['percentage'], 80)

    def test_unknown_status_counts_as_incomplete(self):
        report = fold_attendance_records([_row('a', 'Late'), _row('b', '')])
        self.assertEqual(report['incomplete_count'], 2)
        self.assertEqual(report['overall']['total_classes'], 0)
        self.assertEqual(report['overall']['percentage'], 0)


class AttendanceBaseTestCase(TestCase):
    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course('CS101')
        self.first = make_student(name='Asha Rao')
        self.second = make_student(name='Vikram Shah')
        self.college_class = make_class(course=self.course, teacher=self.teacher, students=[self.first, self.second])


class SaveAttendanceTests(AttendanceBaseTestCase):
    def test_resubmitting_a_period_overwrites_statuses(self):
        day = date(2026, 3, 2)
        save_attendance(
            college_class=self.college_class,
            marked_by=self.teacher.user,
            date=day,
            period=1,
            entries={self.first.doc_id: 'Present', self.second.doc_id: 'Absent'},
        )
        save_attendance(
            college_class=self.college_class,
            marked_by=self.teacher.user,
            date=day,
            period=1,
            entries={self.first.doc_id: 'Absent'},
        )

        self.assertEqual(AttendanceRecord.objects.count(), 2)
        record = AttendanceRecord.objects.get(student=self.first)
        self.assertEqual(record.status, 'Absent')
        self.assertEqual(record.course_code, 'CS101')
        self.assertEqual(record.program, 'B.Tech')

    def test_rejects_other_teachers_and_unknown_students(self):
        other = make_teacher(name='Other Teacher')
        with self.assertRaisesMessage(ValidationError, 'not assigned'):
            save_attendance(
                college_class=self.college_class,
                marked_by=other.user,
                date=date(2026, 3, 2),
                period=1,
                entries={self.first.doc_id: 'Present'},
            )

        outsider = make_student(name='Not Enrolled')
        with self.assertRaisesMessage(ValidationError, outsider.doc_id):
            save_attendance(
                college_class=self.college_class,
                marked_by=self.teacher.user,
                date=date(2026, 3, 2),
                period=1,
                entries={outsider.doc_id: 'Present'},
            )

    def test_student_percentage_is_none_without_records(self):
        self.assertIsNone(student_attendance_percentage(self.first))

        for period, status in enumerate(['Present', 'Present', 'Absent'], start=1):
            save_attendance(
                college_class=self.college_class,
                marked_by=self.teacher.user,
                date=date(2026, 3, 2),
                period=period,
                entries={self.first.doc_id: status},
            )
        self.assertEqual(student_attendance_percentage(self.first), 67)


class AggregatedReportTests(AttendanceBaseTestCase):
    def test_imported_duplicates_show_up_in_report(self):
        rows = [
            {'college_id': self.first.college_id, 'date': '2026-03-02', 'class_id': self.college_class.pk, 'status': 'Present'},
            {'college_id': self.first.college_id, 'date': '2026-03-02', 'class_id': self.college_class.pk, 'status': 'Present'},
            {'college_id': self.second.college_id, 'date': '2026-03-02', 'class_id': self.college_class.pk},
            {'college_id': 'UNKNOWN', 'date': '2026-03-02'},
        ]

        result = import_attendance_records(rows=rows)
        report = get_aggregated_attendance()

        self.assertEqual(result, {'created': 3, 'skipped': 1})
        self.assertEqual(report['duplicate_count'], 1)
        self.assertEqual(report['incomplete_count'], 1)
        self.assertEqual(report['overall']['total_classes'], 1)
        self.assertEqual(report['overall']['percentage'], 100)

    def test_trend_covers_requested_months(self):
        save_attendance(
            college_class=self.college_class,
            marked_by=self.teacher.user,
            date=date(2026, 3, 2),
            period=1,
            entries={self.first.doc_id: 'Present', self.second.doc_id: 'Absent'},
        )

        trend = get_attendance_trend(months=3, today=date(2026, 4, 15))

        self.assertEqual([month['month'] for month in trend], ['2026-02', '2026-03', '2026-04'])
        self.assertEqual(trend[1]['percentage'], 50)
        self.assertEqual(trend[0]['total_classes'], 0)


class AttendanceViewTests(AttendanceBaseTestCase):
    def test_report_requires_admin(self):
        self.client.force_login(self.teacher.user)
        response = self.client.get(reverse('attendance_report'))
        self.assertEqual(response.status_code, 403)
        self.assertFalse(response.json()['success'])

        self.client.force_login(make_admin().user)
        response = self.client.get(reverse('attendance_report'))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['success'])
        self.assertIn('overall', response.json()['report'])

    def test_teacher_saves_attendance_via_json(self):
        self.client.force_login(self.teacher.user)
        response = self.client.post(
            reverse('attendance_save', args=[self.college_class.pk]),
            data={
                'date': '2026-03-02',
                'period': 2,
                'entries': {self.first.doc_id: 'Present', self.second.doc_id: 'Present'},
            },
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200, response.content)
        self.assertTrue(response.json()['success'])
        self.assertEqual(AttendanceRecord.objects.filter(period=2).count(), 2)
