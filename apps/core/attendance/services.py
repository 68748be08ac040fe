from __future__ import annotations

import csv
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from io import StringIO

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q
from django.db.models.functions import TruncMonth
from django.utils import timezone

from apps.core.academics.models import CollegeClass
from apps.core.students.models import Student

from .models import AttendanceRecord, attendance_record_key

logger = logging.getLogger(__name__)

VALID_STATUSES = {AttendanceRecord.STATUS_PRESENT, AttendanceRecord.STATUS_ABSENT}
REQUIRED_FIELDS = ('record_key', 'student_id', 'status', 'program', 'branch', 'year')


def calculate_percentage(present, total) -> int:
    if not total:
        return 0
    value = Decimal(present) * Decimal('100') / Decimal(total)
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _bucket():
    return {'total_classes': 0, 'total_present': 0}


def _add(bucket, present):
    bucket['total_classes'] += 1
    if present:
        bucket['total_present'] += 1


def _finish(bucket):
    bucket['percentage'] = calculate_percentage(bucket['total_present'], bucket['total_classes'])
    return bucket


def _is_incomplete(row):
    for field in REQUIRED_FIELDS:
        value = row.get(field)
        if value is None or value == '':
            return True
    return row.get('status') not in VALID_STATUSES


def fold_attendance_records(rows):
    """Fold attendance rows into program -> branch -> year totals.

    Rows missing a required field are skipped and counted as incomplete; a
    ``record_key`` seen before is skipped and counted as a duplicate. Neither
    contributes to any percentage.
    """
    overall = _bucket()
    by_program = {}
    seen_keys = set()
    total_records = 0
    incomplete_count = 0
    duplicate_count = 0

    for row in rows:
        total_records += 1
        if _is_incomplete(row):
            incomplete_count += 1
            continue

        key = row['record_key']
        if key in seen_keys:
            duplicate_count += 1
            continue
        seen_keys.add(key)

        present = row['status'] == AttendanceRecord.STATUS_PRESENT
        program = by_program.setdefault(row['program'], {**_bucket(), 'branches': {}})
        branch = program['branches'].setdefault(row['branch'], {**_bucket(), 'years': {}})
        year = branch['years'].setdefault(str(row['year']), _bucket())

        for bucket in (overall, program, branch, year):
            _add(bucket, present)

    for program in by_program.values():
        _finish(program)
        for branch in program['branches'].values():
            _finish(branch)
            for year in branch['years'].values():
                _finish(year)

    return {
        'overall': _finish(overall),
        'by_program': by_program,
        'total_records': total_records,
        'incomplete_count': incomplete_count,
        'duplicate_count': duplicate_count,
    }


def get_aggregated_attendance(*, limit=None):
    """Re-scan the most recent window of attendance rows and fold them."""
    limit = limit or settings.ATTENDANCE_REPORT_WINDOW
    rows = (
        AttendanceRecord.objects.order_by('-date', '-id')
        .values(*REQUIRED_FIELDS)[:limit]
    )
    report = fold_attendance_records(rows)
    if report['incomplete_count'] or report['duplicate_count']:
        logger.info(
            'Attendance report skipped %s incomplete and %s duplicate rows out of %s.',
            report['incomplete_count'],
            report['duplicate_count'],
            report['total_records'],
        )
    report['window'] = limit
    return report


def aggregated_attendance_csv(report) -> bytes:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(['Program', 'Branch', 'Year', 'Total Classes', 'Present', 'Percentage'])
    for program_name, program in sorted(report['by_program'].items()):
        for branch_name, branch in sorted(program['branches'].items()):
            for year_name, year in sorted(branch['years'].items()):
                writer.writerow([
                    program_name,
                    branch_name,
                    year_name,
                    year['total_classes'],
                    year['total_present'],
                    year['percentage'],
                ])
    overall = report['overall']
    writer.writerow(['All', '', '', overall['total_classes'], overall['total_present'], overall['percentage']])
    return output.getvalue().encode('utf-8')


def _ensure_can_mark(user, college_class: CollegeClass):
    if user.role == 'admin':
        return
    if college_class.teacher_id != user.pk:
        raise ValidationError('You are not assigned to this class.')


@transaction.atomic
def save_attendance(*, college_class: CollegeClass, marked_by, date, period, entries):
    """Upsert one status per student for a class period.

    ``entries`` maps student document ids to ``Present``/``Absent``. Records are
    keyed on (class, date, period, student) so re-submitting a period overwrites it.
    """
    _ensure_can_mark(marked_by, college_class)

    if not entries:
        raise ValidationError('No attendance entries were submitted.')
    invalid = sorted({status for status in entries.values() if status not in VALID_STATUSES})
    if invalid:
        raise ValidationError(f"Invalid attendance status: {', '.join(invalid)}.")

    roster_ids = set(college_class.students.values_list('pk', flat=True))
    students = {
        student.doc_id: student
        for student in Student.objects.filter(doc_id__in=list(entries), user_id__in=roster_ids)
    }
    unknown = sorted(set(entries) - set(students))
    if unknown:
        raise ValidationError(f"Students not enrolled in this class: {', '.join(unknown)}.")

    course_code = college_class.course.course_id
    saved = 0
    for doc_id, status in entries.items():
        student = students[doc_id]
        key = attendance_record_key(college_class.pk, date.isoformat(), period, doc_id)
        values = {
            'college_class': college_class,
            'teacher': marked_by,
            'student': student,
            'date': date,
            'period': period,
            'status': status,
            'program': college_class.program,
            'branch': college_class.branch,
            'year': college_class.year,
            'semester': college_class.semester,
            'course_code': course_code,
        }
        existing = AttendanceRecord.objects.filter(record_key=key).order_by('id').first()
        if existing is None:
            AttendanceRecord.objects.create(record_key=key, **values)
        else:
            for field, value in values.items():
                setattr(existing, field, value)
            existing.save()
        saved += 1
    return saved


def import_attendance_records(*, rows):
    """Append externally captured rows as-is; returns created and skipped counts.

    Each row carries ``college_id``, ``date`` and optionally ``class_id``,
    ``period``, ``status`` and ``course_code``. Rows for unknown students are skipped.
    """
    college_ids = {row.get('college_id') for row in rows if row.get('college_id')}
    students = {student.college_id: student for student in Student.objects.filter(college_id__in=college_ids)}
    classes = {
        college_class.pk: college_class
        for college_class in CollegeClass.objects.select_related('course').filter(
            pk__in=[row.get('class_id') for row in rows if row.get('class_id')]
        )
    }

    records = []
    skipped = 0
    for row in rows:
        student = students.get(row.get('college_id'))
        if student is None or not row.get('date'):
            skipped += 1
            continue

        college_class = classes.get(row.get('class_id'))
        record_date = row['date']
        if isinstance(record_date, str):
            record_date = date.fromisoformat(record_date)
        period = int(row.get('period') or 1)
        records.append(
            AttendanceRecord(
                record_key=attendance_record_key(
                    college_class.pk if college_class else 'import',
                    record_date.isoformat(),
                    period,
                    student.doc_id,
                ),
                college_class=college_class,
                student=student,
                date=record_date,
                period=period,
                status=row.get('status') or '',
                program=student.program,
                branch=student.branch,
                year=student.year,
                semester=student.semester,
                course_code=row.get('course_code') or (college_class.course.course_id if college_class else ''),
            )
        )

    AttendanceRecord.objects.bulk_create(records)
    if skipped:
        logger.warning('Attendance import skipped %s rows with unknown students or missing dates.', skipped)
    return {'created': len(records), 'skipped': skipped}


def _counted(queryset):
    return queryset.filter(status__in=VALID_STATUSES).aggregate(
        total=Count('id'),
        present=Count('id', filter=Q(status=AttendanceRecord.STATUS_PRESENT)),
    )


def student_attendance_percentage(student: Student):
    """Whole-number attendance percentage, or None when nothing has been recorded."""
    totals = _counted(AttendanceRecord.objects.filter(student=student))
    if not totals['total']:
        return None
    return calculate_percentage(totals['present'], totals['total'])


def _month_start(value, months_back):
    month_index = value.month - 1 - months_back
    return date(value.year + month_index // 12, month_index % 12 + 1, 1)


def get_attendance_trend(*, months=6, student=None, today=None):
    today = today or timezone.localdate()
    start = _month_start(today, months - 1)

    records = AttendanceRecord.objects.filter(date__gte=start, status__in=VALID_STATUSES)
    if student is not None:
        records = records.filter(student=student)

    monthly = {
        row['month'].strftime('%Y-%m'): row
        for row in records.annotate(month=TruncMonth('date')).values('month').annotate(
            total=Count('id'),
            present=Count('id', filter=Q(status=AttendanceRecord.STATUS_PRESENT)),
        )
    }

    trend = []
    for offset in range(months - 1, -1, -1):
        month = _month_start(today, offset)
        key = month.strftime('%Y-%m')
        row = monthly.get(key, {'total': 0, 'present': 0})
        trend.append({
            'month': key,
            'label': month.strftime('%b'),
            'total_classes': row['total'],
            'percentage': calculate_percentage(row['present'], row['total']),
        })
    return trend


def get_student_attendance_details(student: Student):
    records = AttendanceRecord.objects.filter(student=student)
    totals = _counted(records)

    by_course = []
    course_rows = (
        records.filter(status__in=VALID_STATUSES)
        .values('course_code')
        .annotate(
            total=Count('id'),
            present=Count('id', filter=Q(status=AttendanceRecord.STATUS_PRESENT)),
        )
        .order_by('course_code')
    )
    for row in course_rows:
        by_course.append({
            'course_code': row['course_code'],
            'total_classes': row['total'],
            'total_present': row['present'],
            'percentage': calculate_percentage(row['present'], row['total']),
        })

    return {
        'overall': {
            'total_classes': totals['total'],
            'total_present': totals['present'],
            'percentage': calculate_percentage(totals['present'], totals['total']),
        },
        'by_course': by_course,
        'recent': [
            {
                'date': record.date,
                'period': record.period,
                'course_code': record.course_code,
                'status': record.status,
            }
            for record in records.order_by('-date', 'period')[:50]
        ],
        'trend': get_attendance_trend(student=student),
    }


def get_attendance_for_slot(*, college_class: CollegeClass, date, period):
    """Roster for a class period with any status already recorded."""
    statuses = {
        record.student_id: record.status
        for record in AttendanceRecord.objects.filter(
            college_class=college_class,
            date=date,
            period=period,
        )
    }
    roster = Student.objects.filter(user__in=college_class.students.all()).order_by('college_id')
    return [
        {
            'student_id': student.doc_id,
            'college_id': student.college_id,
            'name': student.name,
            'status': statuses.get(student.pk, ''),
        }
        for student in roster
    ]
