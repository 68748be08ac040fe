from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count

from apps.core.notifications.dispatch import enqueue
from apps.core.notifications.services import notify_uids
from apps.core.students.models import Student

from .models import DAY_CHOICES, CollegeClass, Course, Material

logger = logging.getLogger(__name__)

WEEK_DAYS = [day for day, _ in DAY_CHOICES]
TIME_SLOTS = (
    ('09:00', '10:00'),
    ('10:00', '11:00'),
    ('11:15', '12:15'),
    ('12:15', '13:15'),
    ('14:00', '15:00'),
    ('15:00', '16:00'),
)
SLOTS_PER_CLASS = 3


def course_as_dict(course: Course):
    return {
        'id': course.pk,
        'course_id': course.course_id,
        'name': course.name,
        'program': course.program,
        'branch': course.branch,
        'semester': course.semester,
        'credits': course.credits,
        'description': course.description,
    }


def get_grouped_courses():
    grouped = {}
    for course in Course.objects.order_by('program', 'branch', 'semester', 'course_id'):
        branches = grouped.setdefault(course.program, {})
        semesters = branches.setdefault(course.branch, {})
        semesters.setdefault(str(course.semester), []).append(course_as_dict(course))
    return grouped


def get_courses_for_selection(*, program=None, branch=None, semester=None):
    courses = Course.objects.for_cohort(program=program, branch=branch)
    if semester:
        courses = courses.filter(semester=semester)
    return [
        {'id': course.pk, 'course_id': course.course_id, 'name': course.name, 'semester': course.semester}
        for course in courses.order_by('semester', 'course_id')
    ]


@transaction.atomic
def save_course(*, course_id, name, program, branch, semester, credits=3, description='', course=None):
    course_id = (course_id or '').strip().upper()
    duplicate = Course.objects.filter(course_id=course_id)
    if course is not None:
        duplicate = duplicate.exclude(pk=course.pk)
    if duplicate.exists():
        raise ValidationError(f"A course with ID {course_id} already exists.")

    course = course or Course()
    course.course_id = course_id
    course.name = name.strip()
    course.program = program
    course.branch = branch
    course.semester = semester
    course.credits = credits
    course.description = description or ''
    course.save()
    return course


def delete_course(course: Course):
    if course.classes.exists():
        raise ValidationError('This course is used by one or more classes. Delete those classes first.')
    course.delete()


def _resolve_teacher(teacher_user):
    user_model = get_user_model()
    if teacher_user is None or not isinstance(teacher_user, user_model):
        raise ValidationError('Selected teacher not found.')
    if teacher_user.role != 'teacher' or not hasattr(teacher_user, 'teacher_profile'):
        raise ValidationError('Selected teacher not found.')
    return teacher_user


def _cohort_students(*, program, branch, year, section):
    return Student.objects.for_cohort(
        program=program,
        branch=branch,
        year=year,
        section=section,
    ).filter(status=Student.STATUS_ACTIVE, user__isnull=False)


def _teacher_name(user):
    if user is None:
        return None
    profile = getattr(user, 'teacher_profile', None)
    return profile.name if profile else user.get_full_name() or user.email


def class_as_dict(college_class: CollegeClass, student_count=None):
    return {
        'id': college_class.pk,
        'name': college_class.display_name,
        'program': college_class.program,
        'branch': college_class.branch,
        'section': college_class.section,
        'year': college_class.year,
        'semester': college_class.semester,
        'course_id': college_class.course.course_id,
        'course_name': college_class.course.name,
        'teacher_uid': college_class.teacher.uid if college_class.teacher_id else None,
        'teacher_name': _teacher_name(college_class.teacher),
        'student_count': student_count if student_count is not None else college_class.students.count(),
    }


@transaction.atomic
def create_class(*, program, branch, section, year, semester, course: Course, teacher_user):
    teacher_user = _resolve_teacher(teacher_user)
    section = (section or '').strip().upper()

    if CollegeClass.objects.filter(
        program=program,
        year=year,
        semester=semester,
        section=section,
        course=course,
    ).exists():
        raise ValidationError(
            f"A class for {course.course_id} already exists for {program} year {year}, "
            f"semester {semester}, section {section}."
        )

    student_users = [
        student.user
        for student in _cohort_students(program=program, branch=branch, year=year, section=section).select_related('user')
    ]
    if not student_users:
        raise ValidationError(
            f"No active students found for {program} {branch}, year {year}, section {section}."
        )

    college_class = CollegeClass.objects.create(
        program=program,
        branch=branch,
        section=section,
        year=year,
        semester=semester,
        course=course,
        teacher=teacher_user,
    )
    college_class.students.set(student_users)

    enqueue('chat.sync_room_for_class', class_id=college_class.pk)
    notify_uids(
        [teacher_user.uid],
        title='New Class Assigned',
        message=f"You have been assigned {course.name} for {college_class.display_name}.",
        type='task',
        link='/teacher/classes',
    )
    return college_class


def get_classes_with_details(*, program=None, branch=None, year=None):
    classes = (
        CollegeClass.objects.for_cohort(program=program, branch=branch, year=year)
        .select_related('course', 'teacher__teacher_profile')
        .annotate(student_total=Count('students'))
    )
    return [class_as_dict(item, student_count=item.student_total) for item in classes]


def get_class_details(college_class: CollegeClass):
    data = class_as_dict(college_class)
    data['students'] = get_students_for_class(college_class)
    return data


@transaction.atomic
def update_teacher_for_class(*, college_class: CollegeClass, teacher_user):
    teacher_user = _resolve_teacher(teacher_user)
    previous_teacher_id = college_class.teacher_id
    college_class.teacher = teacher_user
    college_class.save(update_fields=['teacher', 'updated_at'])

    enqueue('chat.sync_room_for_class', class_id=college_class.pk)
    if previous_teacher_id != teacher_user.pk:
        notify_uids(
            [teacher_user.uid],
            title='New Class Assigned',
            message=f"You have been assigned {college_class.course.name} for {college_class.display_name}.",
            type='task',
            link='/teacher/classes',
        )
    return college_class


def delete_class(college_class: CollegeClass):
    # Chat room and materials cascade; attendance keeps its denormalized copy.
    college_class.delete()


def get_available_sections(*, program, branch, year=None):
    students = Student.objects.for_cohort(program=program, branch=branch, year=year).exclude(section='')
    return sorted(set(students.values_list('section', flat=True)))


def get_students_for_class(college_class: CollegeClass):
    students = Student.objects.filter(user__in=college_class.students.all()).order_by('college_id')
    return [
        {
            'id': student.doc_id,
            'college_id': student.college_id,
            'name': student.name,
            'email': student.email,
            'avatar_url': student.avatar_url,
        }
        for student in students
    ]


def _lock_class(college_class: CollegeClass):
    return CollegeClass.objects.select_for_update().get(pk=college_class.pk)


@transaction.atomic
def add_student_to_class(*, college_class: CollegeClass, student: Student):
    college_class = _lock_class(college_class)
    if not student.user_id:
        raise ValidationError(f"{student.name} has no login account yet.")
    if student.status != Student.STATUS_ACTIVE:
        raise ValidationError(f"{student.name} is not an active student.")
    if (student.program, student.branch, student.year) != (
        college_class.program,
        college_class.branch,
        college_class.year,
    ):
        raise ValidationError(f"{student.name} is not in {college_class.program} {college_class.branch} year {college_class.year}.")
    if college_class.students.filter(pk=student.user_id).exists():
        raise ValidationError(f"{student.name} is already enrolled in this class.")

    college_class.students.add(student.user_id)
    enqueue('chat.sync_room_for_class', class_id=college_class.pk)
    return college_class


@transaction.atomic
def remove_student_from_class(*, college_class: CollegeClass, student: Student):
    college_class = _lock_class(college_class)
    if not student.user_id or not college_class.students.filter(pk=student.user_id).exists():
        logger.warning('Student %s was not on the roster of class %s.', student.college_id, college_class.pk)
        return college_class

    college_class.students.remove(student.user_id)
    enqueue('chat.sync_room_for_class', class_id=college_class.pk)
    return college_class


@transaction.atomic
def refresh_class_roster(*, college_class: CollegeClass):
    """Re-take the roster snapshot from the students currently in the class cohort."""
    college_class = _lock_class(college_class)
    current = set(college_class.students.values_list('pk', flat=True))
    wanted = set(
        _cohort_students(
            program=college_class.program,
            branch=college_class.branch,
            year=college_class.year,
            section=college_class.section,
        ).values_list('user_id', flat=True)
    )

    added = wanted - current
    removed = current - wanted
    if added:
        college_class.students.add(*added)
    if removed:
        college_class.students.remove(*removed)
    if added or removed:
        enqueue('chat.sync_room_for_class', class_id=college_class.pk)
    return {'added': len(added), 'removed': len(removed)}


def get_teacher_classes(teacher_user):
    classes = (
        CollegeClass.objects.filter(teacher=teacher_user)
        .select_related('course', 'teacher__teacher_profile')
        .annotate(student_total=Count('students'))
    )
    return [class_as_dict(item, student_count=item.student_total) for item in classes]


def build_weekly_schedule(classes):
    """Spread each class over a fixed number of weekly slots, deterministically by class id."""
    schedule = {day: [] for day in WEEK_DAYS}
    used = set()
    all_slots = [(day, slot) for slot in range(len(TIME_SLOTS)) for day in WEEK_DAYS]

    for index, college_class in enumerate(sorted(classes, key=lambda item: item.pk)):
        start = (index * 7) % len(all_slots)
        assigned = 0
        for step in range(len(all_slots)):
            if assigned == SLOTS_PER_CLASS:
                break
            day, slot = all_slots[(start + step * 5) % len(all_slots)]
            if (day, slot) in used:
                continue
            used.add((day, slot))
            assigned += 1
            start_time, end_time = TIME_SLOTS[slot]
            schedule[day].append({
                'class_id': college_class.pk,
                'course_id': college_class.course.course_id,
                'course_name': college_class.course.name,
                'section': college_class.section,
                'start_time': start_time,
                'end_time': end_time,
            })

    for entries in schedule.values():
        entries.sort(key=lambda entry: entry['start_time'])
    return schedule


def get_timetable_filters():
    """Cohort values present on students or classes, for the timetable pickers."""
    programs = set()
    branches = {}
    sections = {}
    years = set()
    semesters = set()

    fields = ('program', 'branch', 'year', 'semester', 'section')
    rows = list(Student.objects.values(*fields).distinct()) + list(CollegeClass.objects.values(*fields).distinct())
    for row in rows:
        if row['program']:
            programs.add(row['program'])
            program_branches = branches.setdefault(row['program'], set())
            program_sections = sections.setdefault(row['program'], set())
            if row['branch']:
                program_branches.add(row['branch'])
            if row['section']:
                program_sections.add(row['section'])
        if row['year']:
            years.add(row['year'])
        if row['semester']:
            semesters.add(row['semester'])

    return {
        'programs': sorted(programs),
        'branches': {program: sorted(values) for program, values in branches.items()},
        'years': sorted(years),
        'semesters': sorted(semesters),
        'sections': {program: sorted(values) for program, values in sections.items()},
    }


def get_schedule_for_class(*, program, branch, semester, section):
    """Weekly timetable of one section plus each of its teachers' slots for that section.

    Teacher slots are cut from the teacher's full weekly schedule, so they match
    what the teacher sees on their own timetable.
    """
    classes = list(
        CollegeClass.objects.filter(
            program=program,
            branch=branch,
            semester=semester,
            section=(section or '').strip().upper(),
        ).select_related('course', 'teacher__teacher_profile')
    )
    if not classes:
        return {'student_schedule': build_weekly_schedule([]), 'teacher_schedules': []}

    section_class_ids = {college_class.pk for college_class in classes}
    teachers = {college_class.teacher_id: college_class.teacher for college_class in classes if college_class.teacher_id}

    teacher_schedules = []
    for teacher_id, teacher_user in sorted(teachers.items()):
        taught = CollegeClass.objects.filter(teacher_id=teacher_id).select_related('course')
        schedule = build_weekly_schedule(list(taught))
        teacher_schedules.append({
            'teacher': {
                'uid': teacher_user.uid,
                'name': _teacher_name(teacher_user),
                'staff_id': getattr(getattr(teacher_user, 'teacher_profile', None), 'staff_id', None),
            },
            'schedule': {
                day: [entry for entry in entries if entry['class_id'] in section_class_ids]
                for day, entries in schedule.items()
            },
        })

    return {'student_schedule': build_weekly_schedule(classes), 'teacher_schedules': teacher_schedules}


def material_as_dict(material: Material):
    return {
        'id': material.pk,
        'title': material.title,
        'description': material.description,
        'url': material.url,
        'material_type': material.material_type,
        'course_id': material.course.course_id,
        'course_name': material.course.name,
        'class_id': material.college_class_id,
        'upload_date': material.upload_date,
    }


@transaction.atomic
def save_material(*, uploaded_by, course: Course, title, url, description='', material_type=Material.TYPE_NOTES, college_class=None):
    if uploaded_by.role == 'teacher':
        taught = CollegeClass.objects.filter(teacher=uploaded_by, course=course)
        if college_class is not None:
            taught = taught.filter(pk=college_class.pk)
        if not taught.exists():
            raise ValidationError('You can only upload materials for classes you teach.')

    material = Material.objects.create(
        college_class=college_class,
        course=course,
        title=title.strip(),
        description=description or '',
        url=url,
        material_type=material_type,
        uploaded_by=uploaded_by,
    )

    classes = CollegeClass.objects.filter(course=course)
    if college_class is not None:
        classes = classes.filter(pk=college_class.pk)
    student_uids = list(
        get_user_model().objects.filter(enrolled_classes__in=classes).values_list('uid', flat=True).distinct()
    )
    if student_uids:
        notify_uids(
            student_uids,
            title='New Course Material',
            message=f"{material.title} was uploaded for {course.name}.",
            type='info',
            link='/student/materials',
        )
    return material


def delete_material(*, material: Material, user):
    if user.role != 'admin' and material.uploaded_by_id != user.pk:
        raise ValidationError('You can only delete materials you uploaded.')
    material.delete()


def get_materials_for_teacher_classes(teacher_user):
    course_ids = CollegeClass.objects.filter(teacher=teacher_user).values_list('course_id', flat=True)
    materials = Material.objects.filter(course_id__in=course_ids).select_related('course')
    return [material_as_dict(material) for material in materials]


def get_materials_for_course(course: Course):
    return [material_as_dict(material) for material in course.materials.select_related('course')]


def get_materials_for_student(student: Student):
    if not student.user_id:
        return []
    classes = CollegeClass.objects.filter(students=student.user_id)
    materials = (
        Material.objects.filter(course__classes__in=classes)
        .select_related('course')
        .distinct()
    )
    return [material_as_dict(material) for material in materials]
