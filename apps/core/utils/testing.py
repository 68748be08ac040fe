"""Model factories shared by the app test suites."""
from itertools import count

from django.contrib.auth import get_user_model

from apps.core.academics.models import CollegeClass, Course
from apps.core.staff.models import Administrator, Teacher
from apps.core.students.models import Student
from apps.core.users.services import sync_identity

_serial = count(1)


def make_user(email=None, role='student', password='pass12345'):
    email = email or f"user{next(_serial)}@example.com"
    return get_user_model().objects.create_user(username=email, email=email, password=password, role=role)


def make_student(
    *,
    name='Asha Rao',
    email=None,
    college_id=None,
    program='B.Tech',
    branch='CSE',
    year=1,
    semester=1,
    section='A',
    batch='2024-2028',
    status=Student.STATUS_ACTIVE,
    with_user=True,
    **extra,
):
    serial = next(_serial)
    email = email or f"student{serial}@example.com"
    user = make_user(email, role='student') if with_user else None
    student = Student.objects.create(
        user=user,
        college_id=college_id or f"TS24CS{serial:05d}",
        name=name,
        email=email,
        program=program,
        branch=branch,
        year=year,
        semester=semester,
        section=section,
        batch=batch,
        status=status,
        **extra,
    )
    if user is not None:
        sync_identity(user=user, profile=student)
    return student


def make_teacher(*, name='Ravi Kumar', email=None, department='CSE Dept', program='B.Tech'):
    serial = next(_serial)
    email = email or f"teacher{serial}@example.com"
    user = make_user(email, role='teacher')
    teacher = Teacher.objects.create(
        user=user,
        staff_id=f"TCH24TS{serial:05d}",
        name=name,
        email=email,
        department=department,
        program=program,
    )
    sync_identity(user=user, profile=teacher)
    return teacher


def make_admin(*, name='Meera Iyer', email=None):
    serial = next(_serial)
    email = email or f"admin{serial}@example.com"
    user = make_user(email, role='admin')
    admin = Administrator.objects.create(
        user=user,
        staff_id=f"ADM24TS{serial:05d}",
        name=name,
        email=email,
        department='General Administration',
    )
    sync_identity(user=user, profile=admin)
    return admin


def make_course(course_id=None, *, name='Data Structures', program='B.Tech', branch='CSE', semester=1, credits=4):
    return Course.objects.create(
        course_id=course_id or f"CS{next(_serial):03d}",
        name=name,
        program=program,
        branch=branch,
        semester=semester,
        credits=credits,
    )


def make_class(*, course, teacher=None, students=(), section='A', year=1):
    college_class = CollegeClass.objects.create(
        program=course.program,
        branch=course.branch,
        section=section,
        year=year,
        semester=course.semester,
        course=course,
        teacher=teacher.user if teacher is not None else None,
    )
    college_class.students.set([student.user for student in students if student.user_id])
    return college_class
