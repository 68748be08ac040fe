import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from faker import Faker

from apps.core.academics.models import Course
from apps.core.academics.services import create_class, save_course
from apps.core.attendance.models import AttendanceRecord
from apps.core.attendance.services import save_attendance
from apps.core.hostels.models import Hostel
from apps.core.hostels.services import add_hostel, add_hostel_room, allocate_student_to_room
from apps.core.staff.models import Administrator, Teacher
from apps.core.staff.services import create_staff_account
from apps.core.students.models import Student
from apps.core.students.services import create_student_account
from apps.core.users.models import User

PROGRAM = 'B.Tech'
BRANCHES = {
    'CSE': ('CSE Dept', [('CS101', 'Programming in C', 4), ('CS102', 'Digital Logic', 3)]),
    'ECE': ('ECE Dept', [('EC101', 'Circuit Theory', 4), ('EC102', 'Signals and Systems', 3)]),
}
BATCH = '2024-2028'
ATTENDANCE_DAYS = 5


class Command(BaseCommand):
    help = 'Seeds the database with a demo college: staff, courses, students, classes with recent attendance, and a hostel.'

    def add_arguments(self, parser):
        parser.add_argument('--students', type=int, default=12, help='Students to create per branch.')
        parser.add_argument('--seed', type=int, default=None, help='Seed for repeatable fake data.')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding database...')

        fake = Faker('en_IN')
        if options['seed'] is not None:
            Faker.seed(options['seed'])
            random.seed(options['seed'])

        if not Administrator.objects.exists():
            result = create_staff_account(
                role=User.ROLE_ADMIN,
                name='College Administrator',
                email='admin@college.example.com',
                dob=fake.date_of_birth(minimum_age=30, maximum_age=55),
            )
            self.stdout.write(self.style.SUCCESS(
                f"Created administrator {result['staff_id']} (admin@college.example.com / {result['initial_password']})"
            ))

        for branch, (department, courses) in BRANCHES.items():
            teachers = list(Teacher.objects.filter(department=department))
            while len(teachers) < 2:
                result = create_staff_account(
                    role=User.ROLE_TEACHER,
                    name=fake.name(),
                    email=fake.unique.email(),
                    dob=fake.date_of_birth(minimum_age=28, maximum_age=60),
                    department=department,
                    program=PROGRAM,
                    position='Assistant Professor',
                )
                teachers.append(result['profile'])
                self.stdout.write(self.style.SUCCESS(f"Created teacher {result['staff_id']}"))

            for course_id, name, credits in courses:
                if not Course.objects.filter(course_id=course_id).exists():
                    save_course(course_id=course_id, name=name, program=PROGRAM, branch=branch, semester=1, credits=credits)
                    self.stdout.write(self.style.SUCCESS(f'Created course {course_id}'))

            for _ in range(options['students']):
                result = create_student_account(
                    name=fake.name(),
                    email=fake.unique.email(),
                    program=PROGRAM,
                    branch=branch,
                    batch=BATCH,
                    dob=fake.date_of_birth(minimum_age=17, maximum_age=21),
                    phone=fake.phone_number()[:20],
                    address=fake.address(),
                )
                self.stdout.write(f"  student {result['college_id']} / {result['initial_password']}")

            for index, (course_id, _, _) in enumerate(courses):
                course = Course.objects.get(course_id=course_id)
                if course.classes.filter(section='A', year=1).exists():
                    continue
                college_class = create_class(
                    program=PROGRAM,
                    branch=branch,
                    section='A',
                    year=1,
                    semester=1,
                    course=course,
                    teacher_user=teachers[index % len(teachers)].user,
                )
                self.stdout.write(self.style.SUCCESS(f'Created class {course_id} for {branch} section A'))
                self._mark_attendance(college_class)

        if not Hostel.objects.exists():
            hostel = add_hostel(name='Aravali Hostel', type=Hostel.TYPE_COED, warden_name=fake.name())
            for floor in (1, 2):
                for number in range(1, 4):
                    add_hostel_room(hostel=hostel, room_number=f'{floor}0{number}', capacity=2, room_type='Double', floor=floor)

            residents = random.sample(
                list(hostel.rooms.values_list('room_number', flat=True)),
                k=min(3, hostel.rooms.count()),
            )
            for room_number, student in zip(residents, Student.objects.order_by('?')[:len(residents)]):
                allocate_student_to_room(hostel_id=hostel.pk, room_number=room_number, student_id=student.doc_id)
            self.stdout.write(self.style.SUCCESS(f'Created hostel {hostel.name} with {hostel.rooms.count()} rooms'))

        self.stdout.write(self.style.SUCCESS('Seeding complete.'))

    def _mark_attendance(self, college_class):
        students = list(Student.objects.filter(user__in=college_class.students.all()).values_list('doc_id', flat=True))
        today = timezone.localdate()
        for offset in range(1, ATTENDANCE_DAYS + 1):
            entries = {
                doc_id: AttendanceRecord.STATUS_PRESENT if random.random() < 0.85 else AttendanceRecord.STATUS_ABSENT
                for doc_id in students
            }
            save_attendance(
                college_class=college_class,
                marked_by=college_class.teacher,
                date=today - timedelta(days=offset),
                period=1,
                entries=entries,
            )
