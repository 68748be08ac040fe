from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.core.notifications.models import DispatchTask, Notification
from apps.core.students.models import Student
from apps.core.utils.testing import make_admin, make_class, make_course, make_student, make_teacher

from .models import CollegeClass, Material
from .services import (
    SLOTS_PER_CLASS,
    add_student_to_class,
    build_weekly_schedule,
    create_class,
    delete_course,
    delete_material,
    get_grouped_courses,
    get_materials_for_student,
    get_schedule_for_class,
    get_timetable_filters,
    refresh_class_roster,
    remove_student_from_class,
    save_course,
    save_material,
)


class CourseTests(TestCase):
    def test_course_ids_are_unique_and_upper_cased(self):
        course = save_course(course_id='cs101', name='Data Structures', program='B.Tech', branch='CSE', semester=3)
        self.assertEqual(course.course_id, 'CS101')

        with self.assertRaisesMessage(ValidationError, 'already exists'):
            save_course(course_id='CS101', name='Copy', program='B.Tech', branch='CSE', semester=3)

        updated = save_course(course=course, course_id='CS101', name='DSA', program='B.Tech', branch='CSE', semester=3, credits=4)
        self.assertEqual(updated.name, 'DSA')

    def test_courses_are_grouped_by_program_branch_and_semester(self):
        make_course('CS101', semester=1)
        make_course('CS201', semester=3)
        make_course('FN101', program='MBA', branch='Finance', semester=1)

        grouped = get_grouped_courses()

        self.assertEqual([row['course_id'] for row in grouped['B.Tech']['CSE']['1']], ['CS101'])
        self.assertIn('3', grouped['B.Tech']['CSE'])
        self.assertEqual(grouped['MBA']['Finance']['1'][0]['course_id'], 'FN101')

    def test_course_in_use_cannot_be_deleted(self):
        course = make_course('CS101')
        make_class(course=course, teacher=make_teacher())
        with self.assertRaises(ValidationError):
            delete_course(course)


class ClassBaseTestCase(TestCase):
    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course('CS101')
        self.first = make_student(name='Asha Rao', section='A')
        self.second = make_student(name='Vikram Shah', section='A')
        self.other_section = make_student(name='Neha Das', section='B')
        make_student(name='Pending Student', section='A', status=Student.STATUS_PENDING_APPROVAL)
        make_student(name='No Login', section='A', with_user=False)

    def _create(self, **overrides):
        values = {
            'program': 'B.Tech',
            'branch': 'CSE',
            'section': 'a',
            'year': 1,
            'semester': 1,
            'course': self.course,
            'teacher_user': self.teacher.user,
        }
        values.update(overrides)
        return create_class(**values)


class CreateClassTests(ClassBaseTestCase):
    def test_roster_is_active_students_of_the_section(self):
        with self.captureOnCommitCallbacks(execute=True):
            college_class = self._create()

        self.assertEqual(college_class.section, 'A')
        self.assertEqual(
            set(college_class.students.values_list('pk', flat=True)),
            {self.first.user_id, self.second.user_id},
        )
        self.assertTrue(Notification.objects.filter(recipient=self.teacher.user, title='New Class Assigned').exists())
        self.assertTrue(DispatchTask.objects.filter(kind='chat.sync_room_for_class').exists())

    def test_duplicate_class_is_rejected(self):
        self._create()
        with self.assertRaisesMessage(ValidationError, 'already exists'):
            self._create()

    def test_empty_cohort_is_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'No active students'):
            self._create(section='Z')
        self.assertFalse(CollegeClass.objects.exists())

    def test_teacher_must_be_a_teacher(self):
        with self.assertRaisesMessage(ValidationError, 'Selected teacher not found'):
            self._create(teacher_user=self.first.user)


class RosterTests(ClassBaseTestCase):
    def setUp(self):
        super().setUp()
        self.college_class = self._create()

    def test_add_student_checks_cohort_and_duplicates(self):
        add_student_to_class(college_class=self.college_class, student=self.other_section)
        self.assertTrue(self.college_class.students.filter(pk=self.other_section.user_id).exists())

        with self.assertRaisesMessage(ValidationError, 'already enrolled'):
            add_student_to_class(college_class=self.college_class, student=self.other_section)

        outsider = make_student(branch='ECE')
        with self.assertRaisesMessage(ValidationError, 'is not in'):
            add_student_to_class(college_class=self.college_class, student=outsider)

    def test_removing_absent_student_is_a_no_op(self):
        remove_student_from_class(college_class=self.college_class, student=self.first)
        remove_student_from_class(college_class=self.college_class, student=self.first)

        self.assertEqual(self.college_class.students.count(), 1)

    def test_refresh_retakes_the_snapshot(self):
        late = make_student(name='Late Joiner', section='A')
        Student.objects.filter(pk=self.second.pk).update(section='C')

        result = refresh_class_roster(college_class=self.college_class)

        self.assertEqual(result, {'added': 1, 'removed': 1})
        self.assertEqual(
            set(self.college_class.students.values_list('pk', flat=True)),
            {self.first.user_id, late.user_id},
        )


class ScheduleTests(TestCase):
    def test_schedule_is_deterministic_and_conflict_free(self):
        teacher = make_teacher()
        classes = [make_class(course=make_course(), teacher=teacher) for _ in range(4)]

        first = build_weekly_schedule(classes)
        second = build_weekly_schedule(list(reversed(classes)))

        self.assertEqual(first, second)
        slots = [(day, entry['start_time']) for day, entries in first.items() for entry in entries]
        self.assertEqual(len(slots), len(classes) * SLOTS_PER_CLASS)
        self.assertEqual(len(set(slots)), len(slots))

    def test_empty_schedule_has_every_day(self):
        schedule = build_weekly_schedule([])
        self.assertTrue(schedule)
        self.assertTrue(all(entries == [] for entries in schedule.values()))


class TimetableTests(TestCase):
    def setUp(self):
        self.teacher = make_teacher()
        self.other_teacher = make_teacher(name='Kavya Menon')
        self.section_a = [
            make_class(course=make_course('CS101'), teacher=self.teacher),
            make_class(course=make_course('CS102'), teacher=self.other_teacher),
        ]
        self.elsewhere = make_class(course=make_course('CS103'), teacher=self.teacher, section='B')
        make_student(name='Asha Rao', program='MBA', branch='Finance', section='C', semester=2, year=1)

    def test_filters_collect_cohorts_from_students_and_classes(self):
        filters = get_timetable_filters()

        self.assertEqual(filters['programs'], ['B.Tech', 'MBA'])
        self.assertEqual(filters['branches'], {'B.Tech': ['CSE'], 'MBA': ['Finance']})
        self.assertEqual(filters['sections'], {'B.Tech': ['A', 'B'], 'MBA': ['C']})
        self.assertEqual(filters['years'], [1])
        self.assertEqual(filters['semesters'], [1, 2])

    def test_section_schedule_matches_each_teachers_own_timetable(self):
        result = get_schedule_for_class(program='B.Tech', branch='CSE', semester=1, section='a')

        self.assertEqual(result['student_schedule'], build_weekly_schedule(self.section_a))
        self.assertEqual(
            [row['teacher']['uid'] for row in result['teacher_schedules']],
            [self.teacher.user.uid, self.other_teacher.user.uid],
        )

        own = build_weekly_schedule([self.section_a[0], self.elsewhere])
        mine = next(row for row in result['teacher_schedules'] if row['teacher']['uid'] == self.teacher.user.uid)
        for day, entries in mine['schedule'].items():
            self.assertEqual(entries, [entry for entry in own[day] if entry['class_id'] == self.section_a[0].pk])
        self.assertEqual(sum(len(entries) for entries in mine['schedule'].values()), SLOTS_PER_CLASS)

    def test_unknown_section_has_an_empty_schedule(self):
        result = get_schedule_for_class(program='B.Tech', branch='CSE', semester=1, section='Z')

        self.assertEqual(result['teacher_schedules'], [])
        self.assertTrue(all(entries == [] for entries in result['student_schedule'].values()))

    def test_section_schedule_endpoint_validates_filters(self):
        self.client.force_login(self.teacher.user)

        missing = self.client.get(reverse('timetable_section_schedule'), {'program': 'B.Tech'})
        response = self.client.get(
            reverse('timetable_section_schedule'),
            {'program': 'B.Tech', 'branch': 'CSE', 'semester': 1, 'section': 'A'},
        )

        self.assertEqual(missing.status_code, 400)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['teacher_schedules']), 2)


class MaterialTests(TestCase):
    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course('CS101')
        self.student = make_student()
        self.college_class = make_class(course=self.course, teacher=self.teacher, students=[self.student])

    def test_teacher_uploads_for_taught_course_and_students_are_notified(self):
        with self.captureOnCommitCallbacks(execute=True):
            material = save_material(
                uploaded_by=self.teacher.user,
                course=self.course,
                title=' Lecture 1 ',
                url='https://example.com/lecture-1.pdf',
            )

        self.assertEqual(material.title, 'Lecture 1')
        self.assertTrue(Notification.objects.filter(recipient=self.student.user, title='New Course Material').exists())
        self.assertEqual([row['title'] for row in get_materials_for_student(self.student)], ['Lecture 1'])

    def test_teacher_cannot_upload_for_other_courses(self):
        with self.assertRaisesMessage(ValidationError, 'classes you teach'):
            save_material(
                uploaded_by=self.teacher.user,
                course=make_course('CS999'),
                title='Notes',
                url='https://example.com/notes.pdf',
            )

    def test_only_uploader_or_admin_can_delete(self):
        material = save_material(
            uploaded_by=self.teacher.user,
            course=self.course,
            title='Notes',
            url='https://example.com/notes.pdf',
        )
        other = make_teacher(name='Other Teacher')

        with self.assertRaises(ValidationError):
            delete_material(material=material, user=other.user)
        delete_material(material=material, user=make_admin().user)
        self.assertFalse(Material.objects.exists())


class AcademicsViewTests(ClassBaseTestCase):
    def test_admin_creates_class_by_course_code_and_teacher_uid(self):
        self.client.force_login(make_admin().user)

        response = self.client.post(
            reverse('class_create'),
            data={
                'program': 'B.Tech',
                'branch': 'CSE',
                'section': 'A',
                'year': 1,
                'semester': 1,
                'course': 'CS101',
                'teacher_uid': self.teacher.user.uid,
            },
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.json()['student_count'], 2)

    def test_teacher_cannot_open_someone_elses_class(self):
        college_class = self._create()
        other = make_teacher(name='Other Teacher')
        self.client.force_login(other.user)

        response = self.client.get(reverse('class_detail', args=[college_class.pk]))

        self.assertEqual(response.status_code, 403)
