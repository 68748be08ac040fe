from datetime import date

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings
from django.urls import reverse

from apps.core.academics.models import CollegeClass
from apps.core.users.models import Identity
from apps.core.utils.testing import make_admin, make_class, make_course, make_student, make_teacher

from .models import Administrator, Teacher
from .services import (
    admin_self_register,
    create_staff_account,
    delete_teacher,
    get_assignable_teachers,
    get_teacher_profile_details,
    update_staff,
)


class CreateStaffTests(TestCase):
    def test_teacher_gets_department_coded_staff_id(self):
        result = create_staff_account(
            role='teacher',
            name='Ravi Kumar',
            email='ravi@example.com',
            dob=date(1985, 11, 2),
            department='Electronics and Communication',
            date_of_joining=date(2023, 7, 1),
        )

        teacher = result['profile']
        self.assertIsInstance(teacher, Teacher)
        self.assertEqual(result['staff_id'], 'TCH23EC0001')
        self.assertEqual(result['initial_password'], 'RAV0211')
        self.assertEqual(teacher.user.role, 'teacher')
        self.assertEqual(teacher.user.claims['staff_id'], 'TCH23EC0001')
        self.assertEqual(Identity.objects.get(user=teacher.user).staff_id, 'TCH23EC0001')

    def test_admin_defaults_to_general_administration(self):
        result = create_staff_account(
            role='admin',
            name='Meera Iyer',
            email='meera@example.com',
            dob=date(1980, 1, 15),
            date_of_joining=date(2024, 6, 1),
        )

        self.assertIsInstance(result['profile'], Administrator)
        self.assertEqual(result['profile'].department, 'General Administration')
        self.assertEqual(result['staff_id'], 'ADM24AD0001')

    def test_teacher_without_department_is_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'Department is required'):
            create_staff_account(role='teacher', name='Ravi Kumar', email='ravi@example.com', dob=date(1985, 11, 2))

    def test_unknown_role_is_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'Invalid staff role'):
            create_staff_account(role='student', name='X', email='x@example.com', dob=date(2000, 1, 1))


class AdminSignupTests(TestCase):
    @override_settings(ADMIN_SIGNUP_CODE='')
    def test_signup_is_disabled_without_a_code(self):
        with self.assertRaisesMessage(ValidationError, 'disabled'):
            admin_self_register(name='Meera Iyer', email='meera@example.com', password='secret123', signup_code='')

    @override_settings(ADMIN_SIGNUP_CODE='open-sesame')
    def test_wrong_code_is_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'Invalid administrator sign-up code'):
            admin_self_register(name='Meera Iyer', email='meera@example.com', password='secret123', signup_code='guess')
        self.assertFalse(get_user_model().objects.exists())

    @override_settings(ADMIN_SIGNUP_CODE='open-sesame')
    def test_correct_code_creates_verified_admin(self):
        profile = admin_self_register(
            name='Meera Iyer',
            email='meera@example.com',
            password='secret123',
            signup_code='open-sesame',
        )

        self.assertTrue(profile.staff_id.startswith('ADM'))
        self.assertTrue(profile.user.email_verified)
        self.assertTrue(profile.user.check_password('secret123'))


class UpdateAndDeleteStaffTests(TestCase):
    def setUp(self):
        self.teacher = make_teacher(email='ravi@example.com')

    def test_update_syncs_login_and_identity(self):
        update_staff(profile=self.teacher, email='Ravi.K@example.com', department='ECE Dept')

        self.teacher.refresh_from_db()
        self.assertEqual(self.teacher.email, 'ravi.k@example.com')
        self.assertEqual(self.teacher.user.email, 'ravi.k@example.com')
        self.assertEqual(Identity.objects.get(user=self.teacher.user).email, 'ravi.k@example.com')

    def test_delete_teacher_unassigns_classes(self):
        college_class = make_class(course=make_course('CS101'), teacher=self.teacher, students=[make_student()])
        user_id = self.teacher.user_id

        delete_teacher(teacher=self.teacher)

        college_class.refresh_from_db()
        self.assertIsNone(college_class.teacher)
        self.assertTrue(CollegeClass.objects.filter(pk=college_class.pk).exists())
        self.assertFalse(Teacher.objects.exists())
        self.assertFalse(get_user_model().objects.filter(pk=user_id).exists())


class StaffQueryTests(TestCase):
    def test_assignable_teachers_filter_by_program(self):
        make_teacher(name='Ravi Kumar', program='B.Tech')
        make_teacher(name='Sara Thomas', program='MBA')
        make_teacher(name='Any Program', program='')

        names = {row['name'] for row in get_assignable_teachers(program='B.Tech')}

        self.assertEqual(names, {'Ravi Kumar', 'Any Program'})

    def test_profile_details_include_classes_and_schedule(self):
        teacher = make_teacher()
        make_class(course=make_course('CS101'), teacher=teacher, students=[make_student()])

        details = get_teacher_profile_details(teacher)

        self.assertEqual(len(details['classes']), 1)
        self.assertEqual(sum(len(entries) for entries in details['schedule'].values()), 3)


class StaffViewTests(TestCase):
    def test_admin_lists_staff(self):
        admin = make_admin()
        make_teacher()
        self.client.force_login(admin.user)

        response = self.client.get(reverse('staff_list'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['staff']), 2)

    @override_settings(ADMIN_SIGNUP_CODE='open-sesame')
    def test_admin_registration_endpoint(self):
        response = self.client.post(
            reverse('staff_admin_register'),
            data={'name': 'Meera Iyer', 'email': 'meera@example.com', 'password': 'secret123', 'signup_code': 'open-sesame'},
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 201, response.content)
        self.assertTrue(Administrator.objects.filter(email='meera@example.com').exists())
