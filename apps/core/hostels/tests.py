from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.core.notifications.models import Notification
from apps.core.students.models import Student
from apps.core.utils.testing import make_admin, make_student

from .models import Complaint, Hostel, RoomResident
from .services import (
    AlreadyAllocated,
    HostelNotFound,
    RoomFull,
    RoomNotFound,
    StudentNotFound,
    add_hostel,
    add_hostel_room,
    allocate_student_to_room,
    delete_hostel,
    get_hostels,
    get_student_hostel_data,
    log_complaint,
    remove_student_from_room,
    update_complaint_status,
)


class HostelBaseTestCase(TestCase):
    def setUp(self):
        self.hostel = add_hostel(name='Aravali Block', type=Hostel.TYPE_BOYS, warden_name='Mr. Sen')
        self.room = add_hostel_room(hostel=self.hostel, room_number='101', capacity=1)
        self.student = make_student(name='Asha Rao')


class HostelCatalogueTests(HostelBaseTestCase):
    def test_names_and_room_numbers_are_unique(self):
        with self.assertRaisesMessage(ValidationError, 'already exists'):
            add_hostel(name='aravali block')
        with self.assertRaisesMessage(ValidationError, 'already exists'):
            add_hostel_room(hostel=self.hostel, room_number='101')

    def test_new_hostel_gets_default_amenities(self):
        self.assertTrue(self.hostel.amenities)
        self.assertTrue(self.hostel.rules_highlight)

    def test_listing_rolls_up_capacity_and_occupancy(self):
        add_hostel_room(hostel=self.hostel, room_number='102', capacity=3)
        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='102', student_id=self.student.doc_id)

        row = get_hostels()[0]

        self.assertEqual(row['room_count'], 2)
        self.assertEqual(row['capacity'], 4)
        self.assertEqual(row['occupied'], 1)
        self.assertEqual(row['available'], 3)


class AllocationTests(HostelBaseTestCase):
    def test_allocation_marks_student_as_hosteler_and_notifies(self):
        with self.captureOnCommitCallbacks(execute=True):
            resident = allocate_student_to_room(
                hostel_id=self.hostel.pk,
                room_number='101',
                student_id=self.student.doc_id,
            )

        self.student.refresh_from_db()
        self.assertEqual(resident.student_name, 'Asha Rao')
        self.assertEqual(self.student.type, Student.TYPE_HOSTELER)
        self.assertTrue(Notification.objects.filter(recipient=self.student.user, title='Hostel Room Allocated').exists())

    def test_full_room_is_refused(self):
        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)
        other = make_student(name='Vikram Shah')

        with self.assertRaisesMessage(RoomFull, 'Room 101 is already full.'):
            allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=other.doc_id)
        self.assertEqual(RoomResident.objects.count(), 1)

    def test_student_cannot_hold_two_rooms(self):
        add_hostel_room(hostel=self.hostel, room_number='102')
        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)

        with self.assertRaises(AlreadyAllocated):
            allocate_student_to_room(hostel_id=self.hostel.pk, room_number='102', student_id=self.student.doc_id)

    def test_capacity_is_checked_before_existing_residency(self):
        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)

        with self.assertRaisesMessage(RoomFull, 'Room 101 is already full.'):
            allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)
        self.assertEqual(RoomResident.objects.filter(student=self.student).count(), 1)

    def test_missing_hostel_room_or_student(self):
        with self.assertRaises(HostelNotFound):
            allocate_student_to_room(hostel_id=9999, room_number='101', student_id=self.student.doc_id)
        with self.assertRaises(RoomNotFound):
            allocate_student_to_room(hostel_id=self.hostel.pk, room_number='999', student_id=self.student.doc_id)
        with self.assertRaises(StudentNotFound):
            allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id='missing')

    def test_allocation_errors_are_validation_errors(self):
        self.assertTrue(issubclass(RoomFull, ValidationError))

    def test_removal_is_lenient(self):
        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)

        self.assertTrue(remove_student_from_room(student_id=self.student.doc_id))
        self.assertFalse(remove_student_from_room(student_id=self.student.doc_id))

        self.student.refresh_from_db()
        self.assertEqual(self.student.type, Student.TYPE_DAY_SCHOLAR)

    def test_deleting_hostel_resets_residents(self):
        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)

        self.assertEqual(delete_hostel(hostel=self.hostel), 1)

        self.student.refresh_from_db()
        self.assertEqual(self.student.type, Student.TYPE_DAY_SCHOLAR)
        self.assertFalse(RoomResident.objects.exists())


class ComplaintTests(HostelBaseTestCase):
    def test_only_residents_can_complain(self):
        with self.assertRaisesMessage(ValidationError, 'Only students with a hostel room'):
            log_complaint(student=self.student, issue='Fan not working')

    def test_complaint_lifecycle(self):
        admin = make_admin()
        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)

        with self.captureOnCommitCallbacks(execute=True):
            complaint = log_complaint(student=self.student, issue='Fan not working')
        self.assertEqual(complaint.room_number, '101')
        self.assertEqual(complaint.status, Complaint.STATUS_PENDING)
        self.assertTrue(Notification.objects.filter(recipient=admin.user, title='New Hostel Complaint').exists())

        with self.captureOnCommitCallbacks(execute=True):
            update_complaint_status(complaint=complaint, status=Complaint.STATUS_RESOLVED)
        self.assertTrue(Notification.objects.filter(recipient=self.student.user, title='Complaint Status Updated').exists())

        with self.assertRaises(ValidationError):
            update_complaint_status(complaint=complaint, status='Closed')

    def test_student_hostel_data(self):
        self.assertFalse(get_student_hostel_data(self.student)['allocated'])

        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)
        data = get_student_hostel_data(self.student)

        self.assertTrue(data['allocated'])
        self.assertEqual(data['hostel']['name'], 'Aravali Block')
        self.assertEqual(data['room']['room_number'], '101')
        self.assertEqual(data['roommates'], [])


class HostelViewTests(HostelBaseTestCase):
    def test_full_room_returns_400_with_message(self):
        self.client.force_login(make_admin().user)
        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)
        other = make_student(name='Vikram Shah')

        response = self.client.post(
            reverse('hostel_room_allocate', args=[self.hostel.pk]),
            data={'room_number': '101', 'student_id': other.doc_id},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Room 101 is already full.')

    def test_student_logs_complaint(self):
        allocate_student_to_room(hostel_id=self.hostel.pk, room_number='101', student_id=self.student.doc_id)
        self.client.force_login(self.student.user)

        response = self.client.post(reverse('hostel_my_complaint'), data={'issue': 'Leaking tap'})

        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(Complaint.objects.get().issue, 'Leaking tap')
