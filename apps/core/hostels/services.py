"""Hostel catalogue, room allocation and complaints.

Allocation reads the room and the student, checks capacity and residency, and
writes both inside one transaction with row locks held on the room and student,
so two concurrent allocations cannot overfill a room or double-book a student.
"""
from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, Sum

from apps.core.notifications.services import notify_roles, notify_uids
from apps.core.students.models import Student

from .models import Complaint, Hostel, Room, RoomResident

logger = logging.getLogger(__name__)

HOSTEL_INFO_FIELDS = (
    'name',
    'type',
    'status',
    'warden_name',
    'warden_contact',
    'warden_email',
    'warden_office_location',
    'amenities',
    'rules_highlight',
)


class AllocationError(ValidationError):
    pass


class HostelNotFound(AllocationError):
    def __init__(self, hostel_id):
        super().__init__(f"Hostel {hostel_id} not found.")


class StudentNotFound(AllocationError):
    def __init__(self, student_id):
        super().__init__(f"Student {student_id} not found.")


class RoomNotFound(AllocationError):
    def __init__(self, room_number):
        super().__init__(f"Room {room_number} not found in this hostel.")


class RoomFull(AllocationError):
    def __init__(self, room_number):
        super().__init__(f"Room {room_number} is already full.")


class AlreadyAllocated(AllocationError):
    def __init__(self, name, room):
        super().__init__(f"{name} is already allocated to {room}.")


def _student_uid(student: Student):
    return student.user.uid if student.user_id else None


def add_hostel(**fields):
    unknown = set(fields) - set(HOSTEL_INFO_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown hostel fields: {', '.join(sorted(unknown))}.")
    name = (fields.get('name') or '').strip()
    if not name:
        raise ValidationError('Hostel name is required.')
    if Hostel.objects.filter(name__iexact=name).exists():
        raise ValidationError(f"A hostel named {name} already exists.")

    fields['name'] = name
    fields = {key: value for key, value in fields.items() if value is not None}
    return Hostel.objects.create(**fields)


def update_hostel_info(*, hostel: Hostel, **changes):
    unknown = set(changes) - set(HOSTEL_INFO_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown hostel fields: {', '.join(sorted(unknown))}.")
    if 'name' in changes:
        changes['name'] = (changes['name'] or '').strip()
        if Hostel.objects.filter(name__iexact=changes['name']).exclude(pk=hostel.pk).exists():
            raise ValidationError(f"A hostel named {changes['name']} already exists.")

    for field, value in changes.items():
        setattr(hostel, field, value)
    hostel.save()
    return hostel


def add_hostel_room(*, hostel: Hostel, room_number, capacity=2, room_type='', floor=None):
    room_number = str(room_number or '').strip()
    if not room_number:
        raise ValidationError('Room number is required.')
    if int(capacity or 0) < 1:
        raise ValidationError('Room capacity must be at least 1.')
    try:
        with transaction.atomic():
            return Room.objects.create(
                hostel=hostel,
                room_number=room_number,
                capacity=capacity,
                room_type=room_type or '',
                floor=floor,
            )
    except IntegrityError as exc:
        raise ValidationError(f"Room {room_number} already exists in {hostel.name}.") from exc


def get_hostels():
    hostels = Hostel.objects.annotate(
        room_count=Count('rooms', distinct=True),
        capacity_total=Sum('rooms__capacity'),
    )
    occupied = dict(
        RoomResident.objects.values('room__hostel').annotate(total=Count('id')).values_list('room__hostel', 'total')
    )
    rows = []
    for hostel in hostels:
        capacity = hostel.capacity_total or 0
        taken = occupied.get(hostel.pk, 0)
        rows.append({
            'id': hostel.pk,
            'name': hostel.name,
            'type': hostel.type,
            'status': hostel.status,
            'warden_name': hostel.warden_name,
            'room_count': hostel.room_count,
            'capacity': capacity,
            'occupied': taken,
            'available': max(capacity - taken, 0),
        })
    return rows


def room_as_dict(room: Room):
    residents = list(room.residents.select_related('student'))
    return {
        'id': room.pk,
        'room_number': room.room_number,
        'capacity': room.capacity,
        'room_type': room.room_type,
        'floor': room.floor,
        'occupied': len(residents),
        'residents': [
            {
                'student_id': resident.student.doc_id,
                'college_id': resident.student.college_id,
                'name': resident.student_name,
                'allocated_at': resident.allocated_at,
            }
            for resident in residents
        ],
    }


def get_hostel_details(hostel: Hostel):
    return {
        'id': hostel.pk,
        'name': hostel.name,
        'type': hostel.type,
        'status': hostel.status,
        'warden': {
            'name': hostel.warden_name,
            'contact': hostel.warden_contact,
            'email': hostel.warden_email,
            'office_location': hostel.warden_office_location,
        },
        'amenities': hostel.amenities,
        'rules_highlight': hostel.rules_highlight,
        'rooms': [room_as_dict(room) for room in hostel.rooms.all()],
    }


@transaction.atomic
def allocate_student_to_room(*, hostel_id, room_number, student_id):
    """Place a student (by document id) in a room, enforcing capacity and single residency."""
    hostel = Hostel.objects.filter(pk=hostel_id).first()
    if hostel is None:
        raise HostelNotFound(hostel_id)

    student = Student.objects.select_for_update().select_related('user').filter(doc_id=student_id).first()
    if student is None:
        raise StudentNotFound(student_id)

    room = Room.objects.select_for_update().filter(hostel=hostel, room_number=room_number).first()
    if room is None:
        raise RoomNotFound(room_number)

    if room.residents.count() >= room.capacity:
        raise RoomFull(room.room_number)
    existing = RoomResident.objects.select_related('room__hostel').filter(student=student).first()
    if existing is not None:
        raise AlreadyAllocated(student.name, existing.room)

    resident = RoomResident.objects.create(room=room, student=student, student_name=student.name)
    if student.type != Student.TYPE_HOSTELER:
        student.type = Student.TYPE_HOSTELER
        student.save(update_fields=['type', 'updated_at'])

    uid = _student_uid(student)
    if uid:
        notify_uids(
            [uid],
            title='Hostel Room Allocated',
            message=f"You have been allocated room {room.room_number} in {hostel.name}.",
            type='info',
            link='/student/hostel',
        )
    return resident


@transaction.atomic
def remove_student_from_room(*, student_id):
    student = Student.objects.select_for_update().filter(doc_id=student_id).first()
    if student is None:
        raise StudentNotFound(student_id)

    deleted, _ = RoomResident.objects.filter(student=student).delete()
    if not deleted:
        logger.warning('Student %s had no room allocation to remove.', student.college_id)

    if student.type != Student.TYPE_DAY_SCHOLAR:
        student.type = Student.TYPE_DAY_SCHOLAR
        student.save(update_fields=['type', 'updated_at'])
    return bool(deleted)


@transaction.atomic
def delete_hostel(*, hostel: Hostel):
    student_ids = list(RoomResident.objects.filter(room__hostel=hostel).values_list('student_id', flat=True))
    if student_ids:
        Student.objects.filter(pk__in=student_ids).update(type=Student.TYPE_DAY_SCHOLAR)
        logger.info('Unallocated %s residents from hostel %s before deleting it.', len(student_ids), hostel.name)
    hostel.delete()
    return len(student_ids)


def log_complaint(*, student: Student, issue):
    issue = (issue or '').strip()
    if not issue:
        raise ValidationError('Please describe the issue.')

    residency = RoomResident.objects.select_related('room__hostel').filter(student=student).first()
    if residency is None:
        raise ValidationError('Only students with a hostel room can log complaints.')

    complaint = Complaint.objects.create(
        student=student,
        hostel=residency.room.hostel,
        student_name=student.name,
        college_id=student.college_id,
        room_number=residency.room.room_number,
        issue=issue,
    )
    notify_roles(
        'admin',
        title='New Hostel Complaint',
        message=f"{student.name} (room {complaint.room_number}, {residency.room.hostel.name}) logged a complaint.",
        type='task',
        link='/admin/hostels',
    )
    return complaint


def update_complaint_status(*, complaint: Complaint, status):
    if status not in dict(Complaint.STATUS_CHOICES):
        raise ValidationError(f"Invalid complaint status: {status}.")
    if complaint.status == status:
        return complaint

    complaint.status = status
    complaint.save(update_fields=['status', 'updated_at'])

    uid = _student_uid(complaint.student)
    if uid:
        notify_uids(
            [uid],
            title='Complaint Status Updated',
            message=f"Your hostel complaint is now {status}.",
            type='info',
            link='/student/hostel',
        )
    return complaint


def complaint_as_dict(complaint: Complaint):
    return {
        'id': complaint.pk,
        'student_name': complaint.student_name,
        'college_id': complaint.college_id,
        'hostel': complaint.hostel.name if complaint.hostel_id else None,
        'room_number': complaint.room_number,
        'issue': complaint.issue,
        'status': complaint.status,
        'date': complaint.date,
    }


def get_complaints(*, hostel=None, status=None):
    complaints = Complaint.objects.select_related('hostel')
    if hostel is not None:
        complaints = complaints.filter(hostel=hostel)
    if status:
        complaints = complaints.filter(status=status)
    return [complaint_as_dict(complaint) for complaint in complaints]


def get_student_hostel_data(student: Student):
    residency = RoomResident.objects.select_related('room__hostel').filter(student=student).first()
    if residency is None:
        return {'allocated': False, 'hostel': None, 'room': None, 'roommates': [], 'complaints': []}

    room = residency.room
    hostel = room.hostel
    roommates = room.residents.exclude(student=student).values_list('student_name', flat=True)
    return {
        'allocated': True,
        'hostel': {
            'id': hostel.pk,
            'name': hostel.name,
            'type': hostel.type,
            'warden_name': hostel.warden_name,
            'warden_contact': hostel.warden_contact,
            'warden_email': hostel.warden_email,
            'amenities': hostel.amenities,
            'rules_highlight': hostel.rules_highlight,
        },
        'room': {
            'room_number': room.room_number,
            'room_type': room.room_type,
            'floor': room.floor,
            'capacity': room.capacity,
        },
        'roommates': list(roommates),
        'complaints': [complaint_as_dict(complaint) for complaint in student.hostel_complaints.select_related('hostel')],
    }
