from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.students.services import get_student_for_user
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import AllocationForm, ComplaintForm, ComplaintStatusForm, HostelForm, RemovalForm, RoomForm
from .models import Complaint, Hostel
from .services import (
    add_hostel,
    add_hostel_room,
    allocate_student_to_room,
    delete_hostel,
    get_complaints,
    get_hostel_details,
    get_hostels,
    get_student_hostel_data,
    log_complaint,
    remove_student_from_room,
    update_complaint_status,
    update_hostel_info,
)


@require_GET
@role_required('admin')
@json_action
def hostel_list(request):
    return action_success(hostels=get_hostels())


@require_POST
@role_required('admin')
@json_action
def hostel_create(request):
    form = HostelForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    hostel = add_hostel(**form.hostel_fields())
    log_audit_event(request, 'hostel.created', target=hostel.name)
    return action_success(f"Hostel {hostel.name} added.", status=201, hostel_id=hostel.pk)


@require_GET
@role_required('admin')
@json_action
def hostel_detail(request, hostel_id):
    return action_success(hostel=get_hostel_details(get_object_or_404(Hostel, pk=hostel_id)))


@require_POST
@role_required('admin')
@json_action
def hostel_update(request, hostel_id):
    hostel = get_object_or_404(Hostel, pk=hostel_id)
    form = HostelForm(request_data(request), partial=True)
    if not form.is_valid():
        return action_failure(form_errors(form))

    update_hostel_info(hostel=hostel, **form.cleaned_data)
    return action_success('Hostel updated.')


@require_POST
@role_required('admin')
@json_action
def hostel_delete(request, hostel_id):
    hostel = get_object_or_404(Hostel, pk=hostel_id)
    name = hostel.name
    unallocated = delete_hostel(hostel=hostel)
    log_audit_event(request, 'hostel.deleted', target=name, details=f"Unallocated={unallocated}")
    return action_success(f"Hostel {name} deleted.", unallocated=unallocated)


@require_POST
@role_required('admin')
@json_action
def room_create(request, hostel_id):
    hostel = get_object_or_404(Hostel, pk=hostel_id)
    form = RoomForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    room = add_hostel_room(hostel=hostel, **form.cleaned_data)
    return action_success(f"Room {room.room_number} added.", status=201, room_id=room.pk)


@require_POST
@role_required('admin')
@json_action
def room_allocate(request, hostel_id):
    form = AllocationForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    resident = allocate_student_to_room(hostel_id=hostel_id, **form.cleaned_data)
    log_audit_event(request, 'hostel.allocated', target=resident.student.college_id, details=str(resident.room))
    return action_success(f"{resident.student_name} allocated to room {resident.room.room_number}.")


@require_POST
@role_required('admin')
@json_action
def room_remove(request):
    form = RemovalForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    removed = remove_student_from_room(student_id=form.cleaned_data['student_id'])
    log_audit_event(request, 'hostel.unallocated', target=form.cleaned_data['student_id'])
    if not removed:
        return action_success('Student had no room; residency cleared.')
    return action_success('Student removed from room.')


@require_GET
@role_required('admin')
@json_action
def complaint_list(request):
    hostel = None
    if request.GET.get('hostel'):
        hostel = get_object_or_404(Hostel, pk=request.GET['hostel'])
    return action_success(complaints=get_complaints(hostel=hostel, status=request.GET.get('status')))


@require_POST
@role_required('admin')
@json_action
def complaint_update_status(request, complaint_id):
    complaint = get_object_or_404(Complaint.objects.select_related('student__user'), pk=complaint_id)
    form = ComplaintStatusForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    update_complaint_status(complaint=complaint, status=form.cleaned_data['status'])
    return action_success('Complaint status updated.')


@require_GET
@role_required('student')
@json_action
def my_hostel(request):
    return action_success(hostel=get_student_hostel_data(get_student_for_user(request.user)))


@require_POST
@role_required('student')
@json_action
def my_complaint(request):
    form = ComplaintForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    complaint = log_complaint(student=get_student_for_user(request.user), issue=form.cleaned_data['issue'])
    return action_success('Complaint logged.', status=201, complaint_id=complaint.pk)
