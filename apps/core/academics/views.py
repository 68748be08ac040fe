from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.students.models import Student
from apps.core.students.services import get_student_for_user
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import authenticated_required, role_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import (
    ClassForm,
    CourseFilterForm,
    CourseForm,
    MaterialForm,
    RosterChangeForm,
    SectionScheduleForm,
    TeacherAssignmentForm,
)
from .models import CollegeClass, Course, Material
from .services import (
    add_student_to_class,
    build_weekly_schedule,
    create_class,
    delete_class,
    delete_course,
    delete_material,
    get_available_sections,
    get_class_details,
    get_classes_with_details,
    get_courses_for_selection,
    get_grouped_courses,
    get_materials_for_course,
    get_materials_for_student,
    get_materials_for_teacher_classes,
    get_schedule_for_class,
    get_students_for_class,
    get_teacher_classes,
    get_timetable_filters,
    refresh_class_roster,
    remove_student_from_class,
    save_course,
    save_material,
    update_teacher_for_class,
)


def _teacher_by_uid(uid):
    return get_user_model().objects.filter(uid=uid, role='teacher').first()


def _class_for_user(user, class_id):
    college_class = get_object_or_404(CollegeClass.objects.select_related('course'), pk=class_id)
    if user.role == 'teacher' and college_class.teacher_id != user.pk:
        return None
    return college_class


@require_GET
@role_required('admin')
@json_action
def course_list(request):
    return action_success(courses=get_grouped_courses())


@require_GET
@role_required(['admin', 'teacher'])
@json_action
def course_options(request):
    form = CourseFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(
        courses=get_courses_for_selection(
            program=form.cleaned_data['program'],
            branch=form.cleaned_data['branch'],
            semester=form.cleaned_data['semester'],
        ),
    )


@require_POST
@role_required('admin')
@json_action
def course_save(request, course_pk=None):
    course = get_object_or_404(Course, pk=course_pk) if course_pk else None
    form = CourseForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    course = save_course(course=course, **form.cleaned_data)
    log_audit_event(request, 'course.saved', target=course.course_id)
    return action_success(f"Course {course.course_id} saved.", course_id=course.course_id)


@require_POST
@role_required('admin')
@json_action
def course_delete(request, course_pk):
    course = get_object_or_404(Course, pk=course_pk)
    course_id = course.course_id
    delete_course(course)
    log_audit_event(request, 'course.deleted', target=course_id)
    return action_success(f"Course {course_id} deleted.")


@require_GET
@role_required('admin')
@json_action
def class_list(request):
    form = CourseFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(
        classes=get_classes_with_details(
            program=form.cleaned_data['program'],
            branch=form.cleaned_data['branch'],
            year=form.cleaned_data['year'],
        ),
    )


@require_GET
@role_required('admin')
@json_action
def available_sections(request):
    form = CourseFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    if not form.cleaned_data['program'] or not form.cleaned_data['branch']:
        return action_failure('Program and branch are required.')
    return action_success(
        sections=get_available_sections(
            program=form.cleaned_data['program'],
            branch=form.cleaned_data['branch'],
            year=form.cleaned_data['year'],
        ),
    )


@require_POST
@role_required('admin')
@json_action
def class_create(request):
    form = ClassForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    data = dict(form.cleaned_data)
    teacher = _teacher_by_uid(data.pop('teacher_uid'))
    college_class = create_class(teacher_user=teacher, **data)
    log_audit_event(request, 'class.created', target=str(college_class.pk), details=college_class.display_name)
    return action_success(
        f"Class created for {college_class.display_name}.",
        status=201,
        class_id=college_class.pk,
        student_count=college_class.students.count(),
    )


@require_GET
@role_required(['admin', 'teacher'])
@json_action
def class_detail(request, class_id):
    college_class = _class_for_user(request.user, class_id)
    if college_class is None:
        return action_failure('You are not assigned to this class.', status=403)
    return action_success(college_class=get_class_details(college_class))


@require_POST
@role_required('admin')
@json_action
def class_assign_teacher(request, class_id):
    college_class = get_object_or_404(CollegeClass.objects.select_related('course'), pk=class_id)
    form = TeacherAssignmentForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    update_teacher_for_class(college_class=college_class, teacher_user=_teacher_by_uid(form.cleaned_data['teacher_uid']))
    log_audit_event(request, 'class.teacher_changed', target=str(college_class.pk))
    return action_success('Teacher updated.')


@require_POST
@role_required('admin')
@json_action
def class_delete(request, class_id):
    college_class = get_object_or_404(CollegeClass, pk=class_id)
    delete_class(college_class)
    log_audit_event(request, 'class.deleted', target=str(class_id))
    return action_success('Class deleted.')


@require_POST
@role_required('admin')
@json_action
def class_add_student(request, class_id):
    college_class = get_object_or_404(CollegeClass, pk=class_id)
    form = RosterChangeForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    student = get_object_or_404(Student, doc_id=form.cleaned_data['student_id'])
    add_student_to_class(college_class=college_class, student=student)
    return action_success(f"{student.name} added to the class.")


@require_POST
@role_required('admin')
@json_action
def class_remove_student(request, class_id):
    college_class = get_object_or_404(CollegeClass, pk=class_id)
    form = RosterChangeForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    student = get_object_or_404(Student, doc_id=form.cleaned_data['student_id'])
    remove_student_from_class(college_class=college_class, student=student)
    return action_success(f"{student.name} removed from the class.")


@require_POST
@role_required('admin')
@json_action
def class_refresh_roster(request, class_id):
    college_class = get_object_or_404(CollegeClass, pk=class_id)
    result = refresh_class_roster(college_class=college_class)
    log_audit_event(request, 'class.roster_refreshed', target=str(class_id), details=str(result))
    return action_success('Roster refreshed.', **result)


@require_GET
@role_required('teacher')
@json_action
def my_classes(request):
    return action_success(classes=get_teacher_classes(request.user))


@require_GET
@role_required(['admin', 'teacher'])
@json_action
def class_students(request, class_id):
    college_class = _class_for_user(request.user, class_id)
    if college_class is None:
        return action_failure('You are not assigned to this class.', status=403)
    return action_success(students=get_students_for_class(college_class))


@require_GET
@role_required('teacher')
@json_action
def my_schedule(request):
    classes = CollegeClass.objects.filter(teacher=request.user).select_related('course')
    return action_success(schedule=build_weekly_schedule(list(classes)))


@require_GET
@role_required(['admin', 'teacher'])
@json_action
def timetable_filters(request):
    return action_success(filters=get_timetable_filters())


@require_GET
@role_required(['admin', 'teacher'])
@json_action
def section_schedule(request):
    form = SectionScheduleForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(**get_schedule_for_class(**form.cleaned_data))


@require_GET
@authenticated_required
@json_action
def material_list(request):
    if request.user.role == 'teacher':
        return action_success(materials=get_materials_for_teacher_classes(request.user))
    if request.user.role == 'student':
        return action_success(materials=get_materials_for_student(get_student_for_user(request.user)))

    course_id = request.GET.get('course')
    if not course_id:
        return action_failure('A course is required.')
    return action_success(materials=get_materials_for_course(get_object_or_404(Course, course_id=course_id)))


@require_POST
@role_required(['admin', 'teacher'])
@json_action
def material_upload(request):
    form = MaterialForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    data = form.cleaned_data
    college_class = None
    if data['class_id']:
        college_class = get_object_or_404(CollegeClass, pk=data['class_id'])
    material = save_material(
        uploaded_by=request.user,
        course=data['course'],
        college_class=college_class,
        title=data['title'],
        description=data['description'],
        url=data['url'],
        material_type=data['material_type'] or Material.TYPE_NOTES,
    )
    return action_success('Material uploaded.', status=201, material_id=material.pk)


@require_POST
@role_required(['admin', 'teacher'])
@json_action
def material_delete(request, material_id):
    material = get_object_or_404(Material, pk=material_id)
    delete_material(material=material, user=request.user)
    return action_success('Material deleted.')
