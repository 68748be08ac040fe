from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.students.services import get_student_for_user
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import ApplicationStatusForm, OpportunityForm
from .models import Application, Opportunity
from .services import (
    delete_opportunity,
    get_applications_for_opportunity,
    get_applications_for_student,
    get_opportunities,
    save_opportunity,
    submit_application,
    update_application_status,
)


@require_GET
@role_required(['admin', 'student'])
@json_action
def opportunity_list(request, type):
    status = request.GET.get('status')
    if request.user.role == 'student':
        status = Opportunity.STATUS_OPEN
    return action_success(opportunities=get_opportunities(type, status=status))


@require_POST
@role_required('admin')
@json_action
def opportunity_create(request):
    form = OpportunityForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    opportunity = save_opportunity(**form.opportunity_fields())
    log_audit_event(request, 'opportunity.created', target=str(opportunity.pk), details=str(opportunity))
    return action_success(
        f"{opportunity.get_type_display()} added.",
        status=201,
        opportunity_id=opportunity.pk,
    )


@require_POST
@role_required('admin')
@json_action
def opportunity_update(request, opportunity_id):
    opportunity = get_object_or_404(Opportunity, pk=opportunity_id)
    form = OpportunityForm(request_data(request), partial=True)
    if not form.is_valid():
        return action_failure(form_errors(form))

    save_opportunity(opportunity=opportunity, **form.cleaned_data)
    return action_success(f"{opportunity.get_type_display()} updated.")


@require_POST
@role_required('admin')
@json_action
def opportunity_delete(request, opportunity_id):
    opportunity = get_object_or_404(Opportunity, pk=opportunity_id)
    label = str(opportunity)
    pk = delete_opportunity(opportunity=opportunity)
    log_audit_event(request, 'opportunity.deleted', target=str(pk), details=label)
    return action_success(f"Opportunity {pk} deleted.")


@require_GET
@role_required('admin')
@json_action
def opportunity_applications(request, opportunity_id):
    opportunity = get_object_or_404(Opportunity, pk=opportunity_id)
    return action_success(applications=get_applications_for_opportunity(opportunity))


@require_POST
@role_required('admin')
@json_action
def application_update_status(request, application_id):
    application = get_object_or_404(Application.objects.select_related('student__user'), pk=application_id)
    form = ApplicationStatusForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    update_application_status(application=application, status=form.cleaned_data['status'])
    return action_success('Application status updated.')


@require_POST
@role_required('student')
@json_action
def opportunity_apply(request, opportunity_id):
    opportunity = get_object_or_404(Opportunity, pk=opportunity_id)
    application = submit_application(student=get_student_for_user(request.user), opportunity=opportunity)
    return action_success(
        f"Your application for the {application.role} role at {application.company} has been submitted.",
        status=201,
        application_id=application.pk,
    )


@require_GET
@role_required('student')
@json_action
def my_applications(request):
    return action_success(applications=get_applications_for_student(get_student_for_user(request.user)))
