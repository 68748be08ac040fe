from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.core.notifications.models import Notification
from apps.core.utils.testing import make_admin, make_student, make_teacher

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


class PlacementBaseTestCase(TestCase):
    def setUp(self):
        self.placement = save_opportunity(
            type=Opportunity.TYPE_PLACEMENT,
            company='Acme Systems',
            role='Graduate Engineer',
            ctc_stipend='8 LPA',
            location='Pune',
            skills=['Python', ' SQL ', ''],
        )
        self.internship = save_opportunity(
            type=Opportunity.TYPE_INTERNSHIP,
            company='Globex',
            role='Data Intern',
            duration='3 months',
        )
        self.student = make_student(name='Asha Rao')


class OpportunityTests(PlacementBaseTestCase):
    def test_opportunities_are_listed_by_type_newest_first(self):
        later = save_opportunity(type=Opportunity.TYPE_PLACEMENT, company='Initech', role='Analyst')

        rows = get_opportunities(Opportunity.TYPE_PLACEMENT)

        self.assertEqual([row['id'] for row in rows], [later.pk, self.placement.pk])
        self.assertEqual(rows[1]['skills'], ['Python', 'SQL'])
        self.assertEqual([row['id'] for row in get_opportunities(Opportunity.TYPE_INTERNSHIP)], [self.internship.pk])

    def test_unknown_type_is_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'Unknown opportunity type'):
            get_opportunities('fellowship')

    def test_required_fields_on_create(self):
        with self.assertRaisesMessage(ValidationError, 'Opportunity company is required.'):
            save_opportunity(type=Opportunity.TYPE_PLACEMENT, company=' ', role='Analyst')

    def test_update_merges_fields(self):
        save_opportunity(opportunity=self.placement, status=Opportunity.STATUS_CLOSED)

        self.placement.refresh_from_db()
        self.assertEqual(self.placement.status, Opportunity.STATUS_CLOSED)
        self.assertEqual(self.placement.ctc_stipend, '8 LPA')
        self.assertEqual(get_opportunities(Opportunity.TYPE_PLACEMENT, status=Opportunity.STATUS_OPEN), [])

    def test_deleting_an_opportunity_keeps_applications(self):
        application = submit_application(student=self.student, opportunity=self.placement)

        delete_opportunity(opportunity=self.placement)

        application.refresh_from_db()
        self.assertIsNone(application.opportunity)
        self.assertEqual(application.company, 'Acme Systems')


class ApplicationTests(PlacementBaseTestCase):
    def test_application_copies_posting_and_notifies_admins(self):
        admin = make_admin()

        with self.captureOnCommitCallbacks(execute=True):
            application = submit_application(student=self.student, opportunity=self.internship)

        self.assertEqual(application.status, Application.STATUS_APPLIED)
        self.assertEqual(application.opportunity_type, Opportunity.TYPE_INTERNSHIP)
        self.assertEqual(application.role, 'Data Intern')
        self.assertTrue(Notification.objects.filter(recipient=admin.user, title='New Application').exists())

    def test_second_application_is_refused(self):
        submit_application(student=self.student, opportunity=self.placement)

        with self.assertRaisesMessage(ValidationError, 'You have already applied for this placement.'):
            submit_application(student=self.student, opportunity=self.placement)
        self.assertEqual(Application.objects.count(), 1)

    def test_closed_opportunity_is_refused(self):
        save_opportunity(opportunity=self.internship, status=Opportunity.STATUS_CLOSED)

        with self.assertRaisesMessage(ValidationError, 'no longer accepting applications'):
            submit_application(student=self.student, opportunity=self.internship)

    def test_status_change_notifies_student(self):
        application = submit_application(student=self.student, opportunity=self.placement)

        with self.captureOnCommitCallbacks(execute=True):
            update_application_status(application=application, status=Application.STATUS_SHORTLISTED)

        self.assertEqual(get_applications_for_student(self.student)[0]['status'], 'Shortlisted')
        self.assertTrue(
            Notification.objects.filter(recipient=self.student.user, title='Application Status Updated').exists()
        )
        with self.assertRaises(ValidationError):
            update_application_status(application=application, status='Hired')

    def test_applications_for_opportunity(self):
        other = make_student(name='Vikram Shah')
        submit_application(student=self.student, opportunity=self.placement)
        submit_application(student=other, opportunity=self.placement)
        submit_application(student=other, opportunity=self.internship)

        names = sorted(row['student_name'] for row in get_applications_for_opportunity(self.placement))

        self.assertEqual(names, ['Asha Rao', 'Vikram Shah'])


class PlacementViewTests(PlacementBaseTestCase):
    def test_students_only_see_open_postings(self):
        save_opportunity(opportunity=self.placement, status=Opportunity.STATUS_CLOSED)
        self.client.force_login(self.student.user)

        response = self.client.get(reverse('opportunity_list', args=['placement']), {'status': 'Closed'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['opportunities'], [])

    def test_unknown_type_returns_400(self):
        self.client.force_login(make_admin().user)
        response = self.client.get(reverse('opportunity_list', args=['fellowship']))
        self.assertEqual(response.status_code, 400)

    def test_admin_creates_and_deletes_a_posting(self):
        self.client.force_login(make_admin().user)

        response = self.client.post(
            reverse('opportunity_create'),
            data={'type': 'internship', 'company': 'Umbrella', 'role': 'QA Intern', 'skills': ['Selenium']},
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 201, response.content)
        opportunity = Opportunity.objects.get(pk=response.json()['opportunity_id'])
        self.assertEqual(opportunity.skills, ['Selenium'])
        self.assertEqual(opportunity.status, Opportunity.STATUS_OPEN)

        response = self.client.post(reverse('opportunity_delete', args=[opportunity.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Opportunity.objects.filter(pk=opportunity.pk).exists())

    def test_teachers_cannot_manage_postings(self):
        self.client.force_login(make_teacher().user)
        response = self.client.post(reverse('opportunity_delete', args=[self.placement.pk]))
        self.assertEqual(response.status_code, 403)

    def test_student_applies_once(self):
        self.client.force_login(self.student.user)
        url = reverse('opportunity_apply', args=[self.placement.pk])

        first = self.client.post(url)
        second = self.client.post(url)

        self.assertEqual(first.status_code, 201, first.content)
        self.assertIn('Graduate Engineer role at Acme Systems', first.json()['message'])
        self.assertEqual(second.status_code, 400)
        self.assertEqual(second.json()['error'], 'You have already applied for this placement.')
        self.assertEqual(len(self.client.get(reverse('placement_my_applications')).json()['applications']), 1)
