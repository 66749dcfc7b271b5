from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from authentication.models import User
from notifications.models import Notification
from .models import VerificationSubmission, Commitment, WorkflowLog


class VerificationAPITests(APITestCase):
    """
    The verification workflow driven over HTTP, one role at a time.
    """

    def setUp(self):
        self.master = User.objects.create_user(email='ma@example.com', password='x', role=User.ROLE_MASTER_ADMIN)
        self.super_admin = User.objects.create_user(email='sa@example.com', password='x', role=User.ROLE_SUPER_ADMIN)
        self.admin = User.objects.create_user(
            email='ad@example.com', password='x', role=User.ROLE_ADMIN, super_admin=self.super_admin
        )
        self.marketer = User.objects.create_user(
            email='mk@example.com', password='x', first_name='Mo', last_name='Marketer',
            role=User.ROLE_MARKETER, admin=self.admin,
        )
        self.biodata = {'name': 'Mo Marketer', 'address': '12 Market Road', 'phone': '08030000000'}
        self.guarantor = {'is_candidate_well_known': True, 'relationship': 'Uncle', 'known_duration': 10}
        self.commitment = {name: True for name in Commitment.PROMISE_FIELDS}
        self.commitment['direct_sales_rep_name'] = 'Mo Marketer'

    def submit_forms(self):
        self.client.force_authenticate(user=self.marketer)
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post(reverse('verification:submit-biodata'), self.biodata, format='json')
            self.client.post(reverse('verification:submit-guarantor'), self.guarantor, format='json')
            response = self.client.post(reverse('verification:submit-commitment'), self.commitment, format='json')
        return response

    def test_three_forms_reach_admin_and_notify(self):
        response = self.submit_forms()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['new_status'], VerificationSubmission.STATUS_PENDING_ADMIN_REVIEW)
        self.assertEqual(response.data['notifications_queued'], 1)
        self.assertTrue(
            Notification.objects.filter(recipient=self.admin, notification_type='verification_review_requested').exists()
        )

        status_response = self.client.get(reverse('verification:form-status'))
        self.assertTrue(status_response.data['all_forms_submitted'])

    def test_duplicate_form_is_400(self):
        self.client.force_authenticate(user=self.marketer)
        url = reverse('verification:submit-biodata')
        self.assertEqual(self.client.post(url, self.biodata, format='json').status_code, 201)
        response = self.client.post(url, self.biodata, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already been submitted', response.data['error']['message'])

    def test_commitment_requires_every_promise(self):
        self.client.force_authenticate(user=self.marketer)
        payload = dict(self.commitment, promise_abide_by_system=False)
        response = self.client.post(reverse('verification:submit-commitment'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('promise_abide_by_system', response.data['error']['details'])

    def test_admin_cannot_submit_forms(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('verification:submit-biodata'), self.biodata, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_full_review_chain_over_http(self):
        self.submit_forms()
        submission = VerificationSubmission.objects.get(marketer=self.marketer)

        self.client.force_authenticate(user=self.admin)
        queue = self.client.get(reverse('verification:submission-list'), {'status': 'pending_admin_review'})
        self.assertEqual([item['id'] for item in queue.data], [submission.pk])

        response = self.client.post(
            reverse('verification:upload-admin-verification', args=[submission.pk]),
            {'verification_notes': 'Shop visited'}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['new_status'], VerificationSubmission.STATUS_PENDING_ADMIN_REVIEW)

        response = self.client.post(reverse('verification:verify-and-send', args=[submission.pk]))
        self.assertEqual(response.data['new_status'], VerificationSubmission.STATUS_PENDING_SUPERADMIN_REVIEW)

        self.client.force_authenticate(user=self.super_admin)
        response = self.client.post(
            reverse('verification:superadmin-verify', args=[submission.pk]), {'verified': True}, format='json'
        )
        self.assertEqual(response.data['new_status'], VerificationSubmission.STATUS_PENDING_MASTERADMIN_APPROVAL)

        self.client.force_authenticate(user=self.master)
        response = self.client.post(
            reverse('verification:masteradmin-decision', args=[submission.pk]),
            {'action': 'approve', 'reason': 'All checks passed'}, format='json',
        )
        self.assertEqual(response.data['new_status'], VerificationSubmission.STATUS_APPROVED)

        history = self.client.get(reverse('verification:submission-history', args=[submission.pk]))
        self.assertEqual(history.data['history'][-1]['action_type'], WorkflowLog.ACTION_MASTERADMIN_APPROVED)

        self.client.force_authenticate(user=self.marketer)
        response = self.client.get(reverse('verification:verification-status'))
        self.assertEqual(response.data['overall_verification_status'], User.VERIFICATION_APPROVED)

    def test_out_of_order_decision_is_400(self):
        self.submit_forms()
        submission = VerificationSubmission.objects.get(marketer=self.marketer)

        self.client.force_authenticate(user=self.master)
        response = self.client.post(
            reverse('verification:masteradmin-decision', args=[submission.pk]),
            {'action': 'approve', 'reason': 'Too early'}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('pending_admin_review', response.data['error']['message'])

    def test_early_rejections_are_400(self):
        self.submit_forms()
        submission = VerificationSubmission.objects.get(marketer=self.marketer)

        self.client.force_authenticate(user=self.super_admin)
        response = self.client.post(
            reverse('verification:superadmin-verify', args=[submission.pk]),
            {'verified': False, 'report': 'Not sent yet'}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('pending_admin_review', response.data['error']['message'])

        self.client.force_authenticate(user=self.master)
        response = self.client.post(
            reverse('verification:masteradmin-decision', args=[submission.pk]),
            {'action': 'reject', 'reason': 'Skipping ahead'}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        submission.refresh_from_db()
        self.assertEqual(submission.submission_status, VerificationSubmission.STATUS_PENDING_ADMIN_REVIEW)

    def test_missing_submission_is_404(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('verification:verify-and-send', args=[4242]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_history_hidden_from_other_marketers(self):
        self.submit_forms()
        submission = VerificationSubmission.objects.get(marketer=self.marketer)
        other = User.objects.create_user(email='o@example.com', password='x', role=User.ROLE_MARKETER)

        self.client.force_authenticate(user=other)
        response = self.client.get(reverse('verification:submission-history', args=[submission.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_allow_refill(self):
        self.submit_forms()

        self.client.force_authenticate(user=self.master)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse('verification:allow-refill'), {
                'marketer_unique_id': self.marketer.unique_id, 'form_type': 'guarantor',
            }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['new_status'], VerificationSubmission.STATUS_PENDING_MARKETER_FORMS)
        self.assertTrue(
            Notification.objects.filter(recipient=self.marketer, notification_type='verification_form_reset').exists()
        )

        self.marketer.refresh_from_db()
        self.assertFalse(self.marketer.guarantor_submitted)
        self.assertEqual(self.marketer.overall_verification_status, User.VERIFICATION_PENDING)
