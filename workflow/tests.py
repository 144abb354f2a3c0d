from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from applications.exceptions import InvalidTransition
from applications.models import Application, StatusHistory
from applications.services import create_application, get_audit_trail
from registers.models import ARegister, BRegister, CallForNotice, Payment, XeroxOperation
from .services import (
    TRANSITIONS, allowed_transitions, can_transition, transition,
    record_payment, strike_off_lapsed_notices,
)

User = get_user_model()
Status = Application.Status

HAPPY_PATH = [
    Status.A_REGISTER,
    Status.SENT_TO_COURT,
    Status.COURT_REPLIED,
    Status.SUPERINTENDENT_RECEIVED,
    Status.CALL_FOR_NOTICE,
    Status.PAYMENT_RECEIVED,
    Status.XEROX_ASSIGNED,
    Status.READY,
    Status.DELIVERED,
]


class TransitionTableTests(TestCase):
    def test_every_status_has_an_entry(self):
        self.assertEqual(set(TRANSITIONS), set(Status))

    def test_allowed_transitions(self):
        self.assertEqual(allowed_transitions('submitted'), [Status.A_REGISTER])
        self.assertEqual(
            allowed_transitions(Status.CALL_FOR_NOTICE),
            [Status.PAYMENT_RECEIVED, Status.STRUCK_OFF],
        )
        self.assertEqual(allowed_transitions('delivered'), [])

    def test_can_transition(self):
        self.assertEqual(can_transition('submitted', 'a_register'), (True, "transition allowed"))
        self.assertFalse(can_transition('submitted', 'payment_received')[0])
        self.assertFalse(can_transition('a_register', 'submitted')[0])
        self.assertFalse(can_transition('struck_off', 'call_for_notice')[0])
        self.assertFalse(can_transition('submitted', 'archived')[0])


@override_settings(COPY_APPLICATION={'NOTICE_GRACE_DAYS': 7, 'PER_PAGE_RATE': Decimal('2.50')})
class WorkflowTests(TestCase):
    def setUp(self):
        self.day0 = date(2024, 6, 3)
        self.application = create_application({
            'application_type': Application.ApplicationType.COPY,
            'case_type': Application.CaseType.CIVIL,
            'base_fee': Decimal('10.00'),
            'applicant_name': 'Mohan Das',
            'advocate_name': 'Adv. Sreeja',
            'case_number': 'OS 45',
            'case_year': 2022,
        }, actor='clerk1', today=self.day0)
        User.objects.create_user(username='clerk1', password='password', full_name='Jaya Varma')

    def advance_to(self, target, day=None):
        day = day or self.day0
        details = {
            Status.CALL_FOR_NOTICE: {'pages_estimated': 10},
        }
        for status in HAPPY_PATH:
            if self.application.status == target:
                break
            transition(self.application, status, 'clerk1', today=day, **details.get(status, {}))
        return self.application

    def test_full_path_to_delivery(self):
        self.advance_to(Status.DELIVERED)

        self.assertEqual(self.application.status, Status.DELIVERED)
        self.assertEqual(ARegister.objects.filter(application=self.application).count(), 1)
        self.assertEqual(BRegister.objects.filter(application=self.application).count(), 1)
        self.assertEqual(Payment.objects.get(application=self.application).amount, Decimal('25.00'))
        operation = XeroxOperation.objects.get(application=self.application)
        self.assertEqual(operation.pages_copied, 10)
        self.assertIsNotNone(operation.completed_date)

    def test_audit_trail_reconstructs_path(self):
        self.advance_to(Status.DELIVERED)

        trail = list(get_audit_trail(self.application))
        self.assertEqual(len(trail), len(HAPPY_PATH) + 1)
        self.assertIsNone(trail[0].old_status)
        for previous, entry in zip(trail, trail[1:]):
            self.assertEqual(entry.old_status, previous.new_status)
        self.assertEqual([e.new_status for e in trail[1:]], [s.value for s in HAPPY_PATH])

    def test_transition_records_actor_and_remarks(self):
        transition(self.application, Status.A_REGISTER, 'clerk1', remarks='Received at counter', today=self.day0)

        entry = StatusHistory.objects.filter(application=self.application).latest()
        self.assertEqual(entry.old_status, Status.SUBMITTED)
        self.assertEqual(entry.new_status, Status.A_REGISTER)
        self.assertEqual(entry.changed_by, 'clerk1')
        self.assertEqual(entry.remarks, 'Received at counter')

    def test_transition_returns_new_audit_entry(self):
        application = transition(self.application, Status.A_REGISTER, 'clerk1',
                                 remarks='Received at counter', today=self.day0)

        entry = application.last_status_change
        self.assertEqual(entry, StatusHistory.objects.filter(application=self.application).latest())
        self.assertEqual(entry.old_status, Status.SUBMITTED)
        self.assertEqual(entry.new_status, Status.A_REGISTER)
        self.assertEqual(entry.remarks, 'Received at counter')

        by_pk = transition(self.application.pk, Status.SENT_TO_COURT, 'clerk1', today=self.day0)
        self.assertEqual(by_pk.last_status_change.new_status, Status.SENT_TO_COURT)

    def test_transition_accepts_primary_key(self):
        application = transition(self.application.pk, 'a_register', 'clerk1', today=self.day0)
        self.assertEqual(application.status, Status.A_REGISTER)

    def test_transition_refreshes_updated_at(self):
        before = self.application.updated_at
        transition(self.application, Status.A_REGISTER, 'clerk1', today=self.day0)
        self.assertGreaterEqual(self.application.updated_at, before)

    def test_a_register_processing_days(self):
        transition(self.application, Status.A_REGISTER, 'clerk1', today=self.day0)

        entry = ARegister.objects.get(application=self.application)
        self.assertEqual(entry.received_date, self.day0)
        self.assertEqual(entry.clerk_initials, 'JV')
        self.assertTrue(entry.is_open)

        transition(self.application, Status.SENT_TO_COURT, 'clerk1',
                   today=self.day0 + timedelta(days=5), court_name='Sub Court')

        entry.refresh_from_db()
        self.assertEqual(entry.returned_date, date(2024, 6, 8))
        self.assertEqual(entry.processing_days, 5)
        self.assertEqual(BRegister.objects.get(application=self.application).sent_to_court_date, date(2024, 6, 8))

    def test_court_reply_closes_b_register(self):
        self.advance_to(Status.SENT_TO_COURT)
        transition(self.application, Status.COURT_REPLIED, 'clerk1', today=self.day0 + timedelta(days=9),
                   compliance_status=True, court_remarks='Certified copies may issue')

        entry = BRegister.objects.get(application=self.application)
        self.assertTrue(entry.compliance_status)
        self.assertEqual(entry.processing_days, 9)
        self.assertEqual(entry.court_remarks, 'Certified copies may issue')

    def test_call_for_notice_estimates_fee(self):
        self.advance_to(Status.CALL_FOR_NOTICE)

        notice = CallForNotice.objects.get(application=self.application)
        self.assertEqual(notice.notice_date, self.day0)
        self.assertEqual(notice.grace_period_end, date(2024, 6, 10))
        self.assertEqual(notice.pages_estimated, 10)
        self.assertEqual(notice.fee_calculated, Decimal('25.00'))

    def test_skipping_a_stage_is_rejected(self):
        with self.assertRaises(InvalidTransition) as ctx:
            transition(self.application, Status.PAYMENT_RECEIVED, 'clerk1', today=self.day0)

        self.assertEqual(ctx.exception.current_status, Status.SUBMITTED)
        self.assertEqual(ctx.exception.target_status, Status.PAYMENT_RECEIVED)
        self.application.refresh_from_db()
        self.assertEqual(self.application.status, Status.SUBMITTED)
        self.assertEqual(get_audit_trail(self.application).count(), 1)

    def test_moving_backward_is_rejected(self):
        self.advance_to(Status.SENT_TO_COURT)
        with self.assertRaises(InvalidTransition):
            transition(self.application, Status.A_REGISTER, 'clerk1', today=self.day0)

    def test_terminal_states_reject_every_target(self):
        self.advance_to(Status.DELIVERED)
        for target in Status:
            with self.assertRaises(InvalidTransition):
                transition(self.application, target, 'clerk1', today=self.day0)
        self.assertEqual(get_audit_trail(self.application).count(), len(HAPPY_PATH) + 1)

    def test_unknown_target_is_rejected(self):
        with self.assertRaises(InvalidTransition):
            transition(self.application, 'archived', 'clerk1')

    def test_unexpected_details_are_rejected(self):
        with self.assertRaises(TypeError):
            transition(self.application, Status.A_REGISTER, 'clerk1', pages_estimated=4)
        self.application.refresh_from_db()
        self.assertEqual(self.application.status, Status.SUBMITTED)

    def test_failed_audit_write_rolls_back_everything(self):
        with mock.patch('workflow.services.log_status_change', side_effect=RuntimeError("disk full")):
            with self.assertRaises(RuntimeError):
                transition(self.application, Status.A_REGISTER, 'clerk1', today=self.day0)

        self.application.refresh_from_db()
        self.assertEqual(self.application.status, Status.SUBMITTED)
        self.assertFalse(ARegister.objects.filter(application=self.application).exists())

    def test_record_payment_within_grace_period(self):
        self.advance_to(Status.CALL_FOR_NOTICE)

        record_payment(self.application, 'clerk1', pages_count=12, receipt_number='CR-1001',
                       payment_method='cash', today=date(2024, 6, 10))

        self.assertEqual(self.application.status, Status.PAYMENT_RECEIVED)
        payment = Payment.objects.get(application=self.application)
        self.assertEqual(payment.amount, Decimal('30.00'))
        self.assertEqual(payment.receipt_number, 'CR-1001')
        self.assertEqual(payment.recorded_by, 'clerk1')

    def test_payment_remarks_are_stored_on_the_payment(self):
        self.advance_to(Status.CALL_FOR_NOTICE)

        record_payment(self.application, 'clerk1', receipt_number='CR-1002',
                       remarks='Paid by advocate clerk', today=date(2024, 6, 5))

        payment = Payment.objects.get(application=self.application)
        self.assertEqual(payment.remarks, 'Paid by advocate clerk')
        self.assertEqual(get_audit_trail(self.application).last().remarks, 'Paid by advocate clerk')

    def test_payment_after_grace_period_is_rejected(self):
        self.advance_to(Status.CALL_FOR_NOTICE)

        with self.assertRaises(InvalidTransition):
            record_payment(self.application, 'clerk1', today=date(2024, 6, 11))

        self.application.refresh_from_db()
        self.assertEqual(self.application.status, Status.CALL_FOR_NOTICE)
        self.assertFalse(Payment.objects.exists())

    def test_strike_off_before_grace_period_ends_is_rejected(self):
        self.advance_to(Status.CALL_FOR_NOTICE)
        with self.assertRaises(InvalidTransition):
            transition(self.application, Status.STRUCK_OFF, 'supdt', today=date(2024, 6, 10))

    def test_strike_off_from_early_stage_is_rejected(self):
        self.advance_to(Status.COURT_REPLIED)
        with self.assertRaises(InvalidTransition):
            transition(self.application, Status.STRUCK_OFF, 'supdt', today=self.day0)

    def test_lapsed_notice_is_struck_off(self):
        self.advance_to(Status.CALL_FOR_NOTICE)
        paid = create_application({
            'application_type': Application.ApplicationType.COPY,
            'case_type': Application.CaseType.CIVIL,
            'base_fee': Decimal('10.00'),
            'applicant_name': 'Paid Applicant',
        }, actor='clerk1', today=self.day0)
        for status in HAPPY_PATH[:5]:
            details = {'pages_estimated': 4} if status == Status.CALL_FOR_NOTICE else {}
            transition(paid, status, 'clerk1', today=self.day0, **details)
        record_payment(paid, 'clerk1', today=self.day0 + timedelta(days=2))

        # Nothing lapses on the last day of the grace period.
        self.assertEqual(strike_off_lapsed_notices(today=date(2024, 6, 10)), [])

        struck = strike_off_lapsed_notices(today=date(2024, 6, 11))

        self.assertEqual(struck, [self.application])
        self.application.refresh_from_db()
        self.assertEqual(self.application.status, Status.STRUCK_OFF)
        self.assertEqual(self.application.strike_off_date, date(2024, 6, 11))
        self.application.full_clean()

        notice = CallForNotice.objects.get(application=self.application)
        self.assertTrue(notice.is_struck_off)
        self.assertEqual(notice.struck_off_date, date(2024, 6, 11))

        entry = get_audit_trail(self.application).last()
        self.assertEqual(entry.changed_by, 'system')
        self.assertEqual(entry.new_status, Status.STRUCK_OFF)

        paid.refresh_from_db()
        self.assertEqual(paid.status, Status.PAYMENT_RECEIVED)

    def test_struck_off_application_rejects_further_transitions(self):
        self.advance_to(Status.CALL_FOR_NOTICE)
        strike_off_lapsed_notices(today=date(2024, 7, 1))

        for target in (Status.PAYMENT_RECEIVED, Status.CALL_FOR_NOTICE, Status.DELIVERED):
            with self.assertRaises(InvalidTransition) as ctx:
                transition(self.application, target, 'clerk1', today=date(2024, 7, 2))
            self.assertEqual(ctx.exception.current_status, Status.STRUCK_OFF)

        self.assertEqual(strike_off_lapsed_notices(today=date(2024, 7, 3)), [])
