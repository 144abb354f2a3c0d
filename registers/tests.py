from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from applications.exceptions import MissingPrerequisite
from applications.models import Application
from applications.services import create_application
from .models import ARegister, BRegister, CallForNotice, Payment, XeroxOperation
from .services import (
    open_a_register, close_a_register, open_b_register, close_b_register,
    open_call_for_notice, get_open_notice, create_payment,
    open_xerox_operation, complete_xerox_operation,
)

User = get_user_model()


class RegisterServiceTests(TestCase):
    def setUp(self):
        self.today = date(2024, 4, 1)
        self.application = create_application({
            'application_type': Application.ApplicationType.THIRD_PARTY,
            'case_type': Application.CaseType.CRIMINAL,
            'base_fee': Decimal('5.00'),
            'applicant_name': 'Fathima Beevi',
            'advocate_name': 'Adv. Joseph',
        }, actor='clerk1', today=self.today)
        self.clerk = User.objects.create_user(username='clerk1', password='password', initials='JV')

    def test_a_register_close_computes_processing_days(self):
        entry = open_a_register(self.application, self.today, actor='clerk1')
        self.assertTrue(entry.is_open)
        self.assertEqual(entry.clerk_initials, 'JV')
        self.assertIsNone(entry.processing_days)

        closed = close_a_register(self.application, self.today + timedelta(days=5), remarks='Papers in order')

        self.assertEqual(closed.pk, entry.pk)
        self.assertEqual(closed.returned_date, date(2024, 4, 6))
        self.assertEqual(closed.processing_days, 5)
        self.assertEqual(closed.remarks, 'Papers in order')

    def test_closing_without_open_entry_names_the_register(self):
        with self.assertRaises(MissingPrerequisite) as ctx:
            close_a_register(self.application, self.today)
        self.assertEqual(ctx.exception.dependency, 'a_register')

    def test_b_register_records_compliance(self):
        open_b_register(self.application, self.today, actor='system', court_name='Munsiff Court, Irinjalakuda')
        entry = close_b_register(self.application, self.today + timedelta(days=12),
                                 compliance_status=True, court_remarks='Records available')

        self.assertEqual(entry.court_name, 'Munsiff Court, Irinjalakuda')
        self.assertEqual(entry.clerk_initials, '')
        self.assertTrue(entry.compliance_status)
        self.assertEqual(entry.processing_days, 12)
        self.assertFalse(entry.is_open)

    @override_settings(COPY_APPLICATION={'NOTICE_GRACE_DAYS': 10, 'PER_PAGE_RATE': Decimal('2.50')})
    def test_call_for_notice_sets_grace_period_and_fee(self):
        notice = open_call_for_notice(self.application, self.today, pages_estimated=10)

        self.assertEqual(notice.grace_period_end, date(2024, 4, 11))
        self.assertEqual(notice.fee_calculated, Decimal('25.00'))
        self.assertFalse(notice.has_lapsed(date(2024, 4, 11)))
        self.assertTrue(notice.has_lapsed(date(2024, 4, 12)))

    def test_notice_without_page_estimate_has_no_fee(self):
        notice = open_call_for_notice(self.application, self.today)
        self.assertIsNone(notice.fee_calculated)

    def test_payment_without_notice_is_missing_prerequisite(self):
        with self.assertRaises(MissingPrerequisite) as ctx:
            get_open_notice(self.application)
        self.assertEqual(ctx.exception.dependency, 'call_for_notice')
        self.assertIn(self.application.g_number, str(ctx.exception))

    def test_payment_defaults_to_notice_estimate(self):
        notice = open_call_for_notice(self.application, self.today, pages_estimated=8)
        payment = create_payment(self.application, notice, self.today, actor='clerk1', receipt_number='R-77')

        self.assertEqual(payment.pages_count, 8)
        self.assertEqual(payment.per_page_rate, Decimal('2.50'))
        self.assertEqual(payment.amount, Decimal('20.00'))
        self.assertEqual(payment.advocate_name, 'Adv. Joseph')
        self.assertEqual(payment.recorded_by, 'clerk1')

    def test_payment_needs_a_page_count(self):
        notice = open_call_for_notice(self.application, self.today)
        with self.assertRaises(MissingPrerequisite):
            create_payment(self.application, notice, self.today)
        self.assertFalse(Payment.objects.exists())

    def test_xerox_needs_payment(self):
        with self.assertRaises(MissingPrerequisite) as ctx:
            open_xerox_operation(self.application, self.today, operator_name='Ravi')
        self.assertEqual(ctx.exception.dependency, 'payment')
        self.assertFalse(XeroxOperation.objects.exists())

    def test_xerox_completion_defaults_to_paid_pages(self):
        notice = open_call_for_notice(self.application, self.today, pages_estimated=14)
        create_payment(self.application, notice, self.today)
        operation = open_xerox_operation(self.application, self.today, operator_name='Ravi')
        self.assertIsNone(operation.processing_days)

        operation = complete_xerox_operation(self.application, self.today + timedelta(days=2))

        self.assertEqual(operation.pages_copied, 14)
        self.assertEqual(operation.processing_days, 2)

    def test_stage_records_are_deleted_with_application(self):
        open_a_register(self.application, self.today)
        open_b_register(self.application, self.today)
        open_call_for_notice(self.application, self.today, pages_estimated=2)

        self.application.delete()

        self.assertFalse(ARegister.objects.exists())
        self.assertFalse(BRegister.objects.exists())
        self.assertFalse(CallForNotice.objects.exists())
