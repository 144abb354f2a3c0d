import threading
from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import OperationalError, connection
from django.test import TestCase, TransactionTestCase, override_settings
from django.utils import timezone

from .exceptions import AllocationFailure, DuplicateIdentifier
from .models import Application, GNumberSequence, StatusHistory
from .services import (
    allocate_g_number, create_application, update_application, get_application,
    find_by_g_number, list_by_status, get_audit_trail,
)
from .utils import processing_days, calculate_fee


def draft(**overrides):
    data = {
        'application_type': Application.ApplicationType.COPY,
        'case_type': Application.CaseType.CIVIL,
        'base_fee': Decimal('10.00'),
        'applicant_name': 'Suresh Kumar',
        'advocate_name': 'Adv. Lakshmi Menon',
        'case_number': 'OS 112',
        'case_year': 2023,
    }
    data.update(overrides)
    return data


class DerivedQuantityTests(TestCase):
    def test_processing_days_same_day_is_zero(self):
        d = date(2024, 5, 10)
        self.assertEqual(processing_days(d, d), 0)

    def test_processing_days_open_stage_is_none(self):
        self.assertIsNone(processing_days(date(2024, 5, 10), None))
        self.assertIsNone(processing_days(None, date(2024, 5, 10)))

    def test_processing_days_across_year_boundary(self):
        self.assertEqual(processing_days(date(2024, 12, 30), date(2025, 1, 2)), 3)

    def test_processing_days_grows_with_end_date(self):
        start = date(2024, 2, 20)
        counts = [processing_days(start, start + timedelta(days=n)) for n in range(0, 15)]
        self.assertEqual(counts, sorted(counts))

    def test_fee_is_pages_times_rate(self):
        self.assertEqual(calculate_fee(10, Decimal('2.50')), Decimal('25.00'))

    def test_fee_rounds_to_paise(self):
        self.assertEqual(calculate_fee(3, Decimal('0.335')), Decimal('1.01'))
        self.assertEqual(calculate_fee(7, 1.1), Decimal('7.70'))

    def test_fee_rejects_negative_pages(self):
        with self.assertRaises(ValueError):
            calculate_fee(-1, Decimal('2.50'))


class GNumberAllocationTests(TestCase):
    def test_first_allocation_of_year_starts_at_one(self):
        self.assertFalse(GNumberSequence.objects.filter(year=2024).exists())

        self.assertEqual(allocate_g_number(2024), '2024/0001')
        self.assertEqual(allocate_g_number(2024), '2024/0002')
        self.assertEqual(GNumberSequence.objects.get(year=2024).sequence_number, 2)

    def test_years_have_independent_counters(self):
        for _ in range(5):
            allocate_g_number(2024)

        self.assertEqual(allocate_g_number(2025), '2025/0001')
        self.assertEqual(allocate_g_number(2024), '2024/0006')

    def test_sequential_allocations_have_no_gaps(self):
        numbers = [allocate_g_number(2026) for _ in range(12)]
        self.assertEqual(numbers, [f"2026/{i:04d}" for i in range(1, 13)])

    def test_defaults_to_current_year(self):
        g_number = Application.generate_g_number()
        self.assertTrue(g_number.startswith(f"{timezone.localdate().year}/"))

    @override_settings(COPY_APPLICATION={'ALLOCATION_RETRIES': 2})
    def test_storage_failure_raises_allocation_failure(self):
        with mock.patch.object(GNumberSequence, 'next_value', side_effect=OperationalError("database is locked")) as next_value, \
                mock.patch('applications.services.time.sleep') as sleep:
            with self.assertRaises(AllocationFailure) as ctx:
                allocate_g_number(2024)

        self.assertEqual(next_value.call_count, 2)
        # Backs off once, between the two attempts.
        self.assertEqual(sleep.call_count, 1)
        self.assertEqual(ctx.exception.year, 2024)

    def test_transient_failure_is_retried(self):
        real_next_value = GNumberSequence.next_value
        calls = []

        def flaky(year):
            calls.append(year)
            if len(calls) == 1:
                raise OperationalError("could not obtain lock")
            return real_next_value(year)

        with mock.patch.object(GNumberSequence, 'next_value', side_effect=flaky):
            self.assertEqual(allocate_g_number(2024), '2024/0001')
        self.assertEqual(len(calls), 2)


class ConcurrentAllocationTests(TransactionTestCase):
    def run_in_threads(self, target, count=10):
        results = []
        errors = []

        def worker():
            try:
                results.append(target())
            except Exception as e:
                errors.append(e)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker) for _ in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return results, errors

    def test_concurrent_allocations_are_unique_and_gapless(self):
        results, errors = self.run_in_threads(lambda: allocate_g_number(2031))

        self.assertEqual(errors, [])
        self.assertEqual(sorted(results), [f"2031/{i:04d}" for i in range(1, 11)])

    def test_concurrent_submissions_get_distinct_g_numbers(self):
        results, errors = self.run_in_threads(
            lambda: create_application(draft(), actor='clerk1', today=date(2031, 1, 1)).g_number
        )

        self.assertEqual(errors, [])
        self.assertEqual(sorted(results), [f"2031/{i:04d}" for i in range(1, 11)])
        self.assertEqual(Application.objects.count(), 10)
        self.assertEqual(StatusHistory.objects.count(), 10)
        self.assertEqual(GNumberSequence.objects.get(year=2031).sequence_number, 10)


class CreateApplicationTests(TestCase):
    def test_create_assigns_g_number_and_submitted_status(self):
        application = create_application(draft(), actor='clerk1', today=date(2024, 1, 15))

        self.assertEqual(application.g_number, '2024/0001')
        self.assertEqual(application.status, Application.Status.SUBMITTED)
        self.assertIsNone(application.strike_off_date)
        self.assertEqual(application.priority, Application.Priority.NORMAL)

    def test_create_writes_initial_audit_entry(self):
        application = create_application(draft(), actor='clerk1', today=date(2024, 1, 15))

        trail = list(get_audit_trail(application))
        self.assertEqual(len(trail), 1)
        self.assertIsNone(trail[0].old_status)
        self.assertEqual(trail[0].new_status, Application.Status.SUBMITTED)
        self.assertEqual(trail[0].changed_by, 'clerk1')

    def test_numbers_follow_the_submission_year(self):
        first = create_application(draft(), actor='clerk1', today=date(2024, 12, 31))
        second = create_application(draft(), actor='clerk1', today=date(2024, 12, 31))
        third = create_application(draft(), actor='clerk1', today=date(2025, 1, 1))

        self.assertEqual(first.g_number, '2024/0001')
        self.assertEqual(second.g_number, '2024/0002')
        self.assertEqual(third.g_number, '2025/0001')

    def test_missing_required_fields_are_rejected(self):
        with self.assertRaises(ValidationError):
            create_application(draft(applicant_name=''), actor='clerk1')
        self.assertEqual(Application.objects.count(), 0)
        self.assertFalse(GNumberSequence.objects.exists())

    def test_non_positive_base_fee_is_rejected(self):
        with self.assertRaises(ValidationError):
            create_application(draft(base_fee=Decimal('0.00')), actor='clerk1')
        self.assertEqual(Application.objects.count(), 0)

    def test_unknown_fields_are_rejected(self):
        with self.assertRaises(ValidationError):
            create_application(draft(status=Application.Status.READY), actor='clerk1')

    def test_allocation_failure_creates_nothing(self):
        with mock.patch.object(GNumberSequence, 'next_value', side_effect=OperationalError("down")):
            with self.assertRaises(AllocationFailure):
                create_application(draft(), actor='clerk1', today=date(2024, 1, 15))

        self.assertEqual(Application.objects.count(), 0)
        self.assertEqual(StatusHistory.objects.count(), 0)

    def test_duplicate_g_number_is_an_integrity_error(self):
        Application.objects.create(g_number='2024/0001', **draft())

        with self.assertLogs('applications.services', level='CRITICAL'):
            with self.assertRaises(DuplicateIdentifier) as ctx:
                create_application(draft(), actor='clerk1', today=date(2024, 1, 15))

        self.assertEqual(ctx.exception.g_number, '2024/0001')
        self.assertEqual(Application.objects.count(), 1)


class UpdateApplicationTests(TestCase):
    def setUp(self):
        self.application = create_application(draft(), actor='clerk1', today=date(2024, 1, 15))

    def test_update_refreshes_updated_at(self):
        later = timezone.now() + timedelta(hours=2)
        with mock.patch('django.utils.timezone.now', return_value=later):
            update_application(self.application, applicant_address='Court Road, Thrissur')

        self.application.refresh_from_db()
        self.assertEqual(self.application.applicant_address, 'Court Road, Thrissur')
        self.assertEqual(self.application.updated_at, later)

    def test_g_number_and_status_cannot_be_updated(self):
        with self.assertRaises(ValidationError):
            update_application(self.application, g_number='2024/9999')
        with self.assertRaises(ValidationError):
            update_application(self.application, status=Application.Status.DELIVERED)

        self.application.refresh_from_db()
        self.assertEqual(self.application.g_number, '2024/0001')
        self.assertEqual(self.application.status, Application.Status.SUBMITTED)

    def test_invalid_values_are_rejected(self):
        with self.assertRaises(ValidationError):
            update_application(self.application, case_type='tax')

    def test_rejected_update_leaves_instance_unchanged(self):
        with self.assertRaises(ValidationError):
            update_application(self.application, case_type='tax', applicant_address='Ward 4')

        self.assertEqual(self.application.case_type, Application.CaseType.CIVIL)
        self.assertEqual(self.application.applicant_address, '')

        update_application(self.application, applicant_address='Ward 4')
        self.application.refresh_from_db()
        self.assertEqual(self.application.case_type, Application.CaseType.CIVIL)
        self.assertEqual(self.application.applicant_address, 'Ward 4')


class QueryTests(TestCase):
    def setUp(self):
        self.first = create_application(draft(), actor='clerk1', today=date(2024, 3, 1))
        self.second = create_application(draft(applicant_name='Anil'), actor='clerk1', today=date(2024, 3, 1))

    def test_get_and_find(self):
        self.assertEqual(get_application(self.first.pk), self.first)
        self.assertEqual(find_by_g_number('2024/0002'), self.second)
        self.assertIsNone(find_by_g_number('2024/0999'))

    def test_get_unknown_application(self):
        with self.assertRaises(Application.DoesNotExist):
            get_application(999999)

    def test_list_by_status(self):
        self.assertEqual(list(list_by_status(Application.Status.SUBMITTED)), [self.first, self.second])
        self.assertEqual(list(list_by_status(Application.Status.READY)), [])

    def test_list_by_unknown_status(self):
        with self.assertRaises(ValueError):
            list_by_status('archived')


class StatusHistoryTests(TestCase):
    def test_entries_cannot_be_edited(self):
        application = create_application(draft(), actor='clerk1', today=date(2024, 3, 1))
        entry = get_audit_trail(application).first()

        entry.remarks = 'rewritten'
        with self.assertRaises(ValidationError):
            entry.save()

    def test_entries_are_deleted_with_application(self):
        application = create_application(draft(), actor='clerk1', today=date(2024, 3, 1))
        application.delete()
        self.assertEqual(StatusHistory.objects.count(), 0)
