import logging
from datetime import timedelta

from accounts.utils import get_initials_for_actor
from applications.conf import get_policy
from applications.exceptions import MissingPrerequisite
from applications.services import apply_mutation
from applications.utils import calculate_fee, processing_days
from .models import ARegister, BRegister, CallForNotice, Payment, XeroxOperation

logger = logging.getLogger(__name__)


def _latest_open(queryset, open_filter, application, dependency):
    entry = queryset.filter(application=application, **open_filter).order_by('-id').first()
    if entry is None:
        logger.warning("No open %s entry for %s", dependency, application.g_number)
        raise MissingPrerequisite(dependency, application)
    return entry


# --- A Register ---

def open_a_register(application, today, actor=None):
    return ARegister.objects.create(
        application=application,
        received_date=today,
        clerk_initials=get_initials_for_actor(actor),
    )


def close_a_register(application, today, remarks=None):
    entry = _latest_open(ARegister.objects, {'returned_date__isnull': True}, application, 'a_register')
    changes = {
        'returned_date': today,
        'processing_days': processing_days(entry.received_date, today),
    }
    if remarks:
        changes['remarks'] = remarks
    return apply_mutation(entry, **changes)


# --- B Register ---

def open_b_register(application, today, actor=None, court_name=''):
    return BRegister.objects.create(
        application=application,
        sent_to_court_date=today,
        court_name=court_name or '',
        clerk_initials=get_initials_for_actor(actor),
    )


def close_b_register(application, today, compliance_status=False, court_remarks=''):
    """
    Records the court's reply on the open B Register entry.
    """
    entry = _latest_open(BRegister.objects, {'returned_date__isnull': True}, application, 'b_register')
    return apply_mutation(
        entry,
        returned_date=today,
        processing_days=processing_days(entry.sent_to_court_date, today),
        compliance_status=bool(compliance_status),
        court_remarks=court_remarks or '',
    )


# --- Call for Notice ---

def open_call_for_notice(application, today, pages_estimated=None):
    """
    Publishes the notice and estimates the copy fee.

    The applicant has NOTICE_GRACE_DAYS after the notice date to pay.
    """
    rate = get_policy('PER_PAGE_RATE')
    grace_days = int(get_policy('NOTICE_GRACE_DAYS'))
    return CallForNotice.objects.create(
        application=application,
        notice_date=today,
        grace_period_end=today + timedelta(days=grace_days),
        pages_estimated=pages_estimated,
        fee_calculated=calculate_fee(pages_estimated, rate),
    )


def get_open_notice(application):
    return _latest_open(CallForNotice.objects, {'is_struck_off': False}, application, 'call_for_notice')


def strike_off_notice(notice, today):
    return apply_mutation(notice, is_struck_off=True, struck_off_date=today)


# --- Payment ---

def create_payment(application, notice, today, actor=None, pages_count=None, amount=None,
                   per_page_rate=None, payment_method='', receipt_number='', advocate_name='', remarks=''):
    """
    Records the copy fee paid against the notice.

    Pages default to the notice estimate and the amount to pages x rate.
    """
    if pages_count is None:
        pages_count = notice.pages_estimated
    if pages_count is None:
        raise MissingPrerequisite('pages_count', application)

    if per_page_rate is None:
        per_page_rate = get_policy('PER_PAGE_RATE')
    if amount is None:
        amount = calculate_fee(pages_count, per_page_rate)

    return Payment.objects.create(
        application=application,
        amount=amount,
        pages_count=pages_count,
        per_page_rate=per_page_rate,
        payment_date=today,
        payment_method=payment_method or '',
        receipt_number=receipt_number or '',
        advocate_name=advocate_name or application.advocate_name,
        recorded_by=actor or '',
        remarks=remarks or '',
    )


def get_latest_payment(application):
    return _latest_open(Payment.objects, {}, application, 'payment')


# --- Xerox ---

def open_xerox_operation(application, today, operator_name=''):
    # Copies are only made for paid applications.
    get_latest_payment(application)
    return XeroxOperation.objects.create(
        application=application,
        assigned_date=today,
        operator_name=operator_name or '',
    )


def complete_xerox_operation(application, today, pages_copied=None, remarks=None):
    entry = _latest_open(XeroxOperation.objects, {'completed_date__isnull': True}, application, 'xerox_operation')
    if pages_copied is None:
        pages_copied = get_latest_payment(application).pages_count

    changes = {'completed_date': today, 'pages_copied': pages_copied}
    if remarks:
        changes['remarks'] = remarks
    return apply_mutation(entry, **changes)
