import logging

from django.db import transaction
from django.utils import timezone

from applications.exceptions import InvalidTransition
from applications.models import Application
from applications.services import apply_mutation, log_status_change
from registers import services as registers
from registers.models import CallForNotice

logger = logging.getLogger(__name__)

Status = Application.Status

# Allowed edges. Anything not listed here is rejected.
TRANSITIONS = {
    Status.SUBMITTED: {Status.A_REGISTER},
    Status.A_REGISTER: {Status.SENT_TO_COURT},
    Status.SENT_TO_COURT: {Status.COURT_REPLIED},
    Status.COURT_REPLIED: {Status.SUPERINTENDENT_RECEIVED},
    Status.SUPERINTENDENT_RECEIVED: {Status.CALL_FOR_NOTICE},
    Status.CALL_FOR_NOTICE: {Status.PAYMENT_RECEIVED, Status.STRUCK_OFF},
    Status.PAYMENT_RECEIVED: {Status.XEROX_ASSIGNED},
    Status.XEROX_ASSIGNED: {Status.READY},
    Status.READY: {Status.DELIVERED},
    Status.DELIVERED: set(),
    Status.STRUCK_OFF: set(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)

# Stage details a caller may hand to transition(), by target status.
STAGE_DETAILS = {
    Status.SENT_TO_COURT: {'court_name'},
    Status.COURT_REPLIED: {'compliance_status', 'court_remarks'},
    Status.CALL_FOR_NOTICE: {'pages_estimated'},
    Status.PAYMENT_RECEIVED: {
        'pages_count', 'amount', 'per_page_rate', 'payment_method',
        'receipt_number', 'advocate_name', 'payment_remarks',
    },
    Status.XEROX_ASSIGNED: {'operator_name'},
    Status.READY: {'pages_copied'},
}


def allowed_transitions(status):
    return sorted(TRANSITIONS[Status(status)])


def can_transition(current_status, target_status):
    """
    Checks an edge against the transition table.

    Returns:
        (allowed, reason)
    """
    if current_status not in Status.values:
        return (False, f"unknown status '{current_status}'")
    if target_status not in Status.values:
        return (False, f"unknown status '{target_status}'")

    # Look up by member, plain strings do not hash like TextChoices members.
    current, target = Status(current_status), Status(target_status)
    if current in TERMINAL_STATUSES:
        return (False, f"'{current}' is a terminal status")
    targets = TRANSITIONS[current]
    if target not in targets:
        valid = ', '.join(sorted(targets))
        return (False, f"allowed next statuses: {valid}")
    return (True, "transition allowed")


def _leave_stage(application, current, today, remarks, details):
    if current == Status.A_REGISTER:
        registers.close_a_register(application, today, remarks=remarks)
    elif current == Status.SENT_TO_COURT:
        registers.close_b_register(
            application,
            today,
            compliance_status=details.get('compliance_status', False),
            court_remarks=details.get('court_remarks', ''),
        )
    elif current == Status.XEROX_ASSIGNED:
        registers.complete_xerox_operation(
            application, today, pages_copied=details.get('pages_copied'), remarks=remarks
        )


def _enter_stage(application, target, actor, today, details):
    """
    Opens the stage record for the target status.
    Returns the extra Application field changes the stage requires.
    """
    if target == Status.A_REGISTER:
        registers.open_a_register(application, today, actor=actor)

    elif target == Status.SENT_TO_COURT:
        registers.open_b_register(application, today, actor=actor, court_name=details.get('court_name', ''))

    elif target == Status.CALL_FOR_NOTICE:
        registers.open_call_for_notice(application, today, pages_estimated=details.get('pages_estimated'))

    elif target == Status.PAYMENT_RECEIVED:
        notice = registers.get_open_notice(application)
        if notice.has_lapsed(today):
            logger.warning("Payment for %s refused, grace period ended %s", application.g_number, notice.grace_period_end)
            raise InvalidTransition(
                application.status, target,
                f"grace period ended on {notice.grace_period_end}"
            )
        registers.create_payment(
            application,
            notice,
            today,
            actor=actor,
            pages_count=details.get('pages_count'),
            amount=details.get('amount'),
            per_page_rate=details.get('per_page_rate'),
            payment_method=details.get('payment_method', ''),
            receipt_number=details.get('receipt_number', ''),
            advocate_name=details.get('advocate_name', ''),
            remarks=details.get('payment_remarks', ''),
        )

    elif target == Status.STRUCK_OFF:
        notice = registers.get_open_notice(application)
        if not notice.has_lapsed(today):
            logger.warning("Strike-off of %s refused, grace period runs until %s", application.g_number, notice.grace_period_end)
            raise InvalidTransition(
                application.status, target,
                f"grace period runs until {notice.grace_period_end}"
            )
        registers.strike_off_notice(notice, today)
        return {'strike_off_date': today}

    elif target == Status.XEROX_ASSIGNED:
        registers.open_xerox_operation(application, today, operator_name=details.get('operator_name', ''))

    return {}


@transaction.atomic
def transition(application, new_status, actor, remarks=None, today=None, **details):
    """
    Moves an application to new_status.

    The status change, the stage records it opens or closes and the
    StatusHistory entry are written in one transaction. The application row
    is locked for the duration, so two clerks acting on the same file are
    applied one after the other.

    Returns the updated Application, with the new StatusHistory entry as
    last_status_change.

    Raises:
        InvalidTransition: the edge is not in TRANSITIONS, or the notice's
            grace period does not allow it.
        MissingPrerequisite: the stage record the action depends on is absent.
    """
    pk = application.pk if isinstance(application, Application) else application
    locked = Application.objects.select_for_update().get(pk=pk)
    current = locked.status

    allowed, reason = can_transition(current, new_status)
    if not allowed:
        logger.warning(
            "Rejected transition: app=%s, current=%s, target=%s, actor=%s, reason=%s",
            locked.g_number, current, new_status, actor, reason
        )
        raise InvalidTransition(current, new_status, reason)

    new_status = Status(new_status)
    extra = set(details) - STAGE_DETAILS.get(new_status, set())
    if extra:
        raise TypeError(f"Unexpected details for '{new_status}': {', '.join(sorted(extra))}")

    today = today or timezone.localdate()

    _leave_stage(locked, current, today, remarks, details)
    changes = _enter_stage(locked, new_status, actor, today, details)

    apply_mutation(locked, status=new_status, **changes)
    entry = log_status_change(locked, current, new_status, changed_by=actor, remarks=remarks)

    logger.info(
        "Workflow transition: app=%s, %s -> %s (actor=%s)",
        locked.g_number, current, new_status, actor
    )

    if isinstance(application, Application):
        application.refresh_from_db()
        locked = application
    # The StatusHistory row this transition wrote.
    locked.last_status_change = entry
    return locked


def record_payment(application, actor, pages_count=None, amount=None, per_page_rate=None,
                   payment_method='', receipt_number='', advocate_name='', remarks=None, today=None):
    """
    Records the copy fee and moves the application to payment_received.
    """
    return transition(
        application,
        Status.PAYMENT_RECEIVED,
        actor,
        remarks=remarks or "Copy fee received",
        today=today,
        pages_count=pages_count,
        amount=amount,
        per_page_rate=per_page_rate,
        payment_method=payment_method,
        receipt_number=receipt_number,
        advocate_name=advocate_name,
        payment_remarks=remarks or '',
    )


def strike_off_lapsed_notices(today=None, actor='system'):
    """
    Strikes off every application whose notice grace period has ended
    without payment. Meant to be run daily by a scheduler.

    Returns the list of struck off applications.
    """
    today = today or timezone.localdate()
    notices = CallForNotice.objects.filter(
        application__status=Status.CALL_FOR_NOTICE,
        is_struck_off=False,
        grace_period_end__lt=today,
    ).select_related('application')

    struck_off = []
    for notice in notices:
        try:
            application = transition(
                notice.application,
                Status.STRUCK_OFF,
                actor,
                remarks=f"Grace period ended on {notice.grace_period_end} without payment",
                today=today,
            )
        except InvalidTransition as e:
            # Paid or struck off by someone else since the query ran.
            logger.info("Skipping strike-off of %s: %s", notice.application.g_number, e.reason)
            continue
        logger.info("Struck off %s (grace period ended %s)", application.g_number, notice.grace_period_end)
        struck_off.append(application)

    return struck_off
