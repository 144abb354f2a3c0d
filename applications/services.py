import logging
import time

from django.core.exceptions import FieldDoesNotExist, ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from .conf import get_policy
from .exceptions import AllocationFailure, DuplicateIdentifier
from .models import Application, StatusHistory

logger = logging.getLogger(__name__)

# Fields that only the allocator and the workflow may write.
PROTECTED_FIELDS = {'id', 'g_number', 'status', 'strike_off_date', 'created_at', 'updated_at'}

# Seconds to wait before retrying a failed allocation, times the attempt number.
RETRY_BACKOFF = 0.05


def apply_mutation(instance, **changes):
    """
    Writes the given field changes and refreshes updated_at.

    Every update of an application or a stage record goes through here, so
    the timestamp is never left stale by a caller that forgot it.
    """
    for field, value in changes.items():
        setattr(instance, field, value)

    update_fields = list(changes)
    try:
        instance._meta.get_field('updated_at')
    except FieldDoesNotExist:
        pass
    else:
        update_fields.append('updated_at')

    instance.save(update_fields=update_fields)
    return instance


def log_status_change(application, old_status, new_status, changed_by=None, remarks=None):
    """
    Creates a StatusHistory entry.
    """
    return StatusHistory.objects.create(
        application=application,
        old_status=old_status,
        new_status=new_status,
        changed_by=changed_by or '',
        remarks=remarks or '',
    )


def allocate_g_number(year=None):
    """
    Issues the next G-Number for the year.

    Lock waits and deadlocks are retried up to ALLOCATION_RETRIES times,
    after that the caller gets AllocationFailure and must not create the
    application.
    """
    if year is None:
        year = timezone.localdate().year

    attempts = max(1, int(get_policy('ALLOCATION_RETRIES')))
    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            g_number = Application.generate_g_number(year)
        except DatabaseError as e:
            last_error = e
            logger.warning("G-Number allocation for %s failed (attempt %s/%s): %s", year, attempt, attempts, e)
            if attempt < attempts:
                time.sleep(RETRY_BACKOFF * attempt)
            continue
        logger.info("Allocated G-Number %s", g_number)
        return g_number

    logger.error("Giving up on G-Number allocation for %s after %s attempts", year, attempts)
    raise AllocationFailure(year, last_error)


REQUIRED_DRAFT_FIELDS = ('application_type', 'case_type', 'base_fee', 'applicant_name')
DRAFT_FIELDS = (
    'application_type', 'case_type', 'priority', 'base_fee',
    'applicant_name', 'applicant_address', 'advocate_name',
    'case_number', 'case_year', 'case_details', 'documents_required',
    'deadline_date',
)


@transaction.atomic
def create_application(data, actor, today=None, remarks=None):
    """
    Registers a new copy application.

    The G-Number is allocated in the same transaction as the insert, so a
    failed insert gives the number back instead of leaving a gap, and an
    application never exists without one.
    """
    missing = [f for f in REQUIRED_DRAFT_FIELDS if data.get(f) in (None, '')]
    if missing:
        raise ValidationError({f: "This field is required." for f in missing})

    unknown = set(data) - set(DRAFT_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown application fields: {', '.join(sorted(unknown))}")

    today = today or timezone.localdate()
    application = Application(
        status=Application.Status.SUBMITTED,
        **{f: data[f] for f in DRAFT_FIELDS if f in data}
    )
    application.full_clean(exclude=['g_number'])

    application.g_number = allocate_g_number(today.year)
    try:
        with transaction.atomic():
            application.save()
    except IntegrityError as e:
        logger.critical("Integrity violation: G-Number %s issued twice (%s)", application.g_number, e)
        raise DuplicateIdentifier(application.g_number) from e

    log_status_change(
        application,
        None,
        Application.Status.SUBMITTED,
        changed_by=actor,
        remarks=remarks or "Application submitted",
    )
    logger.info("Application %s submitted by %s", application.g_number, actor)
    return application


def update_application(application, **changes):
    """
    Updates descriptive fields of an application.

    Status and strike-off date only move through workflow.services.transition.
    """
    protected = PROTECTED_FIELDS.intersection(changes)
    if protected:
        raise ValidationError(f"Fields cannot be changed directly: {', '.join(sorted(protected))}")

    previous = {field: getattr(application, field) for field in changes}
    for field, value in changes.items():
        setattr(application, field, value)
    try:
        application.full_clean(exclude=['g_number'])
    except ValidationError:
        # Leave the caller's instance as it was.
        for field, value in previous.items():
            setattr(application, field, value)
        raise

    return apply_mutation(application, **changes)


# --- Read-only queries ---

def get_application(pk):
    return Application.objects.get(pk=pk)


def find_by_g_number(g_number):
    return Application.objects.filter(g_number=g_number).first()


def list_by_status(status):
    if status not in Application.Status.values:
        raise ValueError(f"Unknown application status: {status}")
    return Application.objects.filter(status=status).order_by('created_at', 'id')


def get_audit_trail(application):
    """
    Status changes of the application, oldest first.
    """
    return StatusHistory.objects.filter(application=application).order_by('changed_at', 'id')
