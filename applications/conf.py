from decimal import Decimal
from django.conf import settings

DEFAULTS = {
    'NOTICE_GRACE_DAYS': 7,
    'PER_PAGE_RATE': Decimal('2.50'),
    'ALLOCATION_RETRIES': 3,
}


def get_policy(key):
    """
    Reads a workflow policy value from settings.COPY_APPLICATION.
    Falls back to DEFAULTS for keys the deployment does not set.
    """
    configured = getattr(settings, 'COPY_APPLICATION', {}) or {}
    if key in configured:
        return configured[key]
    return DEFAULTS[key]
