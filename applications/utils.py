from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal('0.01')


def processing_days(start, end):
    """
    Calendar days between a stage's start and close dates.

    Returns None while the stage is still open (no end date). Weekends and
    holidays are counted like any other day.
    """
    if start is None or end is None:
        return None
    return (end - start).days


def calculate_fee(pages, per_page_rate):
    """pages x rate, rounded half-up to paise."""
    if pages is None:
        return None
    if pages < 0:
        raise ValueError(f"Page count cannot be negative: {pages}")
    rate = Decimal(str(per_page_rate))
    return (Decimal(pages) * rate).quantize(CENT, rounding=ROUND_HALF_UP)
