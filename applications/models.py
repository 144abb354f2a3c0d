from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone


class GNumberSequence(models.Model):
    """
    One counter row per year. The row is created on the first allocation of
    the year, never pre-seeded.
    """
    year = models.PositiveIntegerField(unique=True)
    sequence_number = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "G-Number Sequence"
        verbose_name_plural = "G-Number Sequences"

    def __str__(self):
        return f"{self.year}: {self.sequence_number}"

    @classmethod
    def next_value(cls, year):
        with transaction.atomic():
            counter, created = cls.objects.select_for_update().get_or_create(
                year=year,
                defaults={'sequence_number': 0}
            )
            # Increment in the UPDATE itself so backends without row locks
            # (SQLite) still never hand out the same value twice.
            cls.objects.filter(pk=counter.pk).update(sequence_number=F('sequence_number') + 1)
            counter.refresh_from_db(fields=['sequence_number'])
            return counter.sequence_number


class Application(models.Model):
    class ApplicationType(models.TextChoices):
        COPY = 'copy', 'Copy'
        THIRD_PARTY = 'third_party', 'Third Party'

    class CaseType(models.TextChoices):
        CIVIL = 'civil', 'Civil'
        CRIMINAL = 'criminal', 'Criminal'

    class Priority(models.TextChoices):
        NORMAL = 'normal', 'Normal'
        EMERGENT = 'emergent', 'Emergent'

    class Status(models.TextChoices):
        SUBMITTED = 'submitted', 'Submitted'
        A_REGISTER = 'a_register', 'A Register'
        SENT_TO_COURT = 'sent_to_court', 'Sent to Court'
        COURT_REPLIED = 'court_replied', 'Court Replied'
        SUPERINTENDENT_RECEIVED = 'superintendent_received', 'Superintendent Received'
        CALL_FOR_NOTICE = 'call_for_notice', 'Call for Notice'
        PAYMENT_RECEIVED = 'payment_received', 'Payment Received'
        XEROX_ASSIGNED = 'xerox_assigned', 'Xerox Assigned'
        READY = 'ready', 'Ready'
        DELIVERED = 'delivered', 'Delivered'
        STRUCK_OFF = 'struck_off', 'Struck Off'

    g_number = models.CharField(max_length=20, unique=True, editable=False)  # Format: YYYY/NNNN
    application_type = models.CharField(max_length=20, choices=ApplicationType.choices)
    case_type = models.CharField(max_length=20, choices=CaseType.choices)
    priority = models.CharField(max_length=20, choices=Priority.choices, default=Priority.NORMAL)
    base_fee = models.DecimalField(max_digits=5, decimal_places=2)

    applicant_name = models.CharField(max_length=255)
    applicant_address = models.TextField(blank=True)
    advocate_name = models.CharField(max_length=255, blank=True)
    case_number = models.CharField(max_length=100, blank=True)
    case_year = models.PositiveIntegerField(null=True, blank=True)
    case_details = models.TextField(blank=True)
    documents_required = models.TextField(blank=True)

    status = models.CharField(max_length=30, choices=Status.choices, default=Status.SUBMITTED)
    deadline_date = models.DateField(null=True, blank=True)
    strike_off_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['status'], name='application_status_idx'),
            models.Index(fields=['created_at'], name='application_created_idx'),
            models.Index(fields=['case_type'], name='application_case_type_idx'),
        ]

    def __str__(self):
        return f"{self.g_number} - {self.applicant_name}"

    @property
    def is_terminal(self):
        return self.status in (self.Status.DELIVERED, self.Status.STRUCK_OFF)

    def clean(self):
        errors = {}
        if self.base_fee is not None and self.base_fee <= 0:
            errors['base_fee'] = "Base fee must be a positive amount."
        if (self.status == self.Status.STRUCK_OFF) != (self.strike_off_date is not None):
            errors['strike_off_date'] = "Strike-off date is set only on struck off applications."
        if errors:
            raise ValidationError(errors)

    @classmethod
    def generate_g_number(cls, year=None):
        if year is None:
            year = timezone.localdate().year

        seq = GNumberSequence.next_value(year)
        # G-Number format: <YYYY>/<NNNN>
        return f"{year}/{seq:04d}"


class StatusHistory(models.Model):
    """
    Append-only log of status changes. The first row of an application has
    no old_status.
    """
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='status_history')
    old_status = models.CharField(max_length=30, choices=Application.Status.choices, null=True, blank=True)
    new_status = models.CharField(max_length=30, choices=Application.Status.choices)
    remarks = models.TextField(blank=True)
    changed_by = models.CharField(max_length=100, blank=True)
    changed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['changed_at', 'id']
        get_latest_by = ['changed_at', 'id']
        verbose_name = "Status History"
        verbose_name_plural = "Status History"

    def __str__(self):
        return f"{self.application.g_number}: {self.old_status or '-'} -> {self.new_status}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Status history entries cannot be changed once written.")
        super().save(*args, **kwargs)
