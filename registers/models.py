from django.db import models
from django.utils import timezone

from applications.models import Application
from applications.utils import processing_days


class ARegister(models.Model):
    """
    Initial clerical review of an application.
    """
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='a_register_entries')
    received_date = models.DateField(default=timezone.localdate)
    remarks = models.TextField(blank=True)
    returned_date = models.DateField(null=True, blank=True)
    clerk_initials = models.CharField(max_length=10, blank=True)
    processing_days = models.IntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['received_date', 'id']
        verbose_name = "A Register Entry"
        verbose_name_plural = "A Register"

    def __str__(self):
        return f"A Register: {self.application.g_number} ({self.received_date})"

    @property
    def is_open(self):
        return self.returned_date is None


class BRegister(models.Model):
    """
    Correspondence with the court holding the case records.
    """
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='b_register_entries')
    sent_to_court_date = models.DateField(default=timezone.localdate)
    court_name = models.CharField(max_length=255, blank=True)
    court_remarks = models.TextField(blank=True)
    returned_date = models.DateField(null=True, blank=True)
    compliance_status = models.BooleanField(default=False)
    clerk_initials = models.CharField(max_length=10, blank=True)
    processing_days = models.IntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sent_to_court_date', 'id']
        verbose_name = "B Register Entry"
        verbose_name_plural = "B Register"

    def __str__(self):
        return f"B Register: {self.application.g_number} -> {self.court_name or 'Court'}"

    @property
    def is_open(self):
        return self.returned_date is None


class CallForNotice(models.Model):
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='notices')
    notice_date = models.DateField(default=timezone.localdate)
    grace_period_end = models.DateField(null=True, blank=True)
    pages_estimated = models.PositiveIntegerField(null=True, blank=True)
    fee_calculated = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    is_struck_off = models.BooleanField(default=False)
    struck_off_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['notice_date', 'id']
        verbose_name = "Call for Notice"
        verbose_name_plural = "Calls for Notice"

    def __str__(self):
        return f"Notice: {self.application.g_number} (grace till {self.grace_period_end})"

    def has_lapsed(self, today):
        return self.grace_period_end is not None and today > self.grace_period_end


class Payment(models.Model):
    """
    Copy fee received against a call for notice. Never updated once recorded.
    """
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=8, decimal_places=2)
    pages_count = models.PositiveIntegerField()
    per_page_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    payment_date = models.DateField(default=timezone.localdate)
    payment_method = models.CharField(max_length=50, blank=True)
    receipt_number = models.CharField(max_length=100, blank=True)
    advocate_name = models.CharField(max_length=255, blank=True)
    recorded_by = models.CharField(max_length=100, blank=True)
    remarks = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['payment_date', 'id']

    def __str__(self):
        return f"Payment {self.receipt_number or self.pk}: {self.application.g_number} Rs.{self.amount}"


class XeroxOperation(models.Model):
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='xerox_operations')
    assigned_date = models.DateField(default=timezone.localdate)
    operator_name = models.CharField(max_length=100, blank=True)
    pages_copied = models.PositiveIntegerField(null=True, blank=True)
    completed_date = models.DateField(null=True, blank=True)
    remarks = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['assigned_date', 'id']
        verbose_name = "Xerox Operation"
        verbose_name_plural = "Xerox Operations"

    def __str__(self):
        return f"Xerox: {self.application.g_number} ({self.operator_name or 'unassigned'})"

    @property
    def is_open(self):
        return self.completed_date is None

    @property
    def processing_days(self):
        return processing_days(self.assigned_date, self.completed_date)
