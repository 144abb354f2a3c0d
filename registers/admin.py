from django.contrib import admin
from .models import ARegister, BRegister, CallForNotice, Payment, XeroxOperation

@admin.register(ARegister)
class ARegisterAdmin(admin.ModelAdmin):
    list_display = ('application', 'received_date', 'returned_date', 'processing_days', 'clerk_initials')
    list_filter = ('received_date',)
    search_fields = ('application__g_number', 'remarks')
    readonly_fields = ('processing_days',)

@admin.register(BRegister)
class BRegisterAdmin(admin.ModelAdmin):
    list_display = ('application', 'court_name', 'sent_to_court_date', 'returned_date', 'compliance_status', 'processing_days')
    list_filter = ('compliance_status', 'sent_to_court_date')
    search_fields = ('application__g_number', 'court_name', 'court_remarks')
    readonly_fields = ('processing_days',)

@admin.register(CallForNotice)
class CallForNoticeAdmin(admin.ModelAdmin):
    list_display = ('application', 'notice_date', 'grace_period_end', 'pages_estimated', 'fee_calculated', 'is_struck_off')
    list_filter = ('is_struck_off', 'notice_date')
    search_fields = ('application__g_number',)
    readonly_fields = ('grace_period_end', 'fee_calculated', 'is_struck_off', 'struck_off_date')

@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('application', 'amount', 'pages_count', 'payment_date', 'receipt_number', 'recorded_by')
    list_filter = ('payment_date', 'payment_method')
    search_fields = ('application__g_number', 'receipt_number', 'advocate_name')

    def has_change_permission(self, request, obj=None):
        return False

@admin.register(XeroxOperation)
class XeroxOperationAdmin(admin.ModelAdmin):
    list_display = ('application', 'operator_name', 'assigned_date', 'completed_date', 'pages_copied')
    list_filter = ('assigned_date', 'operator_name')
    search_fields = ('application__g_number', 'operator_name')
