from django.contrib import admin
from .models import Application, GNumberSequence, StatusHistory


class StatusHistoryInline(admin.TabularInline):
    model = StatusHistory
    extra = 0
    can_delete = False
    readonly_fields = ('old_status', 'new_status', 'remarks', 'changed_by', 'changed_at')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ('g_number', 'applicant_name', 'application_type', 'case_type', 'priority', 'status', 'created_at')
    list_filter = ('status', 'application_type', 'case_type', 'priority', 'created_at')
    search_fields = ('g_number', 'applicant_name', 'advocate_name', 'case_number')
    # Status changes go through the workflow, never through the admin form.
    readonly_fields = ('g_number', 'status', 'strike_off_date', 'created_at', 'updated_at')
    inlines = [StatusHistoryInline]


@admin.register(StatusHistory)
class StatusHistoryAdmin(admin.ModelAdmin):
    list_display = ('application', 'old_status', 'new_status', 'changed_by', 'changed_at')
    list_filter = ('new_status', 'changed_at')
    search_fields = ('application__g_number', 'remarks', 'changed_by')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(GNumberSequence)
class GNumberSequenceAdmin(admin.ModelAdmin):
    list_display = ('year', 'sequence_number')
    readonly_fields = ('year', 'sequence_number')
