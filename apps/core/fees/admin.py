from django.contrib import admin

from .models import FeeLedger, FeePayment


class FeePaymentInline(admin.TabularInline):
    model = FeePayment
    extra = 0


@admin.register(FeeLedger)
class FeeLedgerAdmin(admin.ModelAdmin):
    list_display = ('college_id', 'student_name', 'program', 'total_fees', 'amount_paid', 'due_date')
    list_filter = ('program', 'branch')
    search_fields = ('college_id', 'student_name')
    inlines = [FeePaymentInline]


@admin.register(FeePayment)
class FeePaymentAdmin(admin.ModelAdmin):
    list_display = ('date', 'ledger', 'amount', 'status', 'recorded_by', 'reference')
    list_filter = ('status', 'recorded_by')
    search_fields = ('reference', 'ledger__college_id')
