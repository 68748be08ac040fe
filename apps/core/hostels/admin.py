from django.contrib import admin

from .models import Complaint, Hostel, Room, RoomResident


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0


@admin.register(Hostel)
class HostelAdmin(admin.ModelAdmin):
    list_display = ('name', 'type', 'status', 'warden_name')
    list_filter = ('type', 'status')
    inlines = [RoomInline]


@admin.register(RoomResident)
class RoomResidentAdmin(admin.ModelAdmin):
    list_display = ('student_name', 'room', 'allocated_at')
    search_fields = ('student_name', 'student__college_id')


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ('student_name', 'hostel', 'room_number', 'status', 'date')
    list_filter = ('status', 'hostel')
