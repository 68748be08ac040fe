from django.urls import path

from .views import (
    attendance_import,
    attendance_report,
    attendance_report_csv,
    attendance_save,
    attendance_slot,
    my_attendance,
)

urlpatterns = [
    path('report/', attendance_report, name='attendance_report'),
    path('report/csv/', attendance_report_csv, name='attendance_report_csv'),
    path('import/', attendance_import, name='attendance_import'),
    path('classes/<int:class_id>/', attendance_slot, name='attendance_slot'),
    path('classes/<int:class_id>/save/', attendance_save, name='attendance_save'),
    path('me/', my_attendance, name='my_attendance'),
]
