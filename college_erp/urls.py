from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    path('auth/', include('apps.core.users.urls')),
    path('students/', include('apps.core.students.urls')),
    path('staff/', include('apps.core.staff.urls')),
    path('academics/', include('apps.core.academics.urls')),
    path('attendance/', include('apps.core.attendance.urls')),
    path('fees/', include('apps.core.fees.urls')),
    path('hostels/', include('apps.core.hostels.urls')),
    path('exams/', include('apps.core.exams.urls')),
    path('notifications/', include('apps.core.notifications.urls')),
    path('placements/', include('apps.core.placements.urls')),
    path('chat/', include('apps.core.chat.urls')),
    path('dashboard/', include('apps.core.reports.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
