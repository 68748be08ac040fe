"""
Django settings for college_erp project.

Covers:
- identity provisioning and role profiles (students, teachers, administrators)
- course, class roster and material management
- attendance capture and aggregation
- fee ledgers and invoices
- hostel allocation and complaints
- exam scheduling, hall tickets, marks and backlogs
- notifications, class chat and the side-effect dispatch queue
"""
import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


def _env_flag(name, default='False'):
    return os.getenv(name, default).lower() in {'1', 'true', 'yes'}


DEBUG = _env_flag('DJANGO_DEBUG')
SECRET_KEY = os.getenv(
    'DJANGO_SECRET_KEY',
    'change-this-secret-key-in-production-3c1d8e5f7a9b4c2d8e6f0a1b2c3d4e5f',
)
ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')
    if host.strip()
]


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'apps.core.users.apps.UsersConfig',
    'apps.core.sequences.apps.SequencesConfig',
    'apps.core.notifications.apps.NotificationsConfig',
    'apps.core.students.apps.StudentsConfig',
    'apps.core.staff.apps.StaffConfig',
    'apps.core.academics.apps.AcademicsConfig',
    'apps.core.attendance.apps.AttendanceConfig',
    'apps.core.fees.apps.FeesConfig',
    'apps.core.hostels.apps.HostelsConfig',
    'apps.core.exams.apps.ExamsConfig',
    'apps.core.placements.apps.PlacementsConfig',
    'apps.core.chat.apps.ChatConfig',
    'apps.core.reports.apps.ReportsConfig',
    'apps.core',
]


MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]


ROOT_URLCONF = 'college_erp.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'college_erp.wsgi.application'


DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('DJANGO_DB_PATH', str(BASE_DIR / 'db.sqlite3')),
        # Writers take the lock at BEGIN and wait on it instead of failing mid-transaction.
        'OPTIONS': {
            'transaction_mode': 'IMMEDIATE',
            'timeout': int(os.getenv('DJANGO_DB_TIMEOUT', '20')),
        },
        'TEST': {
            'NAME': os.getenv('DJANGO_TEST_DB_PATH', str(BASE_DIR / 'test_db.sqlite3')),
        },
    }
}


AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]


LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True


STATIC_URL = 'static/'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'
AUTH_USER_MODEL = 'users.User'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


CSRF_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_SECURE = not DEBUG
SECURE_SSL_REDIRECT = _env_flag('DJANGO_SECURE_SSL_REDIRECT')
SECURE_HSTS_SECONDS = int(os.getenv('DJANGO_SECURE_HSTS_SECONDS', '0'))
SECURE_HSTS_INCLUDE_SUBDOMAINS = _env_flag('DJANGO_SECURE_HSTS_INCLUDE_SUBDOMAINS')
SECURE_HSTS_PRELOAD = _env_flag('DJANGO_SECURE_HSTS_PRELOAD')
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')


LOGIN_URL = '/auth/login/'

TEST_RUNNER = 'apps.core.test_runner.CollegeAppsDiscoverRunner'


EMAIL_BACKEND = os.getenv('DJANGO_EMAIL_BACKEND', 'django.core.mail.backends.console.EmailBackend')
DEFAULT_FROM_EMAIL = os.getenv('DJANGO_DEFAULT_FROM_EMAIL', 'noreply@college-erp.local')


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': os.getenv('ERP_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'django': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'WARNING'),
        },
    },
}


IDENTITY_PROVIDER = os.getenv('ERP_IDENTITY_PROVIDER', 'apps.core.users.identity.LocalIdentityProvider')
PASSWORD_RESET_URL = os.getenv('ERP_PASSWORD_RESET_URL', 'http://localhost:8000/auth/reset/')
ADMIN_SIGNUP_CODE = os.getenv('ERP_ADMIN_SIGNUP_CODE', '')
AVATAR_PLACEHOLDER_URL = os.getenv('ERP_AVATAR_PLACEHOLDER_URL', 'https://placehold.co/100x100.png?text={initials}')
PROVISIONING_STALE_MINUTES = int(os.getenv('ERP_PROVISIONING_STALE_MINUTES', '15'))

DEFAULT_TOTAL_FEES = int(os.getenv('ERP_DEFAULT_TOTAL_FEES', '150000'))
FEE_DUE_MONTHS = int(os.getenv('ERP_FEE_DUE_MONTHS', '2'))
SECTION_SIZE = int(os.getenv('ERP_SECTION_SIZE', '30'))
ATTENDANCE_REPORT_WINDOW = int(os.getenv('ERP_ATTENDANCE_REPORT_WINDOW', '5000'))

DISPATCH_EAGER = _env_flag('ERP_DISPATCH_EAGER', 'True')
DISPATCH_MAX_ATTEMPTS = int(os.getenv('ERP_DISPATCH_MAX_ATTEMPTS', '5'))
DISPATCH_RETRY_SECONDS = int(os.getenv('ERP_DISPATCH_RETRY_SECONDS', '60'))
DISPATCH_LEASE_SECONDS = int(os.getenv('ERP_DISPATCH_LEASE_SECONDS', '300'))
