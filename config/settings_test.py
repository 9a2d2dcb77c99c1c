from .settings import *  # noqa: F401,F403

SECRET_KEY = 'test-secret-key'
DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

SALON_NOTIFIER_BACKEND = 'salon.notifications.notifier.ConsoleNotifier'
NOTIFICATIONS_ENABLED = True

LOGGING['loggers']['salon']['level'] = 'WARNING'  # noqa: F405
