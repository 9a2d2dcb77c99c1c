import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('salon')

# All celery settings live in Django settings under the CELERY_ prefix
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

# The reminder window is one hour wide, so that scan runs hourly.
# Birthday and overdue scans match on the calendar day and run once a day.
app.conf.beat_schedule = {
    'hourly-24h-reminders': {
        'task': 'salon.notifications.tasks.send_24h_reminders_task',
        'schedule': crontab(minute=0),
    },
    'daily-birthday-greetings': {
        'task': 'salon.notifications.tasks.send_birthday_greetings_task',
        'schedule': crontab(hour=9, minute=0),
    },
    'daily-overdue-reminders': {
        'task': 'salon.notifications.tasks.send_overdue_reminders_task',
        'schedule': crontab(hour=9, minute=30),
    },
}
