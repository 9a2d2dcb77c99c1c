from django.core.management.base import BaseCommand

from salon.notifications import automation


class Command(BaseCommand):
    help = 'Run the WhatsApp automation scans (24h reminders, birthdays, overdue bills) once.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--only',
            choices=sorted(automation.SCANS),
            help='Run a single scan instead of all of them.',
        )

    def handle(self, *args, **opts):
        if opts['only']:
            summary = {opts['only']: automation.SCANS[opts['only']]()}
        else:
            summary = automation.run_daily_automations()

        for name, result in summary.items():
            if 'error' in result:
                self.stdout.write(self.style.ERROR(f"{name}: {result['error']}"))
            else:
                self.stdout.write(
                    self.style.SUCCESS(
                        f"{name}: {result['sent']} sent, {result['failed']} failed, {result['skipped']} skipped"
                    )
                )
