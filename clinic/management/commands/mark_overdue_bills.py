from datetime import date

from django.core.management.base import BaseCommand, CommandError

from clinic.services.billing import mark_overdue_bills
from clinic.services.updates import broadcast_refresh


class Command(BaseCommand):
    help = "Flag Pending/Partial bills whose due date has passed as Overdue. Meant to run daily from a scheduler."

    def add_arguments(self, parser):
        parser.add_argument('--date', help='Treat this ISO date (YYYY-MM-DD) as today')

    def handle(self, *args, **options):
        today = None
        if options.get('date'):
            try:
                today = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"invalid --date {options['date']!r}, expected YYYY-MM-DD")
        changed = mark_overdue_bills(today)
        if changed:
            broadcast_refresh('bills', 'stats')
        self.stdout.write(self.style.SUCCESS(f"Marked {changed} bill(s) overdue"))
