"""
Move trials and paid subscriptions past their end date to "expired".

Meant to run from cron once a day.

Usage:
    python manage.py expire_subscriptions
    python manage.py expire_subscriptions --dry-run
"""

import logging

from django.core.management.base import BaseCommand
from django.db.models import Q
from django.utils import timezone

from core.models import Subscription

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Expire lapsed trials and subscriptions"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would expire without changing anything.",
        )

    def handle(self, *args, **options):
        now = timezone.now()
        lapsed = Subscription.objects.filter(
            Q(status=Subscription.Status.TRIAL, trial_end_date__lt=now)
            | Q(status=Subscription.Status.ACTIVE, end_date__lt=now)
        ).select_related("company")

        count = 0
        for subscription in lapsed:
            count += 1
            self.stdout.write(f"  {subscription.company.name}: {subscription.status} -> expired")
            if options["dry_run"]:
                continue
            subscription.change(status=Subscription.Status.EXPIRED)
            logger.info("Expired subscription for company %s", subscription.company_id)

        verb = "Would expire" if options["dry_run"] else "Expired"
        self.stdout.write(self.style.SUCCESS(f"\nDone. {verb} {count} subscription(s)."))
