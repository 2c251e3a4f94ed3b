"""
Print the plan catalogue and verify that every tier is a superset of the
one below it.

Usage:
    python manage.py check_plans
    python manage.py check_plans --features
"""

from django.core.management.base import BaseCommand, CommandError

from entitlements.features import (
    employee_limit_text,
    enabled_features,
    format_price,
    suggest_upgrade,
)
from entitlements.plans import UNLIMITED, all_plans


def _quota_rank(limit):
    return float("inf") if limit == UNLIMITED else limit


class Command(BaseCommand):
    help = "Show the subscription plan catalogue and check tier monotonicity"

    def add_arguments(self, parser):
        parser.add_argument(
            "--features",
            action="store_true",
            help="List the enabled features of every plan.",
        )

    def handle(self, *args, **options):
        plans = all_plans()
        for plan in plans:
            features = enabled_features(plan.tier)
            upgrade = suggest_upgrade(plan.tier)
            self.stdout.write(
                f"  {plan.name} ({plan.tier}): {format_price(plan.monthly_price)}/month, "
                f"{employee_limit_text(plan.employee_limit)}, "
                f"{len(features)} features"
                + (f", upgrades to {upgrade}" if upgrade else "")
            )
            if options["features"]:
                for name in features:
                    self.stdout.write(f"      - {name}")

        problems = []
        for lower, higher in zip(plans, plans[1:]):
            missing = set(enabled_features(lower.tier)) - set(enabled_features(higher.tier))
            if missing:
                problems.append(
                    f"{higher.name} lacks {', '.join(sorted(missing))} from {lower.name}"
                )
            if _quota_rank(higher.employee_limit) < _quota_rank(lower.employee_limit):
                problems.append(f"{higher.name} allows fewer employees than {lower.name}")

        if problems:
            raise CommandError("Plan catalogue is not monotonic:\n  " + "\n  ".join(problems))

        self.stdout.write(self.style.SUCCESS(f"\nDone. {len(plans)} plans, all monotonic."))
