from django.core.management.base import BaseCommand, CommandError

from stock.services import IngredientService, NotFoundError


class Command(BaseCommand):
    help = 'Recompute ingredient stock from imports, completed exports and losses and report drift'

    def add_arguments(self, parser):
        parser.add_argument('--ingredient', type=int, help='Only check this ingredient id')

    def handle(self, *args, **options):
        try:
            drift = IngredientService.verify_ledger(options.get('ingredient'))
        except NotFoundError as e:
            raise CommandError(str(e))

        if not drift:
            self.stdout.write(self.style.SUCCESS('Stock ledger is consistent.'))
            return

        for entry in drift:
            self.stdout.write(self.style.WARNING(
                f"#{entry['ingredient_id']} {entry['name']}: "
                f"current {entry['current_stock']} {entry['unit']}, "
                f"expected {entry['expected_stock']} {entry['unit']} "
                f"(difference {entry['difference']})"
            ))

        raise CommandError(f'Stock drift found on {len(drift)} ingredient(s).')
