"""
Management command to import products from a CSV file
"""
import os

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from dukabook.catalog.bulk_import import parse_csv, preview_rows, import_products, ImportValidationError


class Command(BaseCommand):
    help = "Imports products from a CSV file in the bulk upload template format"

    def add_arguments(self, parser):
        parser.add_argument(
            '--csv-file',
            type=str,
            required=True,
            help='Path to the CSV file (relative paths resolve from the project root)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Parse and validate the file without writing anything',
        )
        parser.add_argument(
            '--username',
            type=str,
            default=None,
            help='Record the products as created by this user',
        )

    def handle(self, *args, **options):
        csv_file = options['csv_file']
        dry_run = options['dry_run']
        username = options['username']

        if not os.path.isabs(csv_file):
            csv_file = os.path.normpath(os.path.join(settings.BASE_DIR, '..', csv_file))

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("IMPORTING PRODUCTS FROM CSV"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"CSV File: {csv_file}")

        if not os.path.exists(csv_file):
            raise CommandError(f"CSV file not found at {csv_file}")

        user = None
        if username:
            User = get_user_model()
            try:
                user = User.objects.get(username=username)
            except User.DoesNotExist:
                raise CommandError(f"User '{username}' does not exist")

        with open(csv_file, 'r', encoding='utf-8-sig') as f:
            parsed = parse_csv(f.read())

        self.stdout.write(f"Rows found: {len(parsed['rows'])}")
        for error in parsed['errors']:
            self.stdout.write(self.style.ERROR(f"  ✗ {error}"))

        if dry_run:
            for data in preview_rows(parsed):
                self.stdout.write(f"  • {data['name']} [{data['category_name']}] qty={data['quantity']} sku={data['sku']}")
            if parsed['errors']:
                raise CommandError(f"{len(parsed['errors'])} error(s) found, nothing would be imported")
            self.stdout.write(self.style.WARNING("Dry run: no products were written."))
            return

        try:
            created = import_products(parsed, user=user)
        except ImportValidationError as e:
            for error in e.errors:
                if error not in parsed['errors']:
                    self.stdout.write(self.style.ERROR(f"  ✗ {error}"))
            raise CommandError("Import aborted, no products were written")

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS(f"Products Created: {len(created)}"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
