import os

import pandas as pd
from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError

from maintenance.models import ChecklistQuestion
from maintenance.text import normalize_text as normalize

FREQUENCIES = {
    'm': 'M', 'mensual': 'M',
    't': 'T', 'trimestral': 'T',
    's': 'S', 'semestral': 'S',
}

TRUTHY = {'si', 'true', '1', 'x', 'yes'}


class Command(BaseCommand):
    help = 'Imports the maintenance question catalog from an Excel or CSV file'

    def add_arguments(self, parser):
        parser.add_argument('path', nargs='?', default='data/preguntas.xlsx')
        parser.add_argument('--sheet', default=0, help='Sheet name or index for Excel files')

    def handle(self, *args, **options):
        file_path = options['path']
        if not os.path.exists(file_path):
            raise CommandError(f'File not found: {file_path}')

        self.stdout.write(self.style.SUCCESS(f'Reading from {file_path}...'))
        if file_path.lower().endswith('.csv'):
            df = pd.read_csv(file_path)
        else:
            df = pd.read_excel(file_path, sheet_name=options['sheet'])
        # Replace NaN with None
        df = df.astype(object).where(pd.notnull(df), None)
        df.columns = [normalize(str(c)) for c in df.columns]

        self.stdout.write(self.style.SUCCESS(f'Found {len(df)} rows to process.'))

        created = updated = skipped = 0
        for index, row in df.iterrows():
            try:
                result = self.process_row(row)
            except (ValueError, DatabaseError) as e:
                skipped += 1
                self.stdout.write(self.style.ERROR(f'Error processing row {index}: {e}'))
                continue
            if result is None:
                skipped += 1
            elif result:
                created += 1
            else:
                updated += 1

        self.stdout.write(self.style.SUCCESS(
            f'Import completed: {created} created, {updated} updated, {skipped} skipped.'))

    def process_row(self, row):
        number = self.parse_int(row.get('numero'))
        text = str(row.get('pregunta') or '').strip()
        if number is None or not text:
            return None

        frequency_raw = normalize(str(row.get('frecuencia') or 'M'))
        if frequency_raw not in FREQUENCIES:
            raise ValueError(f'Unknown frequency {row.get("frecuencia")!r} for question {number}')

        _, created = ChecklistQuestion.objects.update_or_create(
            number=number,
            defaults={
                'section': str(row.get('seccion') or '').strip(),
                'text': text,
                'frequency': FREQUENCIES[frequency_raw],
                'is_hydraulic_only': normalize(str(row.get('solo hidraulico') or '')) in TRUTHY,
            },
        )
        return created

    def parse_int(self, value):
        try:
            return int(float(value))
        except (ValueError, TypeError):
            return None
