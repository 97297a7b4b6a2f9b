from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from setlists.models import Song
import pandas as pd

# Spreadsheet column -> Song field
COLUMNS = {
    'Name': 'name',
    'Original Key': 'original_key',
    'Author': 'author',
    'Lyrics': 'lyrics',
}


def cell_text(row, column):
    value = row.get(column, '')
    if pd.isna(value):
        return ''
    return str(value).strip()


def read_songs_file(path, sheet=None):
    """Load a CSV or Excel file into a DataFrame"""
    path = Path(path)
    if path.suffix.lower() == '.csv':
        return pd.read_csv(path, dtype=str)
    return pd.read_excel(path, sheet_name=sheet or 0, dtype=str)


class Command(BaseCommand):
    help = 'Import the song repertoire from a CSV or Excel file'

    def add_arguments(self, parser):
        parser.add_argument('songs_file', type=str, help='Path to the CSV or Excel file')
        parser.add_argument('--sheet', type=str, default=None, help='Excel sheet name (default: first sheet)')

    def handle(self, *args, **options):
        songs_file = options['songs_file']
        self.stdout.write(f'Importing songs from {songs_file}...')

        try:
            df = read_songs_file(songs_file, options['sheet'])
        except (OSError, ValueError) as e:
            raise CommandError(f'Could not read {songs_file}: {e}')

        if 'Name' not in df.columns:
            raise CommandError('The file needs a "Name" column.')

        created_count = updated_count = skipped_count = 0
        for index, row in df.iterrows():
            values = {field: cell_text(row, column) for column, field in COLUMNS.items()}
            name = values.pop('name')
            if not name:
                skipped_count += 1
                self.stdout.write(self.style.WARNING(f'  Skipped row {index + 2}: no song name'))
                continue

            song, created = Song.objects.update_or_create(name=name, defaults=values)
            if created:
                created_count += 1
                self.stdout.write(f'  Created: {song.name}')
            else:
                updated_count += 1
                self.stdout.write(f'  Updated: {song.name}')

        self.stdout.write(self.style.SUCCESS(
            f'\nImported songs: {created_count} created, {updated_count} updated, {skipped_count} skipped.'
        ))
