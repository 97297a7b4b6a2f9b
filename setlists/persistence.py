"""Read and write event setlists between EventSong rows and SetlistEntry values"""
import logging

from django.db import transaction

from .models import EventSong
from .setlist import SetlistEntry, SongRef, diff_setlists, sort_entries

logger = logging.getLogger(__name__)

# SetlistEntry field -> EventSong column
COLUMN_FOR_FIELD = {
    'order': 'song_order',
    'key_played': 'key_played',
    'is_medley': 'is_medley',
    'medley_group': 'medley_group',
}


def song_ref(song):
    return SongRef(id=song.pk, name=song.name, original_key=song.original_key or None)


def entry_from_row(row):
    """Build a SetlistEntry from an EventSong with its song joined"""
    return SetlistEntry(
        id=row.pk,
        event_id=row.event_id,
        song_id=row.song_id,
        order=row.song_order,
        key_played=row.key_played or None,
        is_medley=bool(row.is_medley),
        medley_group=row.medley_group if row.is_medley else None,
        song=song_ref(row.song),
    )


def row_values(entry):
    return {column: getattr(entry, name) for name, column in COLUMN_FOR_FIELD.items()}


def load_setlist(event):
    """Current setlist of an event, sorted by order"""
    rows = EventSong.objects.filter(event=event).select_related('song')
    return sort_entries(entry_from_row(row) for row in rows)


def apply_changes(event, changes):
    """
    Write a SetlistChanges plan for one event in a single transaction.

    Deletes go first so a re-added song never collides with its old row.
    Updates touch only the columns that changed.
    """
    if not changes:
        return changes

    with transaction.atomic():
        if changes.deletes:
            ids = [entry.id for entry in changes.deletes if entry.id is not None]
            EventSong.objects.filter(event=event, pk__in=ids).delete()

        if changes.updates:
            rows = EventSong.objects.filter(event=event).in_bulk([entry.id for entry in changes.updates])
            for entry in changes.updates:
                row = rows[entry.id]
                for name, value in row_values(entry).items():
                    setattr(row, name, value)
            fields = [COLUMN_FOR_FIELD[name] for name in sorted(changes.update_fields)]
            EventSong.objects.bulk_update(list(rows.values()), fields)

        for entry in changes.inserts:
            EventSong.objects.create(event=event, song_id=entry.song_id, **row_values(entry))

    logger.info(
        "Saved setlist for event %s: %d inserted, %d deleted, %d updated",
        event.pk, len(changes.inserts), len(changes.deletes), len(changes.updates),
    )
    return changes


def save_setlist(event, old, new):
    """Persist the difference between two versions of an event's setlist"""
    return apply_changes(event, diff_setlists(old, new))
