"""
Ordering and medley grouping for an event's setlist.

Every function here takes the current sequence of SetlistEntry values and
returns a new list; the input is never modified and nothing is written to the
database. Validation always happens before the new sequence is built, so a
raised SetlistError means the caller's sequence is still the valid one.

Settled sequences satisfy three rules:
    * ``order`` values are exactly 1..n
    * ``medley_group`` is None exactly when ``is_medley`` is False
    * a song appears at most once
"""
from dataclasses import dataclass, field, replace


UP = 'up'
DOWN = 'down'
NEW_GROUP = 'new'

# Entry fields a mutation can change on a stored row
WRITABLE_FIELDS = ('order', 'key_played', 'is_medley', 'medley_group')


class SetlistError(Exception):
    """Base class for rejected setlist operations"""


class DuplicateSongError(SetlistError):
    def __init__(self, song_id):
        self.song_id = song_id
        super().__init__(f'Song {song_id} is already in this setlist.')


class InvalidGroupError(SetlistError):
    def __init__(self, group, message=None):
        self.group = group
        super().__init__(message or f'Medley {group} does not exist in this setlist.')


class IndexOutOfRangeError(SetlistError, IndexError):
    def __init__(self, index, length):
        self.index = index
        self.length = length
        super().__init__(f'Position {index} is outside the setlist (0..{length - 1}).' if length
                         else f'Position {index} is outside the setlist (setlist is empty).')


class InvalidSetlistError(SetlistError):
    """Raised by validate() when order values are not 1..n"""


@dataclass(frozen=True)
class SongRef:
    """Display fields of the referenced song"""
    id: object
    name: str
    original_key: str | None = None


@dataclass(frozen=True)
class SetlistEntry:
    song_id: object
    order: int
    key_played: str | None = None
    is_medley: bool = False
    medley_group: int | None = None
    song: SongRef | None = field(default=None, compare=False)
    id: object = None
    event_id: object = None

    @property
    def name(self):
        return self.song.name if self.song else str(self.song_id)


@dataclass(frozen=True)
class MedleyGroup:
    number: int
    entries: tuple

    @property
    def label(self):
        return ' + '.join(entry.name for entry in self.entries)


@dataclass
class SetlistChanges:
    """Rows to write for one mutation: insert-one, delete-one or update-many"""
    inserts: list = field(default_factory=list)
    deletes: list = field(default_factory=list)
    updates: list = field(default_factory=list)
    update_fields: set = field(default_factory=set)

    def __bool__(self):
        return bool(self.inserts or self.deletes or self.updates)


def sort_entries(entries):
    """Stable sort by order"""
    return sorted(entries, key=lambda entry: entry.order)


def renumber(entries):
    """Assign order 1..n following the current sequence"""
    return [
        entry if entry.order == position else replace(entry, order=position)
        for position, entry in enumerate(entries, start=1)
    ]


def group_numbers(entries):
    return sorted({entry.medley_group for entry in entries
                   if entry.is_medley and entry.medley_group is not None})


def next_order(entries):
    return max((entry.order for entry in entries), default=0) + 1


def next_medley_group(entries):
    return max(group_numbers(entries), default=0) + 1


def _normalize_key(key_played):
    if key_played is None:
        return None
    key_played = str(key_played).strip()
    return key_played or None


def _check_index(entries, index):
    # positions are plain ints, never bools
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(entries):
        raise IndexOutOfRangeError(index, len(entries))


def _resolve_group(entries, group):
    """Turn NEW_GROUP into a freshly minted number, check an explicit one exists"""
    if group == NEW_GROUP:
        return next_medley_group(entries)
    # group numbers are ints or numeric text, never bools or fractions
    if isinstance(group, bool) or (isinstance(group, float) and not group.is_integer()):
        raise InvalidGroupError(group)
    try:
        number = int(group)
    except (TypeError, ValueError):
        raise InvalidGroupError(group)
    if number not in group_numbers(entries):
        raise InvalidGroupError(group)
    return number


def add_entry(entries, song_id, key_played=None, join_group=None, song=None, event_id=None):
    """
    Append a song to the setlist.

    ``join_group`` is None for a plain entry, NEW_GROUP to start a new medley,
    or the number of a medley already used in this setlist. The new entry
    takes order max + 1. Returns the new sequence; the added entry is last.
    """
    entries = sort_entries(entries)
    if any(entry.song_id == song_id for entry in entries):
        raise DuplicateSongError(song_id)

    medley_group = None
    if join_group is not None:
        medley_group = _resolve_group(entries, join_group)

    new_entry = SetlistEntry(
        song_id=song_id,
        order=next_order(entries),
        key_played=_normalize_key(key_played),
        is_medley=medley_group is not None,
        medley_group=medley_group,
        song=song,
        event_id=event_id,
    )
    return entries + [new_entry]


def remove_entry(entries, index):
    """
    Drop the entry at ``index`` and close the gap in order values.

    Medley numbers of the remaining entries are left alone, even when a
    medley ends up with a single member or none.
    """
    entries = sort_entries(entries)
    _check_index(entries, index)
    return renumber(entries[:index] + entries[index + 1:])


def move_entry(entries, index, direction):
    """
    Swap the order values of the entry at ``index`` and its neighbour.

    Moving the first entry up or the last entry down returns the sequence
    unchanged. Only the two swapped entries get new order values.
    """
    if direction not in (UP, DOWN):
        raise ValueError(f'Unknown direction {direction!r}, expected {UP!r} or {DOWN!r}.')
    entries = sort_entries(entries)
    _check_index(entries, index)

    neighbour = index - 1 if direction == UP else index + 1
    if not 0 <= neighbour < len(entries):
        return entries

    current, other = entries[index], entries[neighbour]
    entries[index] = replace(current, order=other.order)
    entries[neighbour] = replace(other, order=current.order)
    return sort_entries(entries)


def toggle_medley(entries, index, on, target_group=None):
    """
    Mark or unmark the entry at ``index`` as part of a medley.

    With ``on`` and no ``target_group`` a new medley number is minted;
    a ``target_group`` must already exist in this setlist. Turning the flag
    off clears the group regardless of its previous value.
    """
    entries = sort_entries(entries)
    _check_index(entries, index)

    if not on:
        entries[index] = replace(entries[index], is_medley=False, medley_group=None)
    else:
        group = _resolve_group(entries, NEW_GROUP if target_group is None else target_group)
        entries[index] = replace(entries[index], is_medley=True, medley_group=group)

    validate_medleys(entries)
    return entries


def set_key_played(entries, index, key_played):
    """Override the key for one performance; blank text falls back to the song's key"""
    entries = sort_entries(entries)
    _check_index(entries, index)
    entries[index] = replace(entries[index], key_played=_normalize_key(key_played))
    return entries


def medley_groups(entries):
    """Medleys currently in use, by number, each with its members in play order"""
    entries = sort_entries(entries)
    return [
        MedleyGroup(number, tuple(entry for entry in entries
                                  if entry.is_medley and entry.medley_group == number))
        for number in group_numbers(entries)
    ]


def available_songs(songs, entries):
    """Repertoire songs that can still be added to this setlist"""
    used = {entry.song_id for entry in entries}
    return [song for song in songs if getattr(song, 'id', song) not in used]


def validate_medleys(entries):
    for entry in entries:
        if entry.is_medley != (entry.medley_group is not None):
            raise InvalidGroupError(
                entry.medley_group,
                f'Entry for song {entry.song_id} has is_medley={entry.is_medley} '
                f'but medley group {entry.medley_group}.',
            )


def validate(entries):
    """Raise a SetlistError if the sequence is not settled"""
    orders = sorted(entry.order for entry in entries)
    if orders != list(range(1, len(orders) + 1)):
        raise InvalidSetlistError(f'Order values {orders} are not 1..{len(orders)}.')
    validate_medleys(entries)
    seen = set()
    for entry in entries:
        if entry.song_id in seen:
            raise DuplicateSongError(entry.song_id)
        seen.add(entry.song_id)


def diff_setlists(old, new):
    """
    Work out which rows changed between two sequences of the same event.

    Entries are matched on song_id, which is unique within a setlist. Updated
    entries keep the id of their stored row.
    """
    old_by_song = {entry.song_id: entry for entry in old}
    new_by_song = {entry.song_id: entry for entry in new}
    changes = SetlistChanges()

    for entry in old:
        if entry.song_id not in new_by_song:
            changes.deletes.append(entry)

    for entry in sort_entries(new):
        previous = old_by_song.get(entry.song_id)
        if previous is None:
            changes.inserts.append(entry)
            continue
        fields = changed_fields(previous, entry)
        if fields:
            changes.updates.append(replace(entry, id=previous.id) if entry.id is None else entry)
            changes.update_fields.update(fields)

    return changes


def changed_fields(old_entry, new_entry):
    return [name for name in WRITABLE_FIELDS
            if getattr(old_entry, name) != getattr(new_entry, name)]
