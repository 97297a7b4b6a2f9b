import logging
from datetime import datetime

from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, ProtectedError, Q
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone

from .decorators import SUPERUSER, band_admin_required, get_user_role, superuser_required
from .models import DEFAULT_TAG_COLOR, Band, BandMember, Event, EventParticipant, Song, Tag
from .persistence import load_setlist, save_setlist, song_ref
from . import setlist as setlist_ops

logger = logging.getLogger(__name__)

SONG_SORTS = {
    'name': ['name'],
    'key': ['original_key', 'name'],
    'recent': ['-created_at'],
    'popular': ['-usage_count', 'name'],
}


def event_name_for(event_type, custom_name=''):
    """Fixed names for regular services, the custom name for special events"""
    custom_name = (custom_name or '').strip()
    if event_type == 'special':
        return custom_name or 'Special Event'
    return dict(Event.EVENT_TYPE_CHOICES).get(event_type, custom_name or 'Event')


def update_setlist(request, event, operation, *args, **kwargs):
    """
    Run a setlist operation against the stored setlist and save what changed.

    Rejected operations are reported to the user and nothing is written.
    Returns the new setlist, or None when the operation was rejected.
    """
    current = load_setlist(event)
    try:
        updated = operation(current, *args, **kwargs)
    except setlist_ops.SetlistError as e:
        logger.warning("Rejected %s on event %s: %s", operation.__name__, event.pk, e)
        messages.error(request, str(e))
        return None
    save_setlist(event, current, updated)
    return updated


def medley_choice(request):
    """None when the medley box is unticked, else 'new' or the chosen group number"""
    if 'is_medley' not in request.POST:
        return None
    return request.POST.get('medley_group', '').strip() or setlist_ops.NEW_GROUP


@login_required
def events_list(request):
    """List events, split into upcoming and past"""
    events = (Event.objects.select_related('band', 'leader')
              .annotate(song_count=Count('event_songs', distinct=True)))

    band_id = request.GET.get('band', '').strip()
    if band_id.isdigit():
        events = events.filter(band_id=band_id)

    search = request.GET.get('search', '').strip()
    if search:
        events = events.filter(
            Q(name__icontains=search) | Q(band__name__icontains=search)
            | Q(event_songs__song__name__icontains=search)
        ).distinct()

    today = timezone.localdate()
    context = {
        'upcoming_events': events.filter(event_date__gt=today).order_by('event_date', 'name'),
        'past_events': events.filter(event_date__lte=today).order_by('-event_date', 'name'),
        'bands': Band.objects.all(),
        'selected_band': band_id,
        'search': search,
    }
    return render(request, 'setlists/events_list.html', context)


@login_required
def event_detail(request, event_id):
    """Event page with its setlist in order"""
    event = get_object_or_404(Event.objects.select_related('band', 'leader'), pk=event_id)
    entries = load_setlist(event)
    participants = event.participants.select_related('participant')

    context = {
        'event': event,
        'entries': entries,
        'medley_groups': setlist_ops.medley_groups(entries),
        'available_songs': setlist_ops.available_songs(Song.objects.all(), entries),
        'participants': participants,
        'available_participants': (get_user_model().objects.filter(is_active=True)
                                   .exclude(event_participations__event=event)
                                   .order_by('username')),
    }
    return render(request, 'setlists/event_detail.html', context)


def _save_event_from_post(request, event):
    """Fill an event from the submitted form; returns an error message or None"""
    band_id = request.POST.get('band', '').strip()
    event_date = request.POST.get('event_date', '').strip()
    event_type = request.POST.get('event_type', 'sunday_service')

    if not band_id or not event_date:
        return 'Band and date are required.'
    try:
        event.event_date = datetime.strptime(event_date, '%Y-%m-%d').date()
    except ValueError:
        return 'Invalid date format. Please use YYYY-MM-DD.'

    band = Band.objects.filter(pk=band_id).first() if band_id.isdigit() else None
    if band is None:
        return 'Band not found.'

    leader_id = request.POST.get('leader', '').strip()
    event.band = band
    event.event_type = event_type
    event.name = event_name_for(event_type, request.POST.get('name', ''))
    event.leader = get_user_model().objects.filter(pk=leader_id).first() if leader_id.isdigit() else None
    event.notes = request.POST.get('notes', '').strip()
    event.youtube_link = request.POST.get('youtube_link', '').strip()
    event.save()
    return None


def _event_form_context(event=None):
    return {
        'event': event,
        'bands': Band.objects.all(),
        'leaders': get_user_model().objects.order_by('username'),
        'event_type_choices': Event.EVENT_TYPE_CHOICES,
    }


@login_required
@band_admin_required
def event_add(request):
    """Add a new event"""
    if request.method == 'POST':
        event = Event()
        error = _save_event_from_post(request, event)
        if error:
            messages.error(request, error)
        else:
            messages.success(request, f'Successfully added event "{event.name}".')
            return redirect('setlists:event_detail', event_id=event.pk)

    return render(request, 'setlists/event_form.html', _event_form_context())


@login_required
@band_admin_required
def event_edit(request, event_id):
    """Edit event information"""
    event = get_object_or_404(Event, pk=event_id)

    if request.method == 'POST':
        error = _save_event_from_post(request, event)
        if error:
            messages.error(request, error)
        else:
            messages.success(request, 'Event updated successfully.')
            return redirect('setlists:event_detail', event_id=event.pk)

    return render(request, 'setlists/event_form.html', _event_form_context(event))


@login_required
@band_admin_required
def event_delete(request, event_id):
    """Confirm and delete an event together with its setlist"""
    event = get_object_or_404(Event, pk=event_id)

    if request.method != 'POST':
        return render(request, 'setlists/event_delete.html', {
            'event': event,
            'song_count': event.event_songs.count(),
        })

    event_name = event.name
    event.delete()
    messages.success(request, f'Successfully deleted "{event_name}".')
    return redirect('setlists:events_list')


@login_required
@band_admin_required
def setlist_add(request, event_id):
    """Add a repertoire song to the end of the setlist"""
    event = get_object_or_404(Event, pk=event_id)
    if request.method != 'POST':
        return redirect('setlists:event_detail', event_id=event_id)

    song_id = request.POST.get('song', '').strip()
    song = Song.objects.filter(pk=song_id).first() if song_id.isdigit() else None
    if song is None:
        messages.error(request, 'Please select a song.')
        return redirect('setlists:event_detail', event_id=event_id)

    updated = update_setlist(
        request, event, setlist_ops.add_entry, song.pk,
        key_played=request.POST.get('key_played', ''),
        join_group=medley_choice(request),
        song=song_ref(song), event_id=event.pk,
    )
    if updated is not None:
        messages.success(request, f'Added "{song.name}" to the setlist.')
    return redirect('setlists:event_detail', event_id=event_id)


@login_required
@band_admin_required
def setlist_create_song(request, event_id):
    """Create a new repertoire song and add it to the setlist"""
    event = get_object_or_404(Event, pk=event_id)
    if request.method != 'POST':
        return redirect('setlists:event_detail', event_id=event_id)

    song = Song(
        name=request.POST.get('name', ''),
        original_key=request.POST.get('original_key', '').strip(),
    )
    try:
        song.full_clean()
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))
        return redirect('setlists:event_detail', event_id=event_id)

    # A rejected setlist change rolls the new song back out of the repertoire
    with transaction.atomic():
        song.save()
        updated = update_setlist(
            request, event, setlist_ops.add_entry, song.pk,
            key_played=request.POST.get('key_played', ''),
            join_group=medley_choice(request),
            song=song_ref(song), event_id=event.pk,
        )
        if updated is None:
            transaction.set_rollback(True)
    if updated is not None:
        messages.success(request, f'Created "{song.name}" and added it to the setlist.')
    return redirect('setlists:event_detail', event_id=event_id)


@login_required
@band_admin_required
def setlist_remove(request, event_id, position):
    """Remove a song from the setlist and close the gap"""
    event = get_object_or_404(Event, pk=event_id)
    if request.method == 'POST':
        if update_setlist(request, event, setlist_ops.remove_entry, position) is not None:
            messages.success(request, 'Song removed from the setlist.')
    return redirect('setlists:event_detail', event_id=event_id)


@login_required
@band_admin_required
def setlist_move(request, event_id, position, direction):
    """Move a song one place up or down"""
    event = get_object_or_404(Event, pk=event_id)
    if request.method == 'POST':
        if direction not in (setlist_ops.UP, setlist_ops.DOWN):
            messages.error(request, f'Unknown direction "{direction}".')
        else:
            update_setlist(request, event, setlist_ops.move_entry, position, direction)
    return redirect('setlists:event_detail', event_id=event_id)


@login_required
@band_admin_required
def setlist_medley(request, event_id, position):
    """Join or leave a medley"""
    event = get_object_or_404(Event, pk=event_id)
    if request.method == 'POST':
        group = medley_choice(request)
        target = None if group in (None, setlist_ops.NEW_GROUP) else group
        update_setlist(request, event, setlist_ops.toggle_medley, position, group is not None, target)
    return redirect('setlists:event_detail', event_id=event_id)


@login_required
@band_admin_required
def setlist_key(request, event_id, position):
    """Set the key a song is played in for this event"""
    event = get_object_or_404(Event, pk=event_id)
    if request.method == 'POST':
        update_setlist(request, event, setlist_ops.set_key_played, position,
                       request.POST.get('key_played', ''))
    return redirect('setlists:event_detail', event_id=event_id)


@login_required
def songs_list(request):
    """Repertoire with search, key filter and sorting"""
    songs = (Song.objects.annotate(usage_count=Count('event_songs', distinct=True))
             .prefetch_related('tags'))

    search = request.GET.get('search', '').strip()
    if search:
        songs = songs.filter(Q(name__icontains=search) | Q(author__icontains=search))

    key = request.GET.get('key', '').strip()
    if key:
        songs = songs.filter(original_key=key)

    tag_id = request.GET.get('tag', '').strip()
    if tag_id.isdigit():
        songs = songs.filter(tags__id=tag_id)

    sort = request.GET.get('sort', 'name')
    songs = songs.order_by(*SONG_SORTS.get(sort, SONG_SORTS['name']))

    all_keys = (Song.objects.exclude(original_key='')
                .values_list('original_key', flat=True).distinct().order_by('original_key'))

    context = {
        'songs': songs,
        'all_keys': all_keys,
        'search': search,
        'selected_key': key,
        'tags': Tag.objects.all(),
        'selected_tag': tag_id,
        'sort': sort,
    }
    return render(request, 'setlists/songs_list.html', context)


def _save_song_from_post(request, song):
    song.name = request.POST.get('name', '')
    song.original_key = request.POST.get('original_key', '').strip()
    song.author = request.POST.get('author', '').strip()
    song.lyrics = request.POST.get('lyrics', '').strip()
    song.full_clean()
    tag_ids = [tag_id for tag_id in request.POST.getlist('tags') if tag_id.isdigit()]
    with transaction.atomic():
        song.save()
        song.tags.set(Tag.objects.filter(pk__in=tag_ids))


def _song_form_context(song):
    return {
        'song': song,
        'tags': Tag.objects.all(),
        'selected_tags': set(song.tags.values_list('pk', flat=True)) if song.pk else set(),
    }


@login_required
@band_admin_required
def song_add(request):
    """Add a song to the repertoire"""
    song = Song()
    if request.method == 'POST':
        try:
            _save_song_from_post(request, song)
            messages.success(request, f'Successfully added song "{song.name}".')
            return redirect('setlists:songs_list')
        except ValidationError as e:
            messages.error(request, ' '.join(e.messages))

    return render(request, 'setlists/song_form.html', _song_form_context(song))


@login_required
@band_admin_required
def song_edit(request, song_id):
    """Edit a repertoire song"""
    song = get_object_or_404(Song, pk=song_id)
    if request.method == 'POST':
        try:
            _save_song_from_post(request, song)
            messages.success(request, f'Successfully updated "{song.name}".')
            return redirect('setlists:songs_list')
        except ValidationError as e:
            messages.error(request, ' '.join(e.messages))

    return render(request, 'setlists/song_form.html', _song_form_context(song))


@login_required
@band_admin_required
def song_delete(request, song_id):
    """Delete a song that no setlist uses"""
    song = get_object_or_404(Song, pk=song_id)

    if request.method != 'POST':
        return render(request, 'setlists/song_delete.html', {
            'song': song,
            'event_count': song.event_songs.count(),
        })

    song_name = song.name
    try:
        song.delete()
    except ProtectedError:
        messages.error(request, f'"{song_name}" is still in a setlist and cannot be deleted.')
        return redirect('setlists:songs_list')

    messages.success(request, f'Successfully deleted "{song_name}".')
    return redirect('setlists:songs_list')


@login_required
@band_admin_required
def event_participant_add(request, event_id):
    """Put a musician on the event roster"""
    event = get_object_or_404(Event, pk=event_id)
    if request.method != 'POST':
        return redirect('setlists:event_detail', event_id=event_id)

    participant_id = request.POST.get('participant', '').strip()
    participant = (get_user_model().objects.filter(pk=participant_id, is_active=True).first()
                   if participant_id.isdigit() else None)
    if participant is None:
        messages.error(request, 'Please select a participant.')
        return redirect('setlists:event_detail', event_id=event_id)

    try:
        with transaction.atomic():
            EventParticipant.objects.create(
                event=event,
                participant=participant,
                instrument=request.POST.get('instrument', '').strip(),
            )
    except IntegrityError:
        messages.error(request, f'{participant.get_username()} is already on this event.')
        return redirect('setlists:event_detail', event_id=event_id)

    logger.info("Added %s to event %s", participant.get_username(), event.pk)
    messages.success(request, f'Added {participant.get_username()} to the event.')
    return redirect('setlists:event_detail', event_id=event_id)


@login_required
@band_admin_required
def event_participant_remove(request, event_id, participant_id):
    """Take a musician off the event roster"""
    row = get_object_or_404(EventParticipant.objects.select_related('participant'),
                            pk=participant_id, event_id=event_id)
    if request.method == 'POST':
        username = row.participant.get_username()
        row.delete()
        messages.success(request, f'Removed {username} from the event.')
    return redirect('setlists:event_detail', event_id=event_id)


@login_required
def tags_list(request):
    """Song tags with how many songs carry each"""
    tags = Tag.objects.annotate(song_count=Count('songs', distinct=True))
    return render(request, 'setlists/tags_list.html', {'tags': tags})


def _save_tag_from_post(request, tag):
    tag.name = request.POST.get('name', '')
    tag.color = request.POST.get('color', '').strip() or DEFAULT_TAG_COLOR
    tag.full_clean()
    tag.save()


@login_required
@band_admin_required
def tag_add(request):
    """Create a song tag"""
    tag = Tag(created_by=request.user)
    if request.method == 'POST':
        try:
            _save_tag_from_post(request, tag)
            messages.success(request, f'Successfully added tag "{tag.name}".')
            return redirect('setlists:tags_list')
        except ValidationError as e:
            messages.error(request, ' '.join(e.messages))

    return render(request, 'setlists/tag_form.html', {'tag': tag})


@login_required
@band_admin_required
def tag_edit(request, tag_id):
    """Rename or recolour a song tag"""
    tag = get_object_or_404(Tag, pk=tag_id)
    if request.method == 'POST':
        try:
            _save_tag_from_post(request, tag)
            messages.success(request, f'Successfully updated "{tag.name}".')
            return redirect('setlists:tags_list')
        except ValidationError as e:
            messages.error(request, ' '.join(e.messages))

    return render(request, 'setlists/tag_form.html', {'tag': tag})


@login_required
@band_admin_required
def tag_delete(request, tag_id):
    """Delete a tag; its songs stay in the repertoire"""
    tag = get_object_or_404(Tag, pk=tag_id)

    if request.method != 'POST':
        return render(request, 'setlists/tag_delete.html', {
            'tag': tag,
            'song_count': tag.songs.count(),
        })

    tag_name = tag.name
    tag.delete()
    messages.success(request, f'Successfully deleted "{tag_name}".')
    return redirect('setlists:tags_list')


@login_required
def bands_list(request):
    """Bands with member and event counts"""
    bands = Band.objects.annotate(
        member_count=Count('members', distinct=True),
        event_count=Count('events', distinct=True),
    )
    return render(request, 'setlists/bands_list.html', {'bands': bands})


@login_required
def band_detail(request, band_id):
    """Band page with its members and events"""
    band = get_object_or_404(Band, pk=band_id)
    members = band.members.select_related('user')

    context = {
        'band': band,
        'members': [(member, get_user_role(member.user)) for member in members],
        'events': band.events.order_by('-event_date', 'name'),
        # a user plays in one band at a time
        'available_users': (get_user_model().objects.filter(is_active=True, band_membership__isnull=True)
                            .order_by('username')),
    }
    return render(request, 'setlists/band_detail.html', context)


def _save_band_from_post(request, band):
    band.name = request.POST.get('name', '').strip()
    band.description = request.POST.get('description', '').strip()
    if not band.name:
        return 'Band name is required.'
    band.save()
    return None


@login_required
@superuser_required
def band_add(request):
    """Create a band"""
    band = Band()
    if request.method == 'POST':
        error = _save_band_from_post(request, band)
        if error:
            messages.error(request, error)
        else:
            messages.success(request, f'Successfully added band "{band.name}".')
            return redirect('setlists:band_detail', band_id=band.pk)

    return render(request, 'setlists/band_form.html', {'band': band})


@login_required
@superuser_required
def band_edit(request, band_id):
    """Rename a band or change its description"""
    band = get_object_or_404(Band, pk=band_id)
    if request.method == 'POST':
        error = _save_band_from_post(request, band)
        if error:
            messages.error(request, error)
        else:
            messages.success(request, 'Band updated successfully.')
            return redirect('setlists:band_detail', band_id=band.pk)

    return render(request, 'setlists/band_form.html', {'band': band})


@login_required
@superuser_required
def band_delete(request, band_id):
    """Confirm and delete a band together with its events"""
    band = get_object_or_404(Band, pk=band_id)

    if request.method != 'POST':
        return render(request, 'setlists/band_delete.html', {
            'band': band,
            'event_count': band.events.count(),
            'member_count': band.members.count(),
        })

    band_name = band.name
    band.delete()
    logger.info("Deleted band %s", band_name)
    messages.success(request, f'Successfully deleted "{band_name}".')
    return redirect('setlists:bands_list')


@login_required
@band_admin_required
def band_member_add(request, band_id):
    """Add a user who is not yet in a band"""
    band = get_object_or_404(Band, pk=band_id)
    if request.method != 'POST':
        return redirect('setlists:band_detail', band_id=band_id)

    user_id = request.POST.get('user', '').strip()
    user = (get_user_model().objects.filter(pk=user_id, is_active=True).first()
            if user_id.isdigit() else None)
    if user is None:
        messages.error(request, 'Please select a user.')
        return redirect('setlists:band_detail', band_id=band_id)

    try:
        with transaction.atomic():
            BandMember.objects.create(band=band, user=user)
    except IntegrityError:
        messages.error(request, f'{user.get_username()} already plays in a band.')
        return redirect('setlists:band_detail', band_id=band_id)

    messages.success(request, f'Added {user.get_username()} to {band.name}.')
    return redirect('setlists:band_detail', band_id=band_id)


@login_required
@band_admin_required
def band_member_remove(request, band_id, member_id):
    """Remove a member; superusers and yourself stay"""
    member = get_object_or_404(BandMember.objects.select_related('user'), pk=member_id, band_id=band_id)
    if request.method != 'POST':
        return redirect('setlists:band_detail', band_id=band_id)

    username = member.user.get_username()
    if member.user == request.user:
        messages.error(request, "You can't remove yourself from the band.")
    elif get_user_role(member.user) == SUPERUSER:
        messages.error(request, f"{username} is a superuser and can't be removed.")
    else:
        member.delete()
        messages.success(request, f'Removed {username} from the band.')
    return redirect('setlists:band_detail', band_id=band_id)
