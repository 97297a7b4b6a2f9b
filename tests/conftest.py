import datetime

import pytest
from django.contrib.auth.models import Group, User
from django.utils import timezone

from setlists.models import Band, Event, EventSong, Song


@pytest.fixture
def band(db):
    return Band.objects.create(name='Sunday Band')


@pytest.fixture
def songs(db):
    return [
        Song.objects.create(name='Amazing Grace', original_key='G'),
        Song.objects.create(name='How Great Thou Art', original_key='Bb'),
        Song.objects.create(name='Oceans', original_key='D'),
        Song.objects.create(name='Cornerstone'),
    ]


@pytest.fixture
def event(band):
    return Event.objects.create(
        band=band,
        name='Sunday Service',
        event_date=timezone.localdate() + datetime.timedelta(days=7),
    )


@pytest.fixture
def event_with_setlist(event, songs):
    """Event playing the first three songs in order"""
    for order, song in enumerate(songs[:3], start=1):
        EventSong.objects.create(event=event, song=song, song_order=order)
    return event


@pytest.fixture
def band_admin(db):
    user = User.objects.create_user('leader', password='secret-pass-123')
    group, _ = Group.objects.get_or_create(name='band_admin')
    user.groups.add(group)
    return user


@pytest.fixture
def band_member(db):
    return User.objects.create_user('member', password='secret-pass-123')


@pytest.fixture
def leader_client(client, band_admin):
    client.force_login(band_admin)
    return client


@pytest.fixture
def member_client(client, band_member):
    client.force_login(band_member)
    return client


@pytest.fixture
def superuser(db):
    return User.objects.create_superuser('root', 'root@example.com', 'secret-pass-123')


@pytest.fixture
def superuser_client(client, superuser):
    client.force_login(superuser)
    return client
