import re

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

HEX_COLOR = re.compile(r'#[0-9a-fA-F]{6}')
DEFAULT_TAG_COLOR = '#3b82f6'


class Band(models.Model):
    """A band that plays events"""
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class BandMember(models.Model):
    """A user playing in a band; each user belongs to at most one band"""
    band = models.ForeignKey(Band, on_delete=models.CASCADE, related_name='members')
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                related_name='band_membership')
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['band', 'user__username']
        verbose_name = "Band Member"

    def __str__(self):
        return f"{self.user} ({self.band.name})"


class Tag(models.Model):
    """Label for grouping repertoire songs"""
    name = models.CharField(max_length=50, unique=True)
    color = models.CharField(max_length=7, default=DEFAULT_TAG_COLOR, help_text="Hex colour, e.g. #3b82f6")
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
                                   null=True, blank=True, related_name='created_tags')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or '').strip()
        if not self.name:
            raise ValidationError({'name': 'Tag name is required.'})
        self.color = (self.color or '').strip() or DEFAULT_TAG_COLOR
        if not HEX_COLOR.fullmatch(self.color):
            raise ValidationError({'color': 'Colour must look like #3b82f6.'})


class Song(models.Model):
    """Shared repertoire entry, referenced by event setlists"""
    name = models.CharField(max_length=200)
    original_key = models.CharField(max_length=10, blank=True, help_text="e.g., C, D, G#")
    author = models.CharField(max_length=200, blank=True)
    lyrics = models.TextField(blank=True)
    tags = models.ManyToManyField(Tag, blank=True, related_name='songs')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        if self.original_key:
            return f"{self.name} ({self.original_key})"
        return self.name

    def clean(self):
        if not (self.name or '').strip():
            raise ValidationError({'name': 'Song name is required.'})
        self.name = self.name.strip()


class Event(models.Model):
    """A performance or service played by a band"""

    EVENT_TYPE_CHOICES = [
        ('sunday_service', 'Sunday Service'),
        ('midweek_service', 'Midweek Service'),
        ('special', 'Special Event'),
    ]

    band = models.ForeignKey(Band, on_delete=models.CASCADE, related_name='events')
    name = models.CharField(max_length=200)
    event_date = models.DateField()
    event_type = models.CharField(max_length=20, choices=EVENT_TYPE_CHOICES, default='sunday_service')
    leader = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
                               null=True, blank=True, related_name='led_events')
    notes = models.TextField(blank=True)
    youtube_link = models.URLField(blank=True)

    class Meta:
        ordering = ['-event_date', 'name']

    def __str__(self):
        return f"{self.name} - {self.event_date}"

    @property
    def is_upcoming(self):
        return self.event_date > timezone.localdate()


class EventSong(models.Model):
    """One song's place in an event's setlist"""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='event_songs')
    # Songs stay in the repertoire while any setlist still plays them
    song = models.ForeignKey(Song, on_delete=models.PROTECT, related_name='event_songs')

    song_order = models.PositiveIntegerField(help_text="Order in the setlist (1, 2, 3...)")
    key_played = models.CharField(max_length=10, blank=True, null=True,
                                  help_text="Key for this performance, overrides the song's key")
    is_medley = models.BooleanField(default=False)
    medley_group = models.PositiveIntegerField(blank=True, null=True,
                                               help_text="Medley number, shared by songs played together")

    class Meta:
        ordering = ['event', 'song_order']
        verbose_name = "Event Song"
        constraints = [
            models.UniqueConstraint(fields=['event', 'song'], name='unique_song_per_event'),
            models.CheckConstraint(
                condition=Q(is_medley=True, medley_group__isnull=False)
                | Q(is_medley=False, medley_group__isnull=True),
                name='medley_group_iff_is_medley',
            ),
        ]

    def __str__(self):
        return f"{self.event.name} - {self.song_order}. {self.song.name}"


class EventParticipant(models.Model):
    """A musician on an event's roster"""
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='participants')
    participant = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                    related_name='event_participations')
    instrument = models.CharField(max_length=100, blank=True, help_text="e.g., Guitar, Keys, Vocals")

    class Meta:
        ordering = ['event', 'participant__username']
        verbose_name = "Event Participant"
        constraints = [
            models.UniqueConstraint(fields=['event', 'participant'], name='unique_participant_per_event'),
        ]

    def __str__(self):
        if self.instrument:
            return f"{self.participant} - {self.instrument}"
        return str(self.participant)
