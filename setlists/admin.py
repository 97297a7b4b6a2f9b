from django.contrib import admin
from .models import Band, BandMember, Song, Tag, Event, EventSong, EventParticipant


class BandMemberInline(admin.TabularInline):
    model = BandMember
    extra = 1
    fields = ['user', 'joined_at']
    readonly_fields = ['joined_at']


@admin.register(Band)
class BandAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']
    inlines = [BandMemberInline]


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ['name', 'color', 'created_by', 'created_at']
    search_fields = ['name']


@admin.register(Song)
class SongAdmin(admin.ModelAdmin):
    list_display = ['name', 'original_key', 'author', 'created_at']
    list_filter = ['original_key', 'tags']
    search_fields = ['name', 'author']
    filter_horizontal = ['tags']
    fieldsets = (
        ('Basic Info', {
            'fields': ('name', 'author', 'original_key', 'tags')
        }),
        ('Lyrics', {
            'fields': ('lyrics',),
            'classes': ('collapse',)
        }),
    )


class EventSongInline(admin.TabularInline):
    model = EventSong
    extra = 1
    fields = ['song_order', 'song', 'key_played', 'is_medley', 'medley_group']
    autocomplete_fields = ['song']


class EventParticipantInline(admin.TabularInline):
    model = EventParticipant
    extra = 1
    fields = ['participant', 'instrument']


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['name', 'event_date', 'event_type', 'band', 'leader']
    list_filter = ['band', 'event_type', 'event_date']
    search_fields = ['name', 'band__name']
    date_hierarchy = 'event_date'
    inlines = [EventSongInline, EventParticipantInline]
    fieldsets = (
        ('Event Info', {
            'fields': ('band', 'name', 'event_date', 'event_type', 'leader')
        }),
        ('Notes', {
            'fields': ('notes', 'youtube_link')
        }),
    )


@admin.register(EventSong)
class EventSongAdmin(admin.ModelAdmin):
    list_display = ['event', 'song_order', 'song', 'key_played', 'is_medley', 'medley_group']
    list_filter = ['is_medley', 'event__event_date']
    search_fields = ['event__name', 'song__name']
    autocomplete_fields = ['event', 'song']
