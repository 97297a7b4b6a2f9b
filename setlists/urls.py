from django.urls import path
from . import views

app_name = 'setlists'

urlpatterns = [
    path('', views.events_list, name='events_list'),
    path('events/add/', views.event_add, name='event_add'),
    path('events/<int:event_id>/', views.event_detail, name='event_detail'),
    path('events/<int:event_id>/edit/', views.event_edit, name='event_edit'),
    path('events/<int:event_id>/delete/', views.event_delete, name='event_delete'),
    path('events/<int:event_id>/participants/add/', views.event_participant_add, name='event_participant_add'),
    path('events/<int:event_id>/participants/<int:participant_id>/remove/', views.event_participant_remove,
         name='event_participant_remove'),
    # Setlist editing; positions are zero-based places in the ordered setlist
    path('events/<int:event_id>/setlist/add/', views.setlist_add, name='setlist_add'),
    path('events/<int:event_id>/setlist/create-song/', views.setlist_create_song, name='setlist_create_song'),
    path('events/<int:event_id>/setlist/<int:position>/remove/', views.setlist_remove, name='setlist_remove'),
    path('events/<int:event_id>/setlist/<int:position>/move/<str:direction>/', views.setlist_move, name='setlist_move'),
    path('events/<int:event_id>/setlist/<int:position>/medley/', views.setlist_medley, name='setlist_medley'),
    path('events/<int:event_id>/setlist/<int:position>/key/', views.setlist_key, name='setlist_key'),
    path('songs/', views.songs_list, name='songs_list'),
    path('songs/add/', views.song_add, name='song_add'),
    path('songs/<int:song_id>/edit/', views.song_edit, name='song_edit'),
    path('songs/<int:song_id>/delete/', views.song_delete, name='song_delete'),
    path('tags/', views.tags_list, name='tags_list'),
    path('tags/add/', views.tag_add, name='tag_add'),
    path('tags/<int:tag_id>/edit/', views.tag_edit, name='tag_edit'),
    path('tags/<int:tag_id>/delete/', views.tag_delete, name='tag_delete'),
    path('bands/', views.bands_list, name='bands_list'),
    path('bands/add/', views.band_add, name='band_add'),
    path('bands/<int:band_id>/', views.band_detail, name='band_detail'),
    path('bands/<int:band_id>/edit/', views.band_edit, name='band_edit'),
    path('bands/<int:band_id>/delete/', views.band_delete, name='band_delete'),
    path('bands/<int:band_id>/members/add/', views.band_member_add, name='band_member_add'),
    path('bands/<int:band_id>/members/<int:member_id>/remove/', views.band_member_remove, name='band_member_remove'),
]
