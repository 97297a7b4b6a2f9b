from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Band',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Song',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('original_key', models.CharField(blank=True, help_text='e.g., C, D, G#', max_length=10)),
                ('author', models.CharField(blank=True, max_length=200)),
                ('lyrics', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('event_date', models.DateField()),
                ('event_type', models.CharField(choices=[('sunday_service', 'Sunday Service'), ('midweek_service', 'Midweek Service'), ('special', 'Special Event')], default='sunday_service', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('youtube_link', models.URLField(blank=True)),
                ('band', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='setlists.band')),
                ('leader', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='led_events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-event_date', 'name'],
            },
        ),
        migrations.CreateModel(
            name='EventSong',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('song_order', models.PositiveIntegerField(help_text='Order in the setlist (1, 2, 3...)')),
                ('key_played', models.CharField(blank=True, help_text="Key for this performance, overrides the song's key", max_length=10, null=True)),
                ('is_medley', models.BooleanField(default=False)),
                ('medley_group', models.PositiveIntegerField(blank=True, help_text='Medley number, shared by songs played together', null=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='event_songs', to='setlists.event')),
                ('song', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='event_songs', to='setlists.song')),
            ],
            options={
                'verbose_name': 'Event Song',
                'ordering': ['event', 'song_order'],
                'constraints': [
                    models.UniqueConstraint(fields=('event', 'song'), name='unique_song_per_event'),
                    models.CheckConstraint(condition=models.Q(models.Q(('is_medley', True), ('medley_group__isnull', False)), models.Q(('is_medley', False), ('medley_group__isnull', True)), _connector='OR'), name='medley_group_iff_is_medley'),
                ],
            },
        ),
    ]
