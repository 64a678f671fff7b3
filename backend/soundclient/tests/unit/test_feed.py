from shared.wire import SoundEvent
from soundclient.feed import MAX_FEED_ENTRIES, ActivityFeed
from soundclient.sounds import get_sound_info


class TestActivityFeed:
    def test_newest_first(self):
        feed = ActivityFeed("Alice")

        feed.record_joined()
        feed.record_event(SoundEvent(type=2, nickname="Bob"))

        assert [str(e) for e in feed.entries] == ["🥁 Bob played Drum", "🎉 You joined the room"]

    def test_own_events_shown_as_you(self):
        feed = ActivityFeed("Alice")

        entry = feed.record_event(SoundEvent(type=1, nickname="Alice"))

        assert entry is not None
        assert entry.nickname == "You"

    def test_local_sound(self):
        feed = ActivityFeed("Alice")

        entry = feed.record_local_sound(6)

        assert entry is not None
        assert str(entry) == "📯 You played Horn"

    def test_unknown_sound_type_ignored(self):
        feed = ActivityFeed("Alice")

        assert feed.record_event(SoundEvent(type=99, nickname="Bob")) is None
        assert len(feed) == 0

    def test_bounded_to_twenty_entries(self):
        feed = ActivityFeed("Alice")

        for i in range(MAX_FEED_ENTRIES + 5):
            feed.record_event(SoundEvent(type=1 + i % 6, nickname=f"user{i}"))

        assert len(feed) == MAX_FEED_ENTRIES
        assert feed.entries[0].nickname == f"user{MAX_FEED_ENTRIES + 4}"
        assert feed.entries[-1].nickname == "user5"

    def test_catalog_lookup(self):
        info = get_sound_info(3)
        assert info is not None
        assert info.name == "Bell"
        assert get_sound_info(0) is None
