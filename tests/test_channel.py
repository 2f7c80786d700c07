"""
Tests for Announcement Channels
===============================

Tests for:
- Speaker formatting (dialogue only)
- Blank / markup-only text is a no-op
- Duplicate suppression window and its boundary
- Repeat buffer: eligible categories, raw-text re-cleaning, dedup bypass
- Sink failure isolation
"""

import pytest

from a11y_announcer.categories import Category, CategoryRegistry
from a11y_announcer.output.channel import AnnouncementChannel, ChannelState
from a11y_announcer.output.sinks import RecordingSink
from a11y_announcer.text.cleaner import TextCleaner


# ===================================================================
# Formatting
# ===================================================================


class TestFormatting:
    def test_dialogue_gets_speaker_prefix(self, channel, speech_sink):
        assert channel.output("Phoenix", "Hold it!", Category.DIALOGUE) is True
        assert speech_sink.texts == ["Phoenix: Hold it!"]

    def test_blank_speaker_no_prefix(self, channel, speech_sink):
        channel.output("  ", "Hello", Category.DIALOGUE)
        assert speech_sink.texts == ["Hello"]

    def test_non_dialogue_ignores_speaker(self, channel, speech_sink):
        channel.output("Judge", "Court is in session", Category.NARRATOR)
        assert speech_sink.texts == ["Court is in session"]

    def test_text_is_cleaned(self, channel, speech_sink):
        channel.announce("<color=red>Badge</color>\\n  added", Category.EVIDENCE)
        assert speech_sink.texts == ["Badge added"]


# ===================================================================
# No-op input
# ===================================================================


class TestEmptyInput:
    @pytest.mark.parametrize("text", [None, "", "   ", "<b></b>"])
    def test_nothing_delivered(self, channel, speech_sink, text):
        assert channel.output("Phoenix", text, Category.DIALOGUE) is False
        assert speech_sink.texts == []
        assert channel.state == ChannelState()

    def test_blank_does_not_touch_repeat_buffer(self, channel, speech_sink):
        channel.output("Maya", "Nick!", Category.DIALOGUE)
        channel.output("Maya", "   ", Category.DIALOGUE)
        channel.repeat_last()
        assert speech_sink.texts == ["Maya: Nick!", "Maya: Nick!"]


# ===================================================================
# Duplicate suppression
# ===================================================================


class TestDedupWindow:
    def test_identical_within_window_suppressed(self, channel, speech_sink, clock):
        assert channel.announce("Loading") is True
        clock.advance(0.2)
        assert channel.announce("Loading") is False
        assert speech_sink.texts == ["Loading"]

    def test_identical_after_window_delivered(self, channel, speech_sink, clock):
        channel.announce("Loading")
        clock.advance(0.5)
        assert channel.announce("Loading") is True
        assert speech_sink.texts == ["Loading", "Loading"]

    def test_just_inside_window(self, channel, speech_sink, clock):
        channel.announce("Loading")
        clock.advance(0.499)
        assert channel.announce("Loading") is False

    def test_different_text_always_delivered(self, channel, speech_sink):
        channel.announce("A")
        channel.announce("B")
        channel.announce("A")
        assert speech_sink.texts == ["A", "B", "A"]

    def test_compares_formatted_text(self, channel, speech_sink):
        channel.output("Phoenix", "Hi", Category.DIALOGUE)
        channel.output("Maya", "Hi", Category.DIALOGUE)
        assert speech_sink.texts == ["Phoenix: Hi", "Maya: Hi"]

    def test_equivalent_raw_text_is_duplicate(self, channel, speech_sink):
        channel.announce("<b>Saved</b>")
        assert channel.announce("Saved  ") is False

    def test_suppressed_does_not_extend_window(self, channel, clock):
        channel.announce("Tick")
        clock.advance(0.3)
        channel.announce("Tick")
        clock.advance(0.3)
        assert channel.announce("Tick") is True

    def test_clock_going_backwards_keeps_timestamp(self, channel, clock):
        channel.announce("A")
        first = channel.state.last_delivered_at
        clock.now -= 10
        channel.announce("B")
        assert channel.state.last_delivered_at == first

    def test_zero_window_disables_suppression(self, speech_sink, cleaner, clock):
        channel = AnnouncementChannel("speech", speech_sink, cleaner, dedup_window=0.0, clock=clock)
        channel.announce("A")
        channel.announce("A")
        assert speech_sink.texts == ["A", "A"]


# ===================================================================
# Repeat buffer
# ===================================================================


class TestRepeatLast:
    def test_nothing_to_repeat(self, channel, speech_sink):
        assert channel.repeat_last() is False
        assert speech_sink.texts == ["Nothing to repeat"]

    def test_repeats_dialogue_with_speaker(self, channel, speech_sink):
        channel.output("Edgeworth", "Objection!", Category.DIALOGUE)
        assert channel.repeat_last() is True
        assert speech_sink.texts == ["Edgeworth: Objection!", "Edgeworth: Objection!"]

    def test_bypasses_dedup_window(self, channel, speech_sink, clock):
        channel.announce("The end", Category.CREDITS)
        clock.advance(0.01)
        channel.repeat_last()
        channel.repeat_last()
        assert speech_sink.texts == ["The end"] * 3

    def test_repeat_does_not_update_dedup_state(self, channel, clock):
        channel.announce("Narration", Category.NARRATOR)
        before = channel.state
        clock.advance(5)
        channel.repeat_last()
        assert channel.state == before

    def test_non_repeatable_categories_not_stored(self, channel, speech_sink):
        channel.output("Maya", "Let's go", Category.DIALOGUE)
        channel.announce("Options", Category.MENU)
        channel.announce("Saved", Category.SYSTEM_MESSAGE)
        channel.repeat_last()
        assert speech_sink.last == "Maya: Let's go"

    def test_stores_raw_text_and_recleans(self, channel, speech_sink, cleaner):
        channel.output("Gumshoe", "2×4 lumber", Category.DIALOGUE)
        assert channel.state.repeat_buffer.text == "2×4 lumber"

        cleaner.set_replacements({"×": " times "})
        channel.repeat_last()
        assert speech_sink.last == "Gumshoe: 2 times 4 lumber"

    def test_suppressed_duplicate_leaves_buffer(self, channel):
        channel.announce("Story", Category.NARRATOR)
        assert channel.announce("Story", Category.CREDITS) is False
        assert channel.state.repeat_buffer.category == Category.NARRATOR

    def test_custom_repeatable_set(self, speech_sink, cleaner, clock):
        channel = AnnouncementChannel(
            "queue",
            speech_sink,
            cleaner,
            repeatable={Category.EVIDENCE},
            clock=clock,
        )
        channel.announce("Attorney's badge", Category.EVIDENCE)
        channel.output("Phoenix", "Hmm", Category.DIALOGUE)
        channel.repeat_last()
        assert speech_sink.last == "Attorney's badge"

    def test_reset(self, channel, speech_sink):
        channel.announce("Story", Category.NARRATOR)
        channel.reset()
        assert channel.state == ChannelState()
        assert channel.repeat_last() is False


# ===================================================================
# Failure isolation
# ===================================================================


class TestSinkFailure:
    def test_failure_is_swallowed(self, channel, speech_sink):
        speech_sink.fail_with = RuntimeError("screen reader gone")
        assert channel.announce("Hello") is True

    def test_failed_delivery_still_counts_for_dedup(self, channel, speech_sink):
        speech_sink.fail_with = RuntimeError("screen reader gone")
        channel.announce("Hello")
        speech_sink.fail_with = None
        assert channel.announce("Hello") is False

    def test_repeat_after_failure(self, channel, speech_sink):
        speech_sink.fail_with = OSError("busy")
        channel.output("Maya", "Nick!", Category.DIALOGUE)
        speech_sink.fail_with = None
        assert channel.repeat_last() is True
        assert speech_sink.texts == ["Maya: Nick!"]

    def test_custom_display_name_used(self, speech_sink, cleaner, clock):
        registry = CategoryRegistry()
        registry.register(Category.PSYCHE_LOCK, "Magatama")
        channel = AnnouncementChannel("speech", speech_sink, cleaner, categories=registry, clock=clock)
        assert channel.categories.display_name(Category.PSYCHE_LOCK) == "Magatama"


class TestIndependentChannels:
    def test_channels_dedup_separately(self, cleaner, clock):
        speech, clipboard = RecordingSink(), RecordingSink()
        a = AnnouncementChannel("speech", speech, cleaner, clock=clock)
        b = AnnouncementChannel("queue", clipboard, TextCleaner(), clock=clock)
        assert a.announce("Same") is True
        assert b.announce("Same") is True
        assert speech.texts == ["Same"]
        assert clipboard.texts == ["Same"]
