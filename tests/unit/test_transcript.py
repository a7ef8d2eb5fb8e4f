import pytest

from ella.memory.models import BookingSummary, Message, QuickReply, Role, ServiceCard
from ella.memory.transcript import Transcript, TranscriptWriteError


def test_record_assigns_increasing_ids():
    transcript = Transcript("conv-1")

    first = transcript.record(Role.ASSISTANT, "Hi!")
    second = transcript.record(Role.USER, "book")

    assert (first.id, second.id) == (1, 2)
    assert [m.text for m in transcript] == ["Hi!", "book"]


def test_out_of_order_append_is_rejected():
    transcript = Transcript("conv-1")
    transcript.record(Role.ASSISTANT, "Hi!")

    with pytest.raises(ValueError):
        transcript.append(Message(id=1, role=Role.USER, text="again"))

    assert len(transcript) == 1


def test_messages_snapshot_does_not_change_after_append():
    transcript = Transcript("conv-1")
    transcript.record(Role.ASSISTANT, "Hi!")

    snapshot = transcript.messages
    transcript.record(Role.USER, "book")

    assert len(snapshot) == 1
    assert isinstance(snapshot, tuple)
    assert len(transcript.messages) == 2


def test_subscribers_see_each_message_until_unsubscribed():
    transcript = Transcript("conv-1")
    seen = []
    unsubscribe = transcript.subscribe(seen.append)

    transcript.record(Role.ASSISTANT, "Hi!")
    unsubscribe()
    transcript.record(Role.USER, "book")

    assert [m.text for m in seen] == ["Hi!"]


def test_failing_subscriber_does_not_block_append():
    transcript = Transcript("conv-1")

    def broken(message):
        raise RuntimeError("listener down")

    transcript.subscribe(broken)
    message = transcript.record(Role.ASSISTANT, "Hi!")

    assert transcript.messages == (message,)


def test_store_keeps_attachments(transcript_store):
    transcript = Transcript("conv-1", transcript_store)
    book = QuickReply("🏠 Book a Cleaning", "book")
    transcript.record(Role.ASSISTANT, "Hi!", quick_replies=(book,))
    transcript.record(Role.USER, "deep cleaning")
    transcript.record(
        Role.ASSISTANT,
        "Excellent!",
        service_card=ServiceCard(
            name="Deep Cleaning", description="Top to bottom", price=159, duration="3-4 hrs"
        ),
    )
    transcript.record(
        Role.ASSISTANT,
        "Summary",
        booking_summary=BookingSummary(
            service="Deep Cleaning", date="Tomorrow", time="9:00 AM", property="House", total=174.6
        ),
    )

    stored = transcript_store.fetch("conv-1")

    assert [m.id for m in stored] == [1, 2, 3, 4]
    assert stored[0].quick_replies == (QuickReply("🏠 Book a Cleaning", "book"),)
    assert stored[2].service_card.price == 159
    assert stored[3].booking_summary.total == 174.6
    assert stored == list(transcript.messages)


def test_store_fetch_limit_returns_most_recent_in_order(transcript_store):
    transcript = Transcript("conv-2", transcript_store)
    for text in ["Hi!", "book", "Do you have an account?", "guest"]:
        transcript.record(Role.USER, text)

    recent = transcript_store.fetch("conv-2", limit=2)

    assert [m.text for m in recent] == ["Do you have an account?", "guest"]
    assert list(transcript_store.iter_conversations()) == ["conv-2"]


def test_store_failure_leaves_transcript_unchanged(flaky_store):
    store = flaky_store(failing={2})
    transcript = Transcript("conv-3", store)
    transcript.record(Role.ASSISTANT, "Hi!")
    seen = []
    transcript.subscribe(seen.append)

    with pytest.raises(TranscriptWriteError):
        transcript.record(Role.USER, "book")

    assert [m.text for m in transcript] == ["Hi!"]
    assert seen == []

    message = transcript.record(Role.USER, "book")
    assert message.id == 2
    assert list(transcript.messages) == store.stored


def test_unpersisted_append_skips_store(flaky_store):
    store = flaky_store()
    transcript = Transcript("conv-4", store)

    transcript.record(Role.ASSISTANT, "Hi!", persist=False)

    assert len(transcript) == 1
    assert store.calls == 0
