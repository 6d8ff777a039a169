from vibe_planner.sync.transcript import (
    Transcript,
    TranscriptDeduplicator,
    TranscriptNode,
    deduplicate_messages,
)


def test_deduplicate_removes_repeated_role_and_content():
    transcript = Transcript(
        [
            TranscriptNode("user", "cozy coffee city"),
            TranscriptNode("assistant", "Try Vienna."),
            TranscriptNode("assistant", "  Try Vienna.  "),
            TranscriptNode("user", "Try Vienna."),
        ]
    )

    assert deduplicate_messages(transcript) == 1
    assert [(n.role, n.content.strip()) for n in transcript.nodes] == [
        ("user", "cozy coffee city"),
        ("assistant", "Try Vienna."),
        ("user", "Try Vienna."),
    ]


def test_nodes_without_role_or_content_are_never_removed():
    loader_a = TranscriptNode(None, "")
    loader_b = TranscriptNode(None, "")
    empty = TranscriptNode("assistant", "   ")
    transcript = Transcript([loader_a, loader_b, empty, TranscriptNode("assistant", "   ")])

    assert deduplicate_messages(transcript) == 0
    assert len(transcript) == 4


def test_attached_deduplicator_cleans_each_committed_batch():
    transcript = Transcript([TranscriptNode("assistant", "Hello"), TranscriptNode("assistant", "Hello")])
    dedup = TranscriptDeduplicator(transcript)

    dedup.attach()
    assert len(transcript) == 1

    with transcript.batch():
        transcript.append(TranscriptNode("user", "Beach towns?"))
        transcript.append(TranscriptNode("assistant", "Hello"))
        # duplicates are visible until the batch commits
        assert len(transcript) == 3

    assert [n.content for n in transcript.nodes] == ["Hello", "Beach towns?"]
    assert dedup.removed_total == 2


def test_streaming_update_that_becomes_a_duplicate_is_removed():
    first = TranscriptNode("assistant", "Lisbon is great.")
    streaming = TranscriptNode("assistant", "Lis")
    transcript = Transcript([first, streaming])
    dedup = TranscriptDeduplicator(transcript)
    dedup.attach()
    assert len(transcript) == 2

    transcript.update(streaming, "Lisbon is great.")
    assert transcript.nodes == (first,)


def test_detach_stops_cleaning():
    transcript = Transcript()
    dedup = TranscriptDeduplicator(transcript)
    dedup.attach()
    dedup.detach()

    transcript.append(TranscriptNode("assistant", "x"), TranscriptNode("assistant", "x"))
    assert len(transcript) == 2
    assert not dedup.attached


def test_observer_mutating_transcript_sees_later_batches_in_order():
    transcript = Transcript()
    seen = []

    def echo(records, t):
        seen.append([r.kind for r in records])
        if records[0].kind == "added" and len(t) == 1:
            t.append(TranscriptNode("assistant", "echo"))

    transcript.observe(echo)
    transcript.append(TranscriptNode("user", "hi"))

    assert seen == [["added"], ["added"]]
    assert len(transcript) == 2
