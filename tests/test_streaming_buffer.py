import pytest

from vibe_planner.sync.buffer import StreamingResultBuffer


def _hit(object_id: str, name: str) -> dict:
    return {"objectID": object_id, "city": name, "country": "Japan", "culture_score": 9}


def test_repeated_renders_of_same_hits_bump_version_once():
    buffer = StreamingResultBuffer(cap=2)
    hits = [_hit("kyoto", "Kyoto"), _hit("osaka", "Osaka"), _hit("nara", "Nara")]

    for _ in range(50):
        buffer.write_hits(hits)

    assert buffer.version == 1
    assert [c.name for c in buffer.snapshot()] == ["Kyoto", "Osaka"]


def test_add_merges_unique_names_up_to_cap():
    buffer = StreamingResultBuffer(cap=2)

    assert buffer.add(_hit("kyoto", "Kyoto")) is True
    assert buffer.add(_hit("kyoto-2", "KYOTO")) is False
    assert buffer.add(_hit("osaka", "Osaka")) is True
    assert buffer.add(_hit("nara", "Nara")) is False

    assert buffer.version == 2
    assert [c.object_id for c in buffer.snapshot()] == ["kyoto", "osaka"]


def test_malformed_payloads_are_dropped_without_version_bump():
    buffer = StreamingResultBuffer()

    assert buffer.add({"city": "No id"}) is False
    assert buffer.add("Kyoto") is False
    assert buffer.write_hits([None, {"objectID": "x"}]) is False
    assert buffer.write_hits([]) is False
    assert buffer.version == 0
    assert buffer.snapshot() == ()


def test_begin_turn_clears_without_bumping_version():
    buffer = StreamingResultBuffer()
    buffer.add(_hit("kyoto", "Kyoto"))
    version = buffer.version

    buffer.begin_turn()

    assert buffer.snapshot() == ()
    assert buffer.version == version

    buffer.add(_hit("kyoto", "Kyoto"))
    assert buffer.version == version + 1


def test_changed_hit_set_advances_version():
    buffer = StreamingResultBuffer()
    buffer.write_hits([_hit("kyoto", "Kyoto")])
    buffer.write_hits([_hit("kyoto", "Kyoto"), _hit("osaka", "Osaka")])
    assert buffer.version == 2


def test_cap_must_be_positive():
    with pytest.raises(ValueError):
        StreamingResultBuffer(cap=0)
