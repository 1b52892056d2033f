"""
Tests for share-string encoding and decoding.
"""
from dataclasses import replace
import pytest
from lzstring import LZString

from dartkeeper.core import Config, DartOutcome, GameRecord, GameType, RoundRecord
from dartkeeper.game import GameStateMachine
from dartkeeper.codec import (
    RecordCodec, CodecError, DecompressionFailed, V3Format,
    encode_game_record, decode_game_record, encode_winner, decode_winner
)
from dartkeeper.codec.record_codec import to_base36

T20 = DartOutcome(20, 3)
T19 = DartOutcome(19, 3)
S1 = DartOutcome(1, 1)
S5 = DartOutcome(5, 1)

lz = LZString()


def _play(game_type, target=None, rounds=()):
    game = GameStateMachine(game_type, target)
    for index, throws in enumerate(rounds):
        if index > 0:
            game.next_round()
        for outcome in throws:
            game.record_throw(outcome)
    return game.to_record(date=1700000000000)


def _simple_record(**overrides) -> GameRecord:
    fields = dict(
        id="game-1",
        type=GameType.X01,
        date=1700000000000,
        winner="Win",
        final_score=0,
        rounds=(RoundRecord(round=1, throws=(T20,), score_after=241),),
        target_score=301,
    )
    fields.update(overrides)
    return GameRecord(**fields)


def _assert_same_game(decoded: GameRecord, original: GameRecord):
    assert decoded.id == f"shared-{original.date}"
    assert replace(decoded, id=original.id) == original


# ----------------------------------------------------------------------
# Round trips
# ----------------------------------------------------------------------

def test_roundtrip_01():
    """A finished 01 game survives encode/decode."""
    original = _play("01", 301, [[T20, T20, T20], [T20, T20, S1]])

    decoded = decode_game_record(encode_game_record(original))

    _assert_same_game(decoded, original)
    assert [r.score_after for r in decoded.rounds] == [121, 0]
    assert decoded.stats.ppd == pytest.approx(50.17)


def test_roundtrip_cricket():
    """Cricket marks are rebuilt from the throws."""
    original = _play("cricket", rounds=[[T20, T20, T20], [T19, T19, T19]])

    decoded = decode_game_record(encode_game_record(original))

    _assert_same_game(decoded, original)
    assert decoded.target_score is None
    assert decoded.final_score == 234
    assert decoded.rounds[1].score_after[19] == 3
    assert decoded.stats.mpr == pytest.approx(9.0)


def test_roundtrip_count_up():
    """Count-up keeps the running totals and the Finish result."""
    original = _play("count_up", rounds=[[T20, S5, DartOutcome(25, 1)], [S1]])

    decoded = decode_game_record(encode_game_record(original))

    _assert_same_game(decoded, original)
    assert decoded.winner == "Finish"
    assert [r.score_after for r in decoded.rounds] == [115, 116]


def test_encode_does_not_touch_record():
    """Encoding is pure."""
    original = _play("01", 301, [[T20]])
    snapshot = original.to_dict()

    encode_game_record(original)

    assert original.to_dict() == snapshot


# ----------------------------------------------------------------------
# Field encoding
# ----------------------------------------------------------------------

def test_v3_payload_layout():
    """The decompressed payload is the v3 pipe format with base36 numbers."""
    text = encode_game_record(_simple_record())
    payload = lz.decompressFromEncodedURIComponent(text)

    assert payload.startswith("v3|0|8d|")
    fields = payload.split("|")
    assert len(fields) == 7
    assert int(fields[3], 36) == 1700000000000
    assert fields[4] == "1"
    assert fields[6] == chr(1000 + 20 * 3 + 2)


def test_base36():
    """Base36 numbers use lowercase digits."""
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    assert to_base36(301) == "8d"


def test_missing_target():
    """No target travels as an empty field and decodes to None."""
    record = _simple_record(target_score=None)

    decoded = decode_game_record(encode_game_record(record))

    assert decoded.target_score is None
    # Replay falls back to 301; stats need the real target
    assert decoded.rounds[0].score_after == 241
    assert decoded.stats.ppd is None


def test_large_numbers():
    """Dates and scores beyond 32 bits survive."""
    record = _simple_record(date=9999999999999, final_score=999999, target_score=999999)

    decoded = decode_game_record(encode_game_record(record))

    assert decoded.date == 9999999999999
    assert decoded.final_score == 999999
    assert decoded.target_score == 999999
    assert decoded.id == "shared-9999999999999"


def test_winner_codes():
    """Win/Finish are kept; anything else reads back as Lose."""
    assert encode_winner("Win") == "1"
    assert encode_winner("Player 1") == "1"
    assert encode_winner("Finish") == "2"
    assert encode_winner("Alice") == "0"
    assert decode_winner("1") == "Win"
    assert decode_winner("2") == "Finish"
    assert decode_winner("0") == "Lose"
    assert decode_winner("") == "Lose"

    for winner, expected in [("Win", "Win"), ("Player 1", "Win"),
                             ("Finish", "Finish"), ("Lose", "Lose"), ("Alice", "Lose")]:
        decoded = decode_game_record(encode_game_record(_simple_record(winner=winner)))
        assert decoded.winner == expected


def test_every_throw_code():
    """Every single, double, triple, bull and miss packs and unpacks."""
    throws = [DartOutcome(0, 1), DartOutcome(25, 1), DartOutcome(25, 2)]
    throws += [DartOutcome(s, m) for s in range(1, 21) for m in (1, 2, 3)]
    rounds = tuple(
        RoundRecord(round=i // 3 + 1, throws=tuple(throws[i:i + 3]), score_after=0)
        for i in range(0, len(throws), 3)
    )
    record = _simple_record(type=GameType.COUNT_UP, target_score=None, rounds=rounds)

    decoded = decode_game_record(encode_game_record(record))

    assert [t for r in decoded.rounds for t in r.throws] == throws


def test_inner_bull_packs_as_double_25():
    """A 50 outcome travels as (25, x2)."""
    assert V3Format.pack_throw(DartOutcome(50, 1)) == V3Format.pack_throw(DartOutcome(25, 2))
    assert V3Format.pack_throw(DartOutcome(25, 2)) == chr(1000 + 76)
    assert V3Format.unpack_throw(chr(1000 + 76)) == DartOutcome(25, 2)

    record = _simple_record(rounds=(RoundRecord(1, (DartOutcome(50, 1),), 251),))
    decoded = decode_game_record(encode_game_record(record))

    hit = decoded.rounds[0].throws[0]
    assert (hit.score, hit.multiplier, hit.label) == (25, 2, "D-Bull")
    # Still worth 50 on replay
    assert decoded.rounds[0].score_after == 251


def test_pack_out_of_domain():
    """Scores the board cannot produce are rejected."""
    with pytest.raises(CodecError):
        V3Format.pack_throw(DartOutcome(30, 1))

    with pytest.raises(CodecError):
        encode_game_record(_simple_record(rounds=(RoundRecord(1, (DartOutcome(20, 4),), 0),)))

    # No treble bull on the board
    with pytest.raises(CodecError):
        V3Format.pack_throw(DartOutcome(25, 3))


def test_treble_bull_code_skipped():
    """Code 1077 would be a treble bull; it decodes like any unknown code."""
    assert V3Format.unpack_throw(chr(1000 + 77)) is None

    payload = "v3|2||1|2|0|" + chr(1000 + 77) + chr(1000 + 75)
    decoded = decode_game_record(lz.compressToEncodedURIComponent(payload))

    assert decoded.rounds[0].throws == (DartOutcome(25, 1),)


def test_multiple_and_empty_rounds():
    """Round boundaries are kept, including empty middle rounds."""
    rounds = (
        RoundRecord(1, (T20, T20), 181),
        RoundRecord(2, (), 181),
        RoundRecord(3, (S1,), 180),
    )
    decoded = decode_game_record(encode_game_record(
        _simple_record(rounds=rounds, winner="Lose", final_score=180)))

    assert [len(r.throws) for r in decoded.rounds] == [2, 0, 1]
    assert [r.round for r in decoded.rounds] == [1, 2, 3]
    assert [r.score_after for r in decoded.rounds] == [181, 181, 180]


def test_no_rounds():
    """An empty body decodes to zero rounds."""
    decoded = decode_game_record(encode_game_record(_simple_record(rounds=())))
    assert decoded.rounds == ()
    assert decoded.stats.ppd is None

    # A single empty round has the same body and collapses too
    decoded = decode_game_record(encode_game_record(
        _simple_record(rounds=(RoundRecord(1, (), 301),))))
    assert decoded.rounds == ()


# ----------------------------------------------------------------------
# Legacy and malformed input
# ----------------------------------------------------------------------

def test_decode_v2_json():
    """Legacy JSON links still decode."""
    payload = ('{"t":0,"ts":501,"d":1700000000000,"w":"Win","fs":0,'
               '"r":[{"t":[[20,3],[20,3],[20,3]]},{"t":[[19]]}]}')

    decoded = decode_game_record(lz.compressToEncodedURIComponent(payload))

    assert decoded.type is GameType.X01
    assert decoded.target_score == 501
    assert decoded.winner == "Win"
    assert decoded.rounds[0].throws == (T20, T20, T20)
    assert decoded.rounds[1].throws == (DartOutcome(19, 1),)
    assert [r.score_after for r in decoded.rounds] == [321, 302]


def test_encode_v2():
    """The legacy encoder is still available on request."""
    original = _play("cricket", rounds=[[T20, T19]])

    text = RecordCodec().encode(original, version=2)

    assert lz.decompressFromEncodedURIComponent(text).startswith("{")
    _assert_same_game(decode_game_record(text), original)


def _decode_v2(payload: str) -> GameRecord:
    return decode_game_record(lz.compressToEncodedURIComponent(payload))


def test_v2_rounds_not_a_list():
    """A non-list rounds field reads as no rounds."""
    decoded = _decode_v2('{"t":0,"ts":301,"d":5,"w":"Lose","fs":301,"r":5}')

    assert decoded.rounds == ()
    assert decoded.date == 5
    assert decoded.target_score == 301


def test_v2_round_not_an_object():
    """Malformed rounds read as empty and keep later rounds in place."""
    decoded = _decode_v2('{"t":0,"ts":301,"d":5,"w":"Lose","fs":241,'
                         '"r":[[1],{"t":[[20,3]]}]}')

    assert [len(r.throws) for r in decoded.rounds] == [0, 1]
    assert [r.score_after for r in decoded.rounds] == [301, 241]


def test_v2_throw_not_a_pair():
    """Throw entries that are not lists are skipped."""
    decoded = _decode_v2('{"t":2,"d":5,"w":"Finish","fs":60,'
                         '"r":[{"t":[5,"20",[20,3],null]},{"t":7}]}')

    assert decoded.type is GameType.COUNT_UP
    assert decoded.rounds[0].throws == (T20,)
    assert decoded.rounds[1].throws == ()


def test_v2_odd_scalar_fields():
    """Scalars of the wrong type fall back to defaults."""
    decoded = _decode_v2('{"t":[5],"ts":"abc","d":{"x":1},"w":3,"fs":1e999,"r":[]}')

    assert decoded.type is GameType.X01
    assert decoded.target_score == 0
    assert decoded.date == 0
    assert decoded.winner == "3"
    assert decoded.final_score == 0


def test_unsupported_version():
    with pytest.raises(CodecError):
        RecordCodec().encode(_simple_record(), version=1)


def test_decompression_failures():
    """Garbage and empty strings raise DecompressionFailed."""
    for text in ("invalid", ""):
        with pytest.raises(DecompressionFailed):
            decode_game_record(text)

    with pytest.raises(DecompressionFailed):
        decode_game_record(lz.compressToEncodedURIComponent("hello"))

    with pytest.raises(DecompressionFailed):
        decode_game_record(lz.compressToEncodedURIComponent("[1, 2]"))


def test_decompression_failed_is_codec_error():
    assert issubclass(DecompressionFailed, CodecError)
    assert issubclass(CodecError, ValueError)


def test_truncated_v3_payload():
    """Missing fields fall back to defaults instead of failing."""
    decoded = decode_game_record(lz.compressToEncodedURIComponent("v3|1"))

    assert decoded.type is GameType.CRICKET
    assert decoded.date == 0
    assert decoded.winner == "Lose"
    assert decoded.final_score == 0
    assert decoded.rounds == ()
    assert decoded.id == "shared-0"


def test_unknown_throw_codes_skipped():
    """Characters outside the packed range are dropped."""
    payload = "v3|2||1|2|a|" + chr(1062) + chr(5000)

    decoded = decode_game_record(lz.compressToEncodedURIComponent(payload))

    assert decoded.type is GameType.COUNT_UP
    assert decoded.rounds[0].throws == (T20,)
    assert decoded.final_score == 10
    assert decoded.stats.ppd == 10


def test_unknown_type_index():
    """An unknown ruleset index reads as 01."""
    decoded = decode_game_record(lz.compressToEncodedURIComponent("v3|9|8d|1|0|0|"))
    assert decoded.type is GameType.X01


def test_codec_from_config():
    """Decoded ids use the configured prefix."""
    config = Config.from_dict({"share": {"id_prefix": "link-"}})
    codec = RecordCodec.from_config(config)

    decoded = codec.decode(codec.encode(_simple_record(date=42)))

    assert decoded.id == "link-42"
