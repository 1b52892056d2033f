"""
Share-string codec for game records.

Two payload generations are understood:

- V3 (current): ``v3|type|target|date|winner|final|body`` with base36 numbers
  and one character per dart in the body
- V2 (legacy): a minified JSON object ``{t, ts, d, w, fs, r: [{t: [[s, m]]}]}``

Both are wrapped in lz-string's URI-safe compression, so links produced by
the JavaScript client decode here and vice versa. Only raw throws travel on
the wire; per-round scores and stats are rebuilt on decode by replaying the
throws through the game rules.
"""
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging

import numpy as np
from lzstring import LZString

from dartkeeper.core import (
    DartOutcome,
    GameRecord,
    GameType,
    RoundRecord,
    BULL,
    DOUBLE_BULL,
)
from dartkeeper.game.rules import score_rounds
from dartkeeper.game.stats import compute_stats

logger = logging.getLogger(__name__)

TYPE_ORDER: Tuple[GameType, ...] = (GameType.X01, GameType.CRICKET, GameType.COUNT_UP)

V3_PREFIX = "v3|"
V3_FIELD_COUNT = 7
THROW_BASE = 1000  # Code point of packed value 0
ROUND_SEPARATOR = chr(999)
MAX_PACKED = BULL * 3 + 1  # (25, x2) -> 76; there is no treble bull

WINNER_CODES = {"Win": "1", "Player 1": "1", "Finish": "2"}
WINNER_NAMES = {"1": "Win", "2": "Finish"}


class CodecError(ValueError):
    """Share string could not be encoded or decoded."""


class DecompressionFailed(CodecError):
    """Compressed text did not expand to a readable payload."""


def encode_winner(winner: str) -> str:
    """
    Winner string to its one-character code.

    Anything outside "Win"/"Player 1"/"Finish" collapses to "0" (Lose).
    """
    return WINNER_CODES.get(winner, "0")


def decode_winner(code: str) -> str:
    return WINNER_NAMES.get(code, "Lose")


def to_base36(number: int) -> str:
    return np.base_repr(int(number), 36).lower()


def _parse_base36(text: str, default: Optional[int] = 0) -> Optional[int]:
    try:
        return int(text, 36)
    except ValueError:
        return default


@dataclass
class RawRecord:
    """Wire-level content of a record, before replay."""
    game_type: GameType
    date: int
    winner: str
    final_score: int
    target_score: Optional[int] = None
    rounds: List[List[DartOutcome]] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: GameRecord) -> "RawRecord":
        return cls(
            game_type=record.type,
            date=record.date,
            winner=record.winner,
            final_score=record.final_score,
            target_score=record.target_score,
            rounds=[list(r.throws) for r in record.rounds],
        )


class PayloadFormat(ABC):
    """One wire-format generation."""

    version: int

    @abstractmethod
    def matches(self, payload: str) -> bool:
        """Check if a decompressed payload belongs to this generation."""
        pass

    @abstractmethod
    def dump(self, raw: RawRecord) -> str:
        pass

    @abstractmethod
    def parse(self, payload: str) -> RawRecord:
        """
        Read a decompressed payload.

        Raises:
            CodecError: If the payload cannot be read at all
        """
        pass


class V3Format(PayloadFormat):
    """Delimited text with one packed character per dart."""

    version = 3

    def matches(self, payload: str) -> bool:
        return payload.startswith(V3_PREFIX)

    @staticmethod
    def pack_throw(outcome: DartOutcome) -> str:
        score, multiplier = outcome.score, outcome.multiplier
        if score == DOUBLE_BULL:
            score, multiplier = BULL, 2

        packed = score * 3 + (multiplier - 1)
        if not 0 <= score <= BULL or not 1 <= multiplier <= 3 or packed > MAX_PACKED:
            raise CodecError(f"Cannot pack throw {outcome.label} ({score}, {multiplier})")
        return chr(THROW_BASE + packed)

    @staticmethod
    def unpack_throw(char: str) -> Optional[DartOutcome]:
        packed = ord(char) - THROW_BASE
        if not 0 <= packed <= MAX_PACKED:
            return None
        return DartOutcome(score=packed // 3, multiplier=packed % 3 + 1)

    def dump(self, raw: RawRecord) -> str:
        target = "" if raw.target_score is None else to_base36(raw.target_score)
        body = ROUND_SEPARATOR.join(
            "".join(self.pack_throw(t) for t in throws) for throws in raw.rounds
        )
        fields = [
            "v3",
            str(TYPE_ORDER.index(raw.game_type)),
            target,
            to_base36(raw.date),
            encode_winner(raw.winner),
            to_base36(raw.final_score),
            body,
        ]
        return "|".join(fields)

    def parse(self, payload: str) -> RawRecord:
        fields = payload.split("|", V3_FIELD_COUNT - 1)
        if len(fields) < V3_FIELD_COUNT:
            logger.warning(f"Truncated V3 payload ({len(fields)} fields), filling defaults")
            fields += [""] * (V3_FIELD_COUNT - len(fields))

        _, type_field, target_field, date_field, winner_field, final_field, body = fields

        type_index = _parse_base36(type_field)
        if not 0 <= type_index < len(TYPE_ORDER):
            logger.warning(f"Unknown game type index {type_field!r}, assuming 01")
            type_index = 0

        rounds: List[List[DartOutcome]] = []
        if body:
            for chunk in body.split(ROUND_SEPARATOR):
                throws = []
                for char in chunk:
                    outcome = self.unpack_throw(char)
                    if outcome is None:
                        logger.warning(f"Skipping unknown throw code {ord(char)}")
                        continue
                    throws.append(outcome)
                rounds.append(throws)

        return RawRecord(
            game_type=TYPE_ORDER[type_index],
            target_score=_parse_base36(target_field, default=None) if target_field else None,
            date=_parse_base36(date_field),
            winner=decode_winner(winner_field),
            final_score=_parse_base36(final_field),
            rounds=rounds,
        )


class V2JsonFormat(PayloadFormat):
    """Legacy minified JSON payload."""

    version = 2

    def matches(self, payload: str) -> bool:
        return payload.lstrip().startswith("{")

    def dump(self, raw: RawRecord) -> str:
        data = {"t": TYPE_ORDER.index(raw.game_type)}
        if raw.target_score is not None:
            data["ts"] = raw.target_score
        data.update({
            "d": raw.date,
            "w": raw.winner,
            "fs": raw.final_score,
            "r": [{"t": [[t.score, t.multiplier] for t in throws]} for throws in raw.rounds],
        })
        return json.dumps(data, separators=(",", ":"))

    def parse(self, payload: str) -> RawRecord:
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise DecompressionFailed(f"Decompression failed: payload is not valid JSON ({e})") from e

        if not isinstance(data, dict):
            raise DecompressionFailed("Decompression failed: payload is not a JSON object")

        type_index = _as_int(data.get("t"))
        if not 0 <= type_index < len(TYPE_ORDER):
            type_index = 0

        target = data.get("ts")

        return RawRecord(
            game_type=TYPE_ORDER[type_index],
            target_score=_as_int(target) if target is not None else None,
            date=_as_int(data.get("d")),
            winner=str(data.get("w", "")),
            final_score=_as_int(data.get("fs")),
            rounds=self._parse_rounds(data.get("r")),
        )

    @staticmethod
    def _parse_rounds(minified_rounds) -> List[List[DartOutcome]]:
        """
        Read ``r`` leniently.

        A round that is not an object reads as an empty round, so later
        rounds keep their numbers; throw entries that are not lists are
        skipped.
        """
        if not isinstance(minified_rounds, list):
            if minified_rounds is not None:
                logger.warning(f"Ignoring rounds of type {type(minified_rounds).__name__}")
            return []

        rounds = []
        for minified_round in minified_rounds:
            if not isinstance(minified_round, dict):
                logger.warning(f"Malformed round {minified_round!r}, reading as empty")
                rounds.append([])
                continue

            pairs = minified_round.get("t")
            if not isinstance(pairs, list):
                pairs = []

            throws = []
            for pair in pairs:
                if not isinstance(pair, list):
                    logger.warning(f"Skipping malformed throw {pair!r}")
                    continue
                score = _as_int(pair[0]) if pair else 0
                multiplier = _as_int(pair[1], 1) if len(pair) > 1 else 1
                throws.append(DartOutcome(score=score, multiplier=multiplier))
            rounds.append(throws)

        return rounds


def _as_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


class RecordCodec:
    """
    Encodes GameRecords to share strings and back.

    Decoding sniffs the payload generation, so links made by any supported
    encoder keep working.
    """

    FORMATS: Tuple[PayloadFormat, ...] = (V3Format(), V2JsonFormat())
    CURRENT_VERSION = 3

    def __init__(self, id_prefix: str = "shared-", default_target_score: int = 301):
        """
        Args:
            id_prefix: Prefix of the id minted for decoded records
            default_target_score: 01 start used for replay when a link has no target
        """
        self.id_prefix = id_prefix
        self.default_target_score = default_target_score
        self._lz = LZString()

    @classmethod
    def from_config(cls, config) -> "RecordCodec":
        return cls(
            id_prefix=config.get("share", "id_prefix", "shared-"),
            default_target_score=config.get("share", "default_target_score", 301),
        )

    def _format_for_version(self, version: int) -> PayloadFormat:
        for payload_format in self.FORMATS:
            if payload_format.version == version:
                return payload_format
        raise CodecError(f"Unsupported format version: {version}")

    def encode(self, record: GameRecord, version: Optional[int] = None) -> str:
        """
        Encode a record as a URL-safe share string.

        Args:
            record: Record to encode (not modified)
            version: Payload generation (default: current)

        Returns:
            Compressed, URL-safe string
        """
        payload_format = self._format_for_version(version or self.CURRENT_VERSION)
        payload = payload_format.dump(RawRecord.from_record(record))
        encoded = self._lz.compressToEncodedURIComponent(payload)
        logger.debug(
            f"Encoded {record.id} as v{payload_format.version}: "
            f"{len(payload)} chars → {len(encoded)} chars"
        )
        return encoded

    def decode(self, text: str) -> GameRecord:
        """
        Decode a share string.

        Raises:
            DecompressionFailed: If the text does not decompress to a payload
        """
        payload = self._decompress(text)

        # Anything that is not V3 is treated as legacy JSON
        payload_format = next((f for f in self.FORMATS if f.matches(payload)), self.FORMATS[-1])
        raw = payload_format.parse(payload)
        logger.debug(f"Decoded v{payload_format.version} payload: {raw.game_type.value}, "
                     f"{len(raw.rounds)} round(s)")
        return self._build_record(raw)

    def _decompress(self, text: str) -> str:
        try:
            payload = self._lz.decompressFromEncodedURIComponent(text)
        except Exception as e:
            logger.error(f"Decompression error: {e}")
            raise DecompressionFailed(f"Decompression failed: {e}") from e

        if not payload:
            raise DecompressionFailed("Decompression failed")
        return payload

    def _build_record(self, raw: RawRecord) -> GameRecord:
        """Replay raw rounds into a full record with derived fields."""
        replay_target = raw.target_score
        if replay_target is None and raw.game_type is GameType.X01:
            replay_target = self.default_target_score

        snapshots = score_rounds(raw.game_type, raw.rounds, replay_target)
        rounds = tuple(
            RoundRecord(round=index + 1, throws=tuple(throws), score_after=snapshot)
            for index, (throws, snapshot) in enumerate(zip(raw.rounds, snapshots))
        )

        return GameRecord(
            id=f"{self.id_prefix}{raw.date}",
            type=raw.game_type,
            date=raw.date,
            winner=raw.winner,
            final_score=raw.final_score,
            rounds=rounds,
            target_score=raw.target_score,
            stats=compute_stats(raw.game_type, raw.rounds, raw.final_score, raw.target_score),
        )


_default_codec = RecordCodec()


def encode_game_record(record: GameRecord, version: Optional[int] = None) -> str:
    """Encode with the default codec settings."""
    return _default_codec.encode(record, version)


def decode_game_record(text: str) -> GameRecord:
    """Decode with the default codec settings."""
    return _default_codec.decode(text)

