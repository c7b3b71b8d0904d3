"""
avi/analysis/signals.py
========================
Response Signal Definitions - AVI Interview Engine

Responsibility:
    - Define the typed structure for one answered question's raw signal
      (transcript, word list, response time, acoustic features)
    - Validate and normalize the payload produced by the external
      transcription / feature-extraction layer into a ResponseSignal

Accepted payload (snake_case or camelCase keys):
    {
        "transcript": str | None,
        "words": list[str] | None,
        "response_time_seconds": float | None,
        "acoustic_features": {
            "pitch_series": list[float],
            "energy_series": list[float],
            "disfluency_count": int | None
        }
    }

This module does NOT:
    - Perform signal processing or speech-to-text
    - Score responses (that is analyzer.py)
    - Look up catalog questions
"""

import logging
import math
from typing import Any

logger = logging.getLogger("avi.analysis.signals")


class SignalValidationError(ValueError):
    """Raised when a raw response payload is malformed."""


# ---------------------------------------------------------------------------
# Signal container
# ---------------------------------------------------------------------------


class ResponseSignal:
    """
    Immutable container for the raw signal of one spoken answer.

    Attributes:
        transcript:         Transcribed answer text, or None
        words:              Tokenized words, empty when unavailable
        response_time:      Seconds from question end to answer start, or None
        pitch_series:       Pitch samples in Hz (0 = unvoiced frame)
        energy_series:      Frame energy samples (non-negative)
        disfluency_count:   Filler/disfluency count from the extractor, or None
    """

    __slots__ = (
        "transcript",
        "words",
        "response_time",
        "pitch_series",
        "energy_series",
        "disfluency_count",
    )

    def __init__(
        self,
        transcript: str | None = None,
        words: tuple[str, ...] = (),
        response_time: float | None = None,
        pitch_series: tuple[float, ...] = (),
        energy_series: tuple[float, ...] = (),
        disfluency_count: int | None = None,
    ) -> None:
        object.__setattr__(self, "transcript", transcript)
        object.__setattr__(self, "words", tuple(words))
        object.__setattr__(self, "response_time", response_time)
        object.__setattr__(self, "pitch_series", tuple(pitch_series))
        object.__setattr__(self, "energy_series", tuple(energy_series))
        object.__setattr__(self, "disfluency_count", disfluency_count)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ResponseSignal is immutable")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResponseSignal):
            return NotImplemented
        return all(
            getattr(self, attr) == getattr(other, attr)
            for attr in self.__slots__
        )

    def __hash__(self) -> int:
        return hash(tuple(getattr(self, attr) for attr in self.__slots__))

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{attr}={getattr(self, attr)!r}" for attr in self.__slots__
        )
        return f"ResponseSignal({fields})"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _pick(payload: dict[str, Any], *keys: str) -> Any:
    """Return the first present key's value (snake_case first)."""
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def _validate_series(name: str, raw: Any) -> tuple[float, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise SignalValidationError(
            f"{name} must be a list of numbers, got {type(raw).__name__}"
        )
    values: list[float] = []
    for i, v in enumerate(raw):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise SignalValidationError(
                f"{name}[{i}] must be a number, got {type(v).__name__}"
            )
        if not math.isfinite(v) or v < 0:
            raise SignalValidationError(f"{name}[{i}] out of range: {v}")
        values.append(float(v))
    return tuple(values)


# ---------------------------------------------------------------------------
# Factory / validator
# ---------------------------------------------------------------------------


def build_response_signal(payload: dict[str, Any]) -> ResponseSignal:
    """
    Build a validated ResponseSignal from the transcription layer payload.

    Args:
        payload: Raw answer payload (see module docstring).

    Returns:
        Validated ResponseSignal ready for analysis.

    Raises:
        SignalValidationError: If any value has the wrong type or range.
    """
    if not isinstance(payload, dict):
        raise SignalValidationError(
            f"Payload must be a dict, got {type(payload).__name__}"
        )

    # --- Transcript ---
    transcript = payload.get("transcript")
    if transcript is not None and not isinstance(transcript, str):
        raise SignalValidationError(
            f"transcript must be a string, got {type(transcript).__name__}"
        )
    if transcript is not None and not transcript.strip():
        transcript = None

    # --- Words ---
    raw_words = payload.get("words")
    if raw_words is None:
        words: tuple[str, ...] = ()
    elif isinstance(raw_words, (list, tuple)) and all(
        isinstance(w, str) for w in raw_words
    ):
        words = tuple(w for w in raw_words if w.strip())
    else:
        raise SignalValidationError("words must be a list of strings")

    # --- Response time ---
    response_time = _pick(payload, "response_time_seconds", "responseTimeSeconds")
    if response_time is not None:
        if isinstance(response_time, bool) or not isinstance(
            response_time, (int, float)
        ):
            raise SignalValidationError(
                f"response_time_seconds must be a number, "
                f"got {type(response_time).__name__}"
            )
        response_time = float(response_time)
        if not math.isfinite(response_time) or response_time < 0:
            raise SignalValidationError(
                f"response_time_seconds out of range: {response_time}"
            )

    # --- Acoustic features ---
    features = _pick(payload, "acoustic_features", "acousticFeatures") or {}
    if not isinstance(features, dict):
        raise SignalValidationError(
            f"acoustic_features must be a dict, got {type(features).__name__}"
        )

    pitch = _validate_series(
        "pitch_series", _pick(features, "pitch_series", "pitchSeries")
    )
    energy = _validate_series(
        "energy_series", _pick(features, "energy_series", "energySeries")
    )

    disfluency_count = _pick(features, "disfluency_count", "disfluencyCount")
    if disfluency_count is not None:
        if isinstance(disfluency_count, bool) or not isinstance(disfluency_count, int):
            raise SignalValidationError(
                f"disfluency_count must be an integer, "
                f"got {type(disfluency_count).__name__}"
            )
        if disfluency_count < 0:
            raise SignalValidationError(
                f"disfluency_count out of range: {disfluency_count}"
            )

    signal = ResponseSignal(
        transcript=transcript,
        words=words,
        response_time=response_time,
        pitch_series=pitch,
        energy_series=energy,
        disfluency_count=disfluency_count,
    )

    logger.debug("ResponseSignal built: %s", signal)
    return signal
