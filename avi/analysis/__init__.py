# avi/analysis/__init__.py
# =========================
# Response Analyzer - AVI Interview Engine
#
# Responsibility:
#   - Validate the raw answer payload from the transcription layer
#   - Score one answer into a VoiceAnalysisResult (metrics, stress
#     indicators, truth keywords, voice score, risk flags)
#
# Public API:
#   - build_response_signal() - validate and bundle the raw payload
#   - analyze_response()      - deterministic per-answer scoring
#   - decide_response()       - GO / REVIEW / NO-GO from score and flags

from avi.analysis.signals import (  # noqa: F401
    ResponseSignal,
    SignalValidationError,
    build_response_signal,
)
from avi.analysis.simulation import FixedNoise, NoiseSource, SeededNoise  # noqa: F401
from avi.analysis.analyzer import (  # noqa: F401
    AnalysisMetrics,
    VoiceAnalysisResult,
    analyze_response,
    decide_response,
)
