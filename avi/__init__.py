# avi/__init__.py
# ================
# AVI Interview Engine
#
# Scores spoken answers of a structured loan-applicant interview for
# stress / deception risk, cross-validates answers against each other and
# recommends what to ask next.
#
# Packages:
#   - avi.catalog   - question reference data
#   - avi.analysis  - per-answer scoring
#   - avi.risk      - micro-local risk and pair consistency
#   - avi.session   - session aggregation, financial check, reports
#   - avi.api       - FastAPI surface
