"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


face_login_attempts_total = Counter(
    "face_login_attempts_total",
    "Face login attempts grouped by outcome.",
    ["outcome"],
)

face_comparisons_total = Counter(
    "face_comparisons_total",
    "Pairwise descriptor comparisons grouped by result.",
    ["result"],
)

face_login_auto_enabled_total = Counter(
    "face_login_auto_enabled_total",
    "Accounts whose face login flag was switched on by a successful match.",
)

face_login_duration_seconds = Histogram(
    "face_login_duration_seconds",
    "Wall time of a full face login verification.",
)
