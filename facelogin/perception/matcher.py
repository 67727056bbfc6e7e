"""Pairwise comparison of two face descriptors."""

from __future__ import annotations

import logging
import re

from facelogin.errors import PerceptionServiceError
from facelogin.metrics.prometheus_exporter import face_comparisons_total
from facelogin.perception.client import PerceptionClient
from facelogin.perception.prompts import build_comparison_prompt

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"\d+")


def parse_similarity(answer: str | None) -> int | None:
    """Return the first integer in ``answer`` clamped to [0, 100], or ``None``."""

    if not answer:
        return None
    match = _INTEGER.search(answer)
    if not match:
        return None
    return min(100, max(0, int(match.group(0))))


class PairwiseMatcher:
    """Scores two descriptors with the perception model, failing closed."""

    def __init__(self, client: PerceptionClient) -> None:
        self._client = client

    async def compare(self, submitted: str, stored: str) -> int:
        try:
            answer = await self._client.complete(build_comparison_prompt(submitted, stored))
        except PerceptionServiceError as exc:
            logger.warning("Comparison request failed, scoring candidate 0: %s", exc)
            face_comparisons_total.labels(result="failed").inc()
            return 0

        score = parse_similarity(answer)
        if score is None:
            logger.warning("No integer in comparison answer %r, scoring 0", answer[:40])
            face_comparisons_total.labels(result="unparsed").inc()
            return 0
        face_comparisons_total.labels(result="scored").inc()
        return score
