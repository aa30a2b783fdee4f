"""Log pipeline outcomes and keep per-outcome counters."""

import logging
from collections import Counter

from relay.pipeline.results import ErrorCode, PipelineResult

logger = logging.getLogger(__name__)


class ResultReporter:
    """Sink for pipeline results. Never raises and never touches the queue."""

    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()

    def report(self, result: PipelineResult) -> None:
        try:
            if result.ok:
                self.counts["success"] += 1
                logger.info("Pipeline succeeded: %s %s", result.identity_key, result.data)
                return
            self.counts[result.code.value] += 1
            level = logging.WARNING if result.code is ErrorCode.UNAUTHORIZED else logging.ERROR
            logger.log(
                level,
                "Pipeline failed: %s [%s] %s (retryable=%s)",
                result.identity_key,
                result.code.value,
                result.message,
                result.code.retryable,
            )
        except Exception as e:
            logger.exception("ResultReporter failed to report %r: %s", result, e)
