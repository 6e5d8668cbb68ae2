"""
Sequential batch runner.
Drives many independent fetch-and-parse operations with per-target retries,
pacing between targets and progress reporting.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_fixed

from .exceptions import ConfigurationError, UnsupportedPageKind
from .models import (
    BatchOutcome,
    PageResult,
    ProgressComplete,
    ProgressError,
    ProgressEvent,
    ProgressRetry,
    ProgressStart,
    ProgressSuccess,
)

# Retrying these cannot change the answer
NON_RETRYABLE_ERRORS = (UnsupportedPageKind, ConfigurationError)

_EVENT_LOG_LEVELS = {
    'start': logging.INFO,
    'success': logging.INFO,
    'retry': logging.WARNING,
    'error': logging.ERROR,
    'complete': logging.INFO,
}


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, Exception) and not isinstance(error, NON_RETRYABLE_ERRORS)


@dataclass
class BatchOptions:
    """Knobs for one batch run."""
    timeout: Optional[float] = None
    delay: float = 1.0
    retry_count: int = 2
    retry_cooldown: float = 2.0
    show_progress: bool = True
    on_progress: Optional[Callable[[ProgressEvent], Any]] = None

    @classmethod
    def from_config(cls, politeness_config: Dict, batch_config: Dict, **overrides) -> 'BatchOptions':
        """Build options from the politeness/batch config sections, then apply overrides."""
        options = cls(
            timeout=politeness_config.get('timeout'),
            delay=politeness_config.get('request_delay', 1.0),
            retry_count=politeness_config.get('retry_count', 2),
            retry_cooldown=politeness_config.get('retry_cooldown', 2.0),
            show_progress=batch_config.get('show_progress', True),
        )
        for key, value in overrides.items():
            if not hasattr(options, key):
                raise ConfigurationError(f"Unknown batch option: {key}")
            setattr(options, key, value)
        return options


class BatchOrchestrator:
    """
    Runs one operation per target, strictly in order.

    Each target gets its own retry loop; a target that keeps failing becomes
    a failure outcome and the batch moves on, so one bad target never aborts
    the rest.
    """

    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

    def run(self, targets: Iterable[str], operation: Callable[[str], PageResult],
            options: Optional[BatchOptions] = None) -> List[BatchOutcome]:
        """
        Run `operation` for every target.

        Args:
            targets: Target identifiers (usernames, URLs, ...)
            operation: Callable producing a result for one target; raising means failure
            options: Retry, pacing and progress settings

        Returns:
            One BatchOutcome per target, in target order
        """
        options = options or BatchOptions()
        targets = list(targets)
        total = len(targets)

        if options.show_progress:
            self.logger.info(f"Starting batch of {total} target(s)")

        outcomes = []
        for index, target in enumerate(targets, start=1):
            outcomes.append(self._run_target(index, total, target, operation, options))
            if index < total and options.delay > 0:
                self.sleep(options.delay)

        success_count = sum(1 for outcome in outcomes if outcome.success)
        failure_count = total - success_count
        success_rate = round(success_count / total * 100, 2) if total else 0.0
        self._emit(options, ProgressComplete(
            current_index=total,
            total=total,
            target=None,
            message=(
                f"Batch complete: {success_count} succeeded, {failure_count} failed, "
                f"success rate {success_rate:.2f}%"
            ),
            success_count=success_count,
            failure_count=failure_count,
            success_rate=success_rate,
        ))
        return outcomes

    def _run_target(self, index: int, total: int, target: str,
                    operation: Callable[[str], PageResult], options: BatchOptions) -> BatchOutcome:
        self._emit(options, ProgressStart(
            current_index=index, total=total, target=target,
            message=f"[{index}/{total}] Processing {target}",
        ))

        def before_sleep(retry_state):
            error = retry_state.outcome.exception()
            attempt = retry_state.attempt_number
            self._emit(options, ProgressRetry(
                current_index=index, total=total, target=target,
                message=f"[{index}/{total}] {target} failed ({error}), retry {attempt} of {options.retry_count}",
                attempt=attempt,
                error=str(error),
            ))

        retrying = Retrying(
            stop=stop_after_attempt(options.retry_count + 1),
            wait=wait_fixed(options.retry_cooldown),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep,
            sleep=self.sleep,
            reraise=True,
        )

        attempts = 0
        try:
            for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    result = operation(target)
        except Exception as e:
            self._emit(options, ProgressError(
                current_index=index, total=total, target=target,
                message=f"[{index}/{total}] {target} failed after {attempts} attempt(s): {e}",
                error=str(e),
                retry_attempts=attempts,
            ))
            return BatchOutcome.failed(target, e, attempts)

        outcome = BatchOutcome.succeeded(target, result, attempts - 1)
        self._emit(options, ProgressSuccess(
            current_index=index, total=total, target=target,
            message=f"[{index}/{total}] {target} parsed successfully",
            result=result,
        ))
        return outcome

    def _emit(self, options: BatchOptions, event: ProgressEvent):
        """Log the event and hand it to the progress callback, if any."""
        level = _EVENT_LOG_LEVELS[event.status] if options.show_progress else logging.DEBUG
        self.logger.log(level, event.message)

        if options.on_progress is None:
            return
        try:
            options.on_progress(event)
        except Exception as e:
            self.logger.warning(f"Progress callback raised on '{event.status}' event: {e}")
