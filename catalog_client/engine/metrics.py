"""Executor Metrics - 시도/결과 카운터 (진단용)"""

from __future__ import annotations

from dataclasses import dataclass, field

from .result import AttemptOutcome


@dataclass
class ExecutorMetrics:
    """Resilient Executor 메트릭 추적.

    후보 순서를 바꾸는 데 쓰지 않습니다 (순서는 항상 고정).
    """

    attempts: dict[str, int] = field(
        default_factory=lambda: {outcome.value: 0 for outcome in AttemptOutcome}
    )
    successes: int = 0
    exhaustions: int = 0
    auth_aborts: int = 0

    def record_attempt(self, outcome: AttemptOutcome) -> None:
        self.attempts[outcome.value] = self.attempts.get(outcome.value, 0) + 1

    def record_success(self) -> None:
        self.successes += 1

    def record_exhausted(self) -> None:
        self.exhaustions += 1

    def record_auth_abort(self) -> None:
        self.auth_aborts += 1

    @property
    def total_attempts(self) -> int:
        return sum(self.attempts.values())

    @property
    def total_calls(self) -> int:
        return self.successes + self.exhaustions + self.auth_aborts

    @property
    def success_rate(self) -> float:
        """executor 호출 성공률 (0.0~1.0)."""
        total = self.total_calls
        return self.successes / total if total > 0 else 0.0

    def snapshot(self) -> dict:
        return {
            "attempts": dict(self.attempts),
            "successes": self.successes,
            "exhaustions": self.exhaustions,
            "auth_aborts": self.auth_aborts,
            "success_rate": round(self.success_rate, 4),
        }

    def __repr__(self) -> str:
        return (
            f"ExecutorMetrics(calls={self.total_calls}, ok={self.successes}, "
            f"exhausted={self.exhaustions}, auth={self.auth_aborts}, "
            f"attempts={self.total_attempts}, rate={self.success_rate:.1%})"
        )
