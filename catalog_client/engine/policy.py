"""Retry Policy - 후보별 재시도/타임아웃 값 객체

정책 구조:
- 시도당 타임아웃: 10초
- 후보당 최대 시도: 3회 (전송 실패/타임아웃일 때만 같은 후보 재시도)
- 대기: 선형 증가 (n번째 실패 후 n * backoff_s)
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """재시도 정책 (불변)"""

    timeout_s: float = 10.0  # 시도당 타임아웃 (초)
    max_attempts: int = 3  # 후보당 최대 시도 횟수
    backoff_s: float = 0.5  # 선형 backoff 단위 (초)

    def __post_init__(self):
        """설정 검증"""
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive (got {self.timeout_s})")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1 (got {self.max_attempts})")
        if self.backoff_s < 0:
            raise ValueError(f"backoff_s must be >= 0 (got {self.backoff_s})")

    def delay_for(self, attempt_no: int) -> float:
        """attempt_no 번째 시도 실패 후 다음 시도까지의 대기 시간 (초)

        Args:
            attempt_no: 1부터 시작하는 시도 번호

        Returns:
            float: 대기 시간. 마지막 시도 이후에는 0.0 (다음 후보로 즉시 이동)
        """
        if attempt_no < 1:
            raise ValueError(f"attempt_no must be >= 1 (got {attempt_no})")
        if attempt_no >= self.max_attempts:
            return 0.0
        return self.backoff_s * attempt_no

    def max_total_attempts(self, candidate_count: int) -> int:
        """후보 N개에 대해 발생 가능한 최대 시도 수 (N x R)"""
        return max(0, candidate_count) * self.max_attempts

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            timeout_s=settings.request_timeout_s,
            max_attempts=settings.retry_max_attempts,
            backoff_s=settings.retry_backoff_s,
        )
