"""Resilient Executor - 후보 엔드포인트 순차 실행기

하나의 논리 연산을 후보 URL 목록에 대해 **순차적으로** 실행합니다.

규칙:
1. 시도당 타임아웃은 RetryPolicy.timeout_s
2. 타임아웃/전송 실패 → 같은 후보를 max_attempts 까지 재시도 (선형 backoff)
3. 401/403 → 루프 전체 즉시 중단 (AuthError)
4. 2xx 라도 {"success": true} envelope 가 아니면 실패로 보고 다음 후보로
5. 첫 번째 유효한 success envelope 에서 즉시 반환

후보를 병렬로 시도하지 않습니다. 앞선 후보가 서버 측에서 조용히 성공했을 수 있으므로
비멱등 쓰기(상품 생성 등)가 중복 실행되는 것을 막기 위함입니다.
캐시 저장소는 건드리지 않습니다 (호출자의 책임).
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional, Sequence

from catalog_client.core.exceptions import (
    AuthException,
    NetworkException,
    RequestException,
    ServerException,
)
from catalog_client.core.logging import logger, sanitize_for_log

from .endpoints import EndpointResolver, Operation
from .metrics import ExecutorMetrics
from .policy import RetryPolicy
from .request import RequestSpec
from .result import AttemptOutcome, ExecutionResult, RequestAttempt
from .strategy import ExecutionStrategy

SleepFunc = Callable[[float], Awaitable[None]]


class ResilientExecutor:
    """후보 엔드포인트 실행기

    Usage:
        executor = ResilientExecutor(http_client, policy=RetryPolicy())
        result = await executor.execute(Operation.list_categories(), candidates)
        if result.is_success:
            categories = result.data
    """

    def __init__(
        self,
        http_client,
        policy: Optional[RetryPolicy] = None,
        resolver: Optional[EndpointResolver] = None,
        metrics: Optional[ExecutorMetrics] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Args:
            http_client: 전송 클라이언트 (async send(method, url, timeout_s=, spec=) 구현)
            policy: 재시도 정책 (기본값: 10초 / 3회 / 0.5초)
            resolver: 후보 목록을 생략한 호출에 사용할 resolver
            metrics: 메트릭 수집기
            sleep: backoff 대기 함수 (테스트에서 주입)
        """
        if http_client is None:
            raise ValueError("http_client must not be None")

        self.http = http_client
        self.policy = policy or RetryPolicy()
        self.resolver = resolver
        self.metrics = metrics or ExecutorMetrics()
        self.strategy = ExecutionStrategy()
        self._sleep = sleep or asyncio.sleep

    async def run(self, operation: Operation, spec: Optional[RequestSpec] = None) -> ExecutionResult:
        """resolver 로 후보를 만든 뒤 execute()"""
        if self.resolver is None:
            raise ValueError("run() requires an EndpointResolver")
        return await self.execute(operation, self.resolver.resolve(operation), spec)

    async def execute(
        self,
        operation: Operation,
        candidates: Sequence[str],
        spec: Optional[RequestSpec] = None,
    ) -> ExecutionResult:
        """후보 목록 순차 실행

        Args:
            operation: 논리 연산
            candidates: 우선순위 순서의 후보 URL
            spec: 요청 명세 (모든 후보/재시도에 동일하게 사용)

        Returns:
            ExecutionResult: SUCCESS | AUTH_ERROR | EXHAUSTED

        Raises:
            ValueError: 후보 목록이 비어 있거나, 본문이 필요한 연산(POST/PUT/PATCH)에 본문이 없는 경우
        """
        if not candidates:
            raise ValueError(f"No candidate endpoints for '{operation.name}'")
        if operation.requires_body and (spec is None or not spec.has_body):
            raise ValueError(f"'{operation.name}' ({operation.method}) requires a request body")

        spec = spec or RequestSpec()
        attempts: list[RequestAttempt] = []

        logger.info(
            f"[EXECUTOR] {operation.name} start: {operation.method} "
            f"candidates={len(candidates)} max_attempts={self.policy.max_attempts}"
        )

        for index, endpoint in enumerate(candidates, start=1):
            for attempt_no in range(1, self.policy.max_attempts + 1):
                attempt, envelope, status_code = await self._attempt(operation, endpoint, attempt_no, spec)
                attempts.append(attempt)
                self.metrics.record_attempt(attempt.outcome)

                if attempt.outcome == AttemptOutcome.SUCCESS:
                    self.metrics.record_success()
                    logger.info(
                        f"[EXECUTOR] {operation.name} success: candidate {index}/{len(candidates)} "
                        f"{endpoint} (attempts={len(attempts)})"
                    )
                    return ExecutionResult.success(
                        operation.name, envelope or {}, endpoint, status_code or 200, attempts
                    )

                if self.strategy.should_abort(attempt.outcome):
                    self.metrics.record_auth_abort()
                    logger.warning(
                        f"[EXECUTOR] {operation.name} auth rejected ({status_code}) by {endpoint}; "
                        f"skipping {len(candidates) - index} remaining candidate(s)"
                    )
                    return ExecutionResult.auth_error(operation.name, attempt.error, attempts)

                if not self.strategy.should_retry_same_candidate(attempt.outcome):
                    logger.info(
                        f"[EXECUTOR] {operation.name} candidate {index} rejected: "
                        f"{sanitize_for_log(attempt.message)} → next candidate"
                    )
                    break

                delay = self.policy.delay_for(attempt_no)
                if delay > 0:
                    logger.debug(
                        f"[EXECUTOR] {operation.name} retry {endpoint} in {delay:.2f}s "
                        f"(attempt {attempt_no}/{self.policy.max_attempts})"
                    )
                    await self._sleep(delay)

        self.metrics.record_exhausted()
        logger.warning(
            f"[EXECUTOR] {operation.name} exhausted: {len(candidates)} candidate(s), "
            f"{len(attempts)} attempt(s)"
        )
        return ExecutionResult.exhausted(operation.name, attempts)

    async def _attempt(
        self,
        operation: Operation,
        endpoint: str,
        attempt_no: int,
        spec: RequestSpec,
    ) -> tuple[RequestAttempt, Optional[dict], Optional[int]]:
        started_at = time.time()
        started = time.perf_counter()

        try:
            reply = await self.http.send(
                operation.method, endpoint, timeout_s=self.policy.timeout_s, spec=spec
            )
        except NetworkException as e:
            return (
                RequestAttempt(
                    endpoint=endpoint,
                    started_at=started_at,
                    outcome=AttemptOutcome.NETWORK_ERROR,
                    attempt_no=attempt_no,
                    message=e.message,
                    elapsed_ms=(time.perf_counter() - started) * 1000,
                    error=e,
                ),
                None,
                None,
            )

        classification = self.strategy.classify_response(reply.status_code, reply.text)
        error: Optional[RequestException] = None
        if classification.outcome == AttemptOutcome.AUTH_ERROR:
            error = AuthException(reply.status_code, endpoint)
        elif classification.outcome == AttemptOutcome.SERVER_ERROR:
            error = ServerException(reply.status_code, classification.message or "", endpoint)

        attempt = RequestAttempt(
            endpoint=endpoint,
            started_at=started_at,
            outcome=classification.outcome,
            attempt_no=attempt_no,
            status_code=reply.status_code,
            message=classification.message,
            elapsed_ms=(time.perf_counter() - started) * 1000,
            error=error,
        )
        return attempt, classification.envelope, reply.status_code
