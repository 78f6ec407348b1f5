"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Fake 주입 (HTTP 전송, backoff 대기, 저장소)
- 전역 상태 초기화

금지:
- 실제 네트워크 호출
- 실제 backoff 대기
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import pytest

# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "INFO")

from catalog_client.core.exceptions import CacheConnectionException, NetworkException  # noqa: E402
from catalog_client.engine.endpoints import EndpointResolver  # noqa: E402
from catalog_client.engine.executor import ResilientExecutor  # noqa: E402
from catalog_client.engine.policy import RetryPolicy  # noqa: E402
from catalog_client.transport.http_client import HttpReply  # noqa: E402

BASE_ORIGIN = "http://shop.test"
FALLBACK_ORIGIN = "https://backup.test"


def reply(status_code: int = 200, body: Union[dict, list, str, None] = None) -> HttpReply:
    """HttpReply 생성 (dict/list 는 JSON 직렬화)"""
    if body is None:
        text = ""
    elif isinstance(body, str):
        text = body
    else:
        text = json.dumps(body)
    return HttpReply(status_code=status_code, text=text, content_type="application/json")


@dataclass
class FakeHttp:
    """URL 별 응답 시나리오를 재생하는 전송 Fake

    - routes[url]: HttpReply 또는 Exception 의 목록. 앞에서부터 소비하고 마지막 항목은 계속 반복
    - 등록되지 않은 URL 은 NetworkException (연결 불가)
    """

    routes: dict[str, list[Any]] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    specs: list[Any] = field(default_factory=list)
    timeouts: list[float] = field(default_factory=list)

    def on(self, url: str, *responses: Any) -> "FakeHttp":
        self.routes[url] = list(responses)
        return self

    async def send(self, method: str, url: str, *, timeout_s: float, spec=None) -> HttpReply:
        self.calls.append((method, url))
        self.specs.append(spec)
        self.timeouts.append(timeout_s)

        queue = self.routes.get(url)
        if not queue:
            raise NetworkException(url, "ConnectError: connection refused")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    def urls_called(self) -> list[str]:
        return [url for _, url in self.calls]

    async def close(self) -> None:
        return None


@dataclass
class RecordingSleep:
    """backoff 대기 기록 (실제로 잠들지 않음)"""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class BrokenStorage:
    """항상 접근 불가인 저장소"""

    def __init__(self):
        self.write_calls = 0

    def read(self, key: str) -> Optional[str]:
        raise CacheConnectionException("storage unavailable")

    def write(self, key: str, value: str) -> None:
        self.write_calls += 1
        raise CacheConnectionException("storage unavailable")


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


@pytest.fixture
def fake_http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def resolver() -> EndpointResolver:
    return EndpointResolver(BASE_ORIGIN, FALLBACK_ORIGIN, "/api")


@pytest.fixture
def retry_policy() -> RetryPolicy:
    return RetryPolicy(timeout_s=2.0, max_attempts=3, backoff_s=0.5)


@pytest.fixture
def executor(fake_http, recording_sleep, resolver, retry_policy) -> ResilientExecutor:
    return ResilientExecutor(fake_http, policy=retry_policy, resolver=resolver, sleep=recording_sleep)


@pytest.fixture
def broken_storage() -> BrokenStorage:
    return BrokenStorage()
