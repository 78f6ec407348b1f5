"""공유 HTTP 클라이언트 (httpx)

- 요청마다 AsyncClient 를 만들면 TLS/커넥션 오버헤드가 커지므로
  프로세스 단위로 클라이언트를 재사용합니다.
- 전송 단계 실패(연결 불가/타임아웃)는 NetworkException 으로 변환합니다.
  HTTP 상태 코드 해석은 executor 의 몫입니다.
- 종료 시 close()로 정리합니다.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Dict

import httpx

from catalog_client.core.config import settings
from catalog_client.core.exceptions import NetworkException, NetworkTimeoutException
from catalog_client.core.logging import logger
from catalog_client.engine.request import RequestSpec


@dataclass
class HttpReply:
    """전송에 성공한 응답 (상태 코드와 무관)"""

    status_code: int
    text: str
    content_type: str = ""


class SharedHttpClient:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._lock = asyncio.Lock()
        self._client: Optional[httpx.AsyncClient] = None
        self._transport = transport

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is not None:
                return self._client
            self._client = httpx.AsyncClient(
                headers=self.default_headers(),
                follow_redirects=True,
                transport=self._transport,
                trust_env=False,
            )
            return self._client

    def default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": settings.http_user_agent,
            "Accept": "application/json, text/plain, */*",
        }

    async def send(
        self,
        method: str,
        url: str,
        *,
        timeout_s: float,
        spec: Optional[RequestSpec] = None,
    ) -> HttpReply:
        """요청 1회 전송

        Args:
            method: HTTP 메서드
            url: 대상 URL
            timeout_s: 시도당 전체 타임아웃 (초)
            spec: 요청 명세

        Returns:
            HttpReply: 상태 코드/본문

        Raises:
            NetworkTimeoutException: 타임아웃
            NetworkException: 연결 불가 등 전송 실패
        """
        client = await self._ensure_client()
        spec = spec or RequestSpec()

        kwargs: dict = {"headers": spec.build_headers(), "timeout": timeout_s}
        if spec.form is not None:
            files = spec.form.as_httpx_files()
            if files:
                kwargs["data"] = spec.form.as_httpx_data()
                kwargs["files"] = files
            else:
                # 파일 파트가 없으면 httpx 가 urlencoded 로 보내므로 필드를 filename 없는 파트로 전송
                kwargs["files"] = spec.form.as_httpx_field_parts()
        elif spec.json_body is not None:
            kwargs["json"] = spec.json_body

        try:
            # httpx timeout 은 단계별(connect/read) 값이므로 시도 전체를 한 번 더 감쌉니다.
            resp = await asyncio.wait_for(
                client.request(method.upper(), url, **kwargs),
                timeout=timeout_s,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.info(f"[HTTP_CLIENT] {method.upper()} timeout: {url} ({type(e).__name__})")
            raise NetworkTimeoutException(url, timeout_s) from e
        except httpx.HTTPError as e:
            logger.info(f"[HTTP_CLIENT] {method.upper()} failed: {url} {type(e).__name__}: {e!r}")
            raise NetworkException(url, f"{type(e).__name__}: {e}") from e

        return HttpReply(
            status_code=resp.status_code,
            text=resp.text or "",
            content_type=resp.headers.get("content-type", ""),
        )

    async def close(self) -> None:
        async with self._lock:
            if self._client is None:
                return
            try:
                await self._client.aclose()
            except Exception as e:
                logger.debug(f"[HTTP_CLIENT] close failed: {type(e).__name__}: {e}")
            self._client = None


_shared_http_client = SharedHttpClient()


def get_shared_http_client() -> SharedHttpClient:
    return _shared_http_client


async def shutdown_shared_http_client() -> None:
    await _shared_http_client.close()
