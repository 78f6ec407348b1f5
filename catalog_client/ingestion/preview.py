"""미리보기 핸들 레지스트리

업로드 전 파일을 화면에 그리기 위한 취소 가능한 로컬 참조를 발급/회수합니다.
revoke 는 동기 함수입니다 (I/O 없음, await 없음) - 폼 해제 시점에도 안전하게 호출 가능.
"""

from __future__ import annotations

import itertools
import uuid
from typing import Callable, Optional

from catalog_client.core.logging import logger

from .files import RawFile

PREVIEW_SCHEME = "preview"


class PreviewRegistry:
    """살아 있는 미리보기 핸들 추적

    Attributes:
        created_count: 발급 횟수
        revoked_count: 회수 횟수
    """

    def __init__(self, on_revoke: Optional[Callable[[str], None]] = None):
        self._live: dict[str, RawFile] = {}
        self._counter = itertools.count(1)
        self._namespace = uuid.uuid4().hex[:8]
        self._on_revoke = on_revoke
        self.created_count = 0
        self.revoked_count = 0

    def create(self, raw: RawFile) -> str:
        handle = f"{PREVIEW_SCHEME}:{self._namespace}/{next(self._counter)}"
        self._live[handle] = raw
        self.created_count += 1
        return handle

    def revoke(self, handle: Optional[str]) -> bool:
        """핸들 회수 (이미 회수됐거나 None 이면 False)"""
        if handle is None or handle not in self._live:
            return False
        del self._live[handle]
        self.revoked_count += 1
        if self._on_revoke is not None:
            self._on_revoke(handle)
        return True

    def revoke_all(self) -> int:
        handles = list(self._live)
        for handle in handles:
            self.revoke(handle)
        if handles:
            logger.debug(f"[INGEST] revoked {len(handles)} preview handle(s)")
        return len(handles)

    def is_live(self, handle: Optional[str]) -> bool:
        return handle is not None and handle in self._live

    def lookup(self, handle: str) -> Optional[RawFile]:
        return self._live.get(handle)

    @property
    def live_count(self) -> int:
        return len(self._live)
