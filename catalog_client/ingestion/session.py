"""Upload Session - 폼 하나가 소유하는 업로드 후보 집합

폼이 열려 있는 동안 후보의 수명을 관리하고, 닫힐 때(close) 남은 미리보기를 모두 회수합니다.
"""

from __future__ import annotations

from typing import Iterable, Optional

from catalog_client.core.logging import logger

from .files import CandidateOrigin, RawFile, UploadCandidate
from .pipeline import IngestionPipeline, IngestResult
from .preview import PreviewRegistry
from .rules import IngestionConfig


class UploadSession:
    """폼 단위 업로드 후보 관리

    Usage:
        with UploadSession(IngestionConfig(), existing=product.images) as uploads:
            uploads.add([RawFile.from_path("chair.png")])
            uploads.remove(0)
    """

    def __init__(
        self,
        config: Optional[IngestionConfig] = None,
        pipeline: Optional[IngestionPipeline] = None,
        existing: Optional[Iterable[str]] = None,
    ):
        self.config = config or IngestionConfig()
        self.pipeline = pipeline or IngestionPipeline(PreviewRegistry())
        self._candidates: list[UploadCandidate] = []
        self._closed = False
        if existing:
            self.set_existing(existing)

    @property
    def candidates(self) -> list[UploadCandidate]:
        return list(self._candidates)

    @property
    def previews(self) -> PreviewRegistry:
        return self.pipeline.previews

    @property
    def closed(self) -> bool:
        return self._closed

    def set_existing(self, references: Iterable[str]) -> None:
        """저장된 이미지 참조로 후보 집합 초기화 (수정 폼 진입 시)"""
        self._ensure_open()
        self.pipeline.release_all(self._candidates)
        self._candidates = [
            UploadCandidate.existing(ref, index) for index, ref in enumerate(references) if ref
        ]

    def add(self, raw_selection: Iterable[RawFile]) -> IngestResult:
        self._ensure_open()
        result = self.pipeline.ingest(raw_selection, self._candidates, self.config)
        self._candidates = result.accepted
        return result

    def remove(self, index: int) -> UploadCandidate:
        self._ensure_open()
        removed = self._candidates[index] if 0 <= index < len(self._candidates) else None
        self._candidates = self.pipeline.remove(self._candidates, index)
        return removed

    def clear(self) -> None:
        self.pipeline.release_all(self._candidates)
        self._candidates = []

    def promote_uploaded(self, references: list[str]) -> None:
        """업로드가 끝난 NEW 후보를 저장 참조(EXISTING)로 교체

        references 는 NEW 후보의 sequence_index 순서와 1:1 로 대응해야 합니다.
        교체된 후보의 미리보기는 즉시 회수합니다.

        Raises:
            ValueError: 참조 개수가 NEW 후보 개수와 다른 경우
        """
        self._ensure_open()
        uploaded = sorted(self.new_candidates(), key=lambda c: c.sequence_index)
        if len(references) != len(uploaded):
            raise ValueError(
                f"expected {len(uploaded)} reference(s) for new candidates, got {len(references)}"
            )
        replacements = {
            id(candidate): UploadCandidate.existing(ref, candidate.sequence_index)
            for candidate, ref in zip(uploaded, references)
        }
        self.pipeline.release_all(uploaded)
        self._candidates = [replacements.get(id(c), c) for c in self._candidates]
        logger.info(f"[INGEST] promoted {len(uploaded)} uploaded candidate(s) to stored references")

    def new_candidates(self) -> list[UploadCandidate]:
        return [c for c in self._candidates if c.origin == CandidateOrigin.NEW]

    def existing_references(self) -> list[str]:
        return [str(c.source_ref) for c in self._candidates if c.origin == CandidateOrigin.EXISTING]

    def close(self) -> None:
        """폼 해제 - 남은 미리보기 회수 (동기, 여러 번 호출해도 안전)"""
        if self._closed:
            return
        count = len(self.new_candidates())
        self.clear()
        self._closed = True
        if count:
            logger.debug(f"[INGEST] session closed, released {count} preview(s)")

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("UploadSession is closed")

    def __enter__(self) -> "UploadSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._candidates)
