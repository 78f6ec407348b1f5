"""File Ingestion Pipeline - 파일 선택 → 검증된 업로드 후보

1. 파일별 검증 (크기 → 타입), 거부 사유는 파일마다 기록
2. 병합
   - multiple=False: 첫 번째 유효 파일이 기존 후보를 대체 (기존 미리보기 회수)
   - multiple=True: 기존 후보 뒤에 삽입 순서대로 추가, max_files 초과분은 잘라냄 (앞쪽 유지)
3. 제거되는 NEW 후보의 미리보기 핸들은 버리기 전에 동기적으로 회수
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from catalog_client.core.logging import logger

from .files import CandidateOrigin, RawFile, UploadCandidate
from .preview import PreviewRegistry
from .rules import REASON_LIMIT, IngestionConfig, Rejection, validate_file


@dataclass
class IngestResult:
    """ingest() 결과

    Attributes:
        accepted: 병합 후 활성 후보 집합 (삽입 순서)
        rejected: 거부된 파일 목록 (파일별)
        added: 이번 선택으로 새로 만들어진 후보
    """

    accepted: list[UploadCandidate] = field(default_factory=list)
    rejected: list[Rejection] = field(default_factory=list)
    added: list[UploadCandidate] = field(default_factory=list)

    @property
    def has_rejections(self) -> bool:
        return bool(self.rejected)


class IngestionPipeline:
    """파일 수집 파이프라인

    Usage:
        pipeline = IngestionPipeline(PreviewRegistry())
        result = pipeline.ingest(selection, current, IngestionConfig())
        current = result.accepted
    """

    def __init__(self, previews: Optional[PreviewRegistry] = None):
        self.previews = previews or PreviewRegistry()

    def ingest(
        self,
        raw_selection: Iterable[RawFile],
        current: Sequence[UploadCandidate],
        config: IngestionConfig,
    ) -> IngestResult:
        """파일 선택 처리

        기존 후보(특히 EXISTING)는 다시 검증하지 않습니다.

        Args:
            raw_selection: 새로 선택된 파일
            current: 현재 활성 후보
            config: 검증/병합 설정

        Returns:
            IngestResult: 병합된 후보 집합과 파일별 거부 목록
        """
        valid: list[RawFile] = []
        rejected: list[Rejection] = []
        for raw in raw_selection:
            rejection = validate_file(raw, config)
            if rejection is not None:
                rejected.append(rejection)
                logger.info(f"[INGEST] rejected {raw.name}: {rejection.reason}")
                continue
            valid.append(raw)

        next_index = max((c.sequence_index for c in current), default=-1) + 1

        if not config.multiple:
            return self._replace_single(valid, list(current), rejected, next_index)

        kept = self._truncate(list(current), config.max_files)
        slots = config.max_files - len(kept)

        added: list[UploadCandidate] = []
        for raw in valid:
            if len(added) >= slots:
                rejected.append(
                    Rejection(
                        name=raw.name,
                        reason=REASON_LIMIT,
                        message=f"You can only upload a maximum of {config.max_files} files.",
                    )
                )
                continue
            added.append(self._new_candidate(raw, next_index))
            next_index += 1

        if added or rejected:
            logger.info(
                f"[INGEST] added={len(added)} rejected={len(rejected)} "
                f"total={len(kept) + len(added)}/{config.max_files}"
            )
        return IngestResult(accepted=kept + added, rejected=rejected, added=added)

    def remove(self, candidates: Sequence[UploadCandidate], index: int) -> list[UploadCandidate]:
        """index 위치 후보 제거 (해당 후보의 미리보기만 회수)

        Raises:
            IndexError: index 범위 밖
        """
        if index < 0 or index >= len(candidates):
            raise IndexError(f"candidate index out of range: {index}")
        remaining = list(candidates)
        removed = remaining.pop(index)
        self.release(removed)
        return remaining

    def release(self, candidate: UploadCandidate) -> None:
        """후보 하나의 미리보기 회수 (EXISTING 은 no-op)"""
        if candidate.origin == CandidateOrigin.NEW:
            self.previews.revoke(candidate.preview_handle)

    def release_all(self, candidates: Iterable[UploadCandidate]) -> None:
        for candidate in candidates:
            self.release(candidate)

    def _new_candidate(self, raw: RawFile, sequence_index: int) -> UploadCandidate:
        return UploadCandidate(
            source_ref=raw,
            name=raw.name,
            size_bytes=raw.size_bytes,
            mime_type=raw.mime_type,
            origin=CandidateOrigin.NEW,
            sequence_index=sequence_index,
            preview_handle=self.previews.create(raw),
        )

    def _replace_single(
        self,
        valid: list[RawFile],
        current: list[UploadCandidate],
        rejected: list[Rejection],
        next_index: int,
    ) -> IngestResult:
        if not valid:
            return IngestResult(accepted=current, rejected=rejected)

        self.release_all(current)
        candidate = self._new_candidate(valid[0], next_index)
        if len(valid) > 1:
            logger.debug(f"[INGEST] single mode: ignored {len(valid) - 1} extra file(s)")
        return IngestResult(accepted=[candidate], rejected=rejected, added=[candidate])

    def _truncate(self, candidates: list[UploadCandidate], max_files: int) -> list[UploadCandidate]:
        if len(candidates) <= max_files:
            return candidates
        kept, dropped = candidates[:max_files], candidates[max_files:]
        self.release_all(dropped)
        logger.info(f"[INGEST] truncated {len(dropped)} candidate(s) past max_files={max_files}")
        return kept
