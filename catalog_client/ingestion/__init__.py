"""File Ingestion - 파일 선택 검증 / 미리보기 / 업로드 후보 수명 관리"""

from .files import CandidateOrigin, RawFile, UploadCandidate, format_file_size
from .pipeline import IngestionPipeline, IngestResult
from .preview import PreviewRegistry
from .rules import IngestionConfig, Rejection, matches_accept, validate_file
from .session import UploadSession

__all__ = [
    "RawFile",
    "UploadCandidate",
    "CandidateOrigin",
    "format_file_size",
    "IngestionPipeline",
    "IngestResult",
    "PreviewRegistry",
    "IngestionConfig",
    "Rejection",
    "matches_accept",
    "validate_file",
    "UploadSession",
]
