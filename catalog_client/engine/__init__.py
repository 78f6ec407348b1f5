"""Engine Layer - Resilient Data Access

This module provides the resilient request layer, implementing:
- Operation / EndpointResolver: logical operation → ordered candidate URLs
- ResilientExecutor: sequential candidate execution with retry/backoff
- RetryPolicy: per-attempt timeout and retry budget value object
- ExecutionResult / RequestAttempt: standardized result format
- ExecutionStrategy: response classification
"""

from .endpoints import EndpointResolver, Operation, resolve
from .executor import ResilientExecutor
from .metrics import ExecutorMetrics
from .policy import RetryPolicy
from .request import FilePart, MultipartPayload, RequestSpec
from .result import AttemptOutcome, ExecutionResult, ExecutionStatus, RequestAttempt
from .strategy import Classification, ExecutionStrategy

__all__ = [
    "Operation",
    "EndpointResolver",
    "resolve",
    "ResilientExecutor",
    "ExecutorMetrics",
    "RetryPolicy",
    "RequestSpec",
    "MultipartPayload",
    "FilePart",
    "ExecutionResult",
    "ExecutionStatus",
    "RequestAttempt",
    "AttemptOutcome",
    "ExecutionStrategy",
    "Classification",
]
