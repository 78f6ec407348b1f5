"""테스트 자산(데이터) 레이어

규칙:
- 로직 없음 (단순 dict/list/primitive)
- 엔진/네트워크 의존 없음
"""

from .api_payloads import API_PAYLOADS
from .cache_cases import CACHE_CASES
from .products import PRODUCTS

__all__ = [
    "API_PAYLOADS",
    "CACHE_CASES",
    "PRODUCTS",
]
