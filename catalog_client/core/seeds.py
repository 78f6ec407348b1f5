"""기본(seed) 카테고리 테이블

저장소 상태와 무관하게 항상 노출되는 고정 카테고리입니다.
ID는 운영 백엔드에 이미 존재하는 값과 동일하게 유지해야 합니다.
"""

from __future__ import annotations

from typing import Any

SEED_CATEGORIES: tuple[dict[str, Any], ...] = (
    {
        "id": "680c9481ab11e96a288ef6d9",
        "name": "sofa-beds",
        "displayName": "Sofa Beds",
        "description": "Convertible sofas that can be used as beds",
    },
    {
        "id": "680c9484ab11e96a288ef6da",
        "name": "tables",
        "displayName": "Tables",
        "description": "Dining tables, coffee tables, side tables and more",
    },
    {
        "id": "680c9486ab11e96a288ef6db",
        "name": "chairs",
        "displayName": "Chairs",
        "description": "Dining chairs, armchairs, recliners and more",
    },
    {
        "id": "680c9489ab11e96a288ef6dc",
        "name": "wardrobes",
        "displayName": "Wardrobes",
        "description": "Storage solutions for bedrooms",
    },
    {
        "id": "680c948eab11e96a288ef6dd",
        "name": "beds",
        "displayName": "Beds",
        "description": "Single beds, double beds, king size beds and more",
    },
)

SEED_IDS: frozenset[str] = frozenset(seed["id"] for seed in SEED_CATEGORIES)


def is_seed_id(entity_id: str) -> bool:
    return entity_id in SEED_IDS
