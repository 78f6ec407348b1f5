"""Pydantic 스키마 정의 (카탈로그 엔티티 / 응답 envelope / 상품 폼)"""
import json
from typing import Optional, Any
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
)


class CatalogEntity(BaseModel):
    """카탈로그 엔티티 (카테고리 등)

    - 신규 포맷: {"id", "name", "displayName", "description"}
    - 레거시 포맷: MongoDB 스타일 {"_id", ...} 도 허용
    - 알 수 없는 필드(slug 등)는 그대로 보존
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., min_length=1, validation_alias=AliasChoices("id", "_id"), description="엔티티 ID")
    name: str = Field(..., min_length=1, description="이름")
    display_name: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("displayName", "display_name"),
        serialization_alias="displayName",
        description="표시용 이름",
    )
    description: Optional[str] = Field(None, description="설명")
    is_seed: bool = Field(False, exclude=True, description="seed 엔티티 여부 (저장하지 않음)")

    @field_validator("id", "name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @property
    def label(self) -> str:
        """UI 표시용 라벨"""
        return self.display_name or self.name

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CacheRecord(BaseModel):
    """영속 래퍼 {entity, updatedAt}

    저장 시에는 엔티티 필드 + updatedAt 으로 평탄화됩니다.
    """

    entity: CatalogEntity
    updated_at: str = Field(..., description="마지막 쓰기 시각 (ISO-8601)")

    def to_storage(self) -> dict[str, Any]:
        payload = self.entity.to_storage()
        payload["updatedAt"] = self.updated_at
        return payload

    @classmethod
    def from_storage(cls, data: Any) -> "CacheRecord":
        if not isinstance(data, dict):
            raise ValueError(f"cache record must be an object, got {type(data).__name__}")
        payload = dict(data)
        updated_at = payload.pop("updatedAt", None) or payload.pop("updated_at", None) or ""
        return cls(entity=CatalogEntity.model_validate(payload), updated_at=str(updated_at))


class ApiEnvelope(BaseModel):
    """백엔드 표준 응답 {success, data, message}

    success 는 반드시 JSON boolean 이어야 합니다 ("true" 문자열 등은 거부).
    """

    model_config = ConfigDict(extra="allow")

    success: StrictBool
    data: Any = None
    message: Optional[str] = None

    @field_validator("message", mode="before")
    @classmethod
    def stringify_message(cls, v: Any) -> Optional[str]:
        # success 외 필드는 형식을 강제하지 않음
        if v is None or isinstance(v, str):
            return v
        return json.dumps(v, ensure_ascii=False, default=str)


class Dimensions(BaseModel):
    """상품 치수"""
    length: Optional[float] = Field(None, description="길이")
    width: Optional[float] = Field(None, description="너비")
    height: Optional[float] = Field(None, description="높이")

    def values(self) -> list[Optional[float]]:
        return [self.length, self.width, self.height]

    def is_empty(self) -> bool:
        return all(v is None for v in self.values())


class ProductFormState(BaseModel):
    """관리자 상품 폼 상태 (검증 전 원본 입력)"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    description: str = ""
    price: Optional[float] = None
    stock: Optional[float] = None
    category: str = ""
    featured: bool = False
    material: Optional[str] = None
    color: Optional[str] = None
    dimensions: Optional[Dimensions] = None
    discount_price: Optional[float] = Field(None, validation_alias=AliasChoices("discountPrice", "discount_price"))
    replace_images: bool = Field(False, validation_alias=AliasChoices("replaceImages", "replace_images"))


class PersistedProduct(BaseModel):
    """백엔드에 저장된 상품 (응답 data)"""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    name: str = ""
    images: list[str] = Field(default_factory=list)

    @field_validator("images", mode="before")
    @classmethod
    def coerce_images(cls, v: Any) -> list[str]:
        if not v:
            return []
        result: list[str] = []
        for item in v:
            if isinstance(item, str):
                result.append(item)
            elif isinstance(item, dict):
                url = item.get("url") or item.get("secure_url") or item.get("path")
                if url:
                    result.append(str(url))
        return result
