from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CacheNamespaceRequest(BaseModel):
    namespace: str = Field(min_length=1)

    model_config = ConfigDict(json_schema_extra={'example': {'namespace': 'api_cache:trips'}})


class CacheBumpResponse(BaseModel):
    namespace: str
    new_version: int


class CacheResetResponse(BaseModel):
    namespace: str
    version: int = 0


class QueryCountRequest(BaseModel):
    action: Literal['reset']


class QueryCountResponse(BaseModel):
    count: int
