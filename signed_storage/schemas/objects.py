from pydantic import BaseModel

from signed_storage.storage.base import Visibility


class ObjectResponseData(BaseModel):
    key: str
    visibility: Visibility


class URLResponseData(BaseModel):
    key: str
    url: str


class TemporaryURLResponseData(BaseModel):
    key: str
    url: str
    ttl_seconds: int
