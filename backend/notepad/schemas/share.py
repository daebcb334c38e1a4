from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field

# Stored and returned with the camelCase names of the share index record
class ShareDescriptor(BaseModel):
    file_id: str = Field(..., alias="fileId")
    password: str = ""
    expire: Optional[int] = None # epoch ms, None = never expires
    max_visits: int = Field(0, alias="maxVisits", ge=0) # 0 = unlimited
    views: int = Field(0, ge=0)
    created: int # epoch ms

    class Config:
        populate_by_name = True

    def is_expired(self, now_ms: int) -> bool:
        return self.expire is not None and now_ms > self.expire

    def is_exhausted(self) -> bool:
        return self.max_visits > 0 and self.views >= self.max_visits

    def is_reachable(self, now_ms: int) -> bool:
        return not self.is_expired(now_ms) and not self.is_exhausted()

class ShareCreate(BaseModel):
    file_id: str = Field(..., alias="fileId", min_length=1)
    password: Optional[str] = ""
    expire: Optional[int] = Field(0, ge=0) # seconds from now, 0 = never
    max_visits: Optional[int] = Field(0, alias="maxVisits", ge=0)

    class Config:
        populate_by_name = True

class ShareCreated(BaseModel):
    success: bool = True
    token: str

class ShareInfo(ShareDescriptor):
    token: str

class ShareList(BaseModel):
    success: bool = True
    shares: List[ShareInfo]

class ShareBatchDelete(BaseModel):
    tokens: List[str]

class ResolveState(str, Enum):
    CONTENT = "content"
    NEEDS_PASSWORD = "needs_password"

class ShareResolution(BaseModel):
    state: ResolveState
    token: str
    file_id: str
    raw: bool = False
    content: Optional[str] = None
    # True when a password was submitted but did not match
    password_rejected: bool = False
