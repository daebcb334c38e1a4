from pydantic import BaseModel, Field

class AdminConfig(BaseModel):
    username: str
    password: str
    created_at: int = Field(..., alias="createdAt")

    class Config:
        populate_by_name = True

class SetupRequest(BaseModel):
    username: str = ""
    password: str = ""

class LoginRequest(BaseModel):
    username: str
    password: str
