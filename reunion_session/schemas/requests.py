from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=200, description="Account username")
    password: str = Field(..., min_length=1, max_length=500, description="Account password")
