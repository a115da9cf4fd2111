from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class RevisionInfo(BaseModel):
    revision: str = Field(..., description="Tag or abbreviated SHA, '+' suffixed when modified")
    commit: Optional[str] = Field(default=None, description="Full SHA-1 of HEAD, if known")
    tag: Optional[str] = None
    dirty: bool = False
    source: Literal["git", "metadata"] = "git"
