from typing import List, Optional

from pydantic import BaseModel, Field


class ResolveImageRequest(BaseModel):
    url: str = ""
    base_origin: Optional[str] = None


class ResolveImagesRequest(BaseModel):
    urls: List[str] = Field(default_factory=list, max_length=50)
    base_origin: Optional[str] = None


class InlineImageRequest(BaseModel):
    url: str
