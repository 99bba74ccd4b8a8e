from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class SnippetLabelPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    snippet: str

class Completion(BaseModel):
    raw: str
    content: Optional[str] = None

class DocumentResult(BaseModel):
    path: str
    chunks: int = Field(..., ge=0)
    pairs: List[SnippetLabelPair]
    failed_chunks: List[int] = Field(default_factory=list)
