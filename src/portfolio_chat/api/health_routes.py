from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_settings
from .models import HealthResponse
from ..config import Settings
from ..knowledge.chunker import chunk_text
from ..knowledge.document import load_knowledge

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(settings: Annotated[Settings, Depends(get_settings)]) -> HealthResponse:
    chunks = chunk_text(
        load_knowledge(settings.knowledge_path),
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
    )
    return HealthResponse(provider=settings.llm_provider, chunks=len(chunks))
