from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from paradox_core import (
    EmotionalVector,
    ParadoxInput,
    PostSelection,
    ResolutionStrategy,
    TargetSync,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmotionIn(CamelModel):
    # out-of-range and non-finite values are sanitized by the scorer, not rejected
    valence: float = 0.0
    arousal: float = 0.5
    dominance: float = 0.5
    entropy: float = 0.5


class PostIn(CamelModel):
    target_coherence: Optional[float] = None
    target_sync: Optional[TargetSync] = None
    descriptor: Optional[str] = None


class ParadoxRunReq(CamelModel):
    session_id: str
    thesis: str
    antithesis: str
    emotion: Optional[EmotionIn] = None
    post: Optional[PostIn] = None
    metadata: Optional[Dict[str, Any]] = None
    strategy: Optional[ResolutionStrategy] = None

    def to_input(self) -> ParadoxInput:
        return ParadoxInput(
            session_id=self.session_id,
            thesis=self.thesis,
            antithesis=self.antithesis,
            emotion=EmotionalVector(**self.emotion.model_dump()) if self.emotion else None,
            post=PostSelection(**self.post.model_dump()) if self.post else None,
            metadata=self.metadata,
        )


class EngineStats(CamelModel):
    active_paradoxes: int
    quantum_coherence: float
    resolved_count: int
    transcended_count: int


class ParadoxRunResp(CamelModel):
    synthesis: Dict[str, Any]
    paradox_id: str
    resolution_state: str
    engine_stats: EngineStats


class BatchResolveReq(CamelModel):
    paradox_ids: List[str]
    strategy: Optional[ResolutionStrategy] = None
    session_id: Optional[str] = None


class MemoryQueryReq(CamelModel):
    # validated by the engine so an unknown type yields {success: false} instead of a 422
    query_type: str
    thesis: Optional[str] = None
    antithesis: Optional[str] = None
    limit: int = Field(default=10, ge=1, le=50)


class MemoryQueryResp(CamelModel):
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class IntegrityHashReq(BaseModel):
    TT: str
    CC: str
    SS: str
    PP: List[str]
    RR: str
    content: str


class IntegrityHashResp(CamelModel):
    sigprint20: str
    content_sha256: str
