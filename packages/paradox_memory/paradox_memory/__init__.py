from .bank import ParadoxMemoryBank
from .embedding import CONCEPT_DIMENSIONS, context_embedding, embedding_distance
from .models import ParadoxMemory

__all__ = [
    "ParadoxMemoryBank", "ParadoxMemory",
    "CONCEPT_DIMENSIONS", "context_embedding", "embedding_distance",
]
