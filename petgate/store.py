"""Thread-safe in-memory pet store."""

import threading

from petgate.api.types import Pet


class PetStore:
    """Pets keyed by their caller-supplied id.
    
    Every access holds a single lock; one instance is owned by the server
    and nothing is persisted.
    """
    
    def __init__(self) -> None:
        self._pets: dict[int, Pet] = {}
        self._lock = threading.Lock()
    
    def upsert(self, pet: Pet) -> None:
        """Store ``pet``, replacing any pet with the same id."""
        with self._lock:
            self._pets[pet.id] = pet.model_copy()
    
    def get(self, pet_id: int) -> Pet | None:
        with self._lock:
            pet = self._pets.get(pet_id)
            return pet.model_copy() if pet is not None else None
    
    def list_pets(self, limit: int | None = None) -> list[Pet]:
        """Pets ordered by id, at most ``limit`` of them."""
        with self._lock:
            pets = [self._pets[pet_id].model_copy() for pet_id in sorted(self._pets)]
        return pets if limit is None else pets[:max(limit, 0)]
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._pets)
