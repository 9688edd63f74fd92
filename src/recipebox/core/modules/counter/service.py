from pymongo import ReturnDocument

from recipebox.core.core import Service
from recipebox.core.modules.counter.models import Counter, Sequence


class CounterService(Service):
    """Issues monotonic integer ids, one sequence per entity type."""

    collection_name = "counters"

    async def get_next_id(self, sequence: Sequence) -> int:
        """Atomically increment and return the next id for a sequence."""
        result = await self.collection.find_one_and_update(
            {"_id": sequence.value},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return Counter.model_validate(result).seq
