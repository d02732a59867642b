import logging
from collections import defaultdict
from typing import Dict, Iterable, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.config import STORE_TIMEOUT_SECONDS
from lms_backend.database import bounded
from lms_backend.identity.identity_models import IdentityVariant, IDENTITY_TABLES

logger = logging.getLogger(__name__)

# Never leaves the identity store
PRIVATE_FIELDS = {"_id": 0, "password": 0}


class IdentityStore:
    """
    Read-only access to student/instructor records
    Lookups dispatch on the variant tag instead of guessing the table
    """

    def __init__(self, db: AsyncIOMotorDatabase, timeout: float = STORE_TIMEOUT_SECONDS):
        self.db = db
        self.timeout = timeout

    def _table(self, variant):
        collection, id_field = IDENTITY_TABLES[IdentityVariant(variant)]
        return self.db[collection], id_field

    async def get(self, identity_id: str, variant) -> Optional[dict]:
        collection, id_field = self._table(variant)
        return await bounded(
            collection.find_one({id_field: identity_id}, PRIVATE_FIELDS),
            self.timeout,
            "identity_get"
        )

    async def exists(self, identity_id: str, variant) -> bool:
        collection, id_field = self._table(variant)
        found = await bounded(
            collection.find_one({id_field: identity_id}, {"_id": 1}),
            self.timeout,
            "identity_exists"
        )
        return found is not None

    async def resolve_many(self, refs: Iterable[dict]) -> Dict[Tuple[str, str], dict]:
        """
        Fetch every referenced identity with one query per variant

        Returns:
            dict keyed by (id, variant) -> identity record
            Missing identities are simply absent from the result
        """
        wanted = defaultdict(set)
        for ref in refs:
            wanted[ref["variant"]].add(ref["id"])

        found = {}
        for variant, ids in wanted.items():
            collection, id_field = self._table(variant)
            cursor = collection.find({id_field: {"$in": sorted(ids)}}, PRIVATE_FIELDS)
            records = await bounded(cursor.to_list(length=None), self.timeout, "identity_resolve")
            for record in records:
                found[(record[id_field], variant)] = record

            missing = ids - {record[id_field] for record in records}
            if missing:
                logger.info("Unresolved %s references: %s", variant, sorted(missing))

        return found
