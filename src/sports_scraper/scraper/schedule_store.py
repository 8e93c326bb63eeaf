# src/sports_scraper/scraper/schedule_store.py
"""
MongoDB-backed store for scraped schedule records.

Documents are only ever inserted (never updated), so concurrent writers do
not race. Lookups filter on type, season and week in the query itself and
are served by a compound index on those three fields.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..db_models import ModelType, record_from_document
from ..errors import StoreUnavailable
from . import scraper_config

logger = logging.getLogger(__name__)

SCHEDULE_INDEX_NAME = "type_season_week"


class ScheduleStore:
    """Query/insert access to the schedules collection."""

    def __init__(self, collection: Collection, log: Optional[logging.Logger] = None) -> None:
        self.collection = collection
        self.log = log or logger

    @classmethod
    def connect(
        cls,
        uri: str = scraper_config.MONGO_URI,
        db_name: str = scraper_config.DB_NAME,
        collection_name: str = scraper_config.SCHEDULE_COLLECTION,
    ) -> "ScheduleStore":
        """Connect to MongoDB and make sure the lookup index exists."""
        db = scraper_config.get_mongo_client(uri, db_name)
        # Use 'is None' check: pymongo Database objects don't support truth testing
        if db is None:
            raise StoreUnavailable(f"Could not connect to MongoDB database '{db_name}'")
        store = cls(db[collection_name])
        store.ensure_indexes()
        return store

    def ensure_indexes(self) -> None:
        try:
            self.collection.create_index(
                [("type", ASCENDING), ("season", ASCENDING), ("week", ASCENDING)],
                name=SCHEDULE_INDEX_NAME,
            )
        except PyMongoError as e:
            raise StoreUnavailable(f"Error creating schedule index: {e}") from e

    def query(self, model_type: ModelType, season: int, week: int) -> List:
        """All stored records of ``model_type`` for the given season/week."""
        try:
            documents = list(self.collection.find(
                {"type": int(model_type), "season": season, "week": week},
                {"_id": 0},
            ))
        except PyMongoError as e:
            self.log.error(f"Error querying {model_type.name} for {season} week {week}: {e}")
            raise StoreUnavailable(f"Error querying schedules: {e}") from e

        try:
            return [record_from_document(doc) for doc in documents]
        except (KeyError, ValueError, TypeError) as e:
            self.log.error(f"Malformed {model_type.name} document for {season} week {week}: {e!r}")
            raise StoreUnavailable(f"Malformed schedule document: {e!r}") from e

    def insert(self, record) -> str:
        """Insert one record as a new document and return its id."""
        try:
            result = self.collection.insert_one(record.to_document())
        except PyMongoError as e:
            raise StoreUnavailable(f"Error inserting {type(record).__name__}: {e}") from e
        return str(result.inserted_id)

    def clear_all(self) -> int:
        """Delete every schedule document. Returns the number removed."""
        try:
            result = self.collection.delete_many({})
        except PyMongoError as e:
            raise StoreUnavailable(f"Error clearing schedules: {e}") from e
        self.log.warning(f"All {result.deleted_count} schedule documents have been cleared.")
        return result.deleted_count
