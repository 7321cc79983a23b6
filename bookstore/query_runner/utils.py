import datetime
from contextlib import contextmanager
from logging import Logger
from pprint import pprint
from typing import Iterator

import pymongo
from bson.objectid import ObjectId
from pydantic import BaseModel
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, OperationFailure

from bookstore.query_runner.configuration import Configuration
from bookstore.query_runner.errors import CatalogConnectionError
from bookstore.query_runner.models import LEGACY_YEAR_FIELD, YEAR_FIELD, YearFieldAudit


logger = Logger(__name__)
logger.setLevel("INFO")


def get_mongo_client(configurable: Configuration) -> pymongo.MongoClient:
    return pymongo.MongoClient(
        configurable.mongo_uri,
        serverSelectionTimeoutMS=configurable.server_timeout_ms,
    )


@contextmanager
def open_catalog(configurable: Configuration) -> Iterator[Collection]:
    """
    Connect to MongoDB and yield the books collection.

    The client is closed exactly once when the block exits, whether or not
    the body raised.

    Raises:
        CatalogConnectionError: if the server cannot be reached or refuses the credentials.
    """
    client = get_mongo_client(configurable)
    try:
        try:
            client.admin.command("ping")
        except (ConnectionFailure, OperationFailure) as e:
            raise CatalogConnectionError(
                f"Cannot reach MongoDB at {configurable.mongo_uri}: {str(e)}"
            ) from e
        logger.info(f"Connected to {configurable.database}.{configurable.collection}")
        yield client[configurable.database][configurable.collection]
    finally:
        client.close()
        logger.info("MongoDB connection closed")


def mongo_doc_to_json_serializable(doc):
    """
    Convert a MongoDB document (or a list of them) to a JSON serializable format.
    """
    if isinstance(doc, BaseModel):
        return doc.model_dump()
    if isinstance(doc, dict):
        return {k: mongo_doc_to_json_serializable(v) for k, v in doc.items()}
    elif isinstance(doc, list):
        return [mongo_doc_to_json_serializable(item) for item in doc]
    elif isinstance(doc, ObjectId):
        return str(doc)
    elif isinstance(doc, datetime.datetime):
        return str(doc)
    return doc


def audit_year_field(collection: Collection) -> YearFieldAudit:
    """
    Count documents carrying the canonical and the legacy spelling of the
    publication year field.
    """
    return YearFieldAudit(
        canonical=collection.count_documents({YEAR_FIELD: {"$exists": True}}),
        legacy=collection.count_documents({LEGACY_YEAR_FIELD: {"$exists": True}}),
    )


def print_section(title: str):
    print(f"\n=== {title} ===")


def print_result(label: str, result):
    print(f"\n{label}:")
    pprint(mongo_doc_to_json_serializable(result), sort_dicts=False)
