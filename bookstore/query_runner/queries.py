"""Query, update, aggregation and index operations against the books collection.

Every function takes the collection handle explicitly and performs a single
request (or a single pipeline) against the store.
"""
from typing import Any, Optional, Sequence

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection

from bookstore.query_runner.models import (
    YEAR_FIELD,
    AuthorCount,
    DecadeCount,
    DeleteOutcome,
    GenreAverage,
    UpdateOutcome,
)


TITLE_INDEX = [("title", ASCENDING)]
AUTHOR_YEAR_INDEX = [("author", ASCENDING), (YEAR_FIELD, ASCENDING)]


def find_by_field(collection: Collection, field: str, value: Any) -> list[dict]:
    return list(collection.find({field: value}))


def find_after_year(collection: Collection, year: int, field: str = YEAR_FIELD) -> list[dict]:
    return list(collection.find({field: {"$gt": year}}))


def find_in_stock_after_year(collection: Collection, year: int) -> list[dict]:
    query = {
        "in_stock": True,
        YEAR_FIELD: {"$gt": year}
    }
    return list(collection.find(query))


def count_matching(collection: Collection, query: dict) -> int:
    return collection.count_documents(query)


def update_price(collection: Collection, title: str, price: float) -> UpdateOutcome:
    """
    Set the price of the first book with the given title.

    A title that matches nothing is not an error: both counts come back as 0.
    Re-setting the current price matches one document and modifies none.
    """
    result = collection.update_one({"title": title}, {"$set": {"price": price}})
    return UpdateOutcome(matched=result.matched_count, modified=result.modified_count)


def delete_by_title(collection: Collection, title: str) -> DeleteOutcome:
    result = collection.delete_one({"title": title})
    return DeleteOutcome(deleted=result.deleted_count)


def project_fields(
    collection: Collection, fields: Sequence[str] = ("title", "author", "price")
) -> list[dict]:
    projection = {"_id": 0}
    projection.update({name: 1 for name in fields})
    return list(collection.find({}, projection))


def sort_by_field(collection: Collection, field: str = "price", descending: bool = False) -> list[dict]:
    direction = DESCENDING if descending else ASCENDING
    return list(collection.find().sort(field, direction))


def paginate(
    collection: Collection,
    page: int,
    page_size: int = 5,
    sort: Optional[tuple[str, int]] = None,
) -> list[dict]:
    """
    Return one window of books.

    Args:
        collection (Collection): The books collection.
        page (int): 1-based page number.
        page_size (int): Number of books per page.
        sort (tuple): Optional ``(field, direction)``; storage order when omitted.

    Returns:
        list: At most ``page_size`` documents. Pages are computed against the
        data as it is at call time, so concurrent writes can shift boundaries.
    """
    if page < 1:
        raise ValueError(f"Invalid page: {page}")
    if page_size < 1:
        raise ValueError(f"Invalid page_size: {page_size}")

    cursor = collection.find()
    if sort is not None:
        cursor = cursor.sort(*sort)
    return list(cursor.skip((page - 1) * page_size).limit(page_size))


def average_price_by_genre(collection: Collection) -> list[GenreAverage]:
    pipeline = [
        {"$group": {"_id": "$genre", "avgPrice": {"$avg": "$price"}}}
    ]
    return [GenreAverage.model_validate(doc) for doc in collection.aggregate(pipeline)]


def top_authors(collection: Collection, limit: int = 1) -> list[AuthorCount]:
    if limit < 1:
        raise ValueError(f"Invalid limit: {limit}")

    pipeline = [
        {"$group": {"_id": "$author", "totalBooks": {"$sum": 1}}},
        {"$sort": {"totalBooks": -1}},
        {"$limit": limit}
    ]
    return [AuthorCount.model_validate(doc) for doc in collection.aggregate(pipeline)]


def count_by_decade(collection: Collection, numeric_order: bool = False) -> list[DecadeCount]:
    """
    Group books by publication decade, labelled like ``"1940s"``.

    Labels are text, so the default ordering is lexicographic ("1000s" sorts
    before "900s"). Pass ``numeric_order=True`` to order by the decade value.
    """
    decade = {"$multiply": [{"$floor": {"$divide": [f"${YEAR_FIELD}", 10]}}, 10]}
    pipeline = [
        {
            "$addFields": {
                "decade_start": decade,
                "decade": {"$concat": [{"$toString": decade}, "s"]}
            }
        },
        {
            "$group": {
                "_id": "$decade",
                "decade_start": {"$first": "$decade_start"},
                "count": {"$sum": 1}
            }
        },
        {"$sort": {"decade_start": 1} if numeric_order else {"_id": 1}}
    ]
    return [DecadeCount.model_validate(doc) for doc in collection.aggregate(pipeline)]


def create_indexes(collection: Collection) -> list[str]:
    """
    Create the ascending title index and the (author, published_year) compound index.

    Re-creating an index that already exists with the same keys is a no-op.
    """
    return [
        collection.create_index(TITLE_INDEX),
        collection.create_index(AUTHOR_YEAR_INDEX),
    ]


def explain_query(collection: Collection, query: dict, verbosity: str = "executionStats") -> dict:
    """
    Ask the server how it would run ``find(query)``.

    The returned document is whatever the server reports; only the
    ``executionStats`` section is picked out when present.
    """
    explanation = collection.database.command(
        "explain",
        {"find": collection.name, "filter": query},
        verbosity=verbosity,
    )
    return explanation.get("executionStats", explanation)
