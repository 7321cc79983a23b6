#!/usr/bin/env python3
# run_queries.py - Run the bookstore query battery and print every result

import argparse
import sys
from logging import Logger

from dotenv import load_dotenv
from pydantic import ValidationError
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from bookstore.query_runner import queries
from bookstore.query_runner.configuration import Configuration
from bookstore.query_runner.errors import CatalogError, CatalogQueryError
from bookstore.query_runner.models import LEGACY_YEAR_FIELD, YEAR_FIELD
from bookstore.query_runner.utils import audit_year_field, open_catalog, print_result, print_section


logger = Logger(__name__)
logger.setLevel("INFO")


def _step(name: str, operation, *args, **kwargs):
    logger.info(f"Running {name}")
    try:
        return operation(*args, **kwargs)
    except (PyMongoError, ValidationError) as e:
        raise CatalogQueryError(name, str(e)) from e


def check_year_field(collection: Collection):
    audit = _step("year field audit", audit_year_field, collection)
    print_result(f"Documents with '{YEAR_FIELD}' / '{LEGACY_YEAR_FIELD}'", audit)
    if not audit.consistent:
        logger.warning(
            f"{audit.legacy} document(s) use '{LEGACY_YEAR_FIELD}'; "
            f"year filters only read '{YEAR_FIELD}'"
        )


def run_battery(collection: Collection, configurable: Configuration):
    """
    Run every operation in order and print its result.

    The first failing operation raises CatalogQueryError and nothing after it runs.
    """
    check_year_field(collection)

    print_section("Basic CRUD operations")

    fiction = _step("fiction books", queries.find_by_field, collection, "genre", "fiction")
    print_result("Fiction books", fiction)

    after_1951 = _step("books after 1951", queries.find_after_year, collection, 1951)
    print_result("Books published after 1951", after_1951)

    orwell = _step("books by George Orwell", queries.find_by_field, collection, "author", "George Orwell")
    print_result("Books by George Orwell", orwell)
    count = _step("count by George Orwell", queries.count_matching, collection, {"author": "George Orwell"})
    print(f"Count: {count}")

    updated = _step("update 1984 price", queries.update_price, collection, "1984", 13.49)
    print(f"\nUpdated 1984: {updated.modified} document(s) modified")

    deleted = _step("delete Moby Dick", queries.delete_by_title, collection, "Moby Dick")
    print(f"\nDeleted Moby Dick: {deleted.deleted} document(s) removed")

    print_section("Advanced queries")

    recent_stock = _step("in-stock books after 2010", queries.find_in_stock_after_year, collection, 2010)
    print_result("In-stock books published after 2010", recent_stock)

    projected = _step("projection", queries.project_fields, collection)
    print_result("Projected fields", projected)

    ascending = _step("sort by price ascending", queries.sort_by_field, collection, "price")
    print_result("Books sorted by price (low to high)", ascending)

    descending = _step("sort by price descending", queries.sort_by_field, collection, "price", descending=True)
    print_result("Books sorted by price (high to low)", descending)

    for page in (1, 2):
        books = _step(f"page {page}", queries.paginate, collection, page, configurable.page_size)
        print_result(f"Page {page} ({configurable.page_size} books per page)", books)

    print_section("Aggregation pipelines")

    averages = _step("average price by genre", queries.average_price_by_genre, collection)
    print_result("Average price by genre", averages)

    top = _step("author with most books", queries.top_authors, collection)
    print_result("Author with the most books", top)

    decades = _step("books by decade", queries.count_by_decade, collection)
    print_result("Books grouped by publication decade", decades)

    print_section("Indexing")

    names = _step("create indexes", queries.create_indexes, collection)
    print(f"\nIndexes ready: {', '.join(names)}")

    by_title = _step("explain title search", queries.explain_query, collection, {"title": "1984"})
    print_result("Explain - search by title", by_title)

    by_author_year = _step(
        "explain compound search",
        queries.explain_query,
        collection,
        {"author": "George Orwell", YEAR_FIELD: 1949},
    )
    print_result("Explain - compound search", by_author_year)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the bookstore query battery against MongoDB")
    parser.add_argument("--uri", dest="mongo_uri", help="MongoDB connection string")
    parser.add_argument("--database", help="Database name")
    parser.add_argument("--collection", help="Collection name")
    parser.add_argument("--page-size", dest="page_size", type=int, help="Books per page")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv()
    args = parse_args(argv)
    configurable = Configuration.from_env(vars(args))

    try:
        with open_catalog(configurable) as collection:
            print("Connected to MongoDB")
            run_battery(collection, configurable)
    except CatalogError as e:
        logger.error(str(e))
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1
    finally:
        print("MongoDB connection closed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
