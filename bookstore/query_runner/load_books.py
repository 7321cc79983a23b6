#!/usr/bin/env python3
# load_books.py - Create the books collection with schema validation and sample data

import argparse
import sys
from pprint import pprint

from dotenv import load_dotenv
from pymongo.database import Database
from pymongo.errors import PyMongoError

from bookstore.query_runner.configuration import Configuration
from bookstore.query_runner.models import Book
from bookstore.query_runner.utils import get_mongo_client


# Every book carries the six catalog fields; the year is always spelled published_year
collection_schema = {
    "validator": {
        "$jsonSchema": {
            "bsonType": "object",
            "required": ["title", "author", "genre", "published_year", "price", "in_stock"],
            "properties": {
                "title": {
                    "bsonType": "string",
                    "description": "Title must be a string and is required"
                },
                "author": {
                    "bsonType": "string",
                    "description": "Author must be a string and is required"
                },
                "genre": {
                    "bsonType": "string",
                    "description": "Genre must be a string and is required"
                },
                "published_year": {
                    "bsonType": "int",
                    "description": "Publication year must be an integer and is required"
                },
                "price": {
                    "bsonType": ["double", "int"],
                    "minimum": 0,
                    "description": "Price must be a non-negative number and is required"
                },
                "in_stock": {
                    "bsonType": "bool",
                    "description": "Stock flag must be a boolean and is required"
                }
            }
        }
    }
}

# Sample data to insert into the collection
sample_data = [
    {"title": "To Kill a Mockingbird", "author": "Harper Lee", "genre": "fiction",
     "published_year": 1960, "price": 12.99, "in_stock": True},
    {"title": "1984", "author": "George Orwell", "genre": "dystopian",
     "published_year": 1949, "price": 10.99, "in_stock": True},
    {"title": "The Great Gatsby", "author": "F. Scott Fitzgerald", "genre": "fiction",
     "published_year": 1925, "price": 9.99, "in_stock": True},
    {"title": "Brave New World", "author": "Aldous Huxley", "genre": "dystopian",
     "published_year": 1932, "price": 11.50, "in_stock": False},
    {"title": "The Hobbit", "author": "J.R.R. Tolkien", "genre": "fantasy",
     "published_year": 1937, "price": 14.99, "in_stock": True},
    {"title": "The Catcher in the Rye", "author": "J.D. Salinger", "genre": "fiction",
     "published_year": 1951, "price": 8.99, "in_stock": True},
    {"title": "Pride and Prejudice", "author": "Jane Austen", "genre": "romance",
     "published_year": 1813, "price": 7.99, "in_stock": True},
    {"title": "The Lord of the Rings", "author": "J.R.R. Tolkien", "genre": "fantasy",
     "published_year": 1954, "price": 19.99, "in_stock": True},
    {"title": "Animal Farm", "author": "George Orwell", "genre": "political satire",
     "published_year": 1945, "price": 8.50, "in_stock": False},
    {"title": "The Alchemist", "author": "Paulo Coelho", "genre": "fiction",
     "published_year": 1988, "price": 10.99, "in_stock": True},
    {"title": "Moby Dick", "author": "Herman Melville", "genre": "adventure",
     "published_year": 1851, "price": 12.50, "in_stock": False},
    {"title": "Wuthering Heights", "author": "Emily Brontë", "genre": "gothic fiction",
     "published_year": 1847, "price": 9.99, "in_stock": True},
    {"title": "The Night Circus", "author": "Erin Morgenstern", "genre": "fantasy",
     "published_year": 2011, "price": 15.99, "in_stock": True},
    {"title": "The Martian", "author": "Andy Weir", "genre": "science fiction",
     "published_year": 2014, "price": 13.99, "in_stock": True},
]


def load_books(db: Database, collection_name: str, drop: bool = False) -> int:
    """
    Create ``collection_name`` with the book validator (unless it exists) and insert the sample books.

    Returns:
        int: Number of inserted documents.
    """
    if collection_name in db.list_collection_names():
        if drop:
            db[collection_name].drop()
            print(f"Dropped existing '{collection_name}' collection")
        else:
            print(f"Collection '{collection_name}' already exists, appending sample books")

    if collection_name not in db.list_collection_names():
        print(f"Creating '{collection_name}' collection with schema validation...")
        db.create_collection(collection_name, **collection_schema)

    books = [Book.model_validate(book).model_dump() for book in sample_data]
    result = db[collection_name].insert_many(books)
    return len(result.inserted_ids)


def main(argv=None) -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Load sample books into the bookstore catalog")
    parser.add_argument("--uri", dest="mongo_uri", help="MongoDB connection string")
    parser.add_argument("--database", help="Database name")
    parser.add_argument("--collection", help="Collection name")
    parser.add_argument("--drop", action="store_true", help="Drop the collection before loading")
    args = parser.parse_args(argv)

    configurable = Configuration.from_env(
        {k: v for k, v in vars(args).items() if k != "drop"}
    )
    client = get_mongo_client(configurable)
    try:
        db = client[configurable.database]
        inserted = load_books(db, configurable.collection, drop=args.drop)
        print(f"Inserted {inserted} documents")

        print("\nCollection validation rules:")
        pprint(db.command("listCollections", filter={"name": configurable.collection})
               ["cursor"]["firstBatch"][0]["options"].get("validator"))
    except PyMongoError as e:
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1
    finally:
        client.close()

    print(f"\nDatabase '{configurable.database}' and collection '{configurable.collection}' are ready.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
