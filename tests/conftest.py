import mongomock
import pytest
from unittest.mock import MagicMock

from bookstore.query_runner.configuration import Configuration

TEST_DB = "test_bookstore"
TEST_COLLECTION = "books"


def make_book(title, author, genre, published_year, price, in_stock=True):
    return {
        "title": title,
        "author": author,
        "genre": genre,
        "published_year": published_year,
        "price": price,
        "in_stock": in_stock,
    }


BOOKS = [
    make_book("1984", "George Orwell", "dystopian", 1949, 10.99),
    make_book("Animal Farm", "George Orwell", "satire", 1945, 8.50, in_stock=False),
    make_book("Homage to Catalonia", "George Orwell", "memoir", 1938, 11.25),
    make_book("The Great Gatsby", "F. Scott Fitzgerald", "fiction", 1925, 9.99),
    make_book("To Kill a Mockingbird", "Harper Lee", "fiction", 1960, 12.99),
    make_book("The Catcher in the Rye", "J.D. Salinger", "fiction", 1951, 8.99),
    make_book("The Hobbit", "J.R.R. Tolkien", "fantasy", 1937, 14.99),
    make_book("The Lord of the Rings", "J.R.R. Tolkien", "fantasy", 1954, 19.99),
    make_book("Moby Dick", "Herman Melville", "adventure", 1851, 12.50, in_stock=False),
    make_book("Pride and Prejudice", "Jane Austen", "romance", 1813, 7.99),
    make_book("The Night Circus", "Erin Morgenstern", "fantasy", 2011, 15.99),
    make_book("The Martian", "Andy Weir", "science fiction", 2014, 13.49, in_stock=False),
]


@pytest.fixture(scope="function")
def mongo_client():
    """Create an in-memory MongoDB client for each test."""
    client = mongomock.MongoClient()
    try:
        yield client
    finally:
        client.close()


@pytest.fixture(scope="function")
def test_db(mongo_client):
    db = mongo_client[TEST_DB]
    try:
        yield db
    finally:
        mongo_client.drop_database(TEST_DB)


@pytest.fixture(scope="function")
def books(test_db):
    """Books collection preloaded with a small catalog."""
    collection = test_db[TEST_COLLECTION]
    collection.insert_many([dict(book) for book in BOOKS])
    return collection


@pytest.fixture(scope="function")
def empty_books(test_db):
    return test_db[TEST_COLLECTION]


@pytest.fixture
def configurable():
    return Configuration(
        mongo_uri="mongodb://catalog.test:27017/",
        database=TEST_DB,
        collection=TEST_COLLECTION,
        server_timeout_ms=50,
    )


class CatalogClient:
    """Stands in for pymongo.MongoClient: mongomock storage, scripted ping, close tracking."""

    def __init__(self, backing, ping_error=None):
        self._backing = backing
        self.admin = MagicMock()
        if ping_error is not None:
            self.admin.command.side_effect = ping_error
        self.close_calls = 0

    def __getitem__(self, name):
        return self._backing[name]

    def close(self):
        self.close_calls += 1


@pytest.fixture
def catalog_client(mongo_client):
    """Factory for clients sharing the test's in-memory storage."""
    def factory(ping_error=None):
        return CatalogClient(mongo_client, ping_error=ping_error)
    return factory


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("MONGO_URI", "DATABASE", "COLLECTION", "PAGE_SIZE", "SERVER_TIMEOUT_MS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
