class CatalogError(Exception):
    """Base class for failures talking to the bookstore catalog."""


class CatalogConnectionError(CatalogError):
    """The MongoDB server could not be reached or rejected the credentials."""


class CatalogQueryError(CatalogError):
    """A step of the query battery was rejected or failed mid-flight."""

    def __init__(self, step: str, message: str):
        super().__init__(f"Error running '{step}': {message}")
        self.step = step
