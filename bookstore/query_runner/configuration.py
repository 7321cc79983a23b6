import os
from dataclasses import dataclass, fields
from typing import Any, Optional


@dataclass(kw_only=True)
class Configuration:
    """Connection settings for the bookstore catalog."""
    mongo_uri: str = "mongodb://localhost:27017/"
    database: str = "plp_bookstore"
    collection: str = "books"
    page_size: int = 5
    server_timeout_ms: int = 5000

    @classmethod
    def from_env(
        cls, overrides: Optional[dict[str, Any]] = None
    ) -> "Configuration":
        """Create a Configuration from environment variables and explicit overrides.

        Overrides win over the environment; empty values fall back to the defaults.
        """
        overrides = overrides or {}
        values: dict[str, Any] = {
            f.name: overrides[f.name]
            if overrides.get(f.name) is not None
            else os.environ.get(f.name.upper())
            for f in fields(cls)
            if f.init
        }

        # Environment values arrive as strings
        for name in ("page_size", "server_timeout_ms"):
            if values.get(name) is not None and not isinstance(values[name], int):
                try:
                    values[name] = int(values[name])
                except ValueError:
                    raise ValueError(f"Invalid {name}: {values[name]}")

        if values.get("page_size") is not None and values["page_size"] < 1:
            raise ValueError(f"Invalid page_size: {values['page_size']}")

        return cls(**{k: v for k, v in values.items() if v})
