"""CSV -> PostgreSQL importer for paired DU/RU installation work orders."""

__version__ = "0.1.0"
