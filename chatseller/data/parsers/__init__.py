"""
Catalog parsers for merchant product files.
"""

from chatseller.data.parsers.catalog_parser import CatalogParser, ParsedProduct, parse_catalog

__all__ = [
    "CatalogParser",
    "ParsedProduct",
    "parse_catalog",
]
