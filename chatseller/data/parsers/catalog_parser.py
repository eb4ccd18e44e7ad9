"""
Catalog parser for merchant product exports.
Reads CSV and Excel files with one product per row.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd


@dataclass
class ParsedProduct:
    """Product row read from a catalog file."""
    name: str
    price: Optional[float] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    url: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True


class CatalogParser:
    """Parser for CSV/XLSX catalog exports."""

    # Accepted header names per field, lowercase
    COLUMN_ALIASES = {
        "name": ["name", "nom", "produit", "title", "titre"],
        "description": ["description", "desc"],
        "price": ["price", "prix", "tarif"],
        "image_url": ["image_url", "image", "photo"],
        "url": ["url", "lien", "purchase_url", "link"],
        "category": ["category", "categorie", "catégorie"],
        "is_active": ["is_active", "active", "actif"],
    }

    PRICE_CLEANUP = re.compile(r"[^\d,.\-]")

    INACTIVE_VALUES = {"0", "false", "non", "no", "inactif", "inactive"}

    def parse(self, file_path: str | Path) -> list[ParsedProduct]:
        """
        Parse a catalog file.

        Args:
            file_path: Path to CSV or XLSX file

        Returns:
            Products with a non-empty name

        Raises:
            ValueError: Unsupported format or no name column
        """
        file_path = Path(file_path)
        suffix = file_path.suffix.lower()

        if suffix == ".csv":
            df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
        elif suffix in [".xlsx", ".xls"]:
            df = pd.read_excel(file_path, dtype=str).fillna("")
        else:
            raise ValueError(f"Unsupported file format: {suffix}")

        columns = self._map_columns(df.columns)
        if "name" not in columns:
            raise ValueError(f"No product name column in {file_path.name}")

        products = []
        for _, row in df.iterrows():
            product = self._parse_row(row, columns)
            if product:
                products.append(product)
        return products

    def _map_columns(self, headers) -> dict[str, str]:
        """Field name to the file's column name."""
        lookup = {str(h).strip().lower(): h for h in headers}
        columns = {}
        for field_name, aliases in self.COLUMN_ALIASES.items():
            for alias in aliases:
                if alias in lookup:
                    columns[field_name] = lookup[alias]
                    break
        return columns

    def _parse_row(self, row: pd.Series, columns: dict[str, str]) -> ParsedProduct | None:
        def cell(field_name: str) -> Optional[str]:
            column = columns.get(field_name)
            if column is None:
                return None
            value = str(row[column]).strip()
            return value or None

        name = cell("name")
        if not name:
            return None

        active = cell("is_active")
        return ParsedProduct(
            name=name,
            price=self._parse_price(cell("price")),
            description=cell("description"),
            image_url=cell("image_url"),
            url=cell("url"),
            category=cell("category"),
            is_active=(active or "").lower() not in self.INACTIVE_VALUES,
        )

    def _parse_price(self, raw: Optional[str]) -> Optional[float]:
        """Parse "12 500 FCFA" or "12,50" into a number."""
        if not raw:
            return None
        cleaned = self.PRICE_CLEANUP.sub("", raw).replace(",", ".")
        if cleaned.count(".") > 1:
            # Thousands separators
            head, _, tail = cleaned.rpartition(".")
            cleaned = head.replace(".", "") + "." + tail
        try:
            return float(cleaned)
        except ValueError:
            return None


def parse_catalog(file_path: str | Path) -> list[ParsedProduct]:
    """Convenience function to parse a catalog file."""
    parser = CatalogParser()
    return parser.parse(file_path)
