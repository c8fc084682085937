#!/usr/bin/env python3
"""
Seed the catalog from a JSON file (a list of products, or an object with an
"items" list). Products are upserted by name so the script can be re-run.

Usage:
    python scripts/seed_products.py --file ../public/mock/catalogue.json
"""
import argparse
import json
import os
import sys

from storefront.config import settings
from storefront.db import SessionLocal, init_db
from storefront.repositories.product_repo import ProductRepository


def _parse_price_cents(entry) -> int:
    """Prefer price_cents; otherwise treat `price` as a decimal amount."""
    if entry.get("price_cents") is not None:
        try:
            return int(entry["price_cents"])
        except (TypeError, ValueError):
            return 0
    try:
        return int(round(float(entry.get("price", 0) or 0) * 100))
    except (TypeError, ValueError):
        return 0


def _normalize_entry(entry):
    """Return a dict with keys: name, price_cents, category, description, image, featured, bestseller"""
    return {
        "name": (entry.get("name") or entry.get("title") or "").strip(),
        "price_cents": _parse_price_cents(entry),
        "category": entry.get("category"),
        "description": entry.get("description") or "",
        "image": entry.get("image") or settings.PLACEHOLDER_IMAGE,
        "featured": bool(entry.get("featured", False)),
        "bestseller": bool(entry.get("bestseller", False)),
    }


def seed_entries(db, entries) -> int:
    """Upsert entries into the catalog; entries without a name are skipped."""
    repo = ProductRepository(db)
    seeded = 0
    for entry in entries:
        fields = _normalize_entry(entry)
        name = fields.pop("name")
        if not name:
            continue
        repo.upsert_by_name(name, **fields)
        seeded += 1
    return seeded


def seed_from_file(path: str) -> int:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        source_list = data.get("items") if isinstance(data.get("items"), list) else list(data.values())
    elif isinstance(data, list):
        source_list = data
    else:
        source_list = []

    init_db(reset=False)
    db = SessionLocal()
    try:
        seeded = seed_entries(db, source_list)
        db.commit()
        print("Seeded products:", seeded)
        return seeded
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", required=True, help="Path to a product JSON file")
    args = parser.parse_args()
    if not os.path.exists(args.file):
        print("File not found:", args.file)
        sys.exit(1)
    seed_from_file(args.file)
