"""
Sticker Catalog

Loads the sticker list from a CSV file with an ``image,link`` header.
Rows missing either field never reach the layout engine.
"""

import csv
import io
import logging
import os
from typing import List

from .layout import StickerItem


def parse_catalog(csv_text: str) -> List[StickerItem]:
    """Parse catalog CSV text into sticker items, skipping incomplete rows"""
    reader = csv.DictReader(io.StringIO(csv_text))
    items: List[StickerItem] = []
    skipped = 0

    for row in reader:
        image = (row.get('image') or '').strip()
        link = (row.get('link') or '').strip()
        if not image or not link:
            skipped += 1
            continue
        items.append(StickerItem(id=len(items), image=image, link=link))

    if skipped:
        logging.info(f"Skipped {skipped} incomplete catalog rows")
    return items


def load_catalog(path: str) -> List[StickerItem]:
    """Load the catalog file. A missing or unreadable file yields an empty catalog."""
    if not os.path.exists(path):
        logging.warning(f"Sticker catalog not found at {path}")
        return []

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return parse_catalog(f.read())
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        logging.error(f"Error loading sticker catalog {path}: {e}")
        return []
