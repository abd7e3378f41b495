"""Bulk-import case studies from a JSON backup through the CMS API.

The backup is a JSON array of case study objects. Older backups name the
role field ``role``; it is sent as ``roleDescription``. Case studies whose
slug already exists are skipped.

Usage:
    python -m scripts.import_case_studies backup.json
    python -m scripts.import_case_studies backup.json --base-url https://adaptiveedge.uk
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

import httpx

from cms.client import CmsClient, CmsClientError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

FIELDS = (
    "slug",
    "title",
    "client",
    "category",
    "challenge",
    "approach",
    "impact",
    "roleDescription",
    "featured",
    "treeHouseAttribution",
    "image",
)


def map_case_study(item: dict[str, Any]) -> dict[str, Any]:
    """Backup entry -> create payload."""
    data = dict(item)
    if "roleDescription" not in data and "role" in data:
        data["roleDescription"] = data.pop("role")
    return {key: data[key] for key in FIELDS if key in data}


def load_backup(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a JSON array")
    return data


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("file", type=Path, help="JSON backup file")
    parser.add_argument(
        "--base-url",
        default=os.environ.get("API_BASE_URL", "http://localhost:5000"),
        help="CMS base URL (default: $API_BASE_URL or http://localhost:5000)",
    )
    parser.add_argument(
        "--password",
        default=os.environ.get("ADMIN_PASSWORD", ""),
        help="admin secret (default: $ADMIN_PASSWORD)",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        items = load_backup(args.file)
    except (OSError, ValueError) as exc:
        logger.error("Could not load %s: %s", args.file, exc)
        return 1
    print(f"Loaded {len(items)} case studies from {args.file}")

    created = skipped = failed = 0
    async with CmsClient(args.base_url) as cms:
        try:
            if not await cms.login(args.password):
                logger.error("Admin login failed, check the password")
                return 1
        except (httpx.HTTPError, CmsClientError) as exc:
            logger.error("Could not reach %s: %s", args.base_url, exc)
            return 1

        for item in items:
            payload = map_case_study(item)
            slug = payload.get("slug", "?")
            try:
                await cms.create_case_study(payload)
            except CmsClientError as exc:
                if exc.status_code == 409:
                    print(f"  skip    {slug} (already exists)")
                    skipped += 1
                    continue
                logger.error("Failed to import %s: %s %s", slug, exc.message, exc.field_errors)
                failed += 1
                continue
            except httpx.HTTPError as exc:
                logger.error("Failed to import %s: %s", slug, exc)
                failed += 1
                continue
            print(f"  created {slug}")
            created += 1

        await cms.logout()

    print("\nImport complete:")
    print(f"  Created: {created}")
    print(f"  Skipped: {skipped}")
    print(f"  Failed:  {failed}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
