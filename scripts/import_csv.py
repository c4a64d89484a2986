#!/usr/bin/env python3
"""Import contacts from a CSV file into Neo4j for one owner.

CSV needs a header row with name and phone columns (email and type optional).
Rows whose phone already exists for the owner are skipped and reported.
Run from repo root with .env (NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD):

    python scripts/import_csv.py <owner_id> contacts.csv
"""
import argparse
import logging
import sys
from pathlib import Path

from neo4j import GraphDatabase

from api.config import load_env_file, load_settings
from contactbook.application import ImportService, StoreUnavailable
from contactbook.infrastructure import (
    Neo4jContactRepository,
    candidates_from_csv,
    ensure_constraints,
)

logger = logging.getLogger("import_csv")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("owner_id", help="Owner (user) id to import into")
    parser.add_argument("csv_path", type=Path, help="CSV file with name,phone[,email,type]")
    args = parser.parse_args(argv)

    load_env_file()
    settings = load_settings()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level,
    )

    owner_id = args.owner_id.strip()
    if not owner_id:
        print("owner_id must be non-empty", file=sys.stderr)
        return 2
    try:
        text = args.csv_path.read_text(encoding="utf-8-sig")
    except OSError as e:
        print(f"Cannot read {args.csv_path}: {e}", file=sys.stderr)
        return 2

    candidates = candidates_from_csv(text)
    if not candidates:
        print("No contacts found in CSV.")
        return 0

    driver = GraphDatabase.driver(
        settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password)
    )
    try:
        ensure_constraints(driver)
        service = ImportService(
            Neo4jContactRepository(driver),
            default_region=settings.default_region,
            check_name_conflicts=settings.import_check_names,
        )
        summary = service.reconcile(owner_id, candidates)
    except StoreUnavailable as e:
        logger.error("Neo4j unavailable: %s", e)
        return 1
    finally:
        driver.close()

    print(f"Added {summary.added_count}, skipped {summary.skipped_count}.")
    for skipped in summary.skipped:
        c = skipped.candidate
        print(f"  skipped {c.name or '?'} ({c.phone or '-'}): {skipped.reason}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
