import argparse
import csv
import logging
import sys

import psycopg2

from portfolio_sync.config import SyncConfig

log = logging.getLogger(__name__)

OUTPUT_FILE = "projects.csv"


def dump(db_url: str, output: str = OUTPUT_FILE) -> int:
    log.info("Connecting to database …")
    conn = psycopg2.connect(db_url)

    try:
        with conn.cursor() as cur:
            log.info("Querying projects …")
            cur.execute(
                """
                SELECT
                    slug,
                    name,
                    github_repo,
                    homepage,
                    language,
                    stars,
                    visible,
                    synced_at,
                    updated_at
                FROM projects
                ORDER BY stars DESC, slug
                """
            )
            rows = cur.fetchall()
            columns = [desc[0] for desc in cur.description]
    finally:
        conn.close()

    log.info("Writing %d rows to %s …", len(rows), output)
    with open(output, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(columns)
        writer.writerows(rows)

    log.info("Dump complete: %s (%d rows)", output, len(rows))
    return len(rows)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    parser = argparse.ArgumentParser(description="Export the projects table to CSV")
    parser.add_argument("--output", default=OUTPUT_FILE, help=f"CSV file to write (default: {OUTPUT_FILE})")
    args = parser.parse_args()

    db_url = SyncConfig.from_env().database_url
    if not db_url:
        log.error("DATABASE_URL environment variable is required")
        sys.exit(1)

    dump(db_url, args.output)
