"""
Seed the players table.

Players are created out-of-band; this script loads them from a JSON file
of the form:

    [{"name": "Faker", "avatar": "https://..."}, ...]

Names already present are skipped, so the script can be re-run safely.
"""
import json
from pathlib import Path

from db.base import init_db, close_db
from db.models.leaderboard import Player


def seed_players(entries: list[dict], dry_run: bool = False) -> tuple[int, int]:
    """
    Insert players whose name is not already taken.

    Returns:
        (created, skipped)
    """
    existing = {name for (name,) in Player.select(Player.name).tuples()}
    created = 0
    skipped = 0

    for entry in entries:
        name = entry["name"].strip()
        if not name or name in existing:
            skipped += 1
            continue
        if not dry_run:
            Player.create(name=name, avatar=entry.get("avatar", ""))
        existing.add(name)
        created += 1

    return created, skipped


def main(path: Path, database_url: str | None = None, dry_run: bool = False) -> None:
    entries = json.loads(path.read_text(encoding="utf-8"))
    init_db(database_url)
    try:
        created, skipped = seed_players(entries, dry_run=dry_run)
        prefix = "[dry run] " if dry_run else ""
        print(f"{prefix}Created {created} players, skipped {skipped}")
    finally:
        close_db()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed players from a JSON file")
    parser.add_argument("path", type=Path, help="JSON file with a list of {name, avatar}")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    parser.add_argument("--dry-run", action="store_true", help="Print what would be done without making changes")

    args = parser.parse_args()

    main(args.path, database_url=args.database_url, dry_run=args.dry_run)
