from pathlib import Path
import sys

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from academy.db.session import get_session_factory
from academy.services.badge_catalog import seed_default_badges


def main() -> None:
    session_factory = get_session_factory()
    with session_factory() as db:
        result = seed_default_badges(db)
    print(f"Inserted badges: {len(result.created)}, skipped existing: {len(result.skipped)}")


if __name__ == "__main__":
    main()
