"""
Dev-only reset script for Implant Passport.

What it does:
- Empties the passports and users tables (passports first, they reference users).
  On PostgreSQL: TRUNCATE ... RESTART IDENTITY CASCADE; elsewhere: DELETE FROM.

Guardrails:
- Requires ENV=dev
- Requires confirmation prompt unless --yes is passed
- Logs actions to logs/ with a timestamped file
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import sys
from typing import Iterable


# Allow `import app.*` from backend/
REPO_ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = REPO_ROOT / "backend"
sys.path.insert(0, str(BACKEND_DIR))


from sqlalchemy import text  # noqa: E402
from sqlalchemy.engine import make_url  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.database import SessionLocal  # noqa: E402


TABLES_TO_TRUNCATE = [
    "passports",
    "users",
]


def utc_now_stamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def log_write(fp: Path, lines: Iterable[str]) -> None:
    fp.parent.mkdir(parents=True, exist_ok=True)
    with fp.open("a", encoding="utf-8") as f:
        for line in lines:
            f.write(line.rstrip("\n") + "\n")


def reset_statements(dialect: str) -> list[str]:
    if dialect == "postgresql":
        return ["TRUNCATE " + ", ".join(TABLES_TO_TRUNCATE) + " RESTART IDENTITY CASCADE;"]
    return [f"DELETE FROM {t};" for t in TABLES_TO_TRUNCATE]


def main() -> int:
    parser = argparse.ArgumentParser(description="Dev reset: empty passport + user tables.")
    parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt.")
    args = parser.parse_args()

    if (settings.ENV or "").strip().lower() != "dev":
        print(f"Refusing to run: ENV must be 'dev' (got {settings.ENV!r})")
        return 2

    url = make_url(settings.DATABASE_URL)
    log_path = REPO_ROOT / "logs" / f"reset_dev_db_{utc_now_stamp()}.log"
    log_write(log_path, [f"[start] {datetime.now(timezone.utc).isoformat()} env={settings.ENV}"])
    log_write(log_path, [f"[db] {url.render_as_string(hide_password=True)}"])

    if not args.yes:
        msg = (
            "WARNING: This will DELETE every row in:\n"
            f"  {', '.join(TABLES_TO_TRUNCATE)}\n\n"
            "Type RESET to continue: "
        )
        resp = input(msg).strip()
        if resp != "RESET":
            print("Cancelled.")
            log_write(log_path, ["[cancelled] user did not confirm"])
            return 1

    with SessionLocal() as db:
        for sql in reset_statements(url.get_backend_name()):
            log_write(log_path, [f"[db] executing: {sql}"])
            db.execute(text(sql))
        db.commit()

    log_write(log_path, [f"[done] {datetime.now(timezone.utc).isoformat()}"])
    print(f"Done. Log written to: {log_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
