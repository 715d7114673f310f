"""
Programmatic Alembic migration runner.

Runs migrations without an alembic.ini: the script location is the migrations
directory of this package and the URL comes from furniture_api.db.config.

Usage examples:
    python -m furniture_api.db.run_migrations upgrade head
    python -m furniture_api.db.run_migrations downgrade -1
    python -m furniture_api.db.run_migrations history
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List

from alembic import command
from alembic.config import Config

from furniture_api.db.config import get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# command name -> (alembic function, default arguments)
_COMMANDS: Dict[str, tuple[Callable[..., object], List[str]]] = {
    "upgrade": (command.upgrade, ["head"]),
    "downgrade": (command.downgrade, ["-1"]),
    "history": (command.history, []),
    "current": (command.current, []),
    "heads": (command.heads, []),
    "revision": (command.revision, []),
}


# PUBLIC_INTERFACE
def build_config() -> Config:
    """Alembic Config pointing at this package's migrations and the configured database."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # Offline mode uses this URL; env.py builds its own async engine online.
    cfg.set_main_option("sqlalchemy.url", get_settings().sync_database_url.replace("%", "%%"))
    return cfg


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None) -> None:
    """Run an Alembic command (upgrade, downgrade, history, current, heads, revision)."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("No Alembic arguments provided. Example: upgrade head")
        sys.exit(1)

    name, other = args[0], args[1:]
    if name not in _COMMANDS:
        print(f"Unsupported Alembic command: {name}")
        sys.exit(2)

    func, defaults = _COMMANDS[name]
    logger.info("alembic %s %s", name, " ".join(other or defaults))
    func(build_config(), *(other or defaults))


if __name__ == "__main__":
    main()
