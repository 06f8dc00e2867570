"""
Run Alembic against the bundled migrations without an alembic.ini.

    python -m franchise_api.db.run_migrations upgrade head
    python -m franchise_api.db.run_migrations downgrade -1
    python -m franchise_api.db.run_migrations stamp head
    python -m franchise_api.db.run_migrations history
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def build_config() -> Config:
    """Alembic Config pointing at the bundled migrations and the configured database."""
    from franchise_api.db.config import get_settings

    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # env.py uses the async URL when online; this one serves offline mode
    cfg.set_main_option("sqlalchemy.url", get_settings().sync_database_url)
    return cfg


def _revision_arg(default: Optional[str]) -> Callable[[Config, List[str]], None]:
    """Wrap an Alembic command that takes a single revision argument."""

    def wrap(fn: Callable[..., None]) -> Callable[[Config, List[str]], None]:
        def run(cfg: Config, args: List[str]) -> None:
            revision = args[0] if args else default
            if revision is None:
                raise SystemExit(f"Usage: {fn.__name__} <revision>")
            fn(cfg, revision)

        return run

    return wrap


COMMANDS: Dict[str, Callable[[Config, List[str]], None]] = {
    "upgrade": _revision_arg("head")(command.upgrade),
    "downgrade": _revision_arg("-1")(command.downgrade),
    "stamp": _revision_arg("head")(command.stamp),
    "show": _revision_arg(None)(command.show),
    "history": lambda cfg, args: command.history(cfg, *args[:1]),
    "current": lambda cfg, args: command.current(cfg),
    "heads": lambda cfg, args: command.heads(cfg),
}


# PUBLIC_INTERFACE
def main(argv: Optional[List[str]] = None) -> None:
    """Dispatch ``argv`` (default: the process arguments) to the matching Alembic command."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        raise SystemExit(f"Usage: run_migrations <{'|'.join(COMMANDS)}> [revision]")
    name, rest = args[0], args[1:]
    runner = COMMANDS.get(name)
    if runner is None:
        raise SystemExit(f"Unsupported Alembic command: {name}")
    logger.info("alembic %s %s", name, " ".join(rest))
    runner(build_config(), rest)


# PUBLIC_INTERFACE
def upgrade_head() -> None:
    """Bring the configured database up to the latest revision."""
    main(["upgrade", "head"])


if __name__ == "__main__":
    from franchise_api.core.logging import configure_logging

    configure_logging()
    main()
