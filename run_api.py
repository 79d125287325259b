"""
Launcher for the templehub follow-up API.

Settings come from the environment (templehub.config); uvicorn is started by
templehub.main.run(). On a failed start the operator gets the effective
database, bind address and auth setup next to the traceback.
"""

import logging
import sys
from typing import List

from sqlalchemy.engine import make_url

from templehub.config import settings
from templehub.main import run

logger = logging.getLogger("templehub.launcher")

DEV_JWT_SECRET = "dev-only-change-me"


def startup_hints() -> List[str]:
    db_url = make_url(settings.resolved_database_url).render_as_string(hide_password=True)
    hints = [
        f"database {db_url} (DATABASE_URL / DB_PATH): is it reachable and writable?",
        f"bind {settings.host}:{settings.port} (HOST / PORT): is the port free?",
        f"calendar dates use LOCAL_TIMEZONE={settings.local_timezone}",
    ]
    if settings.jwt_secret == DEV_JWT_SECRET:
        hints.append("JWT_SECRET is still the development default; set it outside local dev")
    return hints


def main() -> None:
    try:
        run()
    except KeyboardInterrupt:
        return
    except Exception:
        logging.basicConfig(level=logging.ERROR)
        logger.exception("templehub API failed to start")
        print("\nCheck:", file=sys.stderr)
        for hint in startup_hints():
            print(f"  - {hint}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
