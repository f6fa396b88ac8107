from pathlib import Path


# Repository root
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Log directory (DEBUG file sink)
LOG_DIR = BASE_DIR / 'logs'

# Alembic config (script_location points into src/platform/alembic)
ALEMBIC_INI = BASE_DIR / 'alembic.ini'
