# app/db/base.py
# Alembic model registry -- imports Base + every model so Alembic detects all tables.
# Do NOT import this file from model files (use app.db.base_class instead).
# This file is imported by:
#   - alembic/env.py        (schema detection)
#   - app/db/init_db.py     (seeding)
#   - app/main.py           (so relationships resolve before the first query)

from app.db.base_class import Base  # noqa: F401

# ── Import all models here so Alembic can detect them ────────────────────────
# Order matters: parent tables before child tables (foreign key dependencies)

from app.models.profile import Profile                                  # noqa: F401, E402
from app.models.lesson import Subject, Lesson, LessonMaterial           # noqa: F401, E402
from app.models.booking import Booking                                  # noqa: F401, E402
from app.models.transaction import Transaction                          # noqa: F401, E402
from app.models.review import Review                                    # noqa: F401, E402
