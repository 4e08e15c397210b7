"""
Module ORM Registry (``admissions_modules._orm_registry``).

Responsibility
--------------
Ensure all SQLAlchemy ORM models are imported so that ``Base.metadata``
contains their table definitions before ``create_tables()`` runs.

Architecture position
---------------------
**Modules layer** -- utility.  Imported lazily by
``admissions_kernel.db.engine.create_tables``.
"""


def import_all_orm_models() -> None:
    """Import every ORM module.  Idempotent."""
    import admissions_kernel.services.sequence_service  # noqa: F401
    import admissions_modules.admission.orm  # noqa: F401
    import admissions_modules.student.orm  # noqa: F401
