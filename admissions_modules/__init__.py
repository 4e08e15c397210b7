"""
admissions_modules -- admission and student aggregates.

Each sub-package follows the same layout: ``models.py`` (frozen
dataclasses), ``orm.py`` (SQLAlchemy persistence), ``store.py`` (store
protocol plus SQL implementation), and, for admissions, ``workflows.py``
and ``service.py``.
"""
