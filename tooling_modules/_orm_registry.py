"""
Module ORM Registry (``tooling_modules._orm_registry``).

Responsibility
--------------
Import every ``tooling_modules.*.orm`` module so that ``Base.metadata``
holds all table definitions and every string relationship target resolves,
then create the tables.

Architecture position
---------------------
**Modules layer** -- utility.  Imports sibling ``tooling_modules`` packages
and ``tooling_kernel.db.engine`` (allowed: modules -> kernel).  MUST NOT be
imported by ``tooling_kernel``.

Usage
-----
Hosts and ``tests/conftest.py`` call ``create_all_tables()`` after
``init_engine_from_url()``.
"""


def import_all_orm_models() -> None:
    """Import every module ORM file.  Idempotent."""
    # Referenced tables first: projects <- requisitions <- quotations, handovers
    # fmt: off
    import tooling_modules.projects.orm  # noqa: F401
    import tooling_modules.suppliers.orm  # noqa: F401
    import tooling_modules.quotations.orm  # noqa: F401
    import tooling_modules.requisitions.orm  # noqa: F401
    import tooling_modules.handover.orm  # noqa: F401
    import tooling_modules.inventory.orm  # noqa: F401
    import tooling_modules.spares.orm  # noqa: F401
    # fmt: on


def create_all_tables() -> None:
    """Register all module ORM models and create their tables.

    Preconditions:
        Engine must be initialized via ``init_engine_from_url()``.
    """
    from tooling_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
