"""Shared fixtures: a temporary SQLite database seeded with one school."""

from __future__ import annotations

import pytest

from schooltenders.persistence.db import (
    create_db_engine,
    create_session_factory,
    init_db_async,
    session_scope,
)
from schooltenders.persistence.models import School


ALBO_PAGE = """
<html>
  <body>
    <ul>
      <li><a href="bando1.pdf">Avviso pubblico scadenza 15/06/2025</a></li>
      <li><a href="/contatti">Contatti</a></li>
    </ul>
  </body>
</html>
"""


@pytest.fixture
def albo_page() -> str:
    return ALBO_PAGE


@pytest.fixture
async def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'tenders.db'}")
    await init_db_async(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def school_id(engine) -> int:
    async with session_scope(create_session_factory(engine)) as session:
        school = School(code="MIIC8AB00X", name="IC Manzoni", website="www.icmanzoni.edu.it")
        session.add(school)
        await session.flush()
        return school.id
