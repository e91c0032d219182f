"""Demo menu seed behavior tests."""

from pathlib import Path

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from console.core.config import settings
from console.db.base import Base
from console.db.seed import DEMO_MENU, ensure_seed_menu
from console.models.menu import MenuItem


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def test_seed_menu_fills_empty_catalog(tmp_path: Path, monkeypatch) -> None:
    """Seeding should insert the demo menu once when enabled."""
    engine = _build_test_engine(tmp_path / "seed_on.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(settings, "seed_menu", True)

    with testing_session_local() as session:
        assert ensure_seed_menu(session) is True
        assert ensure_seed_menu(session) is False

    with testing_session_local() as session:
        names = session.scalars(select(MenuItem.name)).all()
        assert sorted(names) == sorted(name for name, _, _ in DEMO_MENU)


def test_seed_menu_disabled_leaves_catalog_empty(tmp_path: Path, monkeypatch) -> None:
    """Nothing is inserted unless seeding is switched on."""
    engine = _build_test_engine(tmp_path / "seed_off.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(settings, "seed_menu", False)

    with testing_session_local() as session:
        assert ensure_seed_menu(session) is False
        assert session.scalars(select(MenuItem)).all() == []
