import os
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, func, inspect, select
from sqlalchemy.orm import sessionmaker

from app.clinica.db.models import CutScheduleSettings, User
from app.clinica.db.seed import run_seed


def _run_migrations(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


def test_migrations_apply(tmp_path: Path):
    database_url = f"sqlite+pysqlite:///{tmp_path / 'migrations.db'}"
    _run_migrations(database_url)

    engine = create_engine(database_url, future=True)
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())

    assert {"users", "sales", "cash_cut_records", "cut_schedule_settings", "audit_events"} <= tables

    indexes = {index["name"]: index for index in inspector.get_indexes("cash_cut_records")}
    assert indexes["uq_cash_cut_records_opening_per_day"]["unique"]
    constraints = [constraint["name"] for constraint in inspector.get_unique_constraints("cash_cut_records")]
    assert "uq_cash_cut_records_date_cut_time" in constraints
    assert "uq_cash_cut_records_date_seq" in constraints
    engine.dispose()


def test_seed_is_idempotent(tmp_path: Path):
    database_url = f"sqlite+pysqlite:///{tmp_path / 'seed.db'}"
    _run_migrations(database_url)

    engine = create_engine(database_url, future=True)
    SessionLocal = sessionmaker(bind=engine, future=True)

    with SessionLocal() as db:
        admin = run_seed(db)
        run_seed(db)

        assert admin.role == "ADMIN"
        assert db.scalar(select(func.count()).select_from(User)) == 1
        schedules = db.execute(select(CutScheduleSettings)).scalars().all()
        assert [(row.first_cut, row.second_cut, row.is_active) for row in schedules] == [("14:00", "18:00", True)]
    engine.dispose()
