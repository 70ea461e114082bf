from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from sqlmodel import Field, Session, SQLModel, create_engine, select

Run = dict[str, Any]


def _new_run(width: int, height: int, density: float, count: int, metrics: dict[str, Any]) -> Run:
    stamp = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    return {
        "id": str(uuid4()),
        "width": width,
        "height": height,
        "density": density,
        "count": count,
        "metrics": metrics,
        "created_at": stamp,
    }


class JsonBenchmarkRepository:
    """Benchmark runs kept as a JSON list, oldest first."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> list[Run]:
        if not self.path.exists():
            return []
        return json.loads(self.path.read_text(encoding="utf-8") or "[]")

    def record_run(self, width: int, height: int, density: float, count: int, metrics: dict[str, Any]) -> Run:
        runs = self._load()
        run = _new_run(width, height, density, count, metrics)
        runs.append(run)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(runs, indent=2), encoding="utf-8")
        return run

    def get_run(self, run_id: str) -> Run | None:
        return next((run for run in self._load() if run["id"] == run_id), None)

    def list_runs(self, width: int | None = None, height: int | None = None, density: float | None = None) -> list[Run]:
        wanted = {"width": width, "height": height, "density": density}
        return [
            run
            for run in self._load()
            if all(value is None or run[key] == value for key, value in wanted.items())
        ]


class RunModel(SQLModel, table=True):
    __tablename__ = "runs"
    id: str = Field(primary_key=True)
    width: int
    height: int
    density: float
    mazes: int
    metrics: str
    created_at: str

    def as_run(self) -> Run:
        return {
            "id": self.id,
            "width": self.width,
            "height": self.height,
            "density": self.density,
            "count": self.mazes,
            "metrics": json.loads(self.metrics),
            "created_at": self.created_at,
        }


class SqliteBenchmarkRepository:
    """Benchmark runs in a SQLite table through SQLModel."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(f"sqlite:///{self.path}")
        SQLModel.metadata.create_all(self.engine)

    def record_run(self, width: int, height: int, density: float, count: int, metrics: dict[str, Any]) -> Run:
        run = _new_run(width, height, density, count, metrics)
        row = RunModel(
            id=run["id"],
            width=width,
            height=height,
            density=density,
            mazes=count,
            metrics=json.dumps(metrics),
            created_at=run["created_at"],
        )
        with Session(self.engine) as session:
            session.add(row)
            session.commit()
        return run

    def get_run(self, run_id: str) -> Run | None:
        with Session(self.engine) as session:
            row = session.get(RunModel, run_id)
            return row.as_run() if row is not None else None

    def list_runs(self, width: int | None = None, height: int | None = None, density: float | None = None) -> list[Run]:
        stmt = select(RunModel)
        if width is not None:
            stmt = stmt.where(RunModel.width == width)
        if height is not None:
            stmt = stmt.where(RunModel.height == height)
        if density is not None:
            stmt = stmt.where(RunModel.density == density)
        with Session(self.engine) as session:
            return [row.as_run() for row in session.exec(stmt.order_by(RunModel.created_at))]

    def close(self) -> None:
        self.engine.dispose()


def open_repo(path: str | Path):
    """SQLite for a .db path, a JSON list for anything else."""
    path = Path(path)
    if path.suffix == ".db":
        return SqliteBenchmarkRepository(path)
    return JsonBenchmarkRepository(path)
