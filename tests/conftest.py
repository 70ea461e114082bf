import importlib

import pytest


def import_required(module_name: str):
    """
    Import a project module with a clearer failure message than ModuleNotFoundError.
    """
    try:
        return importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        pytest.fail(
            f"Required module '{module_name}.py' could not be imported. "
            f"Original error: {e}"
        )


@pytest.fixture
def maze_module():
    return import_required("maze")


@pytest.fixture
def solver_module():
    return import_required("solver")


@pytest.fixture
def generator_module():
    return import_required("generator")


@pytest.fixture
def mazefile_module():
    return import_required("mazefile")


@pytest.fixture
def main_module():
    return import_required("main")


@pytest.fixture
def db_module():
    return import_required("db")


@pytest.fixture(params=["runs.json", "runs.db"])
def repo(request, tmp_path, db_module):
    """Benchmark repository, once per storage backend."""
    store = db_module.open_repo(tmp_path / request.param)
    yield store
    if hasattr(store, "close"):
        store.close()


@pytest.fixture
def build_grid(maze_module):
    """Build a grid from a list of "0 1 0" style rows."""

    def _build(rows, start=(0, 0), dest=None):
        Position = maze_module.Position
        height = len(rows)
        width = len(rows[0].split())
        dest = dest if dest is not None else (height - 1, width - 1)
        return maze_module.Grid.parse("\n".join(rows), Position(*start), Position(*dest))

    return _build
