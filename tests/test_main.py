from route import Route


def _grid_3x3(build_grid):
    return build_grid([
        "0 1 0",
        "0 0 1",
        "1 0 0",
    ])


def test_render_route_marks_path_cells(main_module, solver_module, build_grid):
    grid = _grid_3x3(build_grid)
    (route,) = solver_module.solve(grid)

    assert main_module.render_route(route) == (
        "| # .\n"
        "| | #\n"
        "# | |\n"
    )
    assert main_module.render_route(route, path_glyph="*", obstacle_glyph="X", open_glyph="o") == (
        "* X o\n"
        "* * X\n"
        "X * *\n"
    )


def test_render_empty_route_shows_plain_grid(main_module, build_grid):
    grid = _grid_3x3(build_grid)

    assert main_module.render_route(Route(grid)) == grid.serialize()


def test_solve_report(main_module, build_grid):
    report = main_module.solve_report(_grid_3x3(build_grid))
    assert "1 solution(s)" in report
    assert "Route length: 5" in report

    blocked = main_module.solve_report(build_grid(["0 1 0"]))
    assert "No solution." in blocked


def test_solvers_agree(main_module, solver_module, build_grid):
    grid = build_grid([
        "0 0 0 0",
        "0 1 0 0",
        "0 0 0 1",
        "1 0 0 0",
    ])
    assert main_module.solvers_agree(solver_module.MazeSolver(grid))


def test_analyze_mazes_report(main_module, generator_module, maze_module):
    P = maze_module.Position
    gen = generator_module.MazeGenerator(8, 8, 30, P(0, 0), P(7, 7), seed=21)

    report = main_module.analyze_mazes(gen, 4)

    assert report.count == 4
    assert report.generate_ms_total >= 0
    assert report.avg_route_length >= 15
    assert set(report.metrics()) == {
        "generate_ms_total",
        "generate_ms_avg",
        "solve_ms_total",
        "solve_ms_avg",
        "avg_route_length",
    }


def test_time_generation(main_module):
    assert main_module.time_generation(2, 20, width=6, height=6, seed=3) >= 0


def test_cli_generate_then_solve(main_module, tmp_path, capsys):
    args = ["generate", "--width", "6", "--height", "6", "--density", "25",
            "--count", "2", "--seed", "8", "--out-dir", str(tmp_path)]
    assert main_module.main(args) == 0

    written = sorted(p.name for p in tmp_path.iterdir())
    assert written == ["Maze25_0.txt", "Maze25_1.txt"]
    content = (tmp_path / "Maze25_0.txt").read_text(encoding="utf-8")
    assert content.count("1") == 9

    capsys.readouterr()
    assert main_module.main(["solve", str(tmp_path / "Maze25_0.txt"), "--dest", "5", "5"]) == 0
    assert "solution(s)" in capsys.readouterr().out


def test_cli_generate_refuses_existing_file(main_module, tmp_path, capsys):
    (tmp_path / "Maze25_0.txt").write_text("keep me\n", encoding="utf-8")

    args = ["generate", "--width", "6", "--height", "6", "--density", "25",
            "--seed", "8", "--out-dir", str(tmp_path)]
    assert main_module.main(args) == 1

    assert "already exists" in capsys.readouterr().err
    assert (tmp_path / "Maze25_0.txt").read_text(encoding="utf-8") == "keep me\n"


def test_cli_reports_infeasible_density(main_module, tmp_path, capsys):
    args = ["generate", "--width", "5", "--height", "5", "--density", "90", "--out-dir", str(tmp_path)]
    assert main_module.main(args) == 1
    assert "error:" in capsys.readouterr().err


def test_cli_bench_records_runs(main_module, db_module, tmp_path):
    record = tmp_path / "bench.json"
    args = ["bench", "--width", "6", "--height", "6", "--densities", "20", "30",
            "--count", "2", "--seed", "1", "--record", str(record)]
    assert main_module.main(args) == 0

    runs = db_module.open_repo(record).list_runs(width=6, height=6)
    assert {r["density"] for r in runs} == {20, 30}
    assert all(r["count"] == 2 for r in runs)
