"""End-to-end tests: headless recording, run analysis and the table command."""
import pytest

from orrery import analyze_run
from orrery.cli import build_parser, main
from orrery.core.kepler import orbital_period
from orrery.core.logging_utils import RunLogger
from orrery.core.driver import SimulationDriver
from orrery.core.model import Body, CentralBody, OrbitalElements


@pytest.fixture
def recorded_run(tmp_path):
    central = CentralBody("Star", 1.98847e30)
    bodies = [
        Body("Inner", 1.0e20, 1.0e6, OrbitalElements(a=1.0e10, e=0.3, m0=10.0)),
        Body("Outer", 1.0e20, 2.0e6, OrbitalElements(a=2.0e10, e=0.1)),
    ]
    driver = SimulationDriver(central, bodies)
    driver.set_time_scale(orbital_period(1.0e10, central) / 50.0)
    with RunLogger(tmp_path, "analysis") as run_logger:
        run_logger.write_meta(driver.meta())
        driver.run_logger = run_logger
        for _ in range(400):
            driver.step(1.0)
    return run_logger.run_dir


def test_analyze_measures_periods(recorded_run):
    summary = analyze_run.analyze(recorded_run)
    by_name = {body.name: body for body in summary.bodies}
    inner = by_name["Inner"]
    assert inner.periapsis_count == 8
    assert inner.period_error == pytest.approx(0.0, abs=1e-6)
    assert inner.energy_error < 1e-6
    assert by_name["Outer"].period_measured is not None
    for path in summary.figures:
        assert path.exists()


def test_analyze_main_prints_summary(recorded_run, capsys):
    analyze_run.main([str(recorded_run)])
    out = capsys.readouterr().out
    assert "Inner" in out
    assert "T_theory" in out


def test_analyze_missing_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        analyze_run.analyze(tmp_path)


def test_cli_table(capsys):
    main(["table", "--days", "0"])
    out = capsys.readouterr().out
    assert "Earth" in out
    assert "Neptune" in out


def test_cli_record_then_analyze(tmp_path, capsys):
    main(["record", "--frames", "120", "--dt", "1", "--time-scale", "3e6", "--runs-dir", str(tmp_path), "--run-id", "cli"])
    assert (tmp_path / "cli" / "timeseries.csv").exists()
    main(["analyze", "--runs-dir", str(tmp_path)])
    out = capsys.readouterr().out
    assert "Run: cli" in out
    assert "Mercury" in out


def test_cli_reports_bad_input(tmp_path):
    with pytest.raises(SystemExit):
        main(["table", "--bodies", str(tmp_path / "missing.csv")])
    with pytest.raises(SystemExit):
        main(["table", "--time-scale", "-5"])
    config = tmp_path / "bad.json"
    config.write_text('{"scale": {"alpha": "1e-9"}}')
    with pytest.raises(SystemExit):
        main(["table", "--config", str(config)])


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
