"""
Batch analysis runner.

Expands an analysis configuration into (scenario, building) work items and
runs each as an independent ``openstudio run`` job on a fixed-size worker
pool. Failed jobs are recorded with status ``Fail`` and never retried.

Handles:
- OSW generation per scenario
- Weather download and extraction
- Parallel job execution with a progress line
- Result collection into CSV tables

Usage:
    summary = run_analysis(Path("national_baseline.yml"), n_threads=4)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
import json
import logging
import queue
import re
import shutil
import subprocess
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

import pandas as pd

from .. import __version__
from ..core.config import get_max_workers, settings
from ..core.exceptions import AnalysisError
from ..weather import fetch_weather, unzip_weather
from .config import AnalysisConfig, load_config
from .osw import BUILD_EXISTING_MODEL, change_building_id, create_osws

logger = logging.getLogger(__name__)

PROGRAM_NAME = "resmeasures"
STATUS_SUCCESS = "Success"
STATUS_FAIL = "Fail"

WorkItem = Tuple[str, Path, int]


def version_string() -> str:
    return f"{PROGRAM_NAME} v{__version__}"


def get_elapsed_time(t1: float, t0: float) -> str:
    """Elapsed time between two timestamps as ``"12.3s"`` or ``"1.5min"``."""
    s = t1 - t0
    if s > 60:
        return f"{s / 60:.1f}min"
    return f"{s:.1f}s"


def format_progress(n_threads: int, completed: int, total: int, elapsed: str) -> str:
    width = len(str(total))
    return f"[Parallel(n_jobs={n_threads})]: {completed:>{width}} / {total} | elapsed: {elapsed:>8}"


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


@dataclass
class JobResult:
    """Outcome of one (scenario, building) job."""
    upgrade_name: str
    building_id: int
    job_id: int
    completed_status: str
    characteristics: Dict[str, Any] = field(default_factory=dict)
    outputs: Dict[str, Any] = field(default_factory=dict)
    cli_output: str = ""

    @property
    def osw_name(self) -> str:
        return f"{self.building_id:04d}-{self.upgrade_name}.osw"

    def _row(self, values: Dict[str, Any]) -> Dict[str, Any]:
        row = {"OSW": self.osw_name, "job_id": self.job_id, "completed_status": self.completed_status}
        row.update(values)
        return row

    def characteristics_row(self) -> Dict[str, Any]:
        return self._row(self.characteristics)

    def output_row(self) -> Dict[str, Any]:
        return self._row(self.outputs)


@dataclass
class AnalysisSummary:
    results_dir: Path
    results: List[JobResult]
    characteristics_csv: Path
    output_csv: Path
    cli_log: Path
    elapsed: str

    @property
    def n_failed(self) -> int:
        return sum(1 for r in self.results if r.completed_status == STATUS_FAIL)


# =============================================================================
# Single job
# =============================================================================

class OSWRunner:
    """
    Run one OSW with the OpenStudio CLI.

    Usage:
        runner = OSWRunner()
        status, characteristics, outputs, log = runner.run_and_check(osw, worker_dir, "")
    """

    def __init__(self, openstudio_path: Optional[str] = None, timeout_seconds: Optional[int] = None):
        self.openstudio_path = openstudio_path or self._find_openstudio()
        self.timeout_seconds = timeout_seconds or settings.job_timeout_seconds

    def run_and_check(self, osw: Path, worker_dir: Path, cli_output: str,
                      measures_only: bool = False) -> Tuple[str, Dict[str, Any], Dict[str, Any], str]:
        """
        Run a workflow and collect its step values.

        Returns:
            (completed status, characteristics, outputs, cli output)
        """
        cmd = [self.openstudio_path, "run"]
        if measures_only:
            cmd.append("--measures_only")
        cmd += ["-w", str(osw)]
        cli_output += " ".join(cmd) + "\n"

        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, cwd=worker_dir,
                                  timeout=self.timeout_seconds)
        except subprocess.TimeoutExpired:
            cli_output += f"Simulation timed out after {self.timeout_seconds} s.\n"
            return STATUS_FAIL, {}, {}, cli_output
        except OSError as e:
            cli_output += f"Could not start simulation: {e}\n"
            return STATUS_FAIL, {}, {}, cli_output

        cli_output += proc.stdout or ""
        cli_output += proc.stderr or ""

        characteristics, outputs, status = self.collect_step_values(worker_dir / "out.osw")
        if proc.returncode != 0:
            status = STATUS_FAIL
        return status, characteristics, outputs, cli_output

    @staticmethod
    def collect_step_values(out_osw: Path) -> Tuple[Dict[str, Any], Dict[str, Any], str]:
        """
        Read registered values from a finished workflow.

        Values of BuildExistingModel are building characteristics; values of
        every other step are outputs. Keys are ``{measure}.{value name}`` with
        the measure name in snake case.
        """
        if not out_osw.exists():
            return {}, {}, STATUS_FAIL

        try:
            data = json.loads(out_osw.read_text())
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {out_osw}: {e}")
            return {}, {}, STATUS_FAIL
        if not isinstance(data, dict):
            logger.warning(f"Unexpected content in {out_osw}")
            return {}, {}, STATUS_FAIL
        characteristics: Dict[str, Any] = {}
        outputs: Dict[str, Any] = {}
        for step in data.get("steps", []):
            measure = step.get("measure_dir_name", "")
            target = characteristics if measure == BUILD_EXISTING_MODEL else outputs
            for value in (step.get("result") or {}).get("step_values", []):
                target[f"{_snake(measure)}.{value['name']}"] = value.get("value")
        return characteristics, outputs, data.get("completed_status", STATUS_FAIL)

    @staticmethod
    def _find_openstudio() -> str:
        candidates = [settings.openstudio_path, shutil.which("openstudio")]
        for path in candidates:
            if path and Path(path).exists():
                return path
        raise AnalysisError("openstudio not found. Install the OpenStudio CLI or set RESMEASURES_OPENSTUDIO_PATH.")


def samples_osw(runner: OSWRunner, results_dir: Path, upgrade_name: str, workflow: Path, building_id: int,
                job_id: int, measures_only: bool = False) -> JobResult:
    """Run one building of one scenario in ``results_dir/run{job_id}``."""
    scenario_dir = results_dir / "osw" / upgrade_name
    worker_dir = results_dir / f"run{job_id}"
    worker_dir.mkdir(exist_ok=True)

    osw = worker_dir / workflow.name
    shutil.copy(workflow, osw)
    change_building_id(osw, building_id)

    cli_output = f"Building ID: {building_id}. Upgrade Name: {upgrade_name}. Job ID: {job_id}.\n"
    status, characteristics, outputs, cli_output = runner.run_and_check(osw, worker_dir, cli_output, measures_only)

    run_dir = worker_dir / "run"
    for name in ("measures.osw", "measures-upgrade.osw"):
        src = run_dir / name
        if src.exists():
            shutil.move(str(src), str(scenario_dir / f"{building_id}-{name}"))

    logger.debug(f"Job finished: {status}",
                 extra={"building_id": building_id, "upgrade_name": upgrade_name, "job_id": job_id})
    return JobResult(upgrade_name, building_id, job_id, status, characteristics, outputs, cli_output)


# =============================================================================
# Results
# =============================================================================

def write_summary_results(results_dir: Path, filename: str, rows: List[Dict[str, Any]]) -> Path:
    """Write result rows as CSV, ordered by OSW name."""
    path = results_dir / filename
    df = pd.DataFrame(rows)
    if not df.empty:
        df = df.sort_values("OSW").reset_index(drop=True)
    df.to_csv(path, index=False)
    logger.info(f"Wrote {len(df)} rows to {path}")
    return path


# =============================================================================
# Analysis
# =============================================================================

def prepare_weather(cfg: AnalysisConfig, yml_dir: Path, weather_dir: Path) -> None:
    """
    Populate the weather directory unless it already holds EPW files.

    Raises:
        AnalysisError: If the configuration names no weather source
    """
    if weather_dir.is_dir() and any(weather_dir.glob("*.epw")):
        logger.info(f"Using existing weather directory {weather_dir}")
        return

    if cfg.weather_files_url:
        fetch_weather(cfg.weather_files_url, weather_dir, timeout=settings.download_timeout_seconds)
    elif cfg.weather_files_path:
        zip_path = Path(cfg.weather_files_path)
        if not zip_path.is_absolute():
            zip_path = yml_dir / zip_path
        unzip_weather(zip_path, weather_dir)
    else:
        raise AnalysisError("Must include 'weather_files_url' or 'weather_files_path' in yml.")


def run_jobs(runner: OSWRunner, results_dir: Path, work_items: List[WorkItem], n_threads: int,
             measures_only: bool = False, start_time: Optional[float] = None,
             progress_callback: Optional[Callable[[str], None]] = None) -> List[JobResult]:
    """
    Run work items on a pool of ``n_threads`` workers.

    Each worker owns one job id, so a ``run{job_id}`` folder is never used by
    two jobs at once.
    """
    start_time = start_time or time.time()
    total = len(work_items)
    job_ids: "queue.Queue[int]" = queue.Queue()
    for job_id in range(1, n_threads + 1):
        job_ids.put(job_id)

    def _run(item: WorkItem) -> JobResult:
        upgrade_name, workflow, building_id = item
        job_id = job_ids.get()
        try:
            return samples_osw(runner, results_dir, upgrade_name, workflow, building_id, job_id, measures_only)
        except Exception as e:
            logger.error(f"Job failed: {e}", exc_info=True,
                         extra={"building_id": building_id, "upgrade_name": upgrade_name, "job_id": job_id})
            cli_output = (f"Building ID: {building_id}. Upgrade Name: {upgrade_name}. Job ID: {job_id}.\n"
                          f"Job failed: {type(e).__name__}: {e}\n")
            return JobResult(upgrade_name, building_id, job_id, STATUS_FAIL, cli_output=cli_output)
        finally:
            job_ids.put(job_id)

    results: List[JobResult] = []
    lock = threading.Lock()
    with ThreadPoolExecutor(max_workers=n_threads) as executor:
        futures = [executor.submit(_run, item) for item in work_items]
        for future in as_completed(futures):
            result = future.result()
            with lock:
                results.append(result)
                line = format_progress(n_threads, len(results), total, get_elapsed_time(time.time(), start_time))
            if progress_callback:
                progress_callback(line)
            else:
                print(line)
    return results


def run_analysis(yml_path: Path, n_threads: Optional[int] = None, measures_only: bool = False,
                 weather_dir: Optional[Path] = None, runner: Optional[OSWRunner] = None,
                 progress_callback: Optional[Callable[[str], None]] = None) -> AnalysisSummary:
    """
    Run every scenario of an analysis for buildings 1..n_datapoints.

    Args:
        yml_path: Analysis YAML file
        n_threads: Worker pool size (default: CPU count)
        measures_only: Only run the measures, not the simulation
        weather_dir: Weather directory (default: settings.weather_dir)
        runner: Job runner (default: OSWRunner())
        progress_callback: Receives each progress line

    Returns:
        AnalysisSummary with result rows and output paths

    Raises:
        ConfigError: If the YAML file is invalid
        AnalysisError: If the output directory exists or no weather source is given
    """
    start_time = time.time()
    yml_path = Path(yml_path)
    cfg = load_config(yml_path)
    n_threads = n_threads or get_max_workers()

    results_dir = (yml_path.parent / cfg.output_directory).resolve()
    if results_dir.exists():
        raise AnalysisError(f"Output directory {cfg.output_directory} already exists.")
    results_dir.mkdir(parents=True)
    (results_dir / "osw").mkdir()

    osw_paths = create_osws(cfg, yml_path, results_dir)
    prepare_weather(cfg, yml_path.parent, weather_dir or settings.weather_dir)

    runner = runner or OSWRunner()
    work_items: List[WorkItem] = [
        (upgrade_name, osw_path, building_id)
        for upgrade_name, osw_path in osw_paths.items()
        for building_id in range(1, cfg.n_datapoints + 1)
    ]
    logger.info(f"Running {len(work_items)} jobs on {n_threads} worker(s)")

    results = run_jobs(runner, results_dir, work_items, n_threads, measures_only, start_time, progress_callback)

    characteristics_csv = write_summary_results(results_dir, "results_characteristics.csv",
                                                [r.characteristics_row() for r in results])
    output_csv = write_summary_results(results_dir, "results_output.csv", [r.output_row() for r in results])
    cli_log = results_dir / "cli_output.log"
    with open(cli_log, "a") as f:
        for result in results:
            f.write(result.cli_output + "\n\n")

    summary = AnalysisSummary(results_dir, results, characteristics_csv, output_csv, cli_log,
                              get_elapsed_time(time.time(), start_time))
    if summary.n_failed:
        logger.warning(f"Failures detected. See {cli_log}.")
    return summary
