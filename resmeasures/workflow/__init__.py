"""Batch driver: analysis configuration, workflow generation and parallel job runs."""

from .apply_logic import make_apply_logic_arg
from .config import AnalysisConfig, UpgradeConfig, OptionConfig, CostConfig, SamplerConfig, load_config
from .osw import create_osws, change_building_id
from .runner import (
    AnalysisSummary,
    JobResult,
    OSWRunner,
    get_elapsed_time,
    run_analysis,
    version_string,
)

__all__ = [
    "make_apply_logic_arg",
    "AnalysisConfig",
    "UpgradeConfig",
    "OptionConfig",
    "CostConfig",
    "SamplerConfig",
    "load_config",
    "create_osws",
    "change_building_id",
    "AnalysisSummary",
    "JobResult",
    "OSWRunner",
    "get_elapsed_time",
    "run_analysis",
    "version_string",
]
