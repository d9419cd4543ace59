"""
Analysis configuration.

The batch driver reads a buildstock-style YAML file:

    output_directory: ../national_baseline
    weather_files_url: https://example.org/weather.zip
    sampler:
      type: residential_quota
      args:
        n_datapoints: 10
    workflow_generator:
      type: residential_default
      args:
        simulation_output:
          include_enduse_subcategories: true
        measures:
          - measure_dir_name: ResidentialMiscPlugLoads
    upgrades:
      - upgrade_name: Triple Pane Windows
        options:
          - option: Windows|Triple, Low-E, Non-metal, Air, L-Gain
            costs:
              - value: 45.77
                multiplier: Window Area (ft^2)
            lifetime: 30
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, field_validator, model_validator

from ..core.exceptions import ConfigError

logger = logging.getLogger(__name__)

BASELINE = "Baseline"
QUOTA_DOWNSELECT = "residential_quota_downselect"
STEP_LISTS = ("measures", "reporting_measures")


class CostConfig(BaseModel):
    """One cost line of an upgrade option."""
    value: Optional[float] = None
    multiplier: Optional[str] = None


class OptionConfig(BaseModel):
    """One option applied by an upgrade."""
    option: str
    lifetime: Optional[float] = None
    apply_logic: Optional[Any] = None
    costs: List[CostConfig] = Field(default_factory=list)


class UpgradeConfig(BaseModel):
    upgrade_name: str
    options: List[OptionConfig] = Field(min_length=1)
    package_apply_logic: Optional[Any] = None

    @property
    def scenario_name(self) -> str:
        """Upgrade name with spaces removed, used in file and folder names."""
        return self.upgrade_name.replace(" ", "")


class SamplerArgs(BaseModel):
    model_config = ConfigDict(extra="allow")

    n_datapoints: PositiveInt
    logic: Optional[Any] = None
    resample: bool = False


class SamplerConfig(BaseModel):
    type: str = "residential_quota"
    args: SamplerArgs

    @model_validator(mode="after")
    def check_downselect_logic(self) -> "SamplerConfig":
        if self.type == QUOTA_DOWNSELECT and self.args.logic is None:
            raise ValueError(f"'{QUOTA_DOWNSELECT}' requires 'args.logic'.")
        return self


class WorkflowGeneratorConfig(BaseModel):
    """
    Workflow generator arguments.

    Keys of ``args`` are measure keys mapped to their arguments, except
    ``measures`` and ``reporting_measures`` which are lists of steps. Key
    order is kept; it is the order of the generated steps.
    """
    type: str = "residential_default"
    args: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("args")
    @classmethod
    def check_step_lists(cls, args: Dict[str, Any]) -> Dict[str, Any]:
        for key in STEP_LISTS:
            if key not in args:
                continue
            if not isinstance(args[key], list):
                raise ValueError(f"'{key}' must be a list of measure steps.")
            for step in args[key]:
                if not isinstance(step, dict) or "measure_dir_name" not in step:
                    raise ValueError(f"Every entry of '{key}' needs a 'measure_dir_name'.")
        return args


class AnalysisConfig(BaseModel):
    """Top level of the analysis YAML file."""
    model_config = ConfigDict(extra="allow")

    buildstock_directory: Optional[str] = None
    project_directory: Optional[str] = None
    output_directory: str
    weather_files_url: Optional[str] = None
    weather_files_path: Optional[str] = None
    sampler: SamplerConfig
    workflow_generator: WorkflowGeneratorConfig = Field(default_factory=WorkflowGeneratorConfig)
    upgrades: List[UpgradeConfig] = Field(default_factory=list)

    @property
    def n_datapoints(self) -> int:
        return self.sampler.args.n_datapoints

    @property
    def upgrade_names(self) -> List[str]:
        return [BASELINE] + [u.scenario_name for u in self.upgrades]


def load_config(path: Union[str, Path]) -> AnalysisConfig:
    """
    Load and validate an analysis YAML file.

    Raises:
        ConfigError: If the file is missing, is not YAML, or fails validation
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"'{path}' does not exist.")

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse '{path}': {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must contain a mapping at the top level.")

    try:
        cfg = AnalysisConfig.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"])
        raise ConfigError(f"Invalid analysis configuration '{path}': {field}: {first['msg']}", field=field) from e

    logger.debug(f"Loaded {path}: {cfg.n_datapoints} datapoints, {len(cfg.upgrades)} upgrade(s)")
    return cfg
