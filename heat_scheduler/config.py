"""
Configuration management for the heat scheduler.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Dict, Optional, Union, Any


class ScheduleOptions(BaseModel):
    """Options recognised by the scheduling entry points."""
    model_config = ConfigDict(extra="ignore")

    speed_matching: bool = Field(default=True, description="Group cars into speed tiers once results exist")


class Columns(BaseModel):
    """Roster column names for CSV/Excel import."""
    car_number: str = Field(default="Car Number", description="Column holding the car number")
    name: str = Field(default="Name", description="Column holding the participant name")

    @model_validator(mode='after')
    def validate_distinct(self):
        if self.car_number == self.name:
            raise ValueError(f"Roster columns must differ, both are {self.car_number!r}")
        return self


class ExcelOut(BaseModel):
    """Excel output configuration."""
    include_summaries: bool = Field(default=True, description="Include lane usage and summary sheets")
    sheets: Dict[str, str] = Field(
        default_factory=lambda: {
            "heats": "Heats",
            "lane_usage": "Lane Usage",
            "summary": "Summary",
        },
        description="Sheet names"
    )


class SchedulerConfig(BaseModel):
    """Main configuration for the heat scheduler."""
    lane_count: int = Field(default=4, ge=2, le=16, description="Number of lanes on the track")
    options: ScheduleOptions = Field(default_factory=ScheduleOptions)
    columns: Columns = Field(default_factory=Columns)
    excel: ExcelOut = Field(default_factory=ExcelOut)


def resolve_options(options: Optional[Union[ScheduleOptions, Dict[str, Any]]]) -> ScheduleOptions:
    """Normalise ``None``, a plain dict or a ScheduleOptions into ScheduleOptions."""
    if options is None:
        return ScheduleOptions()
    if isinstance(options, ScheduleOptions):
        return options
    return ScheduleOptions(**options)


def load_config(config_path: str) -> SchedulerConfig:
    """Load configuration from YAML file."""
    import yaml

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    return SchedulerConfig(**config_data)


def save_config(config: SchedulerConfig, config_path: str) -> None:
    """Save configuration to YAML file."""
    import yaml

    with open(config_path, 'w') as f:
        yaml.dump(config.model_dump(mode="json"), f, default_flow_style=False, indent=2)
