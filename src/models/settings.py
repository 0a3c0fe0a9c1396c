"""Global system settings consulted by the reward formula."""

from pydantic import BaseModel, ConfigDict, Field


class SystemSettings(BaseModel):
    """Reward settings."""
    model_config = ConfigDict(extra="ignore")

    task_completion_base: float = Field(..., gt=0, description="Base coins per difficulty point")
    complexity_multiplier: float = Field(..., gt=0, description="Global complexity multiplier")
