"""
Configuration loader & schema for geochunk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml  # type: ignore
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from geochunk.core.errors import err

DEFAULT_TARGET_POPULATION = 250_000
DEFAULT_CODE_LENGTH = 5


class GeochunkConfig(BaseModel):
    """
    Settings for building a geochunk classifier.

    Attributes:
      target_population (int): Approximate population wanted in each chunk.
      code_length (int): Number of digits in a full postal code.
      population_path (Optional[Path]): CSV or Parquet file of (code, population) rows.
      code_column (str): Column holding the postal code.
      population_column (str): Column holding the population count.
    """

    target_population: int = Field(
        DEFAULT_TARGET_POPULATION, gt=0, description="Approximate population per chunk"
    )
    code_length: int = Field(
        DEFAULT_CODE_LENGTH, ge=1, le=10, description="Digits in a full postal code"
    )
    population_path: Optional[Path] = Field(
        None, description="Population table (CSV or Parquet)"
    )
    code_column: str = Field("zip", min_length=1, description="Postal code column name")
    population_column: str = Field(
        "pop", min_length=1, description="Population column name"
    )

    @model_validator(mode="after")
    def check_columns_distinct(self):
        if self.code_column == self.population_column:
            raise ValueError("code_column and population_column must differ")
        return self

    model_config = ConfigDict(extra="forbid", frozen=True)

    def with_overrides(self, **overrides) -> "GeochunkConfig":
        """Return a copy with every non-``None`` override applied and re-validated."""
        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        payload = self.model_dump()
        payload.update(updates)
        try:
            return GeochunkConfig.model_validate(payload)
        except ValidationError as e:
            raise err("E303_CONFIG_INVALID", f"invalid override: {e}") from e


def load_config(path: Path) -> GeochunkConfig:
    """
    Load and validate a GeochunkConfig from a YAML file.

    Parameters
    ----------
    path : Path
        YAML file whose top-level keys match ``GeochunkConfig`` fields.
        A relative ``population_path`` is resolved against the file's directory.

    Returns
    -------
    GeochunkConfig
        Validated config object.

    Raises
    ------
    ConfigError
        If the file is missing, is not a mapping, or fails validation.
    """
    if not path.exists():
        raise err("E302_CONFIG_MISSING", f"config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise err("E303_CONFIG_INVALID", f"config '{path}' is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise err("E303_CONFIG_INVALID", f"config '{path}' must decode to a mapping")

    raw_path = data.get("population_path")
    if isinstance(raw_path, str) and not Path(raw_path).is_absolute():
        data["population_path"] = str(path.parent / raw_path)

    try:
        return GeochunkConfig.model_validate(data)
    except ValidationError as e:
        raise err("E303_CONFIG_INVALID", f"error parsing config '{path}':\n{e}") from e
