"""Verification configuration.

A Verification instance is the shared configuration cell that a contract
consults at every call of its contract functions. Several contracts may share
one cell, so that verification can be switched off (or back on) for a whole
group of operations at once, for instance from a YAML file or from the
environment.

The flags are read without locking. Changing them while calls are in flight
is allowed: calls that already passed a check point are not affected. Treat
them as coarse configuration, not as hot-path state.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

# Constants
DEFAULT_ENV_PREFIX = "CONTRACT_FUNCTIONS_"


class Verification(BaseModel):
    """Dynamic verification toggles.

    Attributes:
        verify: When False, contract functions call their implementation
            directly, without checking any condition
        verify_postconditions: When False, preconditions are still checked,
            but postconditions and exception conditions are not
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    verify: bool = True
    verify_postconditions: bool = True

    @field_validator("verify", "verify_postconditions", mode="before")
    @classmethod
    def validate_flag(cls, v):
        # YAML and environment values arrive as strings or ints now and then
        if isinstance(v, str):
            normalized = v.strip().lower()
            if normalized in {"1", "true", "yes", "on"}:
                return True
            if normalized in {"0", "false", "no", "off", ""}:
                return False
            raise ValueError(f"Not a boolean flag: {v!r}")
        return v

    def update_from(self, other: "Verification") -> None:
        """Copy the flags of other into this cell.

        Contracts hold on to their cell, so a reloaded configuration reaches
        them only through this method.
        """
        self.verify = other.verify
        self.verify_postconditions = other.verify_postconditions

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Verification":
        """Load from environment variables.

        Reads ``{prefix}VERIFY`` and ``{prefix}VERIFY_POSTCONDITIONS``. Absent
        variables keep their defaults.

        Args:
            prefix: Variable name prefix
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Verification instance
        """
        environ = os.environ if environ is None else environ
        data = {}
        for field_name in cls.model_fields:
            key = f"{prefix}{field_name.upper()}"
            if key in environ:
                data[field_name] = environ[key]
        logger.debug("Verification loaded from environment: %s", data)
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path) -> "Verification":
        """Load from a specific YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            pydantic.ValidationError: If the file content is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Verification configuration not found at {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        logger.debug("Verification loaded from %s", path)
        return cls(**(data or {}))

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> "Verification":
        """Load from YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls(**(data or {}))

    def to_yaml(self, path: Path) -> None:
        """Save to a specific YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def to_yaml_string(self) -> str:
        """Export to YAML string."""
        return yaml.safe_dump(self.model_dump(), default_flow_style=False, sort_keys=False)


__all__ = ["Verification", "DEFAULT_ENV_PREFIX"]
