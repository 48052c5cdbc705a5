"""Options controlling how the help document is produced."""

import os
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

ENV_LOADING_POLICY = "API_HELP_LOADING_POLICY"
SECTION_NAME = "ApiHelp"


class LoadingPolicy(str, Enum):
    """How much detail the bulk listing carries."""

    EAGER = "Eager"  # full per-endpoint expansion
    LAZY = "Lazy"  # "METHOD path" identifiers only

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class ApiHelpOptions(BaseModel):
    """Options for the help document. Only ``LoadingPolicy`` is recognised."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    loading_policy: LoadingPolicy = Field(default=LoadingPolicy.EAGER, alias="LoadingPolicy")

    @classmethod
    def from_file(cls, file_path: Path) -> "ApiHelpOptions":
        """Load options from a YAML (or JSON) file.

        The options may sit at the top level or under an ``ApiHelp`` section.
        """
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        if isinstance(data, dict) and isinstance(data.get(SECTION_NAME), dict):
            data = data[SECTION_NAME]
        return cls.model_validate(data)

    @classmethod
    def from_env(cls, base: "ApiHelpOptions | None" = None) -> "ApiHelpOptions":
        """Apply ``API_HELP_LOADING_POLICY`` on top of ``base`` (or the defaults)."""
        base = base or cls()
        policy = os.getenv(ENV_LOADING_POLICY)
        if not policy:
            return base
        return base.model_copy(update={"loading_policy": LoadingPolicy(policy)})

    @classmethod
    def load(cls, file_path: Path | None = None) -> "ApiHelpOptions":
        """Defaults, then the optional file, then the environment."""
        base = cls.from_file(file_path) if file_path is not None else cls()
        return cls.from_env(base)
