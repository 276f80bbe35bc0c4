"""Reusable base models for rosters, configuration and on-disk artifacts."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


def to_kebab(name: str) -> str:
    """Convert a snake_case field name to the kebab-case key used by node config files."""
    return name.replace("_", "-")


class DevnetModel(BaseModel):
    """
    A frozen pydantic base model.

    Accepts lax input (strings for paths, networks and enums), which is what
    command-line flags and JSON files hand us.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_default=True,
        frozen=True,
        extra="forbid",
    )

    def copy(self: Self, **kwargs: Any) -> Self:
        """Create a copy of the model with the updated fields that are validated."""
        return self.__class__(**(self.model_dump(exclude_unset=True) | kwargs))


class StrictBaseModel(DevnetModel):
    """A strict, immutable pydantic base model."""

    model_config = DevnetModel.model_config | {"strict": True}


class KebabModel(StrictBaseModel):
    """
    A strict model serialized with kebab-case keys.

    For example, the field `data_dir` is written as `data-dir`, matching the
    flag names the node binary reads from its config file.
    """

    model_config = StrictBaseModel.model_config | {"alias_generator": to_kebab}
