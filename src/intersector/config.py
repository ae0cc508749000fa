"""Configuration management for Intersector.

This module handles loading, validating, and providing access to the
settings that control how search regions are built and how distances
are measured. Configuration can come from:
- Default values
- A TOML configuration file
- Command-line arguments (which override the file)

Example:
    >>> from intersector.config import Config
    >>> config = Config.load("intersector.toml")
    >>> config.intersect.anchor
    <Anchor.FIVE: '5'>
"""

from __future__ import annotations

import logging
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

import attrs

logger = logging.getLogger(__name__)

# =============================================================================
# Enums
# =============================================================================


class Anchor(Enum):
    """Position from which start/stop offsets are measured."""

    FIVE = "5"
    THREE = "3"
    MID = "m"

    @classmethod
    def parse(cls, value: Anchor | str) -> Anchor:
        """Parse an anchor from '5', '3', 'm' or their long names."""
        if isinstance(value, cls):
            return value
        aliases = {
            "5": cls.FIVE,
            "five": cls.FIVE,
            "3": cls.THREE,
            "three": cls.THREE,
            "m": cls.MID,
            "mid": cls.MID,
        }
        try:
            return aliases[str(value).strip().lower()]
        except KeyError:
            raise ValueError(
                f"Invalid anchor position: '{value}'. Expected one of 5, 3, m"
            ) from None


class ReferencePoint(Enum):
    """Reference point used when measuring distance to a target."""

    START = "start"
    MID = "mid"

    @classmethod
    def parse(cls, value: ReferencePoint | str) -> ReferencePoint:
        """Parse a reference point from 'start' or 'mid'."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid reference point: '{value}'. Expected 'start' or 'mid'"
            ) from None


# =============================================================================
# Helpers
# =============================================================================


def split_comma_list(values: list[str] | tuple[str, ...] | str | None) -> list[str]:
    """Flatten repeated option values, splitting comma-delimited entries.

    Args:
        values: Strings, each possibly a comma-delimited list.

    Returns:
        Ordered list of unique, non-empty items.
    """
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]

    items: list[str] = []
    for value in values:
        for item in value.split(","):
            item = item.strip()
            if item and item not in items:
                items.append(item)
    return items


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class IntersectConfig:
    """Configuration for region building and distance measurement.

    Attributes:
        feature_types: Feature types to search for (``type`` or ``type:source``).
        extend: Extend the search region by this many bp on each side.
        start_offset: Relative start of the search region from the anchor.
        stop_offset: Relative stop of the search region from the anchor.
        anchor: Position from which offsets are measured.
        reference_point: Point used to measure distance to the target.
    """

    feature_types: list[str] = attrs.field(factory=list, converter=split_comma_list)
    extend: int | None = attrs.field(default=None, converter=_optional_int)
    start_offset: int | None = attrs.field(default=None, converter=_optional_int)
    stop_offset: int | None = attrs.field(default=None, converter=_optional_int)
    anchor: Anchor = attrs.field(default=Anchor.FIVE, converter=Anchor.parse)
    reference_point: ReferencePoint = attrs.field(
        default=ReferencePoint.START, converter=ReferencePoint.parse
    )

    def __attrs_post_init__(self) -> None:
        if (self.start_offset is None) != (self.stop_offset is None):
            logger.warning(
                "Both start and stop offsets are required to adjust the search "
                "region; ignoring the single offset given"
            )

    @property
    def use_offsets(self) -> bool:
        """Whether both start and stop offsets are set."""
        return self.start_offset is not None and self.stop_offset is not None

    def column_metadata(self) -> dict[str, dict[str, str]]:
        """Metadata recorded on the output columns.

        Returns:
            Mapping of output column name to metadata key/values.
        """
        name_meta: dict[str, str] = {}
        if self.use_offsets:
            name_meta["Start"] = str(self.start_offset)
            name_meta["Stop"] = str(self.stop_offset)
        if self.extend is not None:
            name_meta["Extend"] = str(self.extend)

        reference = {"reference": self.reference_point.value}
        return {
            "Target_Name": name_meta,
            "Target_Distance": dict(reference),
            "Target_Overlap": dict(reference),
        }


@attrs.define
class Config:
    """Main configuration container for Intersector.

    Attributes:
        intersect: Region and distance configuration.
        database: Default feature store path(s).
        genome: Optional FASTA used for chromosome lengths.
    """

    intersect: IntersectConfig = attrs.Factory(IntersectConfig)
    database: list[str] = attrs.Factory(list)
    genome: str | None = None

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from a TOML file.

        The file may contain top-level ``database`` and ``genome`` keys and
        an ``[intersect]`` table whose keys match IntersectConfig fields.

        Args:
            path: Path to configuration file. If None, returns defaults.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid configuration file {path}: {e}") from e

        section = data.get("intersect", {})
        known = {field.name for field in attrs.fields(IntersectConfig)}
        unknown = set(section) - known
        if unknown:
            raise ValueError(
                f"Unknown intersect settings in {path}: {', '.join(sorted(unknown))}"
            )

        database = data.get("database", [])
        if isinstance(database, str):
            database = [database]

        return cls(
            intersect=IntersectConfig(**section),
            database=list(database),
            genome=data.get("genome"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return attrs.asdict(
            self,
            value_serializer=lambda _, __, v: v.value if isinstance(v, Enum) else v,
        )
