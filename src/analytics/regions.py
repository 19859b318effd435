"""
Region loading and centroid classification.

Region declarations are a mapping of name -> {x, y, width, height}, read from
a YAML or JSON file (JSON is valid YAML, so one loader handles both):

    Left:  {x: 0,   y: 0, width: 320, height: 480}
    Right: {x: 320, y: 0, width: 320, height: 480}

Declaration order matters: when regions overlap, the first declared region
that contains a point wins.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, ValidationError

from models.errors import InvalidInputError, RegionLoadError
from models.region import Region

Number = Union[StrictInt, StrictFloat]


class RegionSpec(BaseModel):
    """Schema for a single region entry. Floats are truncated toward zero."""

    model_config = ConfigDict(allow_inf_nan=False)

    x: Number
    y: Number
    width: Number
    height: Number

    def to_region(self, name: str) -> Region:
        return Region(
            name=name,
            x=int(self.x),
            y=int(self.y),
            width=int(self.width),
            height=int(self.height),
        )


def _invalid_entry(name: str, exc: ValidationError) -> InvalidInputError:
    err = exc.errors()[0]
    loc = err.get("loc", ())
    field = str(loc[0]) if loc else "<entry>"
    if err.get("type") == "missing":
        return InvalidInputError(
            f"Region {name!r}: missing field {field}",
            reason="missing_field",
            detail=f"{name}.{field}",
        )
    return InvalidInputError(
        f"Region {name!r}: field {field} must be numeric ({err.get('msg')})",
        reason="field_type",
        detail=f"{name}.{field}",
    )


def parse_regions(data: Any) -> Tuple[Region, ...]:
    """
    Convert a region declaration mapping into Regions, keeping declaration order.

    The whole set is rejected on the first malformed entry.

    Raises:
        InvalidInputError: If the mapping or any entry is malformed.
    """
    if not isinstance(data, Mapping):
        raise InvalidInputError(
            f"Region declarations must be a mapping of name -> rectangle, got {type(data).__name__}",
            reason="field_type",
            detail="<root>",
        )

    regions: List[Region] = []
    for name, entry in data.items():
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError(
                f"Region names must be non-empty strings, got {name!r}",
                reason="empty_name",
                detail=repr(name),
            )
        try:
            spec = RegionSpec.model_validate(entry)
        except ValidationError as e:
            raise _invalid_entry(name, e) from e
        regions.append(spec.to_region(name))
    return tuple(regions)


def load_regions(path: str) -> Tuple[Region, ...]:
    """
    Load region declarations from a YAML/JSON file.

    Raises:
        RegionLoadError: If the file cannot be read or parsed.
        InvalidInputError: If the file parses but an entry is malformed.
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise RegionLoadError(f"Cannot read regions file {path}: {e}", path=path) from e
    except yaml.YAMLError as e:
        raise RegionLoadError(f"Cannot parse regions file {path}: {e}", path=path) from e

    if data is None:
        raise RegionLoadError(f"Regions file {path} is empty", path=path)

    regions = parse_regions(data)
    logging.info(f"Loaded regions from {path} count={len(regions)}")
    return regions


def load_regions_or_warn(path: Optional[str]) -> Tuple[Tuple[Region, ...], Optional[str]]:
    """
    Load regions, falling back to no regions when the file cannot be loaded.

    Returns:
        (regions, warning) where warning is None on success, or a message
        describing why the job continues without region classification.
    """
    if not path:
        return (), None
    try:
        return load_regions(path), None
    except RegionLoadError as e:
        warning = f"Failed to load regions ({e}); continuing without region classification"
        logging.warning(warning)
        return (), warning


class RegionClassifier:
    """
    Maps centroid coordinates to region names.

    Example:
        classifier = RegionClassifier(load_regions("regions.yaml"))
        name = classifier.classify(120, 45)  # None when unlabeled
    """

    def __init__(self, regions: Iterable[Region] = ()):
        self._regions = tuple(regions)
        seen = set()
        for region in self._regions:
            if region.name in seen:
                raise InvalidInputError(
                    f"Duplicate region name: {region.name!r}",
                    reason="duplicate_name",
                    detail=region.name,
                )
            seen.add(region.name)

    @property
    def regions(self) -> Tuple[Region, ...]:
        return self._regions

    @property
    def enabled(self) -> bool:
        """Whether any region is loaded."""
        return bool(self._regions)

    @property
    def names(self) -> List[str]:
        return [r.name for r in self._regions]

    def classify(self, x: int, y: int) -> Optional[str]:
        """Return the first declared region containing (x, y), or None."""
        for region in self._regions:
            if region.contains(x, y):
                return region.name
        return None

    def classify_point(self, point: Optional[Tuple[int, int]]) -> Optional[str]:
        if point is None:
            return None
        return self.classify(point[0], point[1])
