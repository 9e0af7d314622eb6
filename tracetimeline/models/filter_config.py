"""
User-controlled selection criteria.
"""

from enum import Enum
from typing import Any, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from ..errors import InvalidFilterConfigError
from .units import TimeUnit


class CategoryMode(str, Enum):
    ALL = "all"
    SUBSET = "subset"


class TimeMode(str, Enum):
    ALL = "all"
    CUSTOM = "custom"


class DenominatorMode(str, Enum):
    """What aggregate percentages are relative to."""
    GLOBAL = "global"        # whole canonical trace
    FILTERED = "filtered"    # only the interval set being summarized


class FilterConfig(BaseModel):
    """
    Category and time-window selection.

    Accepts both snake_case and the camelCase keys the config panel emits
    (``categoryMode``, ``selectedCategories``, ``timeMode``, ``windowStart``,
    ``windowEnd``, ``windowUnit``). A window unit of None means the bounds
    are already in the trace's canonical unit.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    category_mode: CategoryMode = CategoryMode.ALL
    selected_categories: FrozenSet[str] = Field(default_factory=frozenset)
    time_mode: TimeMode = TimeMode.ALL
    window_start: Optional[float] = None
    window_end: Optional[float] = None
    window_unit: Optional[TimeUnit] = None

    @model_validator(mode='after')
    def _check_window(self) -> 'FilterConfig':
        if self.time_mode == TimeMode.CUSTOM:
            if self.window_start is None or self.window_end is None:
                raise ValueError("custom time mode requires window_start and window_end")
            if self.window_start >= self.window_end:
                raise ValueError(
                    f"window_start ({self.window_start}) must be before "
                    f"window_end ({self.window_end})"
                )
        return self

    @classmethod
    def parse(cls, data: Any) -> 'FilterConfig':
        """
        Validate a proposed configuration at the boundary.

        Raises:
            InvalidFilterConfigError: If the proposal violates an invariant
        """
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(data or {})
        except ValidationError as e:
            messages = "; ".join(err['msg'] for err in e.errors())
            raise InvalidFilterConfigError(messages) from e

    def window_bounds(self, time_unit=TimeUnit.NS) -> Optional[Tuple[float, float]]:
        """
        The custom time window in the given canonical unit.

        Returns:
            (start, end), or None when the time mode is 'all'
        """
        if self.time_mode != TimeMode.CUSTOM:
            return None
        if self.window_unit is None:
            return self.window_start, self.window_end
        scale = self.window_unit.nanoseconds / TimeUnit.coerce(time_unit).nanoseconds
        return self.window_start * scale, self.window_end * scale

    @property
    def is_unfiltered(self) -> bool:
        return self.category_mode == CategoryMode.ALL and self.time_mode == TimeMode.ALL

    def to_dict(self) -> dict:
        """camelCase dictionary for the config panel."""
        data = self.model_dump(by_alias=True, mode='json')
        data['selectedCategories'] = sorted(self.selected_categories)
        return data
