from __future__ import annotations

from ofsc.core.models import PaginationStrategy
from ofsc.endpoints.base import BaseEndpoint
from ofsc.exceptions import ValidationError
from ofsc.utils import is_valid_date


class ActivitiesEndpoint(BaseEndpoint):
    """
    Activities of a set of resources within a date range.

    The activities collection echoes the limit it actually applied, so it
    is walked with LIMIT_ADVANCE.

    Args:
        resources (str): Comma-separated resource IDs (required)
        date_from (str): First day, YYYY-MM-DD
        date_to (str): Last day, YYYY-MM-DD
        q (str | None): Filter expression
        fields (str | None): Comma-separated fields to return
        include_non_scheduled (bool): Also return non-scheduled activities
    """

    name = "activities"
    path = "activities/"
    strategy = PaginationStrategy.LIMIT_ADVANCE
    page_size = 1000

    def __init__(
        self,
        resources: str,
        date_from: str,
        date_to: str,
        q: str | None = None,
        fields: str | None = None,
        include_non_scheduled: bool = False,
    ) -> None:
        self.resources = resources
        self.date_from = date_from
        self.date_to = date_to
        self.q = q
        self.fields = fields
        self.include_non_scheduled = include_non_scheduled

    def validate(self) -> None:
        if not is_valid_date(self.date_from) or not is_valid_date(self.date_to):
            raise ValidationError(
                f"Invalid date format ({self.date_from!r}, {self.date_to!r}). "
                f"Expected YYYY-MM-DD."
            )
        if not self.resources:
            raise ValidationError(
                "The resources parameter is required to list activities"
            )

    def build_params(self, offset: int, limit: int) -> dict[str, str]:
        params = super().build_params(offset, limit)
        if self.q:
            params["q"] = self.q
        params["resources"] = self.resources
        if self.fields:
            params["fields"] = self.fields
        params["dateFrom"] = self.date_from
        params["dateTo"] = self.date_to
        if self.include_non_scheduled:
            params["includeNonScheduled"] = "true"
        return params
