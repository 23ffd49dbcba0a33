from dataclasses import dataclass, field
from typing import Any, Mapping


def _parse_count(value: "Any") -> "int":
    """
    count is transmitted as a numeric string ("42"), older
    payloads may carry a plain integer.
    """
    # Twilio sends null for categories without events
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"invalid usage count: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        return int(value)
    raise ValueError(f"invalid usage count: {value!r}")


def _as_str(value: "Any") -> "str":
    return "" if value is None else str(value)


@dataclass(frozen=True)
class UsageFilter:
    """
    UsageFilter holds the query parameters of a single usage
    records request. Empty strings mean "do not filter".
    """

    category: "str" = ""
    # YYYY-MM-DD or a relative offset such as "-30days"
    start_date: "str" = ""
    end_date: "str" = ""
    include_subaccounts: "bool" = False

    def to_params(self) -> "dict[str, str]":
        params: "dict[str, str]" = {}
        if self.category:
            params["Category"] = self.category
        if self.start_date:
            params["StartDate"] = self.start_date
        if self.end_date:
            params["EndDate"] = self.end_date
        params["IncludeSubaccounts"] = "true" if self.include_subaccounts else "false"
        return params


@dataclass(frozen=True, slots=True)
class UsageRecord:
    """
    UsageRecord represents the usage of a single category
    over a date range, as reported by Twilio.
    """

    account_sid: "str"
    category: "str"
    description: "str"
    start_date: "str"
    end_date: "str"
    # decimal string, kept verbatim to avoid float rounding
    price: "str"
    price_unit: "str"
    count: "int"
    count_unit: "str"
    usage: "str"
    usage_unit: "str"
    # GMT timestamp formatted as YYYY-MM-DDTHH:MM:SS+00:00
    as_of: "str"
    # excluded from hashing and equality, the dict is not hashable
    subresource_uris: "Mapping[str, str]" = field(
        default_factory=dict, hash=False, compare=False
    )

    @classmethod
    def from_dict(cls, data: "Mapping[str, Any]") -> "UsageRecord":
        return cls(
            account_sid=_as_str(data.get("account_sid")),
            category=_as_str(data.get("category")),
            description=_as_str(data.get("description")),
            start_date=_as_str(data.get("start_date")),
            end_date=_as_str(data.get("end_date")),
            price=_as_str(data.get("price")),
            price_unit=_as_str(data.get("price_unit")),
            count=_parse_count(data.get("count")),
            count_unit=_as_str(data.get("count_unit")),
            usage=_as_str(data.get("usage")),
            usage_unit=_as_str(data.get("usage_unit")),
            as_of=_as_str(data.get("as_of")),
            subresource_uris=dict(data.get("subresource_uris") or {}),
        )


@dataclass(frozen=True)
class UsagePage:
    """
    UsagePage is one page of the usage records listing. An empty
    next_page_uri marks the last page.
    """

    page_size: "int"
    page: "int"
    usage_records: "tuple[UsageRecord, ...]"
    next_page_uri: "str" = ""

    @classmethod
    def from_dict(cls, data: "Mapping[str, Any]") -> "UsagePage":
        if not isinstance(data, Mapping):
            raise ValueError("usage page payload is not a JSON object")

        return cls(
            page_size=int(data.get("page_size") or 0),
            page=int(data.get("page") or 0),
            usage_records=tuple(
                UsageRecord.from_dict(item) for item in data.get("usage_records") or []
            ),
            next_page_uri=_as_str(data.get("next_page_uri")),
        )
