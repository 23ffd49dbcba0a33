import os
from dataclasses import dataclass

from callmetheus.models import UsageFilter
from callmetheus.provider.twilio import TWILIO_BASE_URL


@dataclass
class Config:
    # listen_address: format ":9186" or
    # "0.0.0.0:9186"
    listen_address: "str" = ":9186"
    # collection interval in seconds, usage records
    # are rolled up by Twilio so polling faster is pointless
    scrape_interval: "int" = 300
    log_level: "str" = "info"
    log_format: "str" = "console"

    twilio_account_sid: "str" = ""
    twilio_auth_token: "str" = ""
    twilio_base_url: "str" = TWILIO_BASE_URL

    usage_category: "str" = ""
    usage_start_date: "str" = ""
    usage_end_date: "str" = ""
    usage_include_subaccounts: "bool" = False

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            twilio_account_sid=os.environ.get("TWILIO_ACCOUNT_SID", ""),
            twilio_auth_token=os.environ.get("TWILIO_AUTH_TOKEN", ""),
            twilio_base_url=os.environ.get("TWILIO_BASE_URL") or TWILIO_BASE_URL,
        )

    @property
    def twilio_enabled(self) -> "bool":
        return bool(self.twilio_account_sid and self.twilio_auth_token)

    def usage_filter(self) -> "UsageFilter":
        return UsageFilter(
            category=self.usage_category,
            start_date=self.usage_start_date,
            end_date=self.usage_end_date,
            include_subaccounts=self.usage_include_subaccounts,
        )
