from typing import Any

import httpx


class UsageError(Exception):
    """
    base class for errors raised while fetching usage records.
    """


class TwilioException(UsageError):
    """
    TwilioException carries the error payload Twilio returns
    with a non-200 response, so callers can tell provider-side
    rejections (bad parameters, auth, rate limits) apart from
    connectivity problems.
    """

    def __init__(
        self,
        status: "int",
        message: "str",
        code: "int | None" = None,
        more_info: "str" = "",
    ) -> "None":
        self.status = status
        self.message = message
        self.code = code
        self.more_info = more_info
        super().__init__(f"twilio error {status} (code {code}): {message}")

    @classmethod
    def from_response(cls, resp: "httpx.Response") -> "TwilioException":
        try:
            data: "Any" = resp.json()
        except ValueError:
            data = None

        # non-JSON error bodies come from proxies and load balancers
        if not isinstance(data, dict):
            return cls(status=resp.status_code, message=resp.text.strip())

        status = data.get("status")
        code = data.get("code")
        return cls(
            status=status if isinstance(status, int) else resp.status_code,
            message=str(data.get("message") or ""),
            code=code if isinstance(code, int) else None,
            more_info=str(data.get("more_info") or ""),
        )


class TransportError(UsageError):
    """
    TransportError wraps local failures: network errors, body
    read errors and undecodable success payloads.
    """
