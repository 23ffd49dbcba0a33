import json

import httpx
import pytest
import respx

from callmetheus.__main__ import _fetch_once, _parse_listen_address
from callmetheus.config import Config
from callmetheus.provider.twilio import TWILIO_BASE_URL, TwilioProvider

RECORDS_URL = f"{TWILIO_BASE_URL}/Accounts/AC123/Usage/Records.json"


class TestParseListenAddress:
    def test_port_only(self) -> "None":
        assert _parse_listen_address(":9186") == ("0.0.0.0", 9186)

    def test_host_and_port(self) -> "None":
        assert _parse_listen_address("127.0.0.1:9000") == ("127.0.0.1", 9000)


class TestFetchOnce:
    @pytest.mark.asyncio
    @respx.mock
    async def test_prints_records_as_json_lines(
        self, capsys: "pytest.CaptureFixture[str]"
    ) -> "None":
        respx.get(RECORDS_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "page": 0,
                    "page_size": 50,
                    "usage_records": [
                        {"account_sid": "AC123", "category": "sms", "count": "3"},
                        {"account_sid": "AC123", "category": "calls", "count": "0"},
                    ],
                    "next_page_uri": None,
                },
            )
        )

        provider = TwilioProvider(account_sid="AC123", auth_token="token")
        code = await _fetch_once(provider, Config(twilio_account_sid="AC123"))

        assert code == 0
        # unconfigured structlog also prints to stdout
        lines = [
            line for line in capsys.readouterr().out.splitlines() if line.startswith("{")
        ]
        assert [json.loads(line)["category"] for line in lines] == ["sms", "calls"]
        assert json.loads(lines[0])["count"] == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_provider_error_exits_non_zero(
        self, capsys: "pytest.CaptureFixture[str]"
    ) -> "None":
        respx.get(RECORDS_URL).mock(
            return_value=httpx.Response(
                401, json={"code": 20003, "message": "Authenticate", "status": 401}
            )
        )

        provider = TwilioProvider(account_sid="AC123", auth_token="wrong")
        code = await _fetch_once(provider, Config(twilio_account_sid="AC123"))

        assert code == 1
        out = capsys.readouterr().out
        assert not [line for line in out.splitlines() if line.startswith("{")]
