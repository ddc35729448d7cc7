"""Integration test for the full authenticator flow.

Builds the real component graph with ``build_authenticator`` (SQLite
session store on a temp file, httpx.MockTransport for the remote side) and
walks through: store a session, list confirmations, allow a batch with
one failing item, then hit a rejected session.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest

from steamguard.config.settings import Settings
from steamguard.main import build_authenticator
from steamguard.models.account import Account
from steamguard.services.guard_code import generate_code
from steamguard.services.request_signer import sign
from steamguard.utils.errors import BatchFailedError, LoginRequiredError

_ZERO = "AAAAAAAAAAAAAAAAAAAAAAAAAAA="
_SERVER_TIME = 1_700_000_000


class _Remote:
    """Minimal remote: time oracle, a three-item queue, and an ajaxop that
    refuses confirmation ``2`` and rejects everything once ``revoked``."""

    def __init__(self) -> None:
        self.revoked = False
        self.acted: list[dict[str, str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/QueryTime/v0001"):
            return httpx.Response(200, json={"response": {"server_time": str(_SERVER_TIME)}})
        if self.revoked:
            return httpx.Response(403)
        if path == "/mobileconf/getlist":
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "conf": [
                        {"id": str(n), "nonce": f"nonce{n}", "type": 2, "type_name": "Trade Offer"}
                        for n in (1, 2, 3)
                    ],
                },
            )
        if path == "/mobileconf/ajaxop":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            self.acted.append(form)
            if form["cid"] == "2":
                return httpx.Response(200, json={"success": False, "message": "Item no longer available"})
            return httpx.Response(200, json={"success": True})
        return httpx.Response(404)


@pytest.mark.asyncio
async def test_end_to_end_confirmation_flow(tmp_path: Path) -> None:
    remote = _Remote()
    settings = Settings(
        session_store="sqlite",
        session_db_path=str(tmp_path / "sessions.db"),
        app_env="test",
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(remote))
    account = Account(steam_id="76561198000000000", shared_secret=_ZERO, identity_secret=_ZERO)

    async with build_authenticator(settings, http_client=client) as authenticator:
        code = await authenticator.guard_code(account)
        now = authenticator.clock.current_time()
        assert code.code == generate_code(_ZERO, now)

        authenticator.sessions.upsert(account.account_id, "sess", "secure")

        pending = await authenticator.confirmations.list_pending(account)
        assert [(c.id, c.key) for c in pending] == [("1", "nonce1"), ("2", "nonce2"), ("3", "nonce3")]

        with pytest.raises(BatchFailedError) as exc_info:
            await authenticator.confirmations.act(account, "allow", pending)

        result = exc_info.value.result
        assert [(i.id, i.success) for i in result.items] == [("1", True), ("2", False), ("3", True)]
        assert result.items[1].error == "Item no longer available"
        assert exc_info.value.failed_ids == ["2"]

        assert [form["ck"] for form in remote.acted] == ["nonce1", "nonce2", "nonce3"]
        for form in remote.acted:
            assert form["tag"] == "allow"
            assert form["k"] == sign(_ZERO, int(form["t"]), "allow")

        remote.revoked = True
        with pytest.raises(LoginRequiredError):
            await authenticator.confirmations.list_pending(account)

        status = authenticator.sessions.status(account.account_id)
        assert status.valid is True
        assert status.age is not None

    # The session survives in SQLite for the next process.
    async with build_authenticator(settings, http_client=httpx.AsyncClient()) as again:
        assert again.sessions.validate(account.account_id).valid is True
