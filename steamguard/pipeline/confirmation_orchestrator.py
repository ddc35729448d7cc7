"""List and act on the mobile confirmation queue.

# ─── HOW A CONFIRMATION CALL IS BUILT ─────────────────────────────────
#
#   ClockSync.synchronize()          best effort, once per process
#        │
#   SessionLifecycle.validate()      LOGIN_REQUIRED if not usable
#        │
#   RequestSigner.build_signed_params(account, tag)
#        │                           p, a, k, t, m, tag
#   GET  /mobileconf/getlist         tag = "conf"
#   POST /mobileconf/ajaxop          tag = op, body adds op, cid, ck
#        │
#   SessionLifecycle.touch()         only after a successful call
#
# A batch is processed strictly in submission order, one request per
# confirmation.  A failing item does not stop the batch; only a 401/403
# (the session was rejected) aborts it.  Each request gets its own
# signature and timestamp.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from steamguard.models.account import Account
from steamguard.models.confirmation import (
    BatchItemResult,
    BatchResult,
    Confirmation,
    ConfirmationOperation,
)
from steamguard.services.clock_sync import ClockSync
from steamguard.services.request_signer import RequestSigner
from steamguard.services.session_lifecycle import SessionLifecycle
from steamguard.utils.errors import (
    BatchFailedError,
    EmptyBatchError,
    InvalidOperationError,
    LoginRequiredError,
    MalformedConfirmationError,
    MissingSecretError,
    RemoteError,
)
from steamguard.utils.logging import get_logger

_PROVIDER = "steam_community"
_DEFAULT_COMMUNITY_URL = "https://steamcommunity.com"
_DEFAULT_TIMEOUT = 10.0
_LIST_TAG = "conf"
_REMOTE_REJECTED = "REMOTE_REJECTED"

_USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 6.0; Nexus 6P Build/MDA89D) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/88.0.4324.181 Mobile Safari/537.36"
)
_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"


class ConfirmationOrchestrator:
    """Runs the list and allow/cancel protocols for one account at a time.

    Parameters
    ----------
    http_client:
        Shared async HTTP client.
    clock:
        Time alignment; synchronized lazily on first use.
    signer:
        Produces the signed parameter set for each call.
    sessions:
        Session validity policy and cookie source.
    community_url:
        Base URL of the community site.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        clock: ClockSync,
        signer: RequestSigner,
        sessions: SessionLifecycle,
        community_url: str = _DEFAULT_COMMUNITY_URL,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._clock = clock
        self._signer = signer
        self._sessions = sessions
        self._base_url = community_url.rstrip("/")
        self._timeout = timeout
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_pending(self, account: Account) -> list[Confirmation]:
        """Fetch the pending confirmations for *account*.

        Raises
        ------
        MissingSecretError
            If the account has no identity secret.
        LoginRequiredError
            If the stored session is unusable or the remote rejects it.
        RemoteError
            On any other non-200 response or a transport failure.
        """
        self._require_identity_secret(account)
        await self._clock.synchronize()
        cookie = self._require_session(account)

        params = self._signer.build_signed_params(account, _LIST_TAG)
        url = f"{self._base_url}/mobileconf/getlist"
        response = await self._send("GET", url, cookie, params=params.to_query())

        if response.status_code in (401, 403):
            raise LoginRequiredError(provider_name=_PROVIDER, reason=_REMOTE_REJECTED)
        if response.status_code != 200:
            message = _json_field(response, "message") or "Failed to fetch confirmations"
            raise RemoteError(
                message=f"HTTP {response.status_code}: {message}",
                provider_name=_PROVIDER,
                status=response.status_code,
            )

        self._sessions.touch(account.account_id)

        try:
            data = response.json()
        except ValueError:
            self._logger.warning(
                "confirmations_unparseable",
                account_id=account.account_id,
                body_length=len(response.content),
            )
            return []

        raw_items = data.get("conf") if isinstance(data, dict) else None
        if raw_items is not None and not isinstance(raw_items, list):
            self._logger.warning(
                "confirmations_unparseable",
                account_id=account.account_id,
                conf_type=type(raw_items).__name__,
            )
            raw_items = None
        confirmations: list[Confirmation] = []
        for item in raw_items or []:
            try:
                confirmations.append(Confirmation.model_validate(item))
            except ValidationError as exc:
                self._logger.warning(
                    "confirmation_skipped",
                    account_id=account.account_id,
                    error=str(exc)[:200],
                )
        self._logger.info(
            "confirmations_fetched",
            account_id=account.account_id,
            count=len(confirmations),
        )
        return confirmations

    async def act(
        self,
        account: Account,
        operation: ConfirmationOperation | str,
        confirmations: Sequence[Confirmation | Mapping[str, Any]],
    ) -> BatchResult:
        """Allow or cancel every confirmation in *confirmations*, in order.

        The whole batch is checked before any request is made, so a
        malformed item means nothing is sent.

        Raises
        ------
        InvalidOperationError
            If *operation* is not ``allow`` or ``cancel``.
        EmptyBatchError
            If *confirmations* is empty.
        MalformedConfirmationError
            If any item lacks its id or key.
        MissingSecretError
            If the account has no identity secret.
        LoginRequiredError
            If the stored session is unusable or the remote rejects it.  A
            rejection mid-batch aborts the rest; ``.result`` then holds the
            items sent so far, the rejected one last.
        BatchFailedError
            If at least one item failed; ``.result`` holds every outcome.
        """
        op = _parse_operation(operation)
        if not confirmations:
            raise EmptyBatchError(provider_name=_PROVIDER)
        items = [_parse_confirmation(index, item) for index, item in enumerate(confirmations)]

        await self._clock.synchronize()
        self._require_identity_secret(account)
        cookie = self._require_session(account)

        self._logger.info(
            "confirmation_batch_started",
            account_id=account.account_id,
            operation=op.value,
            count=len(items),
        )

        url = f"{self._base_url}/mobileconf/ajaxop"
        outcomes: list[BatchItemResult] = []
        for conf in items:
            params = self._signer.build_signed_params(account, op.value)
            form = {**params.to_query(), "op": op.value, "cid": conf.id, "ck": conf.key}
            try:
                response = await self._send("POST", url, cookie, data=form)
            except RemoteError as exc:
                outcomes.append(self._failed(account, conf.id, exc.message))
                continue

            if response.status_code in (401, 403):
                outcomes.append(self._failed(account, conf.id, f"HTTP {response.status_code}"))
                raise LoginRequiredError(
                    provider_name=_PROVIDER,
                    reason=_REMOTE_REJECTED,
                    result=BatchResult(operation=op, items=outcomes),
                )
            outcomes.append(self._interpret_act_response(account, conf.id, response))

        self._sessions.touch(account.account_id)
        result = BatchResult(operation=op, items=outcomes)
        self._logger.info(
            "confirmation_batch_finished",
            account_id=account.account_id,
            operation=op.value,
            succeeded=result.success_count,
            failed=result.failure_count,
        )
        if result.failure_count:
            raise BatchFailedError(result, provider_name=_PROVIDER)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_identity_secret(self, account: Account) -> None:
        if not account.identity_secret:
            raise MissingSecretError(
                message="Identity secret not found. Cannot use confirmations.",
                provider_name=_PROVIDER,
            )

    def _require_session(self, account: Account) -> str:
        validation = self._sessions.validate(account.account_id)
        if not validation.valid or validation.session is None:
            reason = validation.reason.value if validation.reason else None
            self._logger.info(
                "login_required", account_id=account.account_id, reason=reason
            )
            raise LoginRequiredError(provider_name=_PROVIDER, reason=reason)
        return validation.session.cookie_header()

    async def _send(
        self,
        method: str,
        url: str,
        cookie: str,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        headers = {
            "Accept": "application/json, text/javascript; q=0.01",
            "User-Agent": _USER_AGENT,
            "X-Requested-With": "com.valvesoftware.android.steam.community",
            "Referer": f"{self._base_url}/mobileconf/conf",
            "Cookie": cookie,
        }
        if data is not None:
            headers["Content-Type"] = _FORM_CONTENT_TYPE
        try:
            return await self._http.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            self._logger.warning(
                "confirmation_request_error",
                method=method,
                url=url,
                error=str(exc)[:200],
            )
            raise RemoteError(
                message=f"Request failed: {type(exc).__name__}",
                provider_name=_PROVIDER,
            ) from exc

    def _interpret_act_response(
        self, account: Account, conf_id: str, response: httpx.Response
    ) -> BatchItemResult:
        if response.status_code != 200:
            error = f"HTTP {response.status_code}"
            message = _json_field(response, "message")
            return self._failed(account, conf_id, f"{error}: {message}" if message else error)

        try:
            data = response.json()
        except ValueError:
            # Some successful ajaxop responses come back with an empty body.
            return BatchItemResult(id=conf_id, success=True)

        if isinstance(data, dict):
            if data.get("success") is True:
                return BatchItemResult(id=conf_id, success=True)
            if data.get("success") is False or data.get("error"):
                message = data.get("message") or data.get("error") or "Unknown error"
                return self._failed(account, conf_id, str(message))

        # Known leniency: a 200 without a success flag counts as processed.
        self._logger.info(
            "confirmation_assumed_processed",
            account_id=account.account_id,
            confirmation_id=conf_id,
        )
        return BatchItemResult(id=conf_id, success=True)

    def _failed(self, account: Account, conf_id: str, error: str) -> BatchItemResult:
        self._logger.warning(
            "confirmation_failed",
            account_id=account.account_id,
            confirmation_id=conf_id,
            error=error,
        )
        return BatchItemResult(id=conf_id, success=False, error=error)


def _parse_operation(operation: ConfirmationOperation | str) -> ConfirmationOperation:
    try:
        return ConfirmationOperation(operation)
    except ValueError as exc:
        raise InvalidOperationError(provider_name=_PROVIDER) from exc


def _parse_confirmation(index: int, item: Confirmation | Mapping[str, Any]) -> Confirmation:
    if isinstance(item, Mapping):
        try:
            item = Confirmation.model_validate(item)
        except ValidationError as exc:
            raise MalformedConfirmationError(
                message=f"Confirmation {index} is not valid: {exc.error_count()} error(s)",
                provider_name=_PROVIDER,
                index=index,
            ) from exc
    if not isinstance(item, Confirmation) or not item.id or not item.key:
        raise MalformedConfirmationError(
            message=f"Confirmation {index} missing id or key",
            provider_name=_PROVIDER,
            index=index,
        )
    return item


def _json_field(response: httpx.Response, name: str) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get(name):
        return str(data[name])
    return None
