"""Submit operation sending the form payload to an HTTP endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from bindforms import logger
from bindforms.exceptions import GENERIC_BACKEND_ERROR, SubmissionError
from bindforms.settings import build_httpx_client_kwargs, get_settings

if TYPE_CHECKING:
    from bindforms.settings import Settings
    from bindforms.typing.models import SubmitOptions


def _response_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _rejection(response: httpx.Response) -> SubmissionError:
    """Build the error raised for a 4xx/5xx response.

    Args:
        response (httpx.Response): Rejected response.

    Returns:
        SubmissionError: Structured when the body lists issues, top level or under ``details``.
    """
    body = _response_body(response)
    details = body.get("details")
    issues = body.get("issues")
    if not isinstance(issues, list) and isinstance(details, dict):
        issues = details.get("issues")
    message = body.get("message") if isinstance(body.get("message"), str) else ""

    if isinstance(issues, list):
        return SubmissionError(
            message=message,
            error_category=GENERIC_BACKEND_ERROR,
            details={"issues": issues},
            status_code=response.status_code,
        )
    return SubmissionError(message=message, status_code=response.status_code)


class HttpSubmitOperation:
    """Sends the cleaned subject as JSON.

    Without an explicit method, forms that started with data are saved with ``PUT`` and
    new ones with ``POST``.
    """

    def __init__(
        self,
        url: str,
        *,
        method: str | None = None,
        has_initial_data: bool = False,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize the operation.

        Args:
            url (str): Submission endpoint.
            method (str | None): HTTP method override.
            has_initial_data (bool): Whether the form was opened with existing data.
            settings (Settings | None): Runtime settings, loaded when omitted.
            transport (httpx.AsyncBaseTransport | None): Transport override.
            headers (dict[str, str] | None): Extra request headers.
        """
        self.url = url
        self.method = (method or ("put" if has_initial_data else "post")).upper()
        self._settings = settings
        self._transport = transport
        self._headers = headers or {}

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs = build_httpx_client_kwargs(self._settings or get_settings(), target_url=self.url)
        if self._transport is not None:
            kwargs.pop("proxy", None)
            kwargs["transport"] = self._transport
        return kwargs

    async def __call__(self, payload: dict[str, Any], options: SubmitOptions) -> None:
        """Send the payload.

        Args:
            payload (dict[str, Any]): Cleaned subject.
            options (SubmitOptions): Submission options.

        Raises:
            SubmissionError: If the request fails or the endpoint rejects it.
        """
        body = payload if options.pass_as_default_body else None
        logger.info("Sending form submission", extra={"method": self.method, "url": self.url})
        async with httpx.AsyncClient(**self._client_kwargs()) as client:
            try:
                response = await client.request(self.method, self.url, json=body, headers=self._headers)
            except httpx.HTTPError as exc:
                logger.warning("Submission request failed", extra={"url": self.url, "error": str(exc)})
                raise SubmissionError(message=f"Submission request failed: {exc}") from exc

        if response.is_error:
            logger.warning(
                "Submission rejected",
                extra={"url": self.url, "status_code": response.status_code},
            )
            raise _rejection(response)
        logger.info("Submission accepted", extra={"status_code": response.status_code})
