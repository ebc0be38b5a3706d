"""Crossref deposit client for registering monograph DOIs."""

import logging
from pathlib import Path

import httpx
from lxml import etree

from schemas.doi import DepositOutcome

from .client import Client
from .exceptions import (
    APIError,
    ConnectionError,
    MalformedResponseError,
    RemoteRejectionError,
)

logger = logging.getLogger(__name__)

CROSSREF_API_URL = "https://api.crossref.org/v2/deposits"
CROSSREF_API_URL_TEST = "https://test.crossref.org/servlet/deposit"
CROSSREF_REJECTED_STATUS = 403
DEPOSIT_OPERATION = "doMDUpload"


def _response_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True)


def _parse_xml(body: bytes) -> etree._Element:
    try:
        return etree.fromstring(body, parser=_response_parser())
    except etree.XMLSyntaxError as e:
        raise MalformedResponseError(f"Response is not well-formed XML: {e}") from e


def _find_text(root: etree._Element, name: str) -> str:
    """Return the text of the first element with a local name.

    Raises:
        MalformedResponseError: If no such element exists
    """
    matches = root.xpath("//*[local-name() = $name]", name=name)
    if not matches:
        raise MalformedResponseError(f"Response has no <{name}> element")
    return (matches[0].text or "").strip()


def _find_count(root: etree._Element, name: str) -> int:
    text = _find_text(root, name)
    try:
        return int(text)
    except ValueError as e:
        raise MalformedResponseError(f"<{name}> is not an integer: {text!r}") from e


class CrossrefDepositClient(Client):
    """Client for the Crossref deposit API.

    Sends one doi_batch document per request as a multipart upload and
    classifies the reply into a DepositOutcome. deposit() never raises for
    transport, rejection, or parsing failures; they come back as "error"
    outcomes tagged with the failure kind.

    Config keys (in addition to those of Client):
        deposit_url: Production deposit endpoint
        test_deposit_url: Test deposit endpoint
        sandbox: If true, never contact the agency (default: False)

    Example:
        with CrossrefDepositClient({"sandbox": False}) as client:
            outcome = client.deposit(xml_path, ("user", "secret"), test_mode=True)
    """

    def __init__(self, config: dict | None = None):
        config = {"base_url": CROSSREF_API_URL, **(config or {})}
        super().__init__(config)

    @property
    def deposit_url(self) -> str:
        return str(self._config.get("deposit_url", CROSSREF_API_URL))

    @property
    def test_deposit_url(self) -> str:
        return str(self._config.get("test_deposit_url", CROSSREF_API_URL_TEST))

    @property
    def sandbox(self) -> bool:
        return bool(self._config.get("sandbox", False))

    def endpoint(self, test_mode: bool) -> str:
        """Deposit endpoint for the given mode."""
        return self.test_deposit_url if test_mode else self.deposit_url

    def deposit(
        self,
        document: Path | bytes,
        credentials: tuple[str, str],
        test_mode: bool = False,
    ) -> DepositOutcome:
        """Deposit one metadata document.

        Args:
            document: Path to the exported XML file, or the XML bytes
            credentials: (username, password) of the deposit account
            test_mode: Use the test endpoint instead of production

        Returns:
            DepositOutcome classifying the result
        """
        if self.sandbox:
            logger.warning(
                "Sandbox mode is enabled; skipping deposit without contacting Crossref"
            )
            return DepositOutcome(status="skipped")

        try:
            response = self._submit(document, credentials, test_mode)
            return self._read_report(response)
        except RemoteRejectionError as e:
            logger.error(f"Deposit rejected by Crossref: {e.message}")
            return DepositOutcome(
                status="error",
                batch_id=e.batch_id,
                diagnostic=e.diagnostic,
                failure="rejected",
            )
        except MalformedResponseError as e:
            logger.error(f"Malformed deposit response: {e.message}")
            return DepositOutcome(
                status="error",
                diagnostic=f"Malformed deposit response: {e.message}",
                failure="malformed",
            )
        except APIError as e:
            logger.error(f"Deposit failed: {e.message}")
            return DepositOutcome(
                status="error",
                diagnostic=self._describe_failure(e),
                failure="transport",
            )
        except ConnectionError as e:
            logger.error(f"Deposit failed: {e.message}")
            return DepositOutcome(
                status="error",
                diagnostic=e.message,
                failure="transport",
            )

    def _submit(
        self,
        document: Path | bytes,
        credentials: tuple[str, str],
        test_mode: bool,
    ) -> httpx.Response:
        username, password = credentials
        data = {
            "usr": username,
            "pwd": password,
            "operation": DEPOSIT_OPERATION,
        }
        url = self.endpoint(test_mode)
        logger.info(f"Depositing to {url}")

        if isinstance(document, Path):
            with document.open("rb") as fh:
                files = {"mdFile": (document.name, fh, "application/xml")}
                return self.post(url, data=data, files=files)

        files = {"mdFile": ("crossref.xml", document, "application/xml")}
        return self.post(url, data=data, files=files)

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Map HTTP errors to exceptions, reading Crossref rejections.

        Raises:
            RemoteRejectionError: For the Crossref rejection status
            MalformedResponseError: If a rejection body cannot be parsed
            APIError: For other non-2xx responses
        """
        if response.status_code == CROSSREF_REJECTED_STATUS:
            root = _parse_xml(response.content)
            batch_id = _find_text(root, "batch_id")
            msg = _find_text(root, "msg")
            raise RemoteRejectionError(
                msg,
                status_code=response.status_code,
                batch_id=batch_id,
                diagnostic=f"{msg}\n{response.text}",
                response=response,
            )
        return super()._handle_response(response)

    def _read_report(self, response: httpx.Response) -> DepositOutcome:
        """Classify a successful exchange by its failure and warning counts.

        Raises:
            RemoteRejectionError: If the report has failures
            MalformedResponseError: If expected elements are missing
        """
        root = _parse_xml(response.content)
        batch_id = _find_text(root, "batch_id")
        failure_count = _find_count(root, "failure_count")

        if failure_count > 0:
            raise RemoteRejectionError(
                f"Deposit reported {failure_count} failure(s)",
                status_code=response.status_code,
                batch_id=batch_id,
                response=response,
            )

        warning_count = _find_count(root, "warning_count")
        if warning_count > 0:
            logger.warning(f"Deposit {batch_id} registered with {warning_count} warning(s)")
            return DepositOutcome(
                status="registered",
                batch_id=batch_id,
                diagnostic=response.text,
                warning=True,
            )

        logger.info(f"Deposit {batch_id} registered")
        return DepositOutcome(status="registered", batch_id=batch_id)

    def _describe_failure(self, error: APIError) -> str:
        if error.response is None:
            return error.message
        return (
            f"{error.response.text} "
            f"({error.status_code} {error.response.reason_phrase})"
        )
