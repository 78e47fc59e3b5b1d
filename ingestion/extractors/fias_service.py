"""
Client for the FIAS download service (SOAP 1.2).

Asks the service for the latest published dataset and returns its version
identifier together with the download URLs.
"""

import httpx
import xml.etree.ElementTree as ET
from typing import Dict, Optional
from pydantic import ValidationError
from schemas.version import DownloadFileInfo
from core.exceptions import TransportError
import logging

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_URL = "https://fias.nalog.ru/WebServices/Public/DownloadService.asmx"

# Namespace of the request and response bodies, as published in the service WSDL
SERVICE_NAMESPACE = "https://fias.nalog.ru/WebServices/Public/DownloadService.asmx/"

SOAP_ENVELOPE = f"""<soap:Envelope xmlns:soap="http://www.w3.org/2003/05/soap-envelope" xmlns:dow="{SERVICE_NAMESPACE}">
   <soap:Header/>
   <soap:Body>
      <dow:GetLastDownloadFileInfo/>
   </soap:Body>
</soap:Envelope>""".encode("utf-8")

SOAP_HEADERS = {"Content-Type": "application/soap+xml; charset=utf-8"}

RESULT_ELEMENT = "GetLastDownloadFileInfoResult"

# Response element -> DownloadFileInfo field
RESULT_FIELDS = {
    "VersionId": "version_id",
    "TextVersion": "text_version",
    "FiasCompleteXmlUrl": "complete_xml_url",
    "FiasCompleteDbfUrl": "complete_dbf_url",
    "FiasDeltaXmlUrl": "delta_xml_url",
    "FiasDeltaDbfUrl": "delta_dbf_url",
    "Kladr4ArjUrl": "kladr4_arj_url",
    "Kladr47ZUrl": "kladr47z_url",
}


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_download_info(payload: bytes, service_url: str = DEFAULT_SERVICE_URL) -> DownloadFileInfo:
    """
    Parse a GetLastDownloadFileInfo SOAP response.

    Raises:
        TransportError: If the payload is not XML or lacks a usable result
    """
    try:
        root = ET.fromstring(payload)
    except ET.ParseError as e:
        raise TransportError(
            "Download service returned malformed XML",
            context={"url": service_url},
            original_exception=e
        )

    result = next((el for el in root.iter() if _local(el.tag) == RESULT_ELEMENT), None)
    if result is None:
        raise TransportError(
            f"No {RESULT_ELEMENT} in download service response",
            context={"url": service_url}
        )

    values: Dict[str, Optional[str]] = {}
    for child in result:
        field = RESULT_FIELDS.get(_local(child.tag))
        if field:
            values[field] = (child.text or "").strip() or None

    try:
        return DownloadFileInfo(**values)
    except ValidationError as e:
        raise TransportError(
            "Download service response is incomplete",
            context={"url": service_url, "fields": sorted(values)},
            original_exception=e
        )


class DownloadServiceClient:
    """
    Query the remote download service for the latest dataset version.

    One blocking request per call; there is no retry, the next attempt
    happens at the next scheduled cycle.
    """

    def __init__(
        self,
        service_url: str = DEFAULT_SERVICE_URL,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.service_url = service_url
        self.timeout = timeout
        self.transport = transport

    async def get_last_download_info(self) -> DownloadFileInfo:
        """
        Returns:
            Parsed version payload

        Raises:
            TransportError: On network errors, non-2xx responses or bad payloads
        """
        logger.info(f"Requesting last download info from {self.service_url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.service_url,
                    content=SOAP_ENVELOPE,
                    headers=SOAP_HEADERS
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Download service answered {e.response.status_code}",
                context={"url": self.service_url, "status_code": e.response.status_code},
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise TransportError(
                "Download service request failed",
                context={"url": self.service_url},
                original_exception=e
            )

        info = parse_download_info(response.content, self.service_url)
        logger.info(f"Remote dataset version {info.version_id} ({info.text_version})")
        return info
