"""
Pydantic schema for the download service version payload
"""

from pydantic import BaseModel, validator
from typing import Optional


class DownloadFileInfo(BaseModel):
    """
    Result of GetLastDownloadFileInfo.

    Only `version_id` and `complete_xml_url` drive a reload; the other
    URLs are kept for logging.
    """

    version_id: int
    text_version: Optional[str] = None
    complete_xml_url: str
    complete_dbf_url: Optional[str] = None
    delta_xml_url: Optional[str] = None
    delta_dbf_url: Optional[str] = None
    kladr4_arj_url: Optional[str] = None
    kladr47z_url: Optional[str] = None

    @validator("complete_xml_url")
    def url_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Complete XML url is empty")
        return v

    @property
    def version_marker(self) -> str:
        """Text form persisted as the version marker"""
        return str(self.version_id)
