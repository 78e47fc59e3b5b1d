"""
Archive retrieval and unpacking

Downloads the complete XML bundle, unpacks it and enumerates its members
as file descriptors.
"""

import httpx
import shutil
import zipfile
import rarfile
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel
from tqdm import tqdm
from ingestion.classifier import FileClassifier
from core.exceptions import ArchiveError, TransportError
import logging

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class FileDescriptor(BaseModel):
    """One extracted archive member"""

    path: Path
    key: Optional[str] = None
    size: int

    @property
    def name(self) -> str:
        return self.path.name


class ArchiveFetcher:
    """
    Retrieve and unpack a dataset archive into the data directory.

    Workspace layout:
        <archive_path>   downloaded bundle, replaced on every download
        <extract_dir>/   unpacked members, replaced on every download
    """

    def __init__(
        self,
        archive_path: Path,
        extract_dir: Path,
        timeout: float = 60.0,
        show_progress: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.archive_path = Path(archive_path)
        self.extract_dir = Path(extract_dir)
        self.timeout = timeout
        self.show_progress = show_progress
        self.transport = transport

    def reset_workspace(self):
        """Remove the archive and members left by the previous cycle"""
        if self.extract_dir.exists():
            shutil.rmtree(self.extract_dir)
        if self.archive_path.exists():
            self.archive_path.unlink()

    async def download(self, url: str) -> Path:
        """
        Stream the archive at `url` to disk.

        Raises:
            TransportError: On network errors or non-2xx responses
        """
        self.reset_workspace()
        self.archive_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Downloading {url} to {self.archive_path}")
        downloaded = 0

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=True
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    total = int(response.headers.get("Content-Length", 0)) or None

                    with open(self.archive_path, "wb") as output, tqdm(
                        total=total,
                        unit="B",
                        unit_scale=True,
                        desc=self.archive_path.name,
                        disable=not self.show_progress
                    ) as bar:
                        async for chunk in response.aiter_bytes(CHUNK_SIZE):
                            output.write(chunk)
                            downloaded += len(chunk)
                            bar.update(len(chunk))

        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Archive download answered {e.response.status_code}",
                context={"url": url, "status_code": e.response.status_code},
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise TransportError(
                "Archive download failed",
                context={"url": url, "bytes_downloaded": downloaded},
                original_exception=e
            )
        except OSError as e:
            raise TransportError(
                f"Could not write archive to {self.archive_path}",
                context={"url": url, "archive_path": str(self.archive_path)},
                original_exception=e
            )

        logger.info(f"{downloaded} bytes downloaded")
        return self.archive_path

    def unpack(self) -> Path:
        """
        Unpack the downloaded archive (zip or rar) into the extract directory.

        Raises:
            ArchiveError: If the archive is missing, unknown or corrupt
        """
        context = {
            "archive_path": str(self.archive_path),
            "extract_dir": str(self.extract_dir)
        }

        if not self.archive_path.exists():
            raise ArchiveError("Archive not found", context=context)

        self.extract_dir.mkdir(parents=True, exist_ok=True)

        try:
            if zipfile.is_zipfile(self.archive_path):
                with zipfile.ZipFile(self.archive_path) as archive:
                    archive.extractall(self.extract_dir)
            elif rarfile.is_rarfile(self.archive_path):
                with rarfile.RarFile(self.archive_path) as archive:
                    archive.extractall(self.extract_dir)
            else:
                raise ArchiveError("Unsupported archive format", context=context)

        except (zipfile.BadZipFile, rarfile.Error, OSError) as e:
            raise ArchiveError("Failed to unpack archive", context=context, original_exception=e)

        logger.info(f"Unpacked {self.archive_path.name} into {self.extract_dir}")
        return self.extract_dir

    def enumerate(self, classifier: FileClassifier) -> List[FileDescriptor]:
        """List extracted members in name order, classified"""
        if not self.extract_dir.is_dir():
            raise ArchiveError(
                "Extract directory does not exist",
                context={"extract_dir": str(self.extract_dir)}
            )

        descriptors = [
            FileDescriptor(
                path=path,
                key=classifier.classify(path.name),
                size=path.stat().st_size
            )
            for path in sorted(self.extract_dir.iterdir())
            if path.is_file()
        ]

        logger.info(
            f"Found {len(descriptors)} files, "
            f"{sum(1 for d in descriptors if d.key)} classified"
        )
        return descriptors
