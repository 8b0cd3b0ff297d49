# Copyright The Volcano Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Read files out of packaged function artifacts.

Decoding an archive is done once per path. Concurrent first reads of the
same archive share a single in-flight decode.
"""

import asyncio
import io
import logging
import zipfile
from typing import Callable, Dict, Optional

from funcdeploy.exceptions import EntryNotFoundError

logger = logging.getLogger(__name__)


def decode_archive(archive_path: str) -> zipfile.ZipFile:
    """Load the whole archive in memory and open it."""
    with open(archive_path, 'rb') as f:
        data = f.read()
    return zipfile.ZipFile(io.BytesIO(data))


class ArchiveReader:
    """Memoizing reader for zip artifacts."""

    def __init__(self, decoder: Optional[Callable[[str], zipfile.ZipFile]] = None) -> None:
        self._decoder = decoder or decode_archive
        self._archives: Dict[str, "asyncio.Task[zipfile.ZipFile]"] = {}

    async def _load(self, archive_path: str) -> zipfile.ZipFile:
        task = self._archives.get(archive_path)
        if task is None:
            logger.debug(f"Decoding archive {archive_path}")
            task = asyncio.ensure_future(asyncio.to_thread(self._decoder, archive_path))
            self._archives[archive_path] = task

        try:
            return await asyncio.shield(task)
        except Exception:
            # Forget failed decodes so the next caller tries again
            if self._archives.get(archive_path) is task:
                del self._archives[archive_path]
            raise

    async def read_file(self, archive_path: str, relative_path: str) -> str:
        """
        Read a text file stored in an archive.

        Args:
            archive_path: Path of the zip artifact on disk
            relative_path: Path of the entry inside the archive

        Returns:
            The entry content decoded as UTF-8, invalid bytes replaced

        Raises:
            EntryNotFoundError: If the archive has no such entry
        """
        archive = await self._load(archive_path)
        try:
            data = archive.read(relative_path)
        except KeyError:
            raise EntryNotFoundError(
                f"{relative_path} not found in {archive_path}",
                {"archive": archive_path, "entry": relative_path}
            )
        # undecodable bytes must not fail a deployment
        return data.decode('utf-8', errors='replace')

    async def read_optional(self, archive_path: str, relative_path: str) -> Optional[str]:
        """Like read_file, but an absent entry yields None."""
        try:
            return await self.read_file(archive_path, relative_path)
        except EntryNotFoundError:
            logger.debug(f"No {relative_path} in {archive_path}")
            return None

    def clear(self) -> None:
        self._archives.clear()
