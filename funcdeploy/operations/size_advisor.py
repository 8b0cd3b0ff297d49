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

import asyncio
import logging
import math
import os
from typing import Callable, Optional

from funcdeploy import constants

logger = logging.getLogger(__name__)


class SizeAdvisor:
    """Warns about artifacts too large to be stored by the controller."""

    def __init__(self, log: Optional[Callable[[str], None]] = None) -> None:
        self.log = log or logger.warning

    async def check_size(self, path: str) -> None:
        """
        Warn when an artifact exceeds the size limit.

        A missing artifact raises the FileNotFoundError from stat.
        """
        stat = await asyncio.to_thread(os.stat, path)
        if stat.st_size > constants.MAX_ARTIFACT_SIZE:
            size_mb = math.floor(stat.st_size / constants.MAX_ARTIFACT_SIZE + 0.5)
            self.log(
                f"WARNING! Function zip file is {size_mb}MB. "
                "The maximum size allowed is 1MB: please use package.exclude directives to include "
                "only the required files"
            )
