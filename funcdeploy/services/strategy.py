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
Deployment strategies.

A strategy decides how the code of a function reaches the cluster: either
inlined in the Function object, or referenced by URL from storage the
controller can reach. The strategy is chosen per provider through
`provider.deploy.strategy`.
"""

import asyncio
import base64
import hashlib
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from funcdeploy import constants
from funcdeploy.exceptions import ConfigurationError, StrategyDeployError
from funcdeploy.models.service_models import FunctionDeclaration, ProviderConfig

logger = logging.getLogger(__name__)


def _read_artifact(artifact_path: str) -> Tuple[bytes, str]:
    with open(artifact_path, 'rb') as f:
        content = f.read()
    return content, f"sha256:{hashlib.sha256(content).hexdigest()}"


class DeploymentStrategy(ABC):
    """Stages the code of one function."""

    name: str = ""

    def __init__(self, options: Optional[Dict[str, Any]] = None) -> None:
        self.options = options or {}

    async def deploy(self, declaration: FunctionDeclaration, artifact_path: str) -> Dict[str, Any]:
        """
        Stage a function's artifact.

        Args:
            declaration: The function being deployed
            artifact_path: Resolved zip artifact

        Returns:
            Fields merged into the populated function

        Raises:
            StrategyDeployError: If staging fails for any reason
        """
        try:
            return await self._deploy(declaration, artifact_path)
        except StrategyDeployError:
            raise
        except Exception as e:
            raise StrategyDeployError(
                f"{self.name} deployment of {artifact_path} failed: {str(e)}",
                {"artifact": artifact_path, "strategy": self.name}
            ) from e

    @abstractmethod
    async def _deploy(self, declaration: FunctionDeclaration, artifact_path: str) -> Dict[str, Any]:
        ...


class InlineArchiveStrategy(DeploymentStrategy):
    """Embeds the zip, base64 encoded, in the Function object."""

    name = "base64"

    async def _deploy(self, declaration: FunctionDeclaration, artifact_path: str) -> Dict[str, Any]:
        content, checksum = await asyncio.to_thread(_read_artifact, artifact_path)
        return {
            "content": base64.b64encode(content).decode('ascii'),
            "contentType": "base64+zip",
            "checksum": checksum,
        }


class ReferenceStrategy(DeploymentStrategy):
    """Points the Function object to the zip published under a base URL."""

    name = "reference"

    def __init__(self, options: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(options)
        url = self.options.get("url")
        if not url:
            raise ConfigurationError(
                "The reference deployment strategy requires provider.deploy.options.url"
            )
        self.base_url = url.rstrip('/')

    async def _deploy(self, declaration: FunctionDeclaration, artifact_path: str) -> Dict[str, Any]:
        _, checksum = await asyncio.to_thread(_read_artifact, artifact_path)
        return {
            "content": f"{self.base_url}/{os.path.basename(artifact_path)}",
            "contentType": "url+zip",
            "checksum": checksum,
        }


class StrategySelector:
    """Maps provider configuration to a deployment strategy."""

    STRATEGIES = {
        InlineArchiveStrategy.name: InlineArchiveStrategy,
        ReferenceStrategy.name: ReferenceStrategy,
    }

    def select_for(self, provider: ProviderConfig) -> DeploymentStrategy:
        name = provider.deploy.strategy or constants.DEFAULT_STRATEGY
        strategy_class = self.STRATEGIES.get(name)
        if strategy_class is None:
            raise ConfigurationError(
                f"Unsupported deployment strategy: {name}. "
                f"Supported strategies are {', '.join(sorted(self.STRATEGIES))}."
            )
        logger.debug(f"Using the {name} deployment strategy")
        return strategy_class(provider.deploy.options)
