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
Cluster-side configuration for deployments.

Kubeless publishes the runtimes it supports in the kubeless-config
ConfigMap. This service reads it to find the dependency file of each
runtime, and carries the retry settings handed to the submitter.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from funcdeploy import config, constants
from funcdeploy.exceptions import UnsupportedRuntimeError
from funcdeploy.services.kube import load_kubernetes_config

logger = logging.getLogger(__name__)

_RUNTIME_FAMILY = re.compile(r"^([a-z]+)")


class ClusterConfig:
    """Runtime catalogue and retry settings of the target cluster."""

    def __init__(
        self,
        namespace: Optional[str] = None,
        kubeconfig: Optional[str] = None,
        verbose: bool = False,
        core_api: Optional[Any] = None,
        runtime_images: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        self.namespace = namespace or config.get_config_namespace()
        self.kubeconfig = kubeconfig
        self.verbose = verbose
        self.core_api = core_api
        self.runtime_images: List[Dict[str, Any]] = runtime_images or []

        self.deployment_retry_limit = config.get_retry_limit()
        self.deployment_retry_interval = config.get_retry_interval()

    async def init(self) -> "ClusterConfig":
        """
        Load the runtime catalogue from the cluster.

        An unreachable cluster is not fatal here: the built-in runtime table
        is used instead and a warning is logged.
        """
        if self.runtime_images:
            return self

        try:
            self.runtime_images = await asyncio.to_thread(self._read_runtime_images)
        except Exception as e:
            logger.warning(f"Unable to read {constants.DEFAULT_CONFIG_MAP} from the cluster, using built-in runtimes: {e}")
            self.runtime_images = []

        if self.verbose:
            logger.debug(f"Loaded {len(self.runtime_images)} runtime definitions from the cluster")

        return self

    def _read_runtime_images(self) -> List[Dict[str, Any]]:
        if self.core_api is None:
            load_kubernetes_config(self.kubeconfig, verbose=self.verbose)
            self.core_api = client.CoreV1Api()

        try:
            config_map = self.core_api.read_namespaced_config_map(
                name=constants.DEFAULT_CONFIG_MAP,
                namespace=self.namespace
            )
        except ApiException as e:
            if e.status == 404:
                if self.verbose:
                    logger.debug(f"ConfigMap {constants.DEFAULT_CONFIG_MAP} not found in {self.namespace}")
                return []
            raise

        raw = (config_map.data or {}).get("runtime-images")
        if not raw:
            return []
        return json.loads(raw)

    def dep_file_for(self, runtime: str) -> str:
        """
        Get the dependency manifest name for a runtime.

        Args:
            runtime: Runtime identifier such as python3.9 or nodejs14

        Returns:
            Name of the dependency file inside the artifact

        Raises:
            UnsupportedRuntimeError: If the runtime is unknown
        """
        if not runtime:
            raise UnsupportedRuntimeError("No runtime configured for the function")

        match = _RUNTIME_FAMILY.match(runtime.lower())
        family = match.group(1) if match else runtime.lower()

        for image in self.runtime_images:
            if image.get("ID") == family and image.get("depName"):
                return image["depName"]

        dep_file = constants.DEFAULT_RUNTIME_DEP_FILES.get(family)
        if dep_file is None:
            raise UnsupportedRuntimeError(
                f"The runtime {runtime} is not supported",
                {"runtime": runtime}
            )
        return dep_file
