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

import logging
from typing import Optional

from kubernetes import config

logger = logging.getLogger(__name__)


def load_kubernetes_config(kubeconfig: Optional[str] = None, verbose: bool = False) -> None:
    """
    Load Kubernetes configuration for the API clients.

    Args:
        kubeconfig: Path to kubeconfig file (uses default if not specified)
        verbose: Log which configuration was loaded

    Raises:
        RuntimeError: If no configuration can be loaded
    """
    try:
        if kubeconfig:
            config.load_kube_config(config_file=kubeconfig)
            return

        # Try in-cluster config first, then local kubeconfig
        try:
            config.load_incluster_config()
            if verbose:
                logger.info("Loaded in-cluster Kubernetes config")
        except config.ConfigException:
            config.load_kube_config()
            if verbose:
                logger.info("Loaded local Kubernetes config")

    except Exception as e:
        raise RuntimeError(f"Failed to initialize Kubernetes client: {str(e)}")
