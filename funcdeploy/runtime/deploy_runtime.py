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
Deploy runtime for funcdeploy.

This module implements the deploy command functionality: it prepares the
service configuration, populates every function and submits them to the
cluster.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from funcdeploy import config, constants
from funcdeploy.models.service_models import DeployOptions, ServiceConfig
from funcdeploy.operations.function_populator import FunctionPopulator
from funcdeploy.services.cluster_config import ClusterConfig
from funcdeploy.services.function_submitter import FunctionSubmitter
from funcdeploy.services.service_config import load_service_config

logger = logging.getLogger(__name__)


def warn_unsupported_options(
    unsupported: List[str],
    options: Dict[str, Any],
    log: Callable[[str], None],
) -> None:
    """Log a warning for each unsupported option that was given a value."""
    for option in unsupported:
        if options.get(option):
            log(f"Warning: Option {option} is not supported for the kubeless plugin")


class DeployRuntime:
    """Runtime for the deploy command."""

    def __init__(
        self,
        verbose: bool = False,
        kubeconfig: Optional[str] = None,
        log: Optional[Callable[[str], None]] = None,
        cluster_config: Optional[ClusterConfig] = None,
        submitter: Optional[Any] = None,
    ) -> None:
        self.verbose = verbose
        self.kubeconfig = kubeconfig or config.get_kubeconfig()
        self.log = log or logger.info
        self.cluster_config = cluster_config
        self.submitter = submitter

        if self.verbose:
            logging.basicConfig(level=logging.DEBUG)

    def excludes(self, service_config: ServiceConfig) -> List[str]:
        """Make sure node_modules never ends up in an artifact."""
        exclude = service_config.package.exclude or []
        exclude.append(constants.DEFAULT_EXCLUDE)
        service_config.package.exclude = exclude
        return exclude

    def validate(self, options: DeployOptions) -> None:
        warn_unsupported_options(list(constants.UNSUPPORTED_OPTIONS), vars(options), self.log)

    def deploy(
        self,
        service_path: Union[str, Path],
        dry_run: bool = False,
        **options: Any
    ) -> Dict[str, Any]:
        """
        Deploy every function of a service.

        Args:
            service_path: Path to serverless.yml or its directory
            dry_run: Populate the functions without submitting them
            **options: Deploy options (package, force, stage, region)

        Returns:
            Dict containing the service name and the deployed functions

        Raises:
            ConfigurationError: If the service or its packaging is invalid
            StrategyDeployError: If staging the code of a function fails
            SubmissionError: If the cluster rejects the functions
        """
        deploy_options = DeployOptions.from_options({**options, "verbose": self.verbose})

        if self.verbose:
            logger.info(f"Starting deploy process for service: {service_path}")

        service_config = load_service_config(service_path, verbose=self.verbose)
        self.excludes(service_config)
        self.validate(deploy_options)

        return asyncio.run(self._deploy(service_config, deploy_options, dry_run))

    async def _deploy(
        self,
        service_config: ServiceConfig,
        options: DeployOptions,
        dry_run: bool,
    ) -> Dict[str, Any]:
        cluster_config = self.cluster_config or ClusterConfig(
            kubeconfig=self.kubeconfig,
            verbose=self.verbose
        )

        if dry_run:
            populator = FunctionPopulator(
                service_config, options, cluster_config, submitter=None, log=self.log
            )
            functions = await populator.populate()
            return {
                "service": service_config.service,
                "functions": functions,
                "status": "populated",
            }

        submitter = self.submitter or FunctionSubmitter(kubeconfig=self.kubeconfig, verbose=self.verbose)
        populator = FunctionPopulator(
            service_config, options, cluster_config, submitter=submitter, log=self.log
        )
        results = await populator.deploy_functions()

        result = {
            "service": service_config.service,
            "functions": results,
            "status": "deployed",
        }

        if self.verbose:
            logger.info(f"Deploy completed: {result}")

        return result
