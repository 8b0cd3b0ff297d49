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
Function population.

Every declared function is enriched concurrently into a record the
submitter can deploy: its artifact is resolved and size-checked, its code
staged through the provider's strategy, its dependency manifest read from
the artifact and its events normalized. The batch is submitted once, after
every function has been populated. Any fatal error in one function aborts
the whole batch and nothing is submitted.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional

from funcdeploy.models.service_models import DeployOptions, FunctionDeclaration, ServiceConfig
from funcdeploy.operations.archive_reader import ArchiveReader
from funcdeploy.operations.artifact_resolver import ArtifactResolver
from funcdeploy.operations.event_normalizer import normalize_events
from funcdeploy.operations.size_advisor import SizeAdvisor
from funcdeploy.services.cluster_config import ClusterConfig
from funcdeploy.services.strategy import StrategySelector

logger = logging.getLogger(__name__)


class FunctionPopulator:
    """Builds and submits the deployment plan of a service."""

    def __init__(
        self,
        service_config: ServiceConfig,
        options: DeployOptions,
        cluster_config: ClusterConfig,
        submitter: Any,
        strategy_selector: Optional[StrategySelector] = None,
        archive_reader: Optional[ArchiveReader] = None,
        artifact_resolver: Optional[ArtifactResolver] = None,
        size_advisor: Optional[SizeAdvisor] = None,
        log: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Args:
            service_config: Parsed service file
            options: Command line options of the deployment
            cluster_config: Runtime catalogue and retry settings
            submitter: Object whose deploy(functions, runtime, service, options)
                performs the cluster-side deployment
            strategy_selector: Chooses how code is staged (default StrategySelector)
            archive_reader: Reader shared by all functions of this run
            artifact_resolver: Artifact lookup (default ArtifactResolver)
            size_advisor: Artifact size check (default SizeAdvisor)
            log: Callable used for user-facing messages
        """
        self.service_config = service_config
        self.options = options
        self.cluster_config = cluster_config
        self.submitter = submitter
        self.log = log or logger.info
        self.strategy_selector = strategy_selector or StrategySelector()
        self.archive_reader = archive_reader or ArchiveReader()
        self.artifact_resolver = artifact_resolver or ArtifactResolver(options, service_config)
        self.size_advisor = size_advisor or SizeAdvisor(log=self.log)

    @property
    def runtime(self) -> Optional[str]:
        return self.service_config.provider.runtime

    async def populate_function(self, name: str, declaration: FunctionDeclaration) -> Dict[str, Any]:
        """Populate a single function."""
        if not declaration.handler:
            return {**declaration.as_record(), "id": name}

        provider = self.service_config.provider

        pkg = self.artifact_resolver.resolve(declaration, name)
        await self.size_advisor.check_size(pkg)

        # unknown runtimes fail before any code is staged
        dep_file = self.cluster_config.dep_file_for(declaration.runtime or self.runtime)

        strategy = self.strategy_selector.select_for(provider)
        deploy_options = await strategy.deploy(declaration, pkg)

        deps = await self.archive_reader.read_optional(pkg, dep_file)

        record = {
            **declaration.as_record(),
            **deploy_options,
            "id": name,
            "image": declaration.image or provider.image,
            "events": normalize_events(declaration.events),
        }
        if deps is not None:
            record["deps"] = deps

        logger.debug(f"Populated function {name} from {pkg}")
        return record

    async def populate(self) -> List[Dict[str, Any]]:
        """
        Populate every declared function concurrently.

        All branches are started before any is awaited and all of them are
        allowed to finish. When one or more fail, the error raised first is
        propagated and the partial results are dropped.

        Returns:
            One populated record per declared function

        Raises:
            Exception: The first fatal error raised by any function
        """
        await self.cluster_config.init()

        functions = self.service_config.functions
        failures: List[BaseException] = []

        async def branch(name: str, declaration: FunctionDeclaration) -> Optional[Dict[str, Any]]:
            try:
                return await self.populate_function(name, declaration)
            except Exception as e:
                if failures:
                    logger.debug(f"Ignoring error of function {name} after abort: {e}")
                else:
                    logger.error(f"Failed to populate function {name}: {e}")
                failures.append(e)
                return None

        tasks = [
            asyncio.ensure_future(branch(name, declaration))
            for name, declaration in functions.items()
        ]
        results = await asyncio.gather(*tasks)

        if failures:
            raise failures[0]

        return list(results)

    def submit_options(self) -> Dict[str, Any]:
        """Cluster-level options handed to the submitter."""
        provider = self.service_config.provider
        return {
            "namespace": provider.namespace,
            "hostname": provider.hostname,
            "defaultDNSResolution": provider.default_dns_resolution,
            "ingress": provider.ingress,
            "cpu": provider.cpu,
            "memorySize": provider.memory_size,
            "affinity": provider.affinity,
            "tolerations": provider.tolerations,
            "force": self.options.force,
            "verbose": self.options.verbose,
            "log": self.log,
            "timeout": provider.timeout,
            "environment": provider.environment,
            "retryLimit": self.cluster_config.deployment_retry_limit,
            "retryInterval": self.cluster_config.deployment_retry_interval,
        }

    async def deploy_functions(self) -> Any:
        """Populate all functions and submit them in a single call."""
        functions = await self.populate()

        if self.options.verbose:
            logger.info(f"Submitting {len(functions)} functions of service {self.service_config.service}")

        # the cluster client blocks, keep it off the event loop
        result = await asyncio.to_thread(
            self.submitter.deploy,
            functions,
            self.runtime,
            self.service_config.service,
            self.submit_options(),
        )
        if inspect.isawaitable(result):
            result = await result
        return result
