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
import os

from funcdeploy.exceptions import ConfigurationError, InvalidPackageLayoutError
from funcdeploy.models.service_models import DeployOptions, FunctionDeclaration, ServiceConfig

logger = logging.getLogger(__name__)


class ArtifactResolver:
    """Picks the artifact deployed for each function."""

    def __init__(self, options: DeployOptions, service_config: ServiceConfig) -> None:
        self.options = options
        self.service_config = service_config

    def resolve(self, declaration: FunctionDeclaration, function_name: str) -> str:
        """
        Resolve the artifact path of a function.

        The first non-empty candidate wins: --package option, package.path,
        package.artifact, the function's own package.artifact, then the
        service-wide artifact.

        Args:
            declaration: The function declaration
            function_name: Key of the function in the service file

        Returns:
            Path of the zip artifact

        Raises:
            InvalidPackageLayoutError: If functions are packaged individually
                and --package is not a directory
            ConfigurationError: If no artifact is configured at all
        """
        package = self.service_config.package
        pkg = (
            self.options.package
            or package.path
            or package.artifact
            or declaration.artifact
            or self.service_config.artifact
        )

        # With --package and individual packaging, the option points to the
        # directory holding one zip per function
        if self.options.package and package.individually:
            if os.path.isdir(pkg):
                return os.path.join(pkg, f"{function_name}.zip")
            err_msg = "Expecting the package option to be a directory for individually packaged functions"
            logger.error(err_msg)
            raise InvalidPackageLayoutError(err_msg, {"package": pkg, "function": function_name})

        if not pkg:
            raise ConfigurationError(
                f"No artifact found for function {function_name}",
                {"function": function_name}
            )

        return pkg
