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
Service file loading.

This service locates and parses serverless.yml into a validated
ServiceConfig.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from funcdeploy import constants
from funcdeploy.exceptions import ConfigurationError
from funcdeploy.models.service_models import ServiceConfig

logger = logging.getLogger(__name__)


def find_service_file(location: Union[str, Path]) -> Path:
    """
    Resolve the service file from a file path or a service directory.

    Args:
        location: Path to serverless.yml or to the directory containing it

    Returns:
        Path: The service file

    Raises:
        FileNotFoundError: If no service file exists at the location
    """
    path = Path(location)
    if path.is_file():
        return path

    if path.is_dir():
        for name in constants.SERVICE_FILE_NAMES:
            candidate = path / name
            if candidate.exists():
                return candidate

    raise FileNotFoundError(
        f"Service file not found at {path}. "
        f"Expected one of: {', '.join(constants.SERVICE_FILE_NAMES)}"
    )


def load_service_config(location: Union[str, Path], verbose: bool = False) -> ServiceConfig:
    """
    Load and validate the service file.

    Args:
        location: Path to serverless.yml or to the directory containing it
        verbose: Log the resolved file

    Returns:
        ServiceConfig: Validated service configuration

    Raises:
        FileNotFoundError: If the service file is not found
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    service_file = find_service_file(location)

    if verbose:
        logger.debug(f"Loading service file from: {service_file}")

    try:
        with open(service_file, 'r', encoding='utf-8') as f:
            payload = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in service file: {e}", {"path": str(service_file)})

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Service file must be a mapping: {service_file}")

    return parse_service_config(payload, source=str(service_file))


def parse_service_config(payload: dict, source: Optional[str] = None) -> ServiceConfig:
    """Validate an already-parsed service definition."""
    try:
        return ServiceConfig(**payload)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid service definition{f' in {source}' if source else ''}: {e}",
            {"path": source} if source else None,
        )
