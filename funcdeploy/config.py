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
Configuration module for funcdeploy
"""
import os
from typing import Optional

from dotenv import load_dotenv

from funcdeploy import constants


# Load environment variables from .env file
load_dotenv()


def get_config_namespace() -> str:
    """
    Get the namespace holding the kubeless-config ConfigMap

    Returns:
        Kubernetes namespace
    """
    return os.getenv(constants.CONFIG_NAMESPACE_ENV, constants.DEFAULT_CONFIG_NAMESPACE)


def get_retry_limit() -> int:
    """
    Get the number of times a cluster call is retried before giving up

    Returns:
        Retry limit (never negative)
    """
    value = int(os.getenv(constants.RETRY_LIMIT_ENV, str(constants.DEFAULT_RETRY_LIMIT)))
    return max(value, 0)


def get_retry_interval() -> float:
    """
    Get the pause between two retries, in seconds

    Returns:
        Retry interval
    """
    return float(os.getenv(constants.RETRY_INTERVAL_ENV, str(constants.DEFAULT_RETRY_INTERVAL)))


def get_kubeconfig() -> Optional[str]:
    """Get an explicit kubeconfig path, if one is set"""
    return os.getenv(constants.KUBECONFIG_ENV) or None
