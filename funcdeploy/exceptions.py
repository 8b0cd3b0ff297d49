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

class DeployError(Exception):
    """Base exception class for all deployment errors"""
    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.context = context or {}
        self.code = getattr(self, 'code', 500)

class ConfigurationError(DeployError):
    """Invalid service or cluster configuration"""
    code = 400

class InvalidPackageLayoutError(ConfigurationError):
    """Individually packaged functions were given a package path that is not a directory"""

class UnsupportedRuntimeError(ConfigurationError):
    """The runtime has no known dependency file"""

class EntryNotFoundError(DeployError):
    """Raised when a file is not present inside an artifact archive"""
    code = 404

class StrategyDeployError(DeployError):
    """Staging a function's code through its deployment strategy failed"""
    code = 502

class SubmissionError(DeployError):
    """The cluster rejected the populated functions"""
    code = 502
