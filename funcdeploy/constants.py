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

# Service file
SERVICE_FILE_NAMES = ("serverless.yml", "serverless.yaml")
DEFAULT_EXCLUDE = "node_modules/**"
UNSUPPORTED_OPTIONS = ("stage", "region")

# Artifacts
# The controller stores function content in etcd, which caps a single entry at 1MB
MAX_ARTIFACT_SIZE = 1024 * 1024

# Kubeless cluster configuration
CONFIG_NAMESPACE_ENV = "FUNCDEPLOY_CONFIG_NAMESPACE"
RETRY_LIMIT_ENV = "FUNCDEPLOY_RETRY_LIMIT"
RETRY_INTERVAL_ENV = "FUNCDEPLOY_RETRY_INTERVAL"
KUBECONFIG_ENV = "KUBECONFIG"

DEFAULT_CONFIG_NAMESPACE = "kubeless"
DEFAULT_CONFIG_MAP = "kubeless-config"
DEFAULT_RETRY_LIMIT = 3
DEFAULT_RETRY_INTERVAL = 0.5  # seconds

# Dependency file per runtime family, used when the cluster does not publish runtime-images
DEFAULT_RUNTIME_DEP_FILES = {
    "python": "requirements.txt",
    "nodejs": "package.json",
    "ruby": "Gemfile",
    "php": "composer.json",
    "go": "Gopkg.toml",
    "java": "pom.xml",
    "dotnetcore": "project.csproj",
    "ballerina": "kubeless.toml",
}

# Function custom resources
KUBELESS_GROUP = "kubeless.io"
KUBELESS_VERSION = "v1beta1"
FUNCTION_PLURAL = "functions"
HTTP_TRIGGER_PLURAL = "httptriggers"
CRONJOB_TRIGGER_PLURAL = "cronjobtriggers"
KAFKA_TRIGGER_PLURAL = "kafkatriggers"

DEFAULT_NAMESPACE = "default"
DEFAULT_FUNCTION_PORT = 8080
DEFAULT_FUNCTION_TIMEOUT = "180"
DEFAULT_STRATEGY = "base64"
CREATED_BY_LABEL = "funcdeploy"
