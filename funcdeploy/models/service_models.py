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
This module defines the data models parsed from the service file.

Keys keep the camelCase spelling used in serverless.yml through field
aliases, and unknown keys are kept so they reach the populated function.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ServiceModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class DeployStrategyConfig(_ServiceModel):
    """Provider-level settings for how function code is staged."""

    strategy: str = Field("base64", description="Name of the deployment strategy")
    options: Dict[str, Any] = Field(default_factory=dict, description="Strategy-specific settings")

    @field_validator('strategy')
    @classmethod
    def validate_strategy(cls, v):
        return v.lower()


class ProviderConfig(_ServiceModel):
    """The `provider` section of the service file."""

    name: str = Field("kubeless", description="Provider name")
    runtime: Optional[str] = Field(None, description="Default runtime for every function")
    namespace: Optional[str] = None
    hostname: Optional[str] = None
    default_dns_resolution: Optional[str] = Field(None, alias="defaultDNSResolution")
    ingress: Optional[Dict[str, Any]] = None
    cpu: Optional[str] = None
    memory_size: Optional[Any] = Field(None, alias="memorySize")
    affinity: Optional[Dict[str, Any]] = None
    tolerations: Optional[List[Dict[str, Any]]] = None
    timeout: Optional[Any] = None
    environment: Optional[Dict[str, Any]] = None
    image: Optional[str] = None
    deploy: DeployStrategyConfig = Field(default_factory=DeployStrategyConfig)


class PackageConfig(_ServiceModel):
    """The service-level `package` section."""

    path: Optional[str] = None
    artifact: Optional[str] = None
    individually: bool = False
    exclude: List[str] = Field(default_factory=list)


class FunctionPackage(_ServiceModel):
    artifact: Optional[str] = None


class FunctionDeclaration(_ServiceModel):
    """A single entry of the `functions` map."""

    handler: Optional[str] = None
    runtime: Optional[str] = None
    events: List[Any] = Field(default_factory=list)
    package: Optional[FunctionPackage] = None
    image: Optional[str] = None

    @field_validator('events', mode='before')
    @classmethod
    def validate_events(cls, v):
        return v or []

    def as_record(self) -> Dict[str, Any]:
        """Return the declaration exactly as written, without defaults."""
        return self.model_dump(by_alias=True, exclude_unset=True)

    @property
    def artifact(self) -> Optional[str]:
        return self.package.artifact if self.package else None


class ServiceConfig(_ServiceModel):
    """Root of the service file."""

    service: str = Field(..., description="Service name")
    artifact: Optional[str] = Field(None, description="Global artifact fallback")
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    package: PackageConfig = Field(default_factory=PackageConfig)
    functions: Dict[str, FunctionDeclaration] = Field(default_factory=dict)

    @field_validator('service', mode='before')
    @classmethod
    def validate_service(cls, v):
        # `service: {name: foo}` is accepted as well as `service: foo`
        if isinstance(v, dict):
            v = v.get("name")
        if not v:
            raise ValueError("Service name must not be empty")
        return v

    @field_validator('functions', mode='before')
    @classmethod
    def validate_functions(cls, v):
        return v or {}


@dataclass
class DeployOptions:
    """Options given on the command line for a deployment."""
    package: Optional[str] = None
    force: bool = False
    verbose: bool = False
    stage: Optional[str] = None
    region: Optional[str] = None

    @classmethod
    def from_options(cls, options: Dict[str, Any]) -> "DeployOptions":
        """Create an instance from a dictionary of options."""
        return cls(
            package=options.get('package'),
            force=bool(options.get('force', False)),
            verbose=bool(options.get('verbose', False)),
            stage=options.get('stage'),
            region=options.get('region'),
        )
