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
Submitter for populated functions.

This service turns populated functions into Kubeless Function custom
resources, plus HTTPTrigger, CronJobTrigger and KafkaTrigger resources for
their events, and creates or updates them in the cluster.
"""

import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from funcdeploy import constants
from funcdeploy.exceptions import SubmissionError
from funcdeploy.services.kube import load_kubernetes_config

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = (409, 429, 500, 502, 503, 504)


def sanitize_name(name: str) -> str:
    """
    Make a function name Kubernetes DNS-1123 compliant.

    Lowercase alphanumerics and '-', starting and ending with an
    alphanumeric, at most 63 characters.
    """
    sanitized = re.sub(r"[_\s.]", "-", name.lower())
    sanitized = re.sub(r"[^a-z0-9-]", "", sanitized)
    sanitized = sanitized[:63].strip("-")
    return sanitized or "function"


def _memory_quantity(value: Any) -> str:
    # serverless.yml gives memorySize in megabytes
    if isinstance(value, int):
        return f"{value}Mi"
    return str(value)


class FunctionSubmitter:
    """Creates or updates function resources in the cluster."""

    def __init__(
        self,
        kubeconfig: Optional[str] = None,
        verbose: bool = False,
        custom_api: Optional[Any] = None,
        core_api: Optional[Any] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the submitter.

        Args:
            kubeconfig: Path to kubeconfig file (uses default if not specified)
            verbose: Enable verbose logging
            custom_api: CustomObjectsApi to use instead of a configured one
            core_api: CoreV1Api to use instead of a configured one
            sleep: Pause function between retries
        """
        self.verbose = verbose
        self._sleep = sleep
        self.retry_limit = constants.DEFAULT_RETRY_LIMIT
        self.retry_interval = constants.DEFAULT_RETRY_INTERVAL

        if custom_api is None:
            load_kubernetes_config(kubeconfig, verbose=verbose)
            custom_api = client.CustomObjectsApi()
            core_api = core_api or client.CoreV1Api()

        self.custom_api = custom_api
        self.core_api = core_api

    def deploy(
        self,
        functions: List[Dict[str, Any]],
        runtime: Optional[str],
        service_name: str,
        options: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        """
        Deploy populated functions and their triggers.

        Args:
            functions: Populated function records
            runtime: Service-level runtime
            service_name: Name of the service
            options: Cluster-level options (namespace, hostname, force, retryLimit, ...)

        Returns:
            One status entry per function

        Raises:
            SubmissionError: If the cluster rejects a resource
        """
        log = options.get("log") or logger.info
        self.retry_limit = options.get("retryLimit", self.retry_limit)
        self.retry_interval = options.get("retryInterval", self.retry_interval)

        results = []
        for function in functions:
            name = function["id"]
            namespace = function.get("namespace") or options.get("namespace") or constants.DEFAULT_NAMESPACE

            if not function.get("handler"):
                log(f"Function {name} has no handler, skipping")
                results.append({"name": name, "namespace": namespace, "status": "skipped"})
                continue

            manifest = self.build_function_manifest(function, runtime, service_name, namespace, options)
            k8s_name = manifest["metadata"]["name"]

            try:
                status = self._apply(constants.FUNCTION_PLURAL, namespace, manifest, options.get("force", False))
                if status == "exists":
                    log(
                        f"Function {name} already exists. "
                        "Redeploy it using --force to update it"
                    )
                    results.append({"name": k8s_name, "namespace": namespace, "status": "skipped"})
                    continue

                for trigger in self.build_trigger_manifests(function, k8s_name, namespace, options):
                    self._apply(trigger["plural"], namespace, trigger["body"], force=True)

            except ApiException as e:
                raise SubmissionError(
                    f"Failed to deploy function {name}: {e.reason}",
                    {"function": name, "status": e.status}
                )

            log(f"Function {name} successfully {status}")
            results.append({"name": k8s_name, "namespace": namespace, "status": status})

        return results

    def build_function_manifest(
        self,
        function: Dict[str, Any],
        runtime: Optional[str],
        service_name: str,
        namespace: str,
        options: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Build the Function custom resource of a populated function."""
        k8s_name = sanitize_name(function["id"])
        port = int(function.get("port") or constants.DEFAULT_FUNCTION_PORT)

        environment = {**(options.get("environment") or {}), **(function.get("environment") or {})}
        container: Dict[str, Any] = {"name": k8s_name}
        if environment:
            container["env"] = [{"name": k, "value": str(v)} for k, v in environment.items()]
        if function.get("image"):
            container["image"] = function["image"]

        resources: Dict[str, str] = {}
        memory = function.get("memorySize") or options.get("memorySize")
        cpu = function.get("cpu") or options.get("cpu")
        if memory:
            resources["memory"] = _memory_quantity(memory)
        if cpu:
            resources["cpu"] = str(cpu)
        if resources:
            container["resources"] = {"requests": dict(resources), "limits": dict(resources)}

        pod_spec: Dict[str, Any] = {"containers": [container]}
        affinity = function.get("affinity") or options.get("affinity")
        tolerations = function.get("tolerations") or options.get("tolerations")
        if affinity:
            pod_spec["affinity"] = affinity
        if tolerations:
            pod_spec["tolerations"] = tolerations

        timeout = function.get("timeout") or options.get("timeout") or constants.DEFAULT_FUNCTION_TIMEOUT

        return {
            "apiVersion": f"{constants.KUBELESS_GROUP}/{constants.KUBELESS_VERSION}",
            "kind": "Function",
            "metadata": {
                "name": k8s_name,
                "namespace": namespace,
                "labels": {
                    "created-by": constants.CREATED_BY_LABEL,
                    "function": k8s_name,
                    "service": sanitize_name(service_name),
                },
            },
            "spec": {
                "handler": function["handler"],
                "runtime": function.get("runtime") or runtime,
                "deps": function.get("deps", ""),
                "function": function.get("content", ""),
                "function-content-type": function.get("contentType", ""),
                "checksum": function.get("checksum", ""),
                "timeout": str(timeout),
                "deployment": {"spec": {"template": {"spec": pod_spec}}},
                "service": {
                    "ports": [{
                        "name": "http-function-port",
                        "port": port,
                        "protocol": "TCP",
                        "targetPort": port,
                    }],
                    "selector": {"function": k8s_name},
                    "type": "ClusterIP",
                },
            },
        }

    def build_trigger_manifests(
        self,
        function: Dict[str, Any],
        k8s_name: str,
        namespace: str,
        options: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        """Build the trigger resources for the normalized events of a function."""
        log = options.get("log") or logger.info
        triggers = []
        seen: Dict[str, int] = {}

        for event in function.get("events") or []:
            kind = event["type"]
            index = seen.get(kind, 0)
            seen[kind] = index + 1
            name = k8s_name if index == 0 else f"{k8s_name}-{index}"

            if kind == "http":
                plural, body = constants.HTTP_TRIGGER_PLURAL, self._http_trigger(event, name, k8s_name, options)
            elif kind == "schedule":
                plural, body = constants.CRONJOB_TRIGGER_PLURAL, self._trigger(
                    "CronJobTrigger", name, namespace,
                    {"function-name": k8s_name, "schedule": event["schedule"]}, k8s_name
                )
            elif kind == "trigger":
                topic = event["trigger"]
                if isinstance(topic, dict):
                    topic = topic.get("topic")
                plural, body = constants.KAFKA_TRIGGER_PLURAL, self._trigger(
                    "KafkaTrigger", name, namespace,
                    {"functionSelector": {"matchLabels": {"function": k8s_name}}, "topic": topic}, k8s_name
                )
            else:
                log(f"Event type {kind} of function {function['id']} is not supported, ignoring it")
                continue

            body["metadata"]["namespace"] = namespace
            triggers.append({"plural": plural, "body": body})

        return triggers

    def _trigger(self, kind: str, name: str, namespace: str, spec: Dict[str, Any], function_name: str) -> Dict[str, Any]:
        return {
            "apiVersion": f"{constants.KUBELESS_GROUP}/{constants.KUBELESS_VERSION}",
            "kind": kind,
            "metadata": {
                "name": name,
                "namespace": namespace,
                "labels": {"created-by": constants.CREATED_BY_LABEL, "function": function_name},
            },
            "spec": spec,
        }

    def _http_trigger(
        self,
        event: Dict[str, Any],
        name: str,
        function_name: str,
        options: Dict[str, Any],
    ) -> Dict[str, Any]:
        ingress = options.get("ingress") or {}
        spec: Dict[str, Any] = {
            "function-name": function_name,
            "path": str(event.get("path") or "/").lstrip("/"),
            "gateway": ingress.get("class", "nginx"),
            "tls": bool(ingress.get("tls") or ingress.get("tlsConfig")),
        }
        host = event.get("hostname") or options.get("hostname") or self._default_host(options)
        if host:
            spec["host-name"] = host
        if event.get("cors"):
            spec["cors-enable"] = True

        trigger = self._trigger("HTTPTrigger", name, "", spec, function_name)
        annotations = ingress.get("additionalAnnotations")
        if annotations:
            trigger["metadata"]["annotations"] = dict(annotations)
        return trigger

    def _default_host(self, options: Dict[str, Any]) -> Optional[str]:
        """Build a wildcard DNS host (e.g. nip.io) from the address of the first node."""
        dns = options.get("defaultDNSResolution")
        if not dns or self.core_api is None:
            return None

        nodes = self._call(self.core_api.list_node)
        for node in nodes.items:
            addresses = {a.type: a.address for a in (node.status.addresses or [])}
            ip = addresses.get("ExternalIP") or addresses.get("InternalIP")
            if ip:
                return f"{ip}.{dns}"
        return None

    def _apply(self, plural: str, namespace: str, body: Dict[str, Any], force: bool) -> str:
        """
        Create a custom object, or patch it when it exists and force is set.

        Returns:
            "created", "updated", or "exists" when the object was left untouched
        """
        name = body["metadata"]["name"]
        common = {
            "group": constants.KUBELESS_GROUP,
            "version": constants.KUBELESS_VERSION,
            "namespace": namespace,
            "plural": plural,
        }

        try:
            self._call(self.custom_api.get_namespaced_custom_object, name=name, **common)
        except ApiException as e:
            if e.status != 404:
                raise
            self._call(self.custom_api.create_namespaced_custom_object, body=body, **common)
            if self.verbose:
                logger.info(f"Created {body['kind']} {namespace}/{name}")
            return "created"

        if not force:
            return "exists"

        self._call(self.custom_api.patch_namespaced_custom_object, name=name, body=body, **common)
        if self.verbose:
            logger.info(f"Updated {body['kind']} {namespace}/{name}")
        return "updated"

    def _call(self, func: Callable[..., Any], **kwargs: Any) -> Any:
        """Call the API, retrying transient failures up to retry_limit times."""
        attempt = 0
        while True:
            try:
                return func(**kwargs)
            except ApiException as e:
                if e.status not in RETRYABLE_STATUSES or attempt >= self.retry_limit:
                    raise
                attempt += 1
                logger.warning(
                    f"Cluster call failed with status {e.status}, "
                    f"retrying ({attempt}/{self.retry_limit}) in {self.retry_interval}s"
                )
                self._sleep(self.retry_interval)
