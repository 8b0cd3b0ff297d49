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

"""Unit tests for DeployRuntime."""

import os
import tempfile
import unittest
from unittest.mock import Mock

from funcdeploy import constants
from funcdeploy.exceptions import ConfigurationError
from funcdeploy.models.service_models import DeployOptions, ServiceConfig
from funcdeploy.runtime.deploy_runtime import DeployRuntime, warn_unsupported_options
from funcdeploy.services.cluster_config import ClusterConfig
from tests.helpers import write_artifact


class TestWarnUnsupportedOptions(unittest.TestCase):
    def test_warns_only_for_given_options(self):
        log = Mock()
        warn_unsupported_options(["stage", "region"], {"stage": "dev", "region": None}, log)
        log.assert_called_once_with("Warning: Option stage is not supported for the kubeless plugin")


class TestDeployRuntime(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.artifact = write_artifact(self.tmpdir.name, "demo.zip", {
            "handler.py": "def hello(event, context):\n    return 'hello'\n",
            "requirements.txt": "requests\n",
        })
        with open(os.path.join(self.tmpdir.name, "serverless.yml"), "w") as f:
            f.write(
                "service: demo\n"
                "provider:\n"
                "  name: kubeless\n"
                "  runtime: python3.9\n"
                "  namespace: fns\n"
                "package:\n"
                f"  artifact: {self.artifact}\n"
                "functions:\n"
                "  hello:\n"
                "    handler: handler.hello\n"
                "    events:\n"
                "      - http:\n"
                "          path: /hello\n"
                "  docs:\n"
                "    description: metadata only\n"
            )

        self.log = Mock()
        self.submitter = Mock()
        self.submitter.deploy.return_value = [{"name": "hello", "namespace": "fns", "status": "created"}]
        self.runtime = DeployRuntime(
            log=self.log,
            cluster_config=ClusterConfig(runtime_images=[{"ID": "python", "depName": "requirements.txt"}]),
            submitter=self.submitter,
        )

    def test_excludes_always_contains_node_modules(self):
        service = ServiceConfig(service="demo", package={"exclude": ["tests/**"]})
        self.assertEqual(self.runtime.excludes(service), ["tests/**", constants.DEFAULT_EXCLUDE])
        self.assertEqual(service.package.exclude, ["tests/**", constants.DEFAULT_EXCLUDE])

        bare = ServiceConfig(service="demo")
        self.assertEqual(self.runtime.excludes(bare), [constants.DEFAULT_EXCLUDE])

    def test_validate_warns_for_stage_and_region(self):
        self.runtime.validate(DeployOptions(stage="dev", region="eu-west-1"))
        self.log.assert_any_call("Warning: Option stage is not supported for the kubeless plugin")
        self.log.assert_any_call("Warning: Option region is not supported for the kubeless plugin")

    def test_validate_is_silent_without_unsupported_options(self):
        self.runtime.validate(DeployOptions(package="dist"))
        self.log.assert_not_called()

    def test_deploy(self):
        result = self.runtime.deploy(self.tmpdir.name, stage="dev")

        self.assertEqual(result["service"], "demo")
        self.assertEqual(result["status"], "deployed")
        self.assertEqual(result["functions"], self.submitter.deploy.return_value)
        self.log.assert_any_call("Warning: Option stage is not supported for the kubeless plugin")

        self.submitter.deploy.assert_called_once()
        functions, runtime, service_name, options = self.submitter.deploy.call_args.args
        self.assertEqual(runtime, "python3.9")
        self.assertEqual(service_name, "demo")
        self.assertEqual(options["namespace"], "fns")
        self.assertFalse(options["force"])

        by_id = {f["id"]: f for f in functions}
        self.assertEqual(set(by_id), {"hello", "docs"})
        self.assertEqual(by_id["hello"]["deps"], "requests\n")
        self.assertEqual(by_id["hello"]["contentType"], "base64+zip")
        self.assertEqual(by_id["hello"]["events"], [{"type": "http", "path": "/hello"}])
        self.assertNotIn("content", by_id["docs"])

    def test_dry_run_does_not_submit(self):
        result = self.runtime.deploy(os.path.join(self.tmpdir.name, "serverless.yml"), dry_run=True)

        self.assertEqual(result["status"], "populated")
        self.assertEqual(len(result["functions"]), 2)
        self.submitter.deploy.assert_not_called()

    def test_missing_service_file(self):
        with tempfile.TemporaryDirectory() as empty:
            with self.assertRaises(FileNotFoundError):
                self.runtime.deploy(empty)

    def test_invalid_service_file(self):
        with open(os.path.join(self.tmpdir.name, "serverless.yml"), "w") as f:
            f.write("provider:\n  name: kubeless\n")

        with self.assertRaises(ConfigurationError):
            self.runtime.deploy(self.tmpdir.name)

        self.submitter.deploy.assert_not_called()


if __name__ == "__main__":
    unittest.main()
