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

import os
import tempfile
import unittest

from funcdeploy.exceptions import ConfigurationError
from funcdeploy.models.service_models import DeployOptions, FunctionDeclaration
from funcdeploy.services.service_config import find_service_file, load_service_config

SERVICE_YAML = """
service: hello-world
provider:
  name: kubeless
  runtime: python3.9
  namespace: functions
  defaultDNSResolution: nip.io
  memorySize: 128
  deploy:
    strategy: base64
package:
  individually: true
  exclude:
    - tests/**
functions:
  hello:
    handler: handler.hello
    description: Says hello
    events:
      - http:
          path: /hello
  docs:
    description: metadata only
"""


class TestLoadServiceConfig(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def _write(self, name, content):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path

    def test_load_from_directory(self):
        self._write("serverless.yml", SERVICE_YAML)

        service = load_service_config(self.tmpdir.name)

        self.assertEqual(service.service, "hello-world")
        self.assertEqual(service.provider.runtime, "python3.9")
        self.assertEqual(service.provider.default_dns_resolution, "nip.io")
        self.assertEqual(service.provider.memory_size, 128)
        self.assertTrue(service.package.individually)
        self.assertEqual(service.package.exclude, ["tests/**"])
        self.assertEqual(list(service.functions), ["hello", "docs"])
        self.assertIsNone(service.functions["docs"].handler)

    def test_alternate_file_name(self):
        path = self._write("serverless.yaml", SERVICE_YAML)
        self.assertEqual(str(find_service_file(self.tmpdir.name)), path)

    def test_service_name_mapping(self):
        path = self._write("serverless.yml", "service:\n  name: mapped\n")
        self.assertEqual(load_service_config(path).service, "mapped")

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_service_config(self.tmpdir.name)

    def test_invalid_yaml(self):
        path = self._write("serverless.yml", "service: [unclosed\n")
        with self.assertRaises(ConfigurationError):
            load_service_config(path)

    def test_missing_service_name(self):
        path = self._write("serverless.yml", "provider:\n  name: kubeless\n")
        with self.assertRaises(ConfigurationError):
            load_service_config(path)

    def test_not_a_mapping(self):
        path = self._write("serverless.yml", "- a\n- b\n")
        with self.assertRaises(ConfigurationError):
            load_service_config(path)


class TestFunctionDeclaration(unittest.TestCase):
    def test_as_record_keeps_only_declared_keys(self):
        declaration = FunctionDeclaration(handler="h.run", memorySize=256, labels={"team": "a"})
        self.assertEqual(declaration.as_record(), {"handler": "h.run", "memorySize": 256, "labels": {"team": "a"}})

    def test_empty_events(self):
        self.assertEqual(FunctionDeclaration(events=None).events, [])

    def test_artifact(self):
        self.assertEqual(FunctionDeclaration(package={"artifact": "a.zip"}).artifact, "a.zip")
        self.assertIsNone(FunctionDeclaration().artifact)


class TestDeployOptions(unittest.TestCase):
    def test_from_options(self):
        options = DeployOptions.from_options({"package": "out/", "force": True, "stage": "dev"})
        self.assertEqual(options, DeployOptions(package="out/", force=True, verbose=False, stage="dev"))


if __name__ == "__main__":
    unittest.main()
