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
from unittest.mock import Mock

from funcdeploy import constants
from funcdeploy.operations.size_advisor import SizeAdvisor


class TestSizeAdvisor(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def _artifact(self, size):
        path = os.path.join(self.tmpdir.name, f"fn-{size}.zip")
        with open(path, 'wb') as f:
            f.truncate(size)
        return path

    async def test_warns_above_limit(self):
        log = Mock()
        await SizeAdvisor(log=log).check_size(self._artifact(constants.MAX_ARTIFACT_SIZE + 1))

        log.assert_called_once()
        message = log.call_args.args[0]
        self.assertIn("Function zip file is 1MB", message)
        self.assertIn("package.exclude", message)

    async def test_no_warning_at_limit(self):
        log = Mock()
        await SizeAdvisor(log=log).check_size(self._artifact(constants.MAX_ARTIFACT_SIZE))
        log.assert_not_called()

    async def test_size_is_rounded(self):
        log = Mock()
        await SizeAdvisor(log=log).check_size(self._artifact(int(2.6 * constants.MAX_ARTIFACT_SIZE)))
        self.assertIn("is 3MB", log.call_args.args[0])

    async def test_default_log_is_a_logging_warning(self):
        with self.assertLogs("funcdeploy.operations.size_advisor", level="WARNING"):
            await SizeAdvisor().check_size(self._artifact(constants.MAX_ARTIFACT_SIZE * 2))

    async def test_missing_artifact_raises(self):
        with self.assertRaises(FileNotFoundError):
            await SizeAdvisor(log=Mock()).check_size(os.path.join(self.tmpdir.name, "missing.zip"))


if __name__ == "__main__":
    unittest.main()
