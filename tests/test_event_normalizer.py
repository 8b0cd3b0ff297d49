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

import unittest

from funcdeploy.exceptions import ConfigurationError
from funcdeploy.operations.event_normalizer import (
    GenericEvent,
    ScheduleEvent,
    TriggerEvent,
    normalize_events,
    parse_event,
)


class TestNormalizeEvents(unittest.TestCase):
    def test_mixed_events_keep_order_and_shape(self):
        events = [{"trigger": "t1"}, {"schedule": "* * * * *"}, {"http": {"path": "/x"}}]

        self.assertEqual(normalize_events(events), [
            {"type": "trigger", "trigger": "t1"},
            {"type": "schedule", "schedule": "* * * * *"},
            {"type": "http", "path": "/x"},
        ])

    def test_trigger_payload_stays_nested(self):
        out = normalize_events([{"trigger": {"topic": "orders"}}])
        self.assertEqual(out, [{"type": "trigger", "trigger": {"topic": "orders"}}])

    def test_unknown_kind_is_flattened_not_dropped(self):
        out = normalize_events([{"queue": {"name": "jobs", "batch": 10}}])
        self.assertEqual(out, [{"type": "queue", "name": "jobs", "batch": 10}])

    def test_generic_event_without_settings(self):
        self.assertEqual(normalize_events([{"http": None}]), [{"type": "http"}])

    def test_empty_or_missing_events(self):
        self.assertEqual(normalize_events([]), [])
        self.assertEqual(normalize_events(None), [])

    def test_order_preserved_for_many_events(self):
        events = [{"schedule": f"{i} * * * *"} for i in range(5)]
        out = normalize_events(events)
        self.assertEqual([e["schedule"] for e in out], [f"{i} * * * *" for i in range(5)])


class TestParseEvent(unittest.TestCase):
    def test_variants(self):
        self.assertIsInstance(parse_event({"trigger": "t"}), TriggerEvent)
        self.assertIsInstance(parse_event({"schedule": "@daily"}), ScheduleEvent)
        self.assertEqual(parse_event({"http": {"path": "/"}}), GenericEvent(type="http", settings={"path": "/"}))

    def test_first_key_is_the_kind(self):
        event = parse_event({"schedule": "@hourly", "extra": 1})
        self.assertEqual(event.to_record(), {"type": "schedule", "schedule": "@hourly"})

    def test_invalid_declarations(self):
        for declaration in ({}, "http", None, ["trigger"]):
            with self.subTest(declaration=declaration):
                with self.assertRaises(ConfigurationError):
                    parse_event(declaration)

    def test_generic_settings_must_be_a_mapping(self):
        with self.assertRaises(ConfigurationError):
            parse_event({"http": "/path"})


if __name__ == "__main__":
    unittest.main()
