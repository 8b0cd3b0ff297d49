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
Event declarations of a function.

Each declaration in serverless.yml is a single-key mapping from the event
kind to its settings. Declarations are parsed into one of three variants:
trigger and schedule keep their value under their own key, every other
kind has its settings spread next to the type.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Union

from funcdeploy.exceptions import ConfigurationError


@dataclass(frozen=True)
class TriggerEvent:
    trigger: Any
    type: str = field(default="trigger", init=False)

    def to_record(self) -> Dict[str, Any]:
        return {"type": self.type, "trigger": self.trigger}


@dataclass(frozen=True)
class ScheduleEvent:
    schedule: Any
    type: str = field(default="schedule", init=False)

    def to_record(self) -> Dict[str, Any]:
        return {"type": self.type, "schedule": self.schedule}


@dataclass(frozen=True)
class GenericEvent:
    type: str
    settings: Dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> Dict[str, Any]:
        return {"type": self.type, **self.settings}


Event = Union[TriggerEvent, ScheduleEvent, GenericEvent]


def parse_event(declaration: Any) -> Event:
    """
    Parse a raw event declaration.

    Raises:
        ConfigurationError: If the declaration is not a non-empty mapping, or
            a generic event carries settings that are not a mapping
    """
    if not isinstance(declaration, dict) or not declaration:
        raise ConfigurationError(f"Invalid event declaration: {declaration!r}")

    kind = next(iter(declaration))
    value = declaration[kind]

    if kind == "trigger":
        return TriggerEvent(trigger=value)
    if kind == "schedule":
        return ScheduleEvent(schedule=value)

    if value is None:
        return GenericEvent(type=kind)
    if not isinstance(value, dict):
        raise ConfigurationError(
            f"Settings of the {kind} event must be a mapping, got {type(value).__name__}",
            {"event": kind}
        )
    return GenericEvent(type=kind, settings=dict(value))


def normalize_events(events: Iterable[Any]) -> List[Dict[str, Any]]:
    """Normalize event declarations into `{type, ...}` records, keeping their order."""
    return [parse_event(event).to_record() for event in events or []]
