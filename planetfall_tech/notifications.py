"""Research notifications for UI and telemetry listeners."""

from dataclasses import dataclass, field
from typing import Protocol

from planetfall_tech.models.technology import TechNode


class NotificationSink(Protocol):
    def started_research(self, node: TechNode) -> None: ...

    def progress_changed(self, node: TechNode, progress: float) -> None: ...

    def researched(self, node: TechNode) -> None: ...

    def cancelled(self, node: TechNode) -> None: ...

    def availability_changed(self, node: TechNode, available: bool) -> None: ...


class NullSink:
    """Sink that ignores every notification."""

    def started_research(self, node: TechNode) -> None:
        pass

    def progress_changed(self, node: TechNode, progress: float) -> None:
        pass

    def researched(self, node: TechNode) -> None:
        pass

    def cancelled(self, node: TechNode) -> None:
        pass

    def availability_changed(self, node: TechNode, available: bool) -> None:
        pass


@dataclass
class Notification:
    event: str
    tech_id: str
    value: float | bool | None = None


@dataclass
class RecordingSink:
    """Sink that keeps every notification in order."""

    events: list[Notification] = field(default_factory=list)

    def started_research(self, node: TechNode) -> None:
        self.events.append(Notification("started", node.id))

    def progress_changed(self, node: TechNode, progress: float) -> None:
        self.events.append(Notification("progress", node.id, progress))

    def researched(self, node: TechNode) -> None:
        self.events.append(Notification("researched", node.id))

    def cancelled(self, node: TechNode) -> None:
        self.events.append(Notification("cancelled", node.id))

    def availability_changed(self, node: TechNode, available: bool) -> None:
        self.events.append(Notification("availability", node.id, available))

    def of(self, event: str) -> list[Notification]:
        return [n for n in self.events if n.event == event]

    def clear(self) -> None:
        self.events.clear()

