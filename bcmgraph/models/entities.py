"""Entity records supplied by the entity store.

Processes, business resources and recovery objectives are owned and edited
outside the graph engine; the engine only reads them.
"""

from enum import Enum

from pydantic import BaseModel


class ResourceType(str, Enum):
    """Fixed set of business resource categories."""

    personnel = "personnel"
    systems = "systems"
    equipment = "equipment"
    facilities = "facilities"
    vendors = "vendors"
    data = "data"


RESOURCE_TYPE_LABELS: dict[ResourceType, str] = {
    ResourceType.personnel: "Personnel",
    ResourceType.systems: "Systems/Applications",
    ResourceType.equipment: "Equipment",
    ResourceType.facilities: "Facilities",
    ResourceType.vendors: "Vendors/Suppliers",
    ResourceType.data: "Data/Records",
}


class TimeUnit(str, Enum):
    minutes = "minutes"
    hours = "hours"
    days = "days"


class TimeValue(BaseModel):
    """a duration expressed as value + unit."""

    value: float
    unit: TimeUnit = TimeUnit.hours

    def to_hours(self) -> float:
        """Normalize the duration to hours."""
        if self.unit == TimeUnit.minutes:
            return self.value / 60
        if self.unit == TimeUnit.days:
            return self.value * 24
        return self.value

    @classmethod
    def hours(cls, value: float | None) -> "TimeValue | None":
        """Wrap a plain hour count, passing None through."""
        if value is None:
            return None
        return cls(value=value, unit=TimeUnit.hours)


class Process(BaseModel):
    """a business process."""

    id: str
    name: str
    criticality: str = "medium"  # "critical", "high", "medium", "low"
    owner: str | None = None
    department: str | None = None
    description: str = ""


class RecoveryObjective(BaseModel):
    """recovery targets for a process, both in hours."""

    rto: float | None = None
    rpo: float | None = None


class BusinessResource(BaseModel):
    """a resource consumed by processes."""

    id: str
    name: str
    type: ResourceType
    description: str = ""
    rto: TimeValue | None = None
    rpo: TimeValue | None = None

    @property
    def type_label(self) -> str:
        return RESOURCE_TYPE_LABELS.get(self.type, self.type.value)


class EntityBundle(BaseModel):
    """everything the entity store hands to the engine in one load."""

    processes: list[Process] = []
    resources: list[BusinessResource] = []
    recovery_objectives: dict[str, RecoveryObjective] = {}

    def get_process(self, process_id: str) -> Process | None:
        for process in self.processes:
            if process.id == process_id:
                return process
        return None

    def get_resource(self, resource_id: str) -> BusinessResource | None:
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        return None

    def objective_for(self, process_id: str) -> RecoveryObjective | None:
        return self.recovery_objectives.get(process_id)

    def is_process(self, entity_id: str) -> bool:
        return self.get_process(entity_id) is not None

    def is_resource(self, entity_id: str) -> bool:
        return self.get_resource(entity_id) is not None
