from enum import Enum


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
    CRITICAL = "critical"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    IDEA = "idea"


class ProjectType(str, Enum):
    CODING = "coding"
    GENERAL = "general"


class DependencyType(str, Enum):
    # Only variant today; kept as an enum so new kinds can be added later.
    FINISH_TO_START = "finish_to_start"
