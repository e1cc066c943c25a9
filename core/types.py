from enum import Enum


class TaskStatus(str, Enum):
    todo = "todo"
    doing = "doing"
    done = "done"
