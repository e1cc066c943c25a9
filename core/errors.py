class TaskStoreError(RuntimeError):
    pass


class InvalidInput(TaskStoreError):
    pass


class TaskNotFound(TaskStoreError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class StorageUnreadable(TaskStoreError):
    pass


class StorageWriteFailure(TaskStoreError):
    pass


class PersistenceFailure(TaskStoreError):
    pass
