"""Error taxonomy shared by the project store and its clients."""


class ProjectStoreError(Exception):
    """Base class for project persistence failures."""

    pass


class ProjectNotFoundError(ProjectStoreError):
    """No record exists for the requested project id."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class InvalidDocumentError(ProjectStoreError):
    """A stored project payload could not be parsed.

    Signals corruption and must be surfaced, never silently recovered.
    """

    def __init__(self, project_id: str, reason: str):
        self.project_id = project_id
        self.reason = reason
        super().__init__(f"Invalid project data for {project_id}: {reason}")


class StorageUnavailableError(ProjectStoreError):
    """The storage engine itself failed (disk, connection, driver)."""

    pass


class StoreUnreachableError(ProjectStoreError):
    """The remote project store could not be reached (network error or timeout)."""

    pass
