class ProposalServiceError(Exception):
    """Base class for errors surfaced to API callers."""


class ValidationError(ProposalServiceError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class NotFoundError(ProposalServiceError):
    def __init__(self, entity: str = "Proposal", entity_id=None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class StorageUnavailable(ProposalServiceError):
    """The database could not be reached. Fatal for the current request."""


class UploadError(ProposalServiceError):
    def __init__(self, file_name: str, message: str):
        super().__init__(f"{file_name}: {message}")
        self.file_name = file_name
        self.message = message


class ForbiddenError(ProposalServiceError):
    pass
