class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(AppError):
    """Raised when a time window or other scheduling configuration is malformed."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictError(AppError):
    """Raised when a conflict index cell is already held by another entry."""
    def __init__(self, message: str, occupying_entry_id: str, details: dict = None):
        self.occupying_entry_id = occupying_entry_id
        merged = {"occupying_entry_id": occupying_entry_id, **(details or {})}
        super().__init__(message, status_code=409, details=merged)


class ValidationError(AppError):
    """Raised when a candidate schedule entry breaks a placement rule."""
    def __init__(self, message: str, entry: dict | None = None, status_code: int = 422, details: dict = None):
        self.entry = entry
        merged = dict(details or {})
        if entry is not None:
            merged["entry"] = entry
        super().__init__(message, status_code=status_code, details=merged)


class UnknownReferenceError(ValidationError):
    """A class group, teacher or subject id is absent from the snapshot."""
    def __init__(self, resource_type: str, resource_id: str, entry: dict | None = None):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            entry=entry,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class UnqualifiedTeacherError(ValidationError):
    def __init__(self, teacher_id: str, subject_id: str, entry: dict | None = None):
        self.teacher_id = teacher_id
        self.subject_id = subject_id
        super().__init__(
            f"Teacher {teacher_id} is not qualified to teach subject {subject_id}",
            entry=entry,
            details={"teacher_id": teacher_id, "subject_id": subject_id},
        )


class OutOfWindowError(ValidationError):
    pass


class ConflictValidationError(ValidationError):
    """Base for double-booking rejections; carries the blocking entry id."""
    def __init__(self, message: str, blocking_entry_id: str, entry: dict | None = None):
        self.blocking_entry_id = blocking_entry_id
        super().__init__(
            message,
            entry=entry,
            status_code=409,
            details={"blocking_entry_id": blocking_entry_id},
        )


class TeacherConflictError(ConflictValidationError):
    pass


class ClassGroupConflictError(ConflictValidationError):
    pass
