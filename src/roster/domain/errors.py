"""Domain-layer error definitions."""

# ============================================================================
#                           General domain errors
# ============================================================================


class DomainError(Exception):
    """Base class for domain-layer errors."""


class InvalidFieldError(DomainError):
    """Raised when a command carries a value that breaks a business rule."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid {field}: {reason}")
        self.field = field
        self.reason = reason


# ============================================================================
#                       Enrolment / registration errors
# ============================================================================


class ClassFullError(DomainError):
    """Raised when enrolling into a class that has reached its capacity."""

    def __init__(self, class_title: str, capacity: int) -> None:
        super().__init__(
            f"Class '{class_title}' has reached its maximum capacity of {capacity}."
        )
        self.class_title = class_title
        self.capacity = capacity


class AlreadyEnrolledError(DomainError):
    """Raised when a student is already enrolled in the class."""

    def __init__(self, student_name: str, class_title: str) -> None:
        super().__init__(
            f"Student '{student_name}' is already enrolled in '{class_title}'."
        )
        self.student_name = student_name
        self.class_title = class_title


class NotEnrolledError(DomainError):
    """Raised when withdrawing a student from a class they are not in."""

    def __init__(self, student_name: str, class_title: str) -> None:
        super().__init__(f"Student '{student_name}' is not enrolled in '{class_title}'.")
        self.student_name = student_name
        self.class_title = class_title


class AlreadyRegisteredError(DomainError):
    """Raised when a student is already registered for the exam."""

    def __init__(self, student_name: str, exam_title: str) -> None:
        super().__init__(
            f"Student '{student_name}' is already registered for '{exam_title}'."
        )
        self.student_name = student_name
        self.exam_title = exam_title


class NotRegisteredError(DomainError):
    """Raised when unregistering a student from an exam they are not registered for."""

    def __init__(self, student_name: str, exam_title: str) -> None:
        super().__init__(f"Student '{student_name}' is not registered for '{exam_title}'.")
        self.student_name = student_name
        self.exam_title = exam_title


class ExamHasPassedError(DomainError):
    """Raised when changing the registrations of an exam that already took place."""

    def __init__(self, exam_title: str) -> None:
        super().__init__(f"Exam '{exam_title}' has already taken place.")
        self.exam_title = exam_title
