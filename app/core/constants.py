from enum import Enum


CERTIFICATE_ID_PREFIX = "CERT"
CERTIFICATE_ID_LENGTH = 10

class UserRoleEnum(str, Enum):
    LEARNER = "LEARNER"
    INSTRUCTOR = "INSTRUCTOR"
    CORPORATE_ADMIN = "CORPORATE_ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"

class CourseStatusEnum(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"

class LectureTypeEnum(str, Enum):
    VIDEO = "VIDEO"
    TEXT = "TEXT"
    QUIZ = "QUIZ"

class AssignmentStatusEnum(str, Enum):
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"

class AssignmentSortEnum(str, Enum):
    ASSIGNED_AT = "assigned_at"
    DEADLINE = "deadline"
