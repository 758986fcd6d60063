from typing import Optional
from fastapi import HTTPException, status

from app.models.user import User
from app.models.course import Course
from app.core.constants import UserRoleEnum


class PermissionHelper:
    @staticmethod
    def is_super_admin(user: User) -> bool:
        return user.role == UserRoleEnum.SUPER_ADMIN

    @staticmethod
    def is_corporate_admin(user: User) -> bool:
        return user.role == UserRoleEnum.CORPORATE_ADMIN

    @staticmethod
    def is_instructor(user: User) -> bool:
        return user.role == UserRoleEnum.INSTRUCTOR

    @staticmethod
    def is_learner(user: User) -> bool:
        return user.role == UserRoleEnum.LEARNER

    @staticmethod
    def belongs_to_organization(user: User, organization_id: int) -> bool:
        return user.organization_id is not None and user.organization_id == organization_id

    @staticmethod
    def can_manage_course(user: User, course: Course) -> bool:
        if PermissionHelper.is_super_admin(user):
            return True
        return PermissionHelper.is_instructor(user) and course.instructor_id == user.id

    @staticmethod
    def can_manage_organization(user: User, organization_id: int) -> bool:
        if PermissionHelper.is_super_admin(user):
            return True
        return PermissionHelper.is_corporate_admin(user) and PermissionHelper.belongs_to_organization(user, organization_id)

    @staticmethod
    def require_course_management_permission(user: User, course: Course):
        if not PermissionHelper.can_manage_course(user, course):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not own this course."
            )

    @staticmethod
    def require_organization_management_permission(user: User, organization_id: int):
        if not PermissionHelper.can_manage_organization(user, organization_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to manage this organization."
            )

    @staticmethod
    def get_organization_id_for_operation(user: User, provided_organization_id: Optional[int]) -> int:
        if PermissionHelper.is_super_admin(user):
            organization_id = provided_organization_id or user.organization_id
            if not organization_id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Super Admin must specify organization_id."
                )
            return organization_id

        if not user.organization_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No organization assigned"
            )
        if provided_organization_id and provided_organization_id != user.organization_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only operate within your own organization."
            )
        return user.organization_id
