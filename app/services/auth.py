import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from app.core.constants import UserRoleEnum
from app.crud.user import user as crud_user
from app.core.security import get_password_hash, verify_password, create_access_token
from app.schemas.token import LoginResponse, Token
from app.schemas.user import User, UserCreate
from app.models.user import User as UserModel

logger = logging.getLogger(__name__)


class AuthService:
    def register(self, db: Session, *, user_in: UserCreate) -> UserModel:
        if crud_user.get_by_email(db, email=user_in.email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A user with this email already exists.",
            )

        try:
            user = crud_user.create(
                db,
                obj_in={
                    "full_name": user_in.full_name.strip(),
                    "email": user_in.email.lower(),
                    "hashed_password": get_password_hash(user_in.password),
                    "role": UserRoleEnum.LEARNER,
                    "is_active": True,
                },
            )
        except IntegrityError:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A user with this email already exists.",
            )

        logger.info(f"Registered learner {user.id}")
        return user

    def login(self, db: Session, *, email: str, password: str) -> LoginResponse:
        user = crud_user.get_by_email(db, email=email)
        if not user or not user.hashed_password or not verify_password(password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User is inactive",
            )

        access_token = create_access_token(
            data={"user_id": user.id, "role": user.role.value}, email=user.email
        )
        return LoginResponse(
            token=Token(access_token=access_token, token_type="bearer"),
            user=User.model_validate(user),
        )


auth_service = AuthService()
