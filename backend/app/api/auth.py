from datetime import datetime, timezone
import logging
import smtplib

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import APP_ENV, FRONTEND_URL, MAX_PROFILE_IMAGE_CHARS, RESET_TOKEN_EXPIRE_MINUTES
from ..database import get_db
from ..models.user import User
from ..services.emailer import EmailNotConfigured, send_password_reset_email
from ..utils.dependencies import AuthContext, get_current_user
from ..utils.error_handlers import get_error_message, handle_database_error
from ..utils.jwt import issue_token
from ..utils.security import generate_reset_token, hash_password, verify_password
from ..utils.validation import validate_email, validate_password, validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    password: str


class ProfileUpdateRequest(BaseModel):
    name: str | None = None
    profilePicture: str | None = None
    avatar: str | None = None


def _public_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "profilePicture": user.profile_picture,
        "lastLogin": user.last_login.isoformat() if user.last_login else None,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


def _token_response(user: User) -> dict:
    return {
        "access_token": issue_token(user.id),
        "token_type": "bearer",
        "user": {"id": user.id, "email": user.email, "name": user.name},
    }


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    email = validate_email(payload.email)
    validate_password(payload.password)
    name = validate_string_field(payload.name, "Name", max_length=255)

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=400, detail=get_error_message("email_exists"))

    user = User(name=name, email=email, password=hash_password(payload.password))
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating user")

    logger.info("Registered user id=%s", user.id)
    return {"message": "User created successfully", **_token_response(user)}


@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    email = validate_email(payload.email)
    if not payload.password:
        raise HTTPException(status_code=400, detail="Password is required")

    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(status_code=401, detail=get_error_message("invalid_credentials"))

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    return _token_response(user)


@router.post("/forgot-password")
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    email = validate_email(payload.email)

    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail=get_error_message("user_not_found"))

    token, expires_at = generate_reset_token()
    user.reset_password_token = token
    user.reset_password_expires = expires_at
    db.commit()

    reset_url = f"{FRONTEND_URL}/reset-password/{token}"

    # No mail server in local dev: hand the link straight back.
    if APP_ENV == "development":
        logger.info("Development reset URL for user id=%s: %s", user.id, reset_url)
        return {
            "message": "Development mode: Password reset initiated successfully",
            "resetToken": token,
            "resetUrl": reset_url,
        }

    try:
        send_password_reset_email(
            to_email=user.email,
            reset_url=reset_url,
            expires_minutes=RESET_TOKEN_EXPIRE_MINUTES,
        )
    except (EmailNotConfigured, smtplib.SMTPException, OSError) as e:
        # The token is saved either way; support can still complete the reset.
        logger.error("Password reset email failed for user id=%s: %s", user.id, e)
        return {"message": "Password reset initiated, but email delivery failed. Please contact support."}

    return {"message": "Password reset email sent successfully"}


@router.post("/reset-password/{token}")
def reset_password(token: str, payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    validate_password(payload.password)

    user = (
        db.query(User)
        .filter(
            User.reset_password_token == token,
            User.reset_password_expires > datetime.now(timezone.utc),
        )
        .first()
    )
    if not user:
        raise HTTPException(status_code=400, detail=get_error_message("invalid_reset_token"))

    user.password = hash_password(payload.password)
    user.reset_password_token = None
    user.reset_password_expires = None
    db.commit()

    logger.info("Password reset for user id=%s", user.id)
    return {"message": "Password has been reset successfully"}


@router.get("/profile")
def get_profile(auth: AuthContext = Depends(get_current_user)):
    return _public_user(auth.user)


@router.put("/profile")
def update_profile(
    payload: ProfileUpdateRequest,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    # Same request-scoped session as get_current_user, so auth.user is attached to db.
    user = auth.user

    if payload.name is not None:
        user.name = validate_string_field(payload.name, "Name", max_length=255)

    image = payload.profilePicture or payload.avatar
    if image:
        if len(image) > MAX_PROFILE_IMAGE_CHARS:
            raise HTTPException(status_code=400, detail=get_error_message("image_too_large"))
        user.profile_picture = image

    db.commit()
    db.refresh(user)
    return _public_user(user)
