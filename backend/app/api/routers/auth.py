# app/api/routers/auth.py
import logging
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from tortoise.exceptions import IntegrityError
from app.api.deps import get_current_user, get_settings, get_storage
from app.config import Settings
from app.core.errors import DuplicateEmail, InvalidCredentials, ServerConfigurationError, ValidationError
from app.core.security import create_access_token, hash_password, verify_password
from app.core.storage import GCSStorage
from app.models.user import User
from app.schemas.auth import EMAIL_RE, LoginIn, ProfilePatchIn, RegisterIn, UserOut

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn):
    """
    Register a new user account.

    The password is hashed before storage and never returned. Email must be
    unique across all users.

    Returns:
        dict: status, message and the public user projection

    Raises:
        ValidationError (422): missing or malformed fields
        DuplicateEmail (409): email already registered
    """
    if await User.filter(email=body.email).exists():
        raise DuplicateEmail()
    try:
        u = await User.create(
            name=body.name,
            email=body.email,
            password_hash=hash_password(body.password),
        )
    except IntegrityError as e:
        # Lost a race against a concurrent registration with the same email
        raise DuplicateEmail() from e
    logger.info("[auth] registered user id=%s", u.id)
    return {
        "status": "success",
        "message": "User registered successfully",
        "data": UserOut.from_user(u).model_dump(),
    }

@router.post("/login")
async def login(body: LoginIn, settings: Settings = Depends(get_settings)):
    """
    Authenticate with email and password and issue a session token.

    Unknown email and wrong password produce the same InvalidCredentials
    response so the endpoint cannot be used to enumerate accounts.

    Returns:
        dict: status, message, token and the public user projection
    """
    user = await User.get_or_none(email=body.email)
    if not user or not verify_password(body.password, user.password_hash):
        logger.info("[auth] failed login attempt")
        raise InvalidCredentials()
    if not settings.jwt_secret:
        logger.error("[auth] JWT_SECRET is not defined, cannot issue tokens")
        raise ServerConfigurationError()
    token = create_access_token(
        str(user.id),
        user.name,
        settings.jwt_secret,
        settings.access_token_expire_minutes,
    )
    return {
        "status": "success",
        "message": "Login successfully",
        "token": token,
        "data": UserOut.from_user(user).model_dump(),
    }

async def profile_patch(
    request: Request,
    name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    password: str | None = Form(default=None),
) -> ProfilePatchIn:
    """
    Read the sparse patch from a JSON body, or from form fields otherwise.
    The picture itself can only travel as a multipart file.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type != "application/json":
        return ProfilePatchIn(name=name, email=email, password=password)
    try:
        raw = await request.json()
    except ValueError as e:
        raise ValidationError("Invalid JSON body") from e
    try:
        return ProfilePatchIn.model_validate(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"]) or "body"
        raise ValidationError(f"{field}: {first['msg']}") from e

@router.patch("/edit-profile")
async def edit_profile(
    user: User = Depends(get_current_user),
    patch: ProfilePatchIn = Depends(profile_patch),
    profilePicture: UploadFile | None = File(default=None),
    settings: Settings = Depends(get_settings),
    storage: GCSStorage = Depends(get_storage),
):
    """
    Apply a sparse update to the authenticated user's profile.

    Only non-empty fields are applied. A profile picture (image/*, at most
    settings.max_upload_bytes) is uploaded to object storage and its URL stored.
    Everything is validated and uploaded before any field is written, so an
    upload failure leaves the stored record untouched.

    Returns:
        dict: message, plus the updated public projection when something changed

    Raises:
        ValidationError (422): bad email, non-image or oversized file
        DuplicateEmail (409): email belongs to another account
        UploadError (502): object storage rejected the upload
        NotFound (404): account no longer exists
    """
    changes: dict = {}
    if patch.name and patch.name.strip():
        changes["name"] = patch.name.strip()
    if patch.email and patch.email.strip():
        new_email = patch.email.strip().lower()
        if not EMAIL_RE.match(new_email):
            raise ValidationError("Invalid email address")
        if new_email != user.email:
            if await User.filter(email=new_email).exclude(id=user.id).exists():
                raise DuplicateEmail()
            changes["email"] = new_email
    if patch.password:
        changes["password_hash"] = hash_password(patch.password)

    if profilePicture is not None and profilePicture.filename:
        content_type = profilePicture.content_type or ""
        if not content_type.startswith("image/"):
            logger.info("[auth] rejected upload with type %s", content_type)
            raise ValidationError("Please upload an image file")
        data = await profilePicture.read(settings.max_upload_bytes + 1)
        if len(data) > settings.max_upload_bytes:
            raise ValidationError("File too large")
        changes["profile_picture"] = await storage.upload_profile_picture(
            data, profilePicture.filename, content_type
        )

    if not changes:
        return {"message": "No changes made to the profile."}

    user.update_from_dict(changes)
    try:
        await user.save()
    except IntegrityError as e:
        raise DuplicateEmail() from e
    logger.info("[auth] profile updated id=%s fields=%s", user.id, sorted(changes))
    return {
        "message": "User profile updated successfully",
        "data": UserOut.from_user(user).model_dump(),
    }
