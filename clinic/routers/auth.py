from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse

from clinic.middlewares.roles import (
    CurrentUser,
    bearer_token,
    get_current_user,
    token_claims,
    unauthorized,
)
from clinic.models.schema.user import UserEntry
from clinic.schemas.otp import OtpRequest, OtpResponse, OtpVerifyRequest, OtpVerifyResponse
from clinic.schemas.tokens import TokenRefreshRequest, TokenRefreshResponse
from clinic.schemas.users import (
    AuthResponse,
    LoginRequest,
    Role,
    SetupRequest,
    UserCreate,
    UserResponse,
)
from clinic.services.otp import OtpManager, OtpOutcome, OtpResult, get_otp_manager
from clinic.services.sessions import session_store
from clinic.services.tokens import (
    ACCESS,
    REFRESH,
    TokenError,
    TokenPair,
    issue_pair,
    issue_token,
    lifetime,
)
from clinic.services.users import UserConflictError, user_store

router = APIRouter(prefix="/auth", tags=["auth"])

OTP_STATUS = {
    OtpOutcome.SENT: status.HTTP_200_OK,
    OtpOutcome.VERIFIED: status.HTTP_200_OK,
    OtpOutcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    OtpOutcome.EXPIRED_OR_INVALID: status.HTTP_400_BAD_REQUEST,
    OtpOutcome.INVALID_CODE: status.HTTP_400_BAD_REQUEST,
    OtpOutcome.TOO_MANY_ATTEMPTS: status.HTTP_429_TOO_MANY_REQUESTS,
    OtpOutcome.FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _token_failure(exc: TokenError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
    )


def _start_session(user_id: int, role: str) -> TokenPair:
    session_id = session_store.open(user_id)
    try:
        return issue_pair(user_id, session_id, role)
    except TokenError as exc:
        session_store.close(session_id)
        raise _token_failure(exc) from exc


def _signed_in(user: UserEntry, message: str) -> AuthResponse:
    tokens = _start_session(user.id, user.role)
    return AuthResponse(
        message=message,
        user=UserResponse.model_validate(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in_seconds=tokens.expires_in_seconds,
        refresh_expires_in_seconds=tokens.refresh_expires_in_seconds,
    )


def _otp_reply(result: OtpResult, body) -> JSONResponse:
    return JSONResponse(
        status_code=OTP_STATUS[result.outcome],
        content=body.model_dump(mode="json", exclude_none=True),
    )


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest) -> AuthResponse:
    user = user_store.authenticate(payload.username, payload.password)
    if user is None:
        raise unauthorized("Kullanıcı adı veya şifre hatalı")
    return _signed_in(user, "Giriş başarılı")


@router.post("/setup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def setup(payload: SetupRequest) -> AuthResponse:
    """Create the first admin account; refused once any user exists."""
    if user_store.has_users():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admin kullanıcı zaten mevcut",
        )
    try:
        user = user_store.create_user(
            UserCreate(
                username=payload.username,
                email=payload.email,
                password=payload.password,
                role=Role.ADMIN,
            )
        )
    except UserConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _signed_in(user, "Admin kullanıcı oluşturuldu")


@router.get("/me", response_model=UserResponse)
def me(current: CurrentUser = Depends(get_current_user)) -> UserResponse:
    user = user_store.get_user(current.id)
    if user is None:
        raise unauthorized("Giriş yapılmamış")
    return UserResponse.model_validate(user)


@router.post("/refresh", response_model=TokenRefreshResponse)
def refresh_tokens(payload: TokenRefreshRequest) -> TokenRefreshResponse:
    claims = token_claims(payload.refresh_token, REFRESH)
    if session_store.resolve(claims.session_id) != claims.user_id:
        raise unauthorized("Invalid refresh token")
    user = user_store.get_user(claims.user_id)
    if user is None:
        raise unauthorized("Invalid refresh token")
    try:
        access_token = issue_token(ACCESS, user.id, claims.session_id, user.role)
    except TokenError as exc:
        raise _token_failure(exc) from exc
    return TokenRefreshResponse(
        access_token=access_token,
        expires_in_seconds=int(lifetime(ACCESS).total_seconds()),
    )


@router.post("/logout")
def logout(authorization: str | None = Header(default=None)) -> dict:
    claims = token_claims(bearer_token(authorization), REFRESH)
    if not session_store.close(claims.session_id):
        raise unauthorized("Invalid session token")
    return {"message": "Çıkış yapıldı"}


@router.post("/otp/request", response_model=OtpResponse, response_model_exclude_none=True)
def request_otp(
    payload: OtpRequest, manager: OtpManager = Depends(get_otp_manager)
) -> JSONResponse:
    result = manager.issue(payload.phone)
    return _otp_reply(
        result,
        OtpResponse(
            success=result.success,
            message=result.message,
            outcome=result.outcome,
            expires_in_seconds=manager.ttl_seconds if result.success else None,
        ),
    )


@router.post(
    "/otp/verify", response_model=OtpVerifyResponse, response_model_exclude_none=True
)
def verify_otp(
    payload: OtpVerifyRequest, manager: OtpManager = Depends(get_otp_manager)
) -> JSONResponse:
    result = manager.verify(payload.phone, payload.code)
    body = OtpVerifyResponse(
        success=result.success,
        message=result.message,
        outcome=result.outcome,
        remaining_attempts=result.remaining_attempts,
        user_id=result.user_id,
    )
    if result.outcome is OtpOutcome.VERIFIED:
        tokens = _start_session(result.user_id, Role.PATIENT.value)
        body = body.model_copy(
            update={
                "access_token": tokens.access_token,
                "refresh_token": tokens.refresh_token,
                "token_type": "bearer",
                "expires_in_seconds": tokens.expires_in_seconds,
                "refresh_expires_in_seconds": tokens.refresh_expires_in_seconds,
            }
        )
    return _otp_reply(result, body)
