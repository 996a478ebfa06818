"""
Token Service - HTTP surface over the token codec.

Issues channel join tokens and, when debugging is enabled, exposes the
structural inspector.

Usage:
    # Start the service
    rtctoken-server

    # Or with uvicorn directly
    uvicorn rtctoken.server:app --host 127.0.0.1 --port 5000

Endpoints:
    GET  /status                    - Health check
    GET  /api/agora/token           - Issue a token
    GET  /api/agora/token_inspect   - Issue a token and return its decoded fields
    POST /api/agora/inspect         - Decode a caller-supplied token
"""

from __future__ import annotations

import logging
import secrets
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from rtctoken import __version__, config
from rtctoken.errors import MalformedToken, MissingAppId, TokenError
from rtctoken.identity import NumericIdentity, parse_identity
from rtctoken.issuer import issue, token_mode
from rtctoken.inspector import inspect

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("rtctoken.server")

RANDOM_UID_LIMIT = 999999


# =============================================================================
# Pydantic Models
# =============================================================================


class StatusResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    app_id_configured: bool
    token_mode: str
    inspect_enabled: bool


class TokenResponse(BaseModel):
    """Issued token. `token` is null in tokenless mode."""

    token: Optional[str] = None
    appId: str
    uid: Union[int, str]
    channel: str
    tokenMode: str
    expireTs: Optional[int] = None
    chatAppKey: Optional[str] = None


class InspectRequest(BaseModel):
    """Token inspection request."""

    token: str
    best_effort: bool = False
    channel: Optional[str] = None
    uid: Optional[Union[int, str]] = None


class MessageItem(BaseModel):
    privilege: int
    expireTs: int


class MessageView(BaseModel):
    count: int
    items: List[MessageItem]


class InspectResponse(BaseModel):
    """Decoded token fields."""

    tokenVersion: str
    tokenBase64Length: int
    signatureHex: str
    appIdHex: str
    appIdAscii: str
    channelCrc: Optional[int] = None
    uidCrc: Optional[int] = None
    message: MessageView
    rawHex: str
    error: Optional[str] = None
    mismatches: List[str] = []


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="RTC Token Service",
    description="Issues and inspects short-lived channel join tokens",
    version=__version__,
)

# The browser client is served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_detail(message: str, err: Exception, debug: bool) -> Any:
    if debug:
        return {"error": message, "details": str(err)}
    return message


def _resolve_uid(uid: Optional[str]) -> Union[int, str]:
    """
    Normalize a requested uid, drawing a random one when absent.

    Numeric uids come back as int so clients join with the same numeric
    identity the token was signed for.
    """
    if not uid:
        return secrets.randbelow(RANDOM_UID_LIMIT)
    try:
        identity = parse_identity(uid)
    except TokenError as e:
        logger.warning(f"Rejected token request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(identity, NumericIdentity):
        return identity.value
    return identity.text


def _require_inspect(debug: Optional[str]) -> None:
    if not (config.INSPECT_ENABLED or debug == "1"):
        raise HTTPException(status_code=403, detail="token inspect disabled")


def _issue_or_raise(
    channel: str, uid: Union[int, str], role: Optional[str], expire: Optional[int], debug: bool
) -> Optional[str]:
    """Issue a token, mapping codec errors to HTTP errors."""
    try:
        return issue(
            config.APP_ID,
            config.APP_CERTIFICATE,
            channel,
            uid,
            role=role,
            expire_seconds=expire or config.EXPIRE_SECONDS,
        )
    except MissingAppId as e:
        message = "AGORA_APP_ID is not configured on the server"
        logger.error(message)
        raise HTTPException(status_code=500, detail=_error_detail(message, e, debug))
    except TokenError as e:
        logger.warning(f"Rejected token request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Token generation failed")
        raise HTTPException(
            status_code=500, detail=_error_detail("Token generation failed", e, debug)
        )


# =============================================================================
# Endpoints
# =============================================================================


@app.get("/status", response_model=StatusResponse)
async def get_status():
    """Health check endpoint."""
    return StatusResponse(
        status="ok",
        version=__version__,
        app_id_configured=bool(config.APP_ID),
        token_mode=token_mode(config.APP_CERTIFICATE),
        inspect_enabled=config.INSPECT_ENABLED,
    )


@app.get("/api/agora/token", response_model=TokenResponse)
async def get_token(
    channel: Optional[str] = None,
    uid: Optional[str] = None,
    role: Optional[str] = None,
    expire: Optional[int] = Query(None, gt=0),
    debug: Optional[str] = None,
):
    """Issue a channel join token (null in tokenless mode)."""
    channel = channel or config.DEFAULT_CHANNEL
    uid = _resolve_uid(uid)

    token = _issue_or_raise(channel, uid, role, expire, debug == "1")

    return TokenResponse(
        token=token,
        appId=config.APP_ID,
        uid=uid,
        channel=channel,
        tokenMode=token_mode(token),
        expireTs=inspect(token).privilege_expire_ts() if token else None,
        chatAppKey=config.CHAT_APP_KEY,
    )


@app.get("/api/agora/token_inspect")
async def get_token_inspect(
    channel: Optional[str] = None,
    uid: Optional[str] = None,
    debug: Optional[str] = None,
) -> Dict[str, Any]:
    """Issue a token and return its decoded fields."""
    _require_inspect(debug)

    channel = channel or config.DEFAULT_CHANNEL
    uid = _resolve_uid(uid)

    token = _issue_or_raise(channel, uid, None, None, debug == "1")
    if not token:
        return {"token": None, "note": "tokenless mode (no certificate configured)"}

    return inspect(token).to_dict()


@app.post("/api/agora/inspect", response_model=InspectResponse)
async def post_inspect(request: InspectRequest, debug: Optional[str] = None):
    """Decode a caller-supplied token."""
    _require_inspect(debug)

    try:
        view = inspect(request.token, best_effort=request.best_effort)
    except MalformedToken as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = view.to_dict()
    if not view.error:
        result["mismatches"] = view.mismatches(
            app_id=config.APP_ID or None,
            channel=request.channel,
            identity=request.uid,
        )
    return InspectResponse(**result)
