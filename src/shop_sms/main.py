from __future__ import annotations

from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import BackgroundTasks, Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .config import configure_logging, get_settings
from .db import SessionLocal, init_db
from .service import get_settings_for_shop, save_settings, send_message
from .sms import SendSms, SmsSettingsView


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: runs once before the app starts serving requests
    configure_logging()
    init_db()
    yield
    # Shutdown: nothing to do yet


app = FastAPI(title="shop-sms", version="0.1.0", lifespan=lifespan)


# --- Admin protection & shop context ---


def verify_admin(request: Request) -> None:
    """
    Protection for the /sms endpoints:
    require an X-Admin-Token header that matches the ADMIN_TOKEN env var.
    """
    admin_token = get_settings().admin_token
    if not admin_token:
        # Misconfiguration; safer to refuse access than to expose credentials.
        raise HTTPException(status_code=500, detail="ADMIN_TOKEN not configured")

    header_token = request.headers.get("X-Admin-Token")
    if header_token != admin_token:
        raise HTTPException(status_code=401, detail="Invalid admin token")


def current_shop_id(request: Request) -> str:
    """The shop the caller is acting for, taken from the X-Shop-Id header."""
    shop_id = request.headers.get("X-Shop-Id")
    if not shop_id:
        raise HTTPException(status_code=400, detail="X-Shop-Id header is required")
    return shop_id


# --- DB dependency ---


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# --- Routes ---


def send_message_async(message: str, user_id: str, shop_id: str) -> None:
    """
    Background task:

    - open a fresh DB session
    - look up user, settings and provider, then send
    """
    db = SessionLocal()
    try:
        send_message(db=db, message=message, user_id=user_id, shop_id=shop_id)
    finally:
        db.close()


@app.post("/sms/settings")
def save_sms_settings(
    payload: dict[str, Any] = Body(...),
    shop_id: str = Depends(current_shop_id),
    db: Session = Depends(get_db),
    _: None = Depends(verify_admin),
) -> JSONResponse:
    """
    Save the provider settings of the current shop.

    Accepts JSON such as:

      { "smsProvider": "twilio", "apiKey": "AC...", "apiToken": "...", "smsPhone": "+15559999" }
    """
    row = save_settings(db=db, shop_id=shop_id, settings=payload)
    return JSONResponse(SmsSettingsView.from_row(row).model_dump(by_alias=True))


@app.get("/sms/settings")
def get_sms_settings(
    shop_id: str = Depends(current_shop_id),
    db: Session = Depends(get_db),
    _: None = Depends(verify_admin),
) -> JSONResponse:
    row = get_settings_for_shop(db, shop_id)
    if row is None:
        raise HTTPException(status_code=404, detail="No SMS settings for this shop")
    return JSONResponse(SmsSettingsView.from_row(row).model_dump(by_alias=True))


@app.post("/sms/send", status_code=202)
def send_sms(
    payload: SendSms,
    background_tasks: BackgroundTasks,
    _: None = Depends(verify_admin),
) -> JSONResponse:
    """
    Queue a single SMS to a user's address-book phone.

    Fire-and-forget: the response does not wait for the provider.
    """
    background_tasks.add_task(
        send_message_async, payload.message, payload.user_id, payload.shop_id
    )
    return JSONResponse({"status": "queued"}, status_code=202)
