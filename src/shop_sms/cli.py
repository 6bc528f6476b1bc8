from __future__ import annotations

import argparse

from .config import configure_logging
from .db import SessionLocal, init_db
from .service import get_settings_for_shop, send_message
from .sms import SmsSettingsView


def cmd_send(message: str, user_id: str, shop_id: str) -> None:
    """Send one SMS synchronously and print what happened."""
    db = SessionLocal()
    try:
        outcome = send_message(db=db, message=message, user_id=user_id, shop_id=shop_id)
    finally:
        db.close()

    if outcome is None:
        print("nothing sent (missing user, phone, settings or unknown provider)")
    elif outcome.ok:
        print(f"sent via {outcome.provider.value}")
    else:
        print(f"{outcome.provider.value} failed: {outcome.error}")


def cmd_show_settings(shop_id: str) -> None:
    db = SessionLocal()
    try:
        row = get_settings_for_shop(db, shop_id)
        if row is None:
            print(f"no SMS settings for shop {shop_id}")
            return
        view = SmsSettingsView.from_row(row)
    finally:
        db.close()

    for key, value in view.model_dump(by_alias=True).items():
        print(f"{key}: {value}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="shop-sms", description="Shop SMS tools.")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="Send an SMS to a user's address-book phone.")
    send.add_argument("message", type=str)
    send.add_argument("--user", required=True, help="Recipient user id.")
    send.add_argument("--shop", required=True, help="Shop whose SMS settings to use.")

    show = sub.add_parser("show-settings", help="Print a shop's SMS settings.")
    show.add_argument("--shop", required=True)

    args = parser.parse_args(argv)
    configure_logging()
    init_db()

    if args.command == "send":
        cmd_send(args.message, user_id=args.user, shop_id=args.shop)
    else:
        cmd_show_settings(args.shop)


if __name__ == "__main__":
    main()
