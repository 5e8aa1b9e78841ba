"""Seed script: populates dev DB with an account whose devices cover each eligibility case."""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from idle_notifier.config import get_settings
from idle_notifier.models.account import Account, Device
from idle_notifier.models.base import to_epoch_millis
from idle_notifier.models.stored_message import StoredMessage

SEED_ACCOUNT_ID = uuid.UUID("aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee")
SEED_NUMBER = "+12015550123"


async def seed():
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as db:
        # Check if seed account already exists
        result = await db.execute(text("SELECT id FROM accounts WHERE number = :number"), {"number": SEED_NUMBER})
        if result.scalar():
            print(f"Seed account {SEED_ACCOUNT_ID} already exists, skipping.")
            await engine.dispose()
            return

        now = datetime.now(timezone.utc)
        idle_since = to_epoch_millis(now - settings.min_idle_duration - timedelta(hours=1))

        account = Account(id=SEED_ACCOUNT_ID, number=SEED_NUMBER)
        db.add(account)
        await db.flush()

        devices = [
            # Eligible: idle, APNs token, no messages
            Device(account_id=SEED_ACCOUNT_ID, device_id=Device.PRIMARY_ID, name="iPhone",
                   last_seen=idle_since, apns_token="seed-apns-token"),
            # Active recently
            Device(account_id=SEED_ACCOUNT_ID, device_id=2, name="Desktop",
                   last_seen=to_epoch_millis(now), fcm_token="seed-fcm-token"),
            # Woken through the VoIP channel instead
            Device(account_id=SEED_ACCOUNT_ID, device_id=3, name="iPad",
                   last_seen=idle_since, apns_token="seed-apns-token-2", voip_apns_token="seed-voip-token"),
            # Idle but has a stored message waiting
            Device(account_id=SEED_ACCOUNT_ID, device_id=4, name="Android",
                   last_seen=idle_since, fcm_token="seed-fcm-token-2"),
        ]
        db.add_all(devices)
        await db.flush()

        db.add(StoredMessage(account_id=SEED_ACCOUNT_ID, device_id=4, envelope=b"seed-envelope"))

        await db.commit()
        print(f"Seeded: account={SEED_ACCOUNT_ID}, {len(devices)} devices, 1 stored message")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
