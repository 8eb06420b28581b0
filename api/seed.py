"""Seed script — wipe all data and create demo developers, websites and premium usage.

Usage:
    python seed.py

Then trigger a distribution for last month with the admin token printed at the end.
"""
import asyncio
import secrets
from datetime import datetime, timedelta

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import engine, async_session, init_db
from app.models.user import User, SubscriptionType
from app.models.developer import Developer, ApiKey, Website
from app.models.tracking import TimeTracking
from app.services.usage_service import month_bounds, previous_month
from app.utils.auth import create_access_token


DEVELOPERS = [
    {
        'username': 'acme',
        'company_name': 'Acme Media',
        'payment_details': {'paypal': 'payouts@acme.example'},
        'websites': [('Acme News', 'https://news.acme.example'), ('Acme Blog', 'https://blog.acme.example')],
    },
    {
        'username': 'globex',
        'company_name': 'Globex Tools',
        'payment_details': {'bankAccount': {'iban': 'DE00000000000000000000'}},
        'websites': [('Globex Docs', 'https://docs.globex.example')],
    },
]

PREMIUM_READERS = 10
FREE_READERS = 5

# Seconds per premium reader per website over the month
SECONDS_PER_READER = 360


async def wipe_all(db: AsyncSession):
    """Delete all rows in dependency-safe order."""
    tables = [
        'revenue_distribution_logs',
        'payouts',
        'revenue',
        'developer_earnings',
        'revenue_settings',
        'time_tracking',
        'websites',
        'api_keys',
        'developers',
        'users',
    ]
    for table in tables:
        await db.execute(text(f'DELETE FROM {table}'))
    await db.commit()
    print('✓ All tables wiped')


async def create_developers(db: AsyncSession) -> list[Website]:
    websites = []
    for d in DEVELOPERS:
        user = User(username=d['username'], email=f'{d["username"]}@example.com')
        db.add(user)
        await db.flush()

        developer = Developer(
            user_id=user.id,
            company_name=d['company_name'],
            payment_details=d['payment_details'],
        )
        db.add(developer)
        await db.flush()

        key = ApiKey(developer_id=developer.id, name='default', key=secrets.token_hex(16))
        db.add(key)
        await db.flush()

        for name, url in d['websites']:
            site = Website(api_key_id=key.id, name=name, url=url)
            db.add(site)
            websites.append(site)
        await db.flush()
        print(f'  ✓ {d["company_name"]} — {len(d["websites"])} website(s), developer id={developer.id}')

    await db.commit()
    return websites


async def create_usage(db: AsyncSession, websites: list[Website], month: str):
    start, _ = month_bounds(month)
    readers = []
    for i in range(PREMIUM_READERS):
        readers.append(User(
            username=f'premium{i}',
            is_subscribed=True,
            subscription_type=SubscriptionType.PREMIUM.value,
        ))
    for i in range(FREE_READERS):
        readers.append(User(username=f'free{i}'))
    db.add_all(readers)
    await db.flush()

    for n, reader in enumerate(readers):
        for site in websites:
            db.add(TimeTracking(
                user_id=reader.id,
                website_id=site.id,
                duration=SECONDS_PER_READER,
                path='/',
                date=start + timedelta(days=n % 28, hours=12),
            ))
    await db.commit()
    print(f'  ✓ {len(readers)} readers ({PREMIUM_READERS} premium) tracked in {month}')


async def create_admin(db: AsyncSession) -> User:
    admin = User(username='admin', email='admin@example.com', is_admin=True)
    db.add(admin)
    await db.commit()
    return admin


async def main():
    print()
    print('=' * 50)
    print('  PremiumTime Seed Script')
    print('=' * 50)
    print()

    await init_db()
    month = previous_month(datetime.utcnow().date())

    async with async_session() as db:
        print('[1/4] Wiping all data...')
        await wipe_all(db)

        print('[2/4] Creating developers...')
        websites = await create_developers(db)

        print('[3/4] Creating readers and usage...')
        await create_usage(db, websites, month)

        print('[4/4] Creating admin...')
        admin = await create_admin(db)

    await engine.dispose()

    print()
    print('Done! Ready for testing.')
    print()
    print(f'  Admin token: {create_access_token(admin.id)}')
    print(f'  POST /api/admin/revenue/calculate {{"month": "{month}"}}')
    print()


if __name__ == '__main__':
    asyncio.run(main())
