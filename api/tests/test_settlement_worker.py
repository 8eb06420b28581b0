from datetime import datetime

from sqlalchemy import select

from app.models.revenue import RevenueDistributionLog
from app.worker.settlement_worker import SettlementWorker


async def test_run_once_distributes_and_skips_duplicates(database_url, engine, factory, db_session, session_factory):
    dev = await factory.developer()
    site = await factory.website(dev)
    reader = await factory.user(subscribed=True)
    await factory.track(reader, site, 600, datetime(2024, 5, 20))
    await db_session.commit()

    worker = SettlementWorker(database_url)
    try:
        result = await worker.run_once('2024-05')
        assert result['month'] == '2024-05'
        assert result['total_revenue'] == 999
        assert result['developer_count'] == 1

        assert await worker.run_once('2024-05') is None
    finally:
        await worker.engine.dispose()

    async with session_factory() as s:
        logs = (await s.execute(select(RevenueDistributionLog))).scalars().all()
    assert [log.month for log in logs] == ['2024-05']


def test_monthly_job_is_scheduled():
    worker = SettlementWorker('sqlite+aiosqlite://')
    worker.schedule()
    [job] = worker.scheduler.get_jobs()
    assert job.id == 'monthly_distribution'
    assert 'day=\'1\'' in str(job.trigger)
