"""HTTP surface: auth gates, admin trigger, developer reporting."""
from datetime import datetime

import pytest

from app.models.user import User
from conftest import auth_headers

MONTH = '2024-03'
IN_MONTH = datetime(2024, 3, 10, 9, 30)


async def _seed(factory, db_session):
    admin = await factory.user(is_admin=True)
    dev1 = await factory.developer(payment_details={'paypal': 'dev1@example.com'}, company_name='Acme')
    dev2 = await factory.developer(company_name='Globex')
    site_a = await factory.website(dev1, 'alpha')
    site_b = await factory.website(dev1, 'beta')
    site_c = await factory.website(dev2, 'gamma')
    readers = await factory.premium_users(10)
    for site in (site_a, site_b, site_c):
        await factory.track(readers[0], site, 3600, IN_MONTH)
    await db_session.commit()

    dev1_user = await db_session.get(User, dev1.user_id)
    dev2_user = await db_session.get(User, dev2.user_id)
    return admin, dev1_user, dev2_user, (site_a, site_b, site_c)


async def test_health(client):
    response = await client.get('/health')
    assert response.status_code == 200
    assert response.json()['status'] == 'ok'


# ── Auth ─────────────────────────────────────────────────────────────────────

async def test_requires_authentication(client):
    for path in ('/api/revenue/earnings', '/api/revenue/payouts', '/api/admin/revenue/settings'):
        response = await client.get(path)
        assert response.status_code == 401

    response = await client.get(
        '/api/revenue/earnings', headers={'Authorization': 'Bearer not-a-token'},
    )
    assert response.status_code == 401


async def test_admin_endpoints_forbid_developers(client, factory, db_session):
    _, dev_user, _, _ = await _seed(factory, db_session)
    headers = auth_headers(dev_user)

    assert (await client.post('/api/admin/revenue/calculate', json={'month': MONTH}, headers=headers)).status_code == 403
    assert (await client.get('/api/admin/revenue/settings', headers=headers)).status_code == 403
    assert (await client.put('/api/admin/revenue/settings', json={}, headers=headers)).status_code == 403
    assert (await client.get('/api/admin/revenue/stats', headers=headers)).status_code == 403
    assert (await client.get(f'/api/admin/revenue/top-developers/{MONTH}', headers=headers)).status_code == 403


# ── Calculation ──────────────────────────────────────────────────────────────

async def test_calculate_then_duplicate_conflict(client, factory, db_session):
    admin, _, _, _ = await _seed(factory, db_session)
    headers = auth_headers(admin)

    response = await client.post('/api/admin/revenue/calculate', json={'month': MONTH}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body['month'] == MONTH
    assert body['total_revenue'] == 9990
    assert body['platform_fee'] == 2997
    assert body['total_distributed'] == 6993
    assert body['developer_count'] == 2
    assert body['status'] == 'completed'

    response = await client.post('/api/admin/revenue/calculate', json={'month': MONTH}, headers=headers)
    assert response.status_code == 409

    response = await client.post(
        '/api/admin/revenue/calculate', json={'month': MONTH, 'force': True}, headers=headers,
    )
    assert response.status_code == 200
    assert response.json()['notes'].startswith('Recalculated')


async def test_calculate_no_activity(client, factory, db_session):
    admin = await factory.user(is_admin=True)
    await db_session.commit()

    response = await client.post(
        '/api/admin/revenue/calculate', json={'month': '2023-01'}, headers=auth_headers(admin),
    )
    assert response.status_code == 200
    body = response.json()
    assert body['status'] == 'completed'
    assert body['notes'] == 'No premium usage recorded for this period'
    assert body['total_distributed'] == 0


async def test_calculate_rejects_bad_month(client, factory, db_session):
    admin = await factory.user(is_admin=True)
    await db_session.commit()

    response = await client.post(
        '/api/admin/revenue/calculate', json={'month': '2024-13'}, headers=auth_headers(admin),
    )
    assert response.status_code == 422


# ── Settings ─────────────────────────────────────────────────────────────────

async def test_settings_roundtrip(client, factory, db_session):
    admin = await factory.user(is_admin=True)
    await db_session.commit()
    headers = auth_headers(admin)

    response = await client.get('/api/admin/revenue/settings', headers=headers)
    assert response.status_code == 200
    assert response.json()['high_performance_bonus_multiplier'] == 1.5

    response = await client.put(
        '/api/admin/revenue/settings',
        json={'platform_fee_percentage': 20, 'minimum_payout_amount': 500},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()['platform_fee_percentage'] == 20
    assert response.json()['developer_share'] == 70

    response = await client.put(
        '/api/admin/revenue/settings',
        json={'high_performance_bonus_multiplier': 0.5},
        headers=headers,
    )
    assert response.status_code == 400

    response = await client.get('/api/admin/revenue/settings', headers=headers)
    assert response.json()['minimum_payout_amount'] == 500
    assert response.json()['high_performance_bonus_multiplier'] == 1.5


async def test_settings_rejects_unknown_fields(client, factory, db_session):
    admin = await factory.user(is_admin=True)
    await db_session.commit()

    response = await client.put(
        '/api/admin/revenue/settings', json={'bogus': 1}, headers=auth_headers(admin),
    )
    assert response.status_code == 422


@pytest.mark.parametrize('multiplier', ['Infinity', 1000])
async def test_settings_rejects_unstorable_multiplier(client, factory, db_session, multiplier):
    admin = await factory.user(is_admin=True)
    await db_session.commit()
    headers = auth_headers(admin)

    response = await client.put(
        '/api/admin/revenue/settings',
        json={'high_performance_bonus_multiplier': multiplier},
        headers=headers,
    )
    assert response.status_code == 400

    response = await client.get('/api/admin/revenue/settings', headers=headers)
    assert response.json()['high_performance_bonus_multiplier'] == 1.5


# ── Developer reporting ──────────────────────────────────────────────────────

async def test_developer_reports(client, factory, db_session):
    admin, dev1_user, dev2_user, sites = await _seed(factory, db_session)
    await client.post('/api/admin/revenue/calculate', json={'month': MONTH}, headers=auth_headers(admin))

    headers = auth_headers(dev1_user)

    response = await client.get('/api/revenue/earnings', headers=headers)
    assert response.status_code == 200
    [earning] = response.json()
    assert earning['month'] == MONTH
    assert earning['amount'] == 4662
    assert earning['websites_count'] == 2

    response = await client.get(f'/api/revenue/earnings/{MONTH}', headers=headers)
    assert response.status_code == 200
    details = response.json()
    assert {d['website_name'] for d in details} == {'alpha', 'beta'}
    assert all(d['amount'] == 2331 and d['premium_minutes'] == 60 for d in details)

    response = await client.get('/api/revenue/payouts', headers=headers)
    [payout] = response.json()
    assert payout['amount'] == 4662
    assert payout['status'] == 'pending'
    assert payout['payment_method'] == 'paypal'

    # Scoped to the caller
    response = await client.get('/api/revenue/earnings', headers=auth_headers(dev2_user))
    assert response.json()[0]['amount'] == 2331


async def test_earnings_details_rejects_bad_month(client, factory, db_session):
    _, dev_user, _, _ = await _seed(factory, db_session)
    response = await client.get('/api/revenue/earnings/2024-3', headers=auth_headers(dev_user))
    assert response.status_code == 422


async def test_not_yet_a_developer(client, factory, db_session):
    user = await factory.user()
    await db_session.commit()
    headers = auth_headers(user)

    for path in ('/api/revenue/earnings', f'/api/revenue/earnings/{MONTH}', '/api/revenue/payouts'):
        response = await client.get(path, headers=headers)
        assert response.status_code == 404
        assert response.json()['detail'] == 'Developer profile not found'


# ── Admin reporting ──────────────────────────────────────────────────────────

async def test_stats_and_leaderboard(client, factory, db_session):
    admin, _, _, _ = await _seed(factory, db_session)
    headers = auth_headers(admin)
    await client.post('/api/admin/revenue/calculate', json={'month': '2024-02'}, headers=headers)
    await client.post('/api/admin/revenue/calculate', json={'month': MONTH}, headers=headers)

    response = await client.get('/api/admin/revenue/stats', headers=headers)
    assert response.status_code == 200
    assert [s['month'] for s in response.json()] == [MONTH, '2024-02']

    response = await client.get(f'/api/admin/revenue/top-developers/{MONTH}', headers=headers)
    assert response.status_code == 200
    board = response.json()
    assert [(d['rank'], d['developer_name'], d['amount']) for d in board] == [
        (1, 'Acme', 4662), (2, 'Globex', 2331),
    ]

    response = await client.get(f'/api/admin/revenue/top-developers/{MONTH}?limit=1', headers=headers)
    assert len(response.json()) == 1


async def test_payout_status_updates(client, factory, db_session):
    admin, dev_user, _, _ = await _seed(factory, db_session)
    headers = auth_headers(admin)
    await client.post('/api/admin/revenue/calculate', json={'month': MONTH}, headers=headers)

    [payout] = (await client.get('/api/revenue/payouts', headers=auth_headers(dev_user))).json()
    path = f'/api/admin/revenue/payouts/{payout["id"]}'

    response = await client.patch(path, json={'status': 'processing'}, headers=headers)
    assert response.status_code == 200
    assert response.json()['processed_at'] is None

    response = await client.patch(
        path, json={'status': 'completed', 'reference_id': 'PP-123'}, headers=headers,
    )
    assert response.status_code == 200
    assert response.json()['reference_id'] == 'PP-123'
    assert response.json()['processed_at'] is not None

    response = await client.patch(path, json={'status': 'failed'}, headers=headers)
    assert response.status_code == 400

    response = await client.patch(path, json={'status': 'lost'}, headers=headers)
    assert response.status_code == 422

    response = await client.patch('/api/admin/revenue/payouts/9999', json={'status': 'failed'}, headers=headers)
    assert response.status_code == 404

    # Money moved: the month can no longer be recalculated
    response = await client.post(
        '/api/admin/revenue/calculate', json={'month': MONTH, 'force': True}, headers=headers,
    )
    assert response.status_code == 409
