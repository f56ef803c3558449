import pytest
from sqlalchemy import update

from eldercare.models import AsyncSessionLocal
from eldercare.models.users import User


@pytest.mark.asyncio
async def test_register_login_and_me(client):
    r = await client.post('/api/users/register', json={
        'fullName': 'Grace Tan',
        'email': 'Grace.Tan@carehome.org',
        'password': 'pw-123456',
        'userType': 'nutritionist',
        'phone': '+65 5555 0101',
    })
    assert r.status_code == 201, r.text
    user = r.json()
    assert user['fullName'] == 'Grace Tan'
    assert user['email'] == 'grace.tan@carehome.org'
    assert user['userType'] == 'nutritionist'
    assert 'hashedPassword' not in user and 'password' not in user

    login = await client.post('/api/users/login', json={'email': 'grace.tan@carehome.org', 'password': 'pw-123456'})
    assert login.status_code == 200, login.text
    body = login.json()
    assert body['tokenType'] == 'bearer'
    assert body['user']['id'] == user['id']

    me = await client.get('/api/users/me', headers={'Authorization': f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()['id'] == user['id']


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client, make_user):
    existing = await make_user()
    r = await client.post('/api/users/register', json={
        'fullName': 'Someone Else',
        'email': existing['email'],
        'password': 'whatever1',
        'userType': 'nurse',
    })
    assert r.status_code == 400
    assert r.json()['detail'] == 'User already exists'


@pytest.mark.asyncio
async def test_unknown_role_rejected(client):
    r = await client.post('/api/users/register', json={
        'fullName': 'Mallory',
        'email': 'mallory@carehome.org',
        'password': 'whatever1',
        'userType': 'janitor',
    })
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_bad_password_rejected(client, make_user):
    user = await make_user()
    r = await client.post('/api/users/login', json={'email': user['email'], 'password': 'wrong-one'})
    assert r.status_code == 401
    assert r.json()['detail'] == 'Invalid email or password'


@pytest.mark.asyncio
async def test_archived_user_cannot_log_in_or_use_token(client, make_user):
    user = await make_user()
    async with AsyncSessionLocal() as session:
        await session.execute(update(User).where(User.id == user['id']).values(is_archived=True))
        await session.commit()

    r = await client.post('/api/users/login', json={'email': user['email'], 'password': user['password']})
    assert r.status_code == 401
    assert r.json()['detail'] == 'This account has been archived'

    r = await client.get('/api/conversations', headers=user['headers'])
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_contacts_exclude_self_and_archived_and_filter_by_role(client, make_user):
    viewer = await make_user('Vera Admin', 'admin')
    nurse = await make_user('Nico Nurse', 'nurse')
    relative = await make_user('Rita Relative', 'relative')
    gone = await make_user('Olga Old', 'nurse')
    async with AsyncSessionLocal() as session:
        await session.execute(update(User).where(User.id == gone['id']).values(is_archived=True))
        await session.commit()

    r = await client.get('/api/users/contacts', headers=viewer['headers'])
    assert r.status_code == 200
    ids = [u['id'] for u in r.json()]
    assert set(ids) == {nurse['id'], relative['id']}

    r = await client.get('/api/users/contacts', params={'userType': 'Nurse'}, headers=viewer['headers'])
    assert [u['id'] for u in r.json()] == [nurse['id']]

    r = await client.get('/api/users/contacts', params={'userType': 'pharmacist'}, headers=viewer['headers'])
    assert r.json() == []
