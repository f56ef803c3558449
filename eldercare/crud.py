import os
from .models import AsyncSessionLocal
from .models.users import User
from .models.messages import Message
from .models.alerts import EmergencyAlert
from .auth import hash_password, verify_password
from sqlalchemy import select, update, func, case, and_, or_, false
from sqlalchemy.exc import IntegrityError

# 'latest' mirrors the legacy aggregation: unread is 0/1 from the newest message only.
# 'total' counts every unread message from the counterpart.
UNREAD_COUNT_MODE = os.getenv('UNREAD_COUNT_MODE', 'latest')
CHAT_ELIGIBLE_ROLES = tuple(
    r.strip().lower()
    for r in os.getenv('CHAT_ELIGIBLE_ROLES', 'nurse,nutritionist,relative,admin,owner').split(',')
    if r.strip()
)

# users
async def create_user(payload):
    async with AsyncSessionLocal() as session:
        user = User(
            full_name=payload.full_name.strip(),
            email=payload.email.lower(),
            hashed_password=hash_password(payload.password),
            user_type=payload.user_type,
            phone=payload.phone,
            location=payload.location,
        )
        session.add(user)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            return None
        await session.refresh(user)
        return user

async def authenticate_user(email: str, password: str):
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User).where(User.email == email.lower()))
        user = q.scalars().first()
        if not user or not verify_password(password, user.hashed_password):
            return None
        return user

async def get_user_by_id(user_id: int):
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User).where(User.id == user_id))
        return q.scalars().first()

async def list_chat_contacts(viewer_id: int, user_type: str | None = None):
    """Active users in a messaging-eligible role, excluding the viewer."""
    roles = CHAT_ELIGIBLE_ROLES
    if user_type:
        user_type = user_type.lower()
        if user_type not in roles:
            return []
        roles = (user_type,)
    async with AsyncSessionLocal() as session:
        q = select(User).where(
            User.id != viewer_id,
            User.is_archived == false(),
            User.user_type.in_(roles),
        ).order_by(User.full_name.asc(), User.id.asc())
        res = await session.execute(q)
        return res.scalars().all()

# messaging
async def send_message(sender_id: int, receiver_id: int, content: str):
    async with AsyncSessionLocal() as session:
        m = Message(sender_id=sender_id, receiver_id=receiver_id, content=content, is_read=False)
        session.add(m)
        await session.commit()
        await session.refresh(m)
        return m

def _thread_clause(user_id: int, peer_id: int):
    return or_(
        and_(Message.sender_id == user_id, Message.receiver_id == peer_id),
        and_(Message.sender_id == peer_id, Message.receiver_id == user_id),
    )

def _mark_read_stmt(viewer_id: int, counterpart_id: int):
    return (
        update(Message)
        .where(
            Message.sender_id == counterpart_id,
            Message.receiver_id == viewer_id,
            Message.is_read == false(),
        )
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )

async def list_dialog(user_id: int, peer_id: int, mark_read: bool = True):
    """Chronological transcript between two users.

    Incoming unread messages are flagged read afterwards, but the returned
    rows keep the flags they had when selected.
    """
    async with AsyncSessionLocal() as session:
        q = select(Message).where(_thread_clause(user_id, peer_id)).order_by(
            Message.timestamp.asc(), Message.id.asc()
        )
        res = await session.execute(q)
        messages = res.scalars().all()
        marked = 0
        if mark_read:
            upd = await session.execute(_mark_read_stmt(user_id, peer_id))
            marked = upd.rowcount or 0
            await session.commit()
        return messages, marked

async def mark_thread_read(viewer_id: int, counterpart_id: int) -> int:
    async with AsyncSessionLocal() as session:
        res = await session.execute(_mark_read_stmt(viewer_id, counterpart_id))
        await session.commit()
        return res.rowcount or 0

# delivery has no state of its own yet
mark_thread_delivered = mark_thread_read

async def list_conversations(viewer_id: int, unread_mode: str | None = None):
    """One summary row per counterpart, built from the newest message of each thread."""
    unread_mode = unread_mode or UNREAD_COUNT_MODE
    counterpart = case(
        (Message.sender_id == viewer_id, Message.receiver_id),
        else_=Message.sender_id,
    )
    ranked = (
        select(
            Message.id.label('message_id'),
            Message.sender_id,
            Message.receiver_id,
            Message.content,
            Message.is_read,
            Message.timestamp,
            counterpart.label('counterpart_id'),
            func.row_number().over(
                partition_by=counterpart,
                order_by=(Message.timestamp.desc(), Message.id.desc()),
            ).label('rn'),
        )
        .where(or_(Message.sender_id == viewer_id, Message.receiver_id == viewer_id))
        .subquery()
    )

    if unread_mode == 'total':
        unread = (
            select(Message.sender_id.label('counterpart_id'), func.count().label('n'))
            .where(Message.receiver_id == viewer_id, Message.is_read == false())
            .group_by(Message.sender_id)
            .subquery()
        )
        unread_count = func.coalesce(unread.c.n, 0)
    else:
        unread = None
        unread_count = case(
            (and_(ranked.c.receiver_id == viewer_id, ranked.c.is_read == false()), 1),
            else_=0,
        )

    # inner join: counterparts without a user row are left out
    joined = ranked.join(User.__table__, User.id == ranked.c.counterpart_id)
    if unread is not None:
        joined = joined.outerjoin(unread, unread.c.counterpart_id == ranked.c.counterpart_id)

    q = (
        select(
            ranked.c.counterpart_id,
            User.full_name,
            User.user_type,
            ranked.c.content,
            ranked.c.timestamp,
            ranked.c.is_read,
            ranked.c.sender_id,
            unread_count.label('unread_count'),
        )
        .select_from(joined)
        .where(ranked.c.rn == 1)
        .order_by(ranked.c.timestamp.desc(), ranked.c.message_id.desc())
    )

    async with AsyncSessionLocal() as session:
        res = await session.execute(q)
        rows = res.all()

    return [
        {
            'user': {'id': r.counterpart_id, 'full_name': r.full_name, 'user_type': r.user_type},
            'last_message': {
                'content': r.content,
                'timestamp': r.timestamp,
                'is_read': r.is_read,
                'sender_id': r.sender_id,
            },
            'unread_count': int(r.unread_count),
        }
        for r in rows
    ]

# emergency alerts
async def create_alert(resident_id: int, resident_name: str, message: str | None = None,
                       emergency_contact: dict | None = None):
    async with AsyncSessionLocal() as session:
        a = EmergencyAlert(
            resident_id=resident_id,
            resident_name=resident_name,
            message=message or f'Emergency alert triggered for {resident_name}',
            emergency_contact=emergency_contact,
        )
        session.add(a)
        await session.commit()
        await session.refresh(a)
        return a

async def list_alerts(resident_id: int):
    async with AsyncSessionLocal() as session:
        q = select(EmergencyAlert).where(EmergencyAlert.resident_id == resident_id).order_by(
            EmergencyAlert.timestamp.desc(), EmergencyAlert.id.desc()
        )
        res = await session.execute(q)
        return res.scalars().all()

async def mark_alerts_as_read(alert_ids) -> int:
    if not alert_ids:
        return 0
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            update(EmergencyAlert)
            .where(EmergencyAlert.id.in_(list(alert_ids)))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        await session.commit()
        return res.rowcount or 0
