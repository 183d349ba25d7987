"""Database fixtures for berrybind tests (shared)."""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Company, User, Post, Token


async def create_sample_companies(session: AsyncSession):
    """Create and commit the sample companies."""
    companies = [
        Company(name="Acme"),
        Company(name="Globex"),
    ]
    session.add_all(companies)
    await session.flush()
    await session.commit()
    return companies


@pytest.fixture(scope="function")
async def sample_companies(db_session: AsyncSession):
    return await create_sample_companies(db_session)


async def create_sample_users(session: AsyncSession, companies):
    """Create and commit the sample users; the two "Dana Twin" rows share a name on purpose."""
    acme, globex = companies
    users = [
        User(name="Alice Johnson", email="alice@example.com", is_admin=True, company_id=acme.id, external_ref="ext-alice"),
        User(name="Bob Smith", email="bob@example.com", company_id=acme.id),
        User(name="Charlie Brown", email="charlie@example.com", company_id=globex.id),
        User(name="Dana Twin", email="dana1@example.com"),
        User(name="Dana Twin", email="dana2@example.com"),
    ]
    session.add_all(users)
    await session.flush()
    await session.commit()
    return users


@pytest.fixture(scope="function")
async def sample_users(db_session: AsyncSession, sample_companies):
    return await create_sample_users(db_session, sample_companies)


async def create_sample_posts(session: AsyncSession, users):
    alice, bob = users[0], users[1]
    posts = [
        Post(title="First Post", author_id=alice.id),
        Post(title="GraphQL is Great", author_id=alice.id),
        Post(title="SQLAlchemy Tips", author_id=bob.id),
    ]
    session.add_all(posts)
    await session.flush()
    await session.commit()
    return posts


async def create_sample_tokens(session: AsyncSession):
    tokens = [
        Token(id=uuid.UUID('00000000-0000-0000-0000-000000000001'), label="first"),
        Token(id=uuid.UUID('00000000-0000-0000-0000-000000000002'), label="second"),
    ]
    session.add_all(tokens)
    await session.flush()
    await session.commit()
    return tokens


async def seed_populated_db(session: AsyncSession):
    """Seed the full sample data set; returns a dict of created rows."""
    companies = await create_sample_companies(session)
    users = await create_sample_users(session, companies)
    posts = await create_sample_posts(session, users)
    tokens = await create_sample_tokens(session)
    return {
        'companies': companies,
        'users': users,
        'posts': posts,
        'tokens': tokens,
    }


@pytest.fixture(scope="function")
async def populated_db(db_session: AsyncSession):
    data = await seed_populated_db(db_session)
    # Start tests from an empty identity map so lookups load fresh instances
    db_session.expunge_all()
    return data
