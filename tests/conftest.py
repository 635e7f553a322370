import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mirai.db.session import Base
from mirai.schemas.user import EmailAddress, ExternalIdentity
import mirai.models  # noqa: F401


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def identity():
    return ExternalIdentity(
        id="user_2abc",
        firstName="Jane",
        lastName="Doe",
        imageUrl="https://img.example.com/jane.png",
        emailAddresses=[EmailAddress(id="idn_1", emailAddress="jane@example.com")],
        primaryEmailAddressId="idn_1",
    )
