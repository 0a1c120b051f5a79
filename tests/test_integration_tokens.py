from pathlib import Path

from webmaster_cli.db import create_session_factory, latest_access_token, save_access_token
from webmaster_cli.models import AccessToken, Base


def test_latest_access_token_per_consumer(tmp_path: Path):
    session_factory, engine = create_session_factory(f"sqlite:///{tmp_path / 'webmaster.db'}")
    Base.metadata.create_all(bind=engine)
    db = session_factory()

    save_access_token(db, consumer_key="example.com", token="old", token_secret="old-secret")
    newest = save_access_token(
        db, consumer_key="example.com", token="new", token_secret="new-secret", scope="https://example.com/feeds/"
    )
    save_access_token(db, consumer_key="other.com", token="other", token_secret="other-secret")

    found = latest_access_token(db, "example.com")
    assert found is not None
    assert found.id == newest.id
    assert found.token == "new"
    assert found.scope == "https://example.com/feeds/"
    assert latest_access_token(db, "missing.com") is None
    assert db.query(AccessToken).count() == 3
    db.close()
