import os
import tempfile

import pytest

# Muss vor dem Import von app.py gesetzt sein, sonst landet die Test-DB im echten data/ Ordner
os.environ.setdefault('WORKHOURS_DATA_DIR', tempfile.mkdtemp(prefix='workhours-tests-'))


@pytest.fixture
def flask_app():
    from app import app, db
    from models import TimeEntry, User

    app.config['TESTING'] = True
    original_repo = app.config['ENTRY_REPOSITORY']
    yield app

    # Aufräumen, damit sich die Tests nicht gegenseitig beeinflussen
    app.config['ENTRY_REPOSITORY'] = original_repo
    with app.app_context():
        TimeEntry.query.delete()
        User.query.delete()
        db.session.commit()


@pytest.fixture
def client(flask_app):
    with flask_app.test_client() as client:
        yield client
