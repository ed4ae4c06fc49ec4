import os, sys, pytest
# Ensure the backend directory is on path so 'powerdesk' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from powerdesk import create_app, get_db, set_store
from powerdesk.models.authz import Base
# Import all model modules to ensure tables are registered before create_all
import powerdesk.models.document  # noqa: F401

TEST_JWT_SECRET = 'powerdesk-test-secret-0123456789abcdef'


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app({'JWT_SECRET_KEY': TEST_JWT_SECRET})
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def swap_store():
    """Install a replacement document store for one test; the SQL store is restored after."""
    def install(store):
        return set_store(store)
    yield install
    set_store(None)
