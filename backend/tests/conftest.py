import os, sys, pytest
# Ensure the backend directory is on path so 'tailor_ops' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from tailor_ops import create_app, get_db, load_models


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app({'LOG_LEVEL': 'WARNING'})
    # Import all model modules and create every table on the shared in-memory engine
    with app.app_context():
        engine = get_db().get_bind()
        load_models().metadata.create_all(engine)
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def app_ctx(app_instance):
    with app_instance.test_request_context():
        yield app_instance
