from datetime import datetime, timezone

import click
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import PyMongoError
import certifi
from flask import current_app, g
from flask.cli import with_appcontext

from storefront.errors import PersistenceFailure

ENQUIRIES_COLLECTION = 'enquiries'


def get_db():
    if 'db' not in g:
        mongo_uri = current_app.config.get('MONGODB_URI')
        if mongo_uri:
            try:
                g.mongo_client = MongoClient(
                    mongo_uri,
                    tlsCAFile=certifi.where(),
                    serverSelectionTimeoutMS=30000,
                    connectTimeoutMS=30000,
                    socketTimeoutMS=30000,
                    retryWrites=False
                )
                g.db = g.mongo_client[current_app.config.get('MONGODB_DATABASE', 'divyansh')]
            except Exception as e:
                current_app.logger.error(f"Failed to connect to MongoDB: {e}")
                g.db = None
                g.mongo_client = None
        else:
            g.db = None
            g.mongo_client = None
    return g.db


def close_db(e=None):
    g.pop('db', None)
    mongo_client = g.pop('mongo_client', None)
    if mongo_client:
        mongo_client.close()


def ensure_indexes(db):
    collection = db[ENQUIRIES_COLLECTION]
    collection.create_index([('created_at', DESCENDING)])
    collection.create_index([('status', ASCENDING)])
    collection.create_index([('email', ASCENDING)])
    collection.create_index([('type', ASCENDING)])


class MongoEnquiryRepository:
    """Stores submitted enquiries in the ``enquiries`` collection."""

    def __init__(self, db_factory=get_db):
        self._db_factory = db_factory

    def save(self, record: dict):
        db = self._db_factory()
        if db is None:
            raise PersistenceFailure('Database not configured')

        now = datetime.now(timezone.utc)
        document = {**record, 'created_at': now, 'updated_at': now}
        try:
            result = db[ENQUIRIES_COLLECTION].insert_one(document)
        except PyMongoError as e:
            raise PersistenceFailure(f'Failed to store enquiry: {e}') from e
        return result.inserted_id


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the enquiry collection indexes."""
    db = get_db()
    if db is None:
        raise click.ClickException('MONGODB_URI is not configured')
    ensure_indexes(db)
    click.echo('Enquiry indexes created.')


def init_app(app):
    app.teardown_appcontext(close_db)
    app.cli.add_command(init_db_command)
