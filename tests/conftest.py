"""Shared fixtures: the users/emails sample data and fuzzy search clients over it."""

import os
import sys
from pathlib import Path

import pytest

# Keep the settings module from creating backend/data during tests
os.environ.setdefault("FUZZY_DATABASE_URL", "sqlite://")

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from trigram import LatinFoldNormalizer, fuzzy_search_attributes
from trigram_client import FuzzySearchClient, MappingRecordSource

# (surname, firstname)
USERS = [
    ("meier", "kristian"),
    ("meyer", "christian"),
    ("mayr", "Chris"),
    ("maier", "christoph"),
    ("mueller", "andreas"),
    ("other", "name"),
    ("yet another", "name"),
    ("last other", "name"),
]

EMAILS = ["oscar@web.oa", "ö"]


def make_users():
    return [
        {"id": i, "surname": surname, "firstname": firstname, "deleted": False}
        for i, (surname, firstname) in enumerate(USERS, start=1)
    ]


@pytest.fixture
def user_records():
    return MappingRecordSource(make_users())


@pytest.fixture
def users(user_records):
    """Users searchable on firstname and surname with German/Latin-1 folding; deleted users hidden."""

    def not_deleted(record_id):
        record = user_records.get(record_id)
        return record is not None and not record["deleted"]

    config = fuzzy_search_attributes(
        "users",
        "firstname",
        "surname",
        normalizer=LatinFoldNormalizer(),
        visible=not_deleted,
    )
    client = FuzzySearchClient(config, user_records)
    client.reindex_many(user_records)
    yield client
    client.close()


@pytest.fixture
def emails():
    records = MappingRecordSource(
        {"id": i, "address": address} for i, address in enumerate(EMAILS, start=1)
    )
    client = FuzzySearchClient(fuzzy_search_attributes("emails", "address"), records)
    client.reindex_many(records)
    yield client
    client.close()
