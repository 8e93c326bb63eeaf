import pytest
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from sports_scraper.db_models import CurrentPosition, HistoricalGame, ModelType
from sports_scraper.errors import StoreUnavailable
from sports_scraper.scraper import schedule_store
from sports_scraper.scraper.schedule_store import SCHEDULE_INDEX_NAME, ScheduleStore


GAME = HistoricalGame(
    season=2016, week=11, date="Sunday, November 20",
    home_team_name="Redskins", away_team_name="Packers",
    home_team_score=42, away_team_score=24, game_status="FINAL",
)


@pytest.fixture
def collection(mocker):
    return mocker.MagicMock()


def test_query_pushes_season_and_week_into_filter(collection):
    collection.find.return_value = [GAME.to_document()]
    store = ScheduleStore(collection)

    records = store.query(ModelType.NFL_HISTORICAL, 2016, 11)

    assert records == [GAME]
    collection.find.assert_called_once_with({"type": 1, "season": 2016, "week": 11}, {"_id": 0})


def test_query_with_no_documents(collection):
    collection.find.return_value = []
    assert ScheduleStore(collection).query(ModelType.NFL_LIVE, 2016, 2) == []


def test_query_error_becomes_store_unavailable(collection):
    collection.find.side_effect = ServerSelectionTimeoutError("no servers")
    with pytest.raises(StoreUnavailable):
        ScheduleStore(collection).query(ModelType.NFL_LIVE, 2016, 2)


def test_insert_writes_document_and_returns_id(collection, mocker):
    collection.insert_one.return_value = mocker.Mock(inserted_id="abc123")
    assert ScheduleStore(collection).insert(GAME) == "abc123"
    collection.insert_one.assert_called_once_with(GAME.to_document())


def test_insert_error_becomes_store_unavailable(collection):
    collection.insert_one.side_effect = PyMongoError("write concern")
    with pytest.raises(StoreUnavailable):
        ScheduleStore(collection).insert(CurrentPosition(2016, 3))


def test_ensure_indexes_creates_compound_index(collection):
    ScheduleStore(collection).ensure_indexes()
    collection.create_index.assert_called_once_with(
        [("type", 1), ("season", 1), ("week", 1)], name=SCHEDULE_INDEX_NAME
    )


def test_clear_all_returns_deleted_count(collection, mocker):
    collection.delete_many.return_value = mocker.Mock(deleted_count=7)
    assert ScheduleStore(collection).clear_all() == 7
    collection.delete_many.assert_called_once_with({})


def test_connect_uses_configured_database(mocker):
    db = mocker.MagicMock()
    get_client = mocker.patch.object(schedule_store.scraper_config, "get_mongo_client", return_value=db)

    store = ScheduleStore.connect("mongodb://db.test:27017", "nfl", "games")

    get_client.assert_called_once_with("mongodb://db.test:27017", "nfl")
    assert store.collection is db["games"]
    store.collection.create_index.assert_called_once()


def test_connect_without_database_raises(mocker):
    mocker.patch.object(schedule_store.scraper_config, "get_mongo_client", return_value=None)
    with pytest.raises(StoreUnavailable):
        ScheduleStore.connect("mongodb://db.test:27017", "nfl", "games")


@pytest.mark.parametrize("document", [
    {"type": 9, "season": 2016, "week": 11},
    {"type": 1, "season": 2016, "week": 11},
    {"season": 2016, "week": 11},
])
def test_malformed_document_becomes_store_unavailable(collection, document):
    collection.find.return_value = [GAME.to_document(), document]
    with pytest.raises(StoreUnavailable) as excinfo:
        ScheduleStore(collection).query(ModelType.NFL_HISTORICAL, 2016, 11)
    assert "Malformed schedule document" in str(excinfo.value)
