import pytest
from sqlalchemy import event, update
from sqlalchemy.orm import Session

from moviehub.models import Movie, Vote
from moviehub.schemas.vote import VoteType
from moviehub.services.vote_service import KeyedLock, VoteService, _vote_locks
from tests.factories import auth_headers, create_movie, create_user, create_vote


def vote(client, user, movie_id, vote_type):
    return client.post(
        f"/api/movies/{movie_id}/vote",
        json={"voteType": vote_type},
        headers=auth_headers(user),
    )


@pytest.fixture
def arrival(db_session, ann):
    return create_movie(db_session, ann)


def test_first_upvote_is_added(client, ann, arrival):
    response = vote(client, ann, arrival.id, "up")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Vote added successfully"
    assert body["data"] == {"voteType": "up", "upvotes": 1, "downvotes": 0, "score": 1}


def test_same_vote_twice_toggles_off(client, ann, arrival, db_session):
    vote(client, ann, arrival.id, "up")

    response = vote(client, ann, arrival.id, "up")

    body = response.json()
    assert body["message"] == "Vote removed successfully"
    assert body["data"] == {"voteType": None, "upvotes": 0, "downvotes": 0, "score": 0}

    db_session.expire_all()
    assert db_session.query(Vote).count() == 0


def test_opposite_vote_flips(client, ann, arrival, db_session):
    vote(client, ann, arrival.id, "up")

    response = vote(client, ann, arrival.id, "down")

    body = response.json()
    assert body["message"] == "Vote updated successfully"
    assert body["data"] == {"voteType": "down", "upvotes": 0, "downvotes": 1, "score": -1}

    db_session.expire_all()
    ledger = db_session.query(Vote).one()
    assert ledger.vote_type == "down"


def test_votes_from_several_users(client, ann, bob, arrival, db_session):
    carl = create_user(db_session, email="carl@x.com", name="Carl")

    vote(client, ann, arrival.id, "up")
    vote(client, bob, arrival.id, "up")
    response = vote(client, carl, arrival.id, "down")

    assert response.json()["data"] == {"voteType": "down", "upvotes": 2, "downvotes": 1, "score": 1}

    movie = client.get(f"/api/movies/{arrival.id}").json()["data"]
    assert movie["score"] == movie["upvotes"] - movie["downvotes"] == 1


def test_tally_never_goes_below_zero(client, ann, arrival, db_session):
    # Ledger row without a matching tally, as left by an out-of-band edit
    create_vote(db_session, ann, arrival, "up")

    response = vote(client, ann, arrival.id, "up")

    assert response.json()["data"]["upvotes"] == 0
    db_session.expire_all()
    assert db_session.get(Movie, arrival.id).upvotes == 0


def test_vote_requires_auth(client, arrival):
    response = client.post(f"/api/movies/{arrival.id}/vote", json={"voteType": "up"})

    assert response.status_code == 401


def test_vote_rejects_unknown_type(client, ann, arrival):
    response = vote(client, ann, arrival.id, "sideways")

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "voteType"


def test_vote_on_missing_movie_returns_404(client, ann):
    response = vote(client, ann, 999, "up")

    assert response.status_code == 404
    assert response.json()["message"] == "Movie not found"


def test_get_user_vote(client, ann, bob, arrival):
    vote(client, ann, arrival.id, "down")

    mine = client.get(f"/api/movies/{arrival.id}/vote", headers=auth_headers(ann))
    theirs = client.get(f"/api/movies/{arrival.id}/vote", headers=auth_headers(bob))

    assert mine.json()["data"] == {"voteType": "down"}
    assert theirs.json()["data"] == {"voteType": None}


def test_vote_locks_are_released(client, ann, arrival):
    vote(client, ann, arrival.id, "up")
    vote(client, ann, arrival.id, "down")

    assert _vote_locks._locks == {}
    assert len(_vote_locks._waiters) == 0


def test_keyed_lock_cleans_up_after_use():
    locks = KeyedLock()

    with locks.hold((1, 2)):
        with locks.hold((3, 4)):
            assert set(locks._locks) == {(1, 2), (3, 4)}

    assert locks._locks == {}


def test_recalculate_tallies_from_ledger(db_session, ann, bob, arrival):
    create_vote(db_session, ann, arrival, "up")
    create_vote(db_session, bob, arrival, "down")
    arrival.upvotes = 7
    arrival.downvotes = 3
    db_session.commit()

    movie = VoteService.recalculate_tallies(db_session, arrival.id)

    assert (movie.upvotes, movie.downvotes, movie.score) == (1, 1, 0)


def test_lost_insert_race_is_retried_against_the_winning_vote(db_session, ann, arrival):
    bind = db_session.get_bind()
    user_id, movie_id = ann.id, arrival.id
    session = Session(bind=bind)
    raced = []

    @event.listens_for(session, "before_flush")
    def commit_competing_vote(flushing, flush_context, instances):
        # Another request commits its vote between our lookup and our insert
        if raced or not any(isinstance(obj, Vote) for obj in flushing.new):
            return
        raced.append(True)
        rival = Session(bind=bind)
        rival.add(Vote(user_id=user_id, movie_id=movie_id, vote_type="down"))
        rival.execute(update(Movie).where(Movie.id == movie_id).values(downvotes=Movie.downvotes + 1))
        rival.commit()
        rival.close()

    try:
        action, result = VoteService.cast_vote(session, user_id, movie_id, VoteType.UP)
    finally:
        session.close()

    assert raced
    assert action == "updated"
    assert result == {"vote_type": VoteType.UP, "upvotes": 1, "downvotes": 0, "score": 1}

    db_session.expire_all()
    ledger = db_session.query(Vote).filter(Vote.movie_id == movie_id).all()
    assert [(row.user_id, row.vote_type) for row in ledger] == [(user_id, "up")]
    movie = db_session.get(Movie, movie_id)
    assert (movie.upvotes, movie.downvotes) == (len(ledger), 0)
    assert _vote_locks._locks == {}
