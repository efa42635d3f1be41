from sqlalchemy.orm import sessionmaker

from moviehub.models import Comment, Movie, User, Vote
from moviehub.scripts.create_admin import create_admin
from tests.factories import auth_headers, create_comment, create_movie, create_vote


def test_admin_routes_reject_regular_users(client, ann):
    response = client.get("/api/admin/stats", headers=auth_headers(ann))

    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Access denied. Admin privileges required."}


def test_admin_routes_require_a_token(client):
    assert client.get("/api/admin/users").status_code == 401


def test_stats(client, ann, bob, admin_user, db_session):
    arrival = create_movie(db_session, ann, upvotes=1)
    heat = create_movie(db_session, bob, title="Heat", upvotes=3, downvotes=2)
    create_comment(db_session, bob, arrival)

    response = client.get("/api/admin/stats", headers=auth_headers(admin_user))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalUsers"] == 3
    assert data["totalMovies"] == 2
    assert data["totalComments"] == 1
    assert data["totalVotes"] == {"totalUpvotes": 4, "totalDownvotes": 2}
    assert [movie["id"] for movie in data["topMovies"]] == [heat.id, arrival.id]
    assert data["topMovies"][0]["addedBy"]["name"] == "Bob"
    assert [user["email"] for user in data["recentUsers"]] == ["admin@x.com", "bob@x.com", "ann@x.com"]


def test_list_and_get_users(client, ann, admin_user):
    listing = client.get("/api/admin/users", headers=auth_headers(admin_user))

    body = listing.json()
    assert body["pagination"]["total"] == 2
    assert {user["email"] for user in body["data"]} == {"ann@x.com", "admin@x.com"}

    single = client.get(f"/api/admin/users/{ann.id}", headers=auth_headers(admin_user))
    assert single.json()["data"]["name"] == "Ann"

    missing = client.get("/api/admin/users/999", headers=auth_headers(admin_user))
    assert missing.status_code == 404
    assert missing.json()["message"] == "User not found"


def test_update_role(client, ann, admin_user, db_session):
    response = client.put(f"/api/admin/users/{ann.id}", json={"role": "admin"}, headers=auth_headers(admin_user))

    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"

    demoted = client.put(f"/api/admin/users/{ann.id}/role", json={"role": "user"}, headers=auth_headers(admin_user))
    assert demoted.json()["data"]["role"] == "user"

    db_session.expire_all()
    assert db_session.get(User, ann.id).role == "user"


def test_update_role_rejects_unknown_role(client, ann, admin_user):
    response = client.put(f"/api/admin/users/{ann.id}", json={"role": "owner"}, headers=auth_headers(admin_user))

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "role"


def test_admin_cannot_delete_self(client, admin_user):
    response = client.delete(f"/api/admin/users/{admin_user.id}", headers=auth_headers(admin_user))

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete your own account"


def test_delete_user_cascades_and_recalculates(client, ann, bob, admin_user, db_session):
    bobs_movie = create_movie(db_session, bob, title="Heat")
    anns_movie = create_movie(db_session, ann, upvotes=2)
    create_vote(db_session, bob, anns_movie, "up")
    create_vote(db_session, admin_user, anns_movie, "up")
    create_vote(db_session, ann, bobs_movie, "down")
    create_comment(db_session, bob, anns_movie)
    create_comment(db_session, ann, bobs_movie)
    keep = create_comment(db_session, ann, anns_movie)
    bob_id, bobs_movie_id = bob.id, bobs_movie.id
    anns_movie_id, keep_id = anns_movie.id, keep.id

    response = client.delete(f"/api/admin/users/{bob_id}", headers=auth_headers(admin_user))

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "User deleted successfully"}

    db_session.expire_all()
    assert db_session.query(User).filter(User.id == bob_id).count() == 0
    assert [movie.id for movie in db_session.query(Movie).all()] == [anns_movie_id]
    assert [comment.id for comment in db_session.query(Comment).all()] == [keep_id]
    assert db_session.query(Vote).filter(Vote.user_id == bob_id).count() == 0
    assert db_session.query(Vote).filter(Vote.movie_id == bobs_movie_id).count() == 0

    movie = db_session.get(Movie, anns_movie_id)
    assert (movie.upvotes, movie.downvotes) == (1, 0)


def test_recalculate_votes_endpoint(client, ann, bob, admin_user, db_session):
    movie = create_movie(db_session, ann, upvotes=9, downvotes=4)
    create_vote(db_session, bob, movie, "down")

    response = client.post(f"/api/admin/movies/{movie.id}/recalculate-votes", headers=auth_headers(admin_user))

    assert response.status_code == 200
    data = response.json()["data"]
    assert (data["upvotes"], data["downvotes"], data["score"]) == (0, 1, -1)


def test_create_admin_script_promotes_existing_user(db_session, ann, monkeypatch):
    bind = db_session.get_bind()
    monkeypatch.setattr("moviehub.scripts.create_admin.engine", bind)
    monkeypatch.setattr("moviehub.scripts.create_admin.get_db_session", sessionmaker(bind=bind))

    user = create_admin("ANN@x.com", "Ignored", "whatever")

    assert user.id == ann.id
    assert user.role == "admin"
