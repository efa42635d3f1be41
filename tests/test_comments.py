from moviehub.models import Comment
from tests.factories import auth_headers, create_comment, create_movie


def test_create_comment(client, ann, bob, db_session):
    movie = create_movie(db_session, ann)

    response = client.post(
        f"/api/comments/movies/{movie.id}",
        json={"content": "  Loved the ending  "},
        headers=auth_headers(bob),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Comment created successfully"
    data = body["data"]
    assert data["content"] == "Loved the ending"
    assert data["movieId"] == movie.id
    assert data["user"] == {"id": bob.id, "name": "Bob", "email": "bob@x.com"}


def test_comment_text_is_stored_verbatim(client, ann, db_session):
    movie = create_movie(db_session, ann)
    url = f"/api/comments/movies/{movie.id}"

    for content in ("Tom & Jerry < Arrival", "<b>bold</b> claim", "The questions = answered"):
        response = client.post(url, json={"content": content}, headers=auth_headers(ann))

        assert response.status_code == 201
        assert response.json()["data"]["content"] == content

    db_session.expire_all()
    stored = {comment.content for comment in db_session.query(Comment).all()}
    assert stored == {"Tom & Jerry < Arrival", "<b>bold</b> claim", "The questions = answered"}


def test_comment_edit_keeps_text_verbatim(client, ann, db_session):
    movie = create_movie(db_session, ann)
    comment = create_comment(db_session, ann, movie)

    response = client.put(
        f"/api/comments/{comment.id}",
        json={"content": "Onwards & upwards = 5 > 4"},
        headers=auth_headers(ann),
    )

    assert response.json()["data"]["content"] == "Onwards & upwards = 5 > 4"


def test_comment_length_limits(client, ann, db_session):
    movie = create_movie(db_session, ann)
    url = f"/api/comments/movies/{movie.id}"

    empty = client.post(url, json={"content": "   "}, headers=auth_headers(ann))
    too_long = client.post(url, json={"content": "x" * 501}, headers=auth_headers(ann))

    assert empty.status_code == 400
    assert too_long.status_code == 400
    db_session.expire_all()
    assert db_session.query(Comment).count() == 0


def test_comment_on_missing_movie_returns_404(client, ann):
    response = client.post("/api/comments/movies/999", json={"content": "Hello"}, headers=auth_headers(ann))

    assert response.status_code == 404
    assert response.json()["message"] == "Movie not found"


def test_list_comments_newest_first(client, ann, db_session):
    movie = create_movie(db_session, ann)
    other = create_movie(db_session, ann, title="Heat")
    for content in ("first", "second", "third"):
        create_comment(db_session, ann, movie, content)
    create_comment(db_session, ann, other, "elsewhere")

    response = client.get(f"/api/comments/movies/{movie.id}", params={"limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert [comment["content"] for comment in body["data"]] == ["third", "second"]
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}


def test_list_comments_for_missing_movie_returns_404(client):
    assert client.get("/api/comments/movies/999").status_code == 404


def test_get_comment_includes_movie(client, ann, db_session):
    movie = create_movie(db_session, ann)
    comment = create_comment(db_session, ann, movie)

    response = client.get(f"/api/comments/{comment.id}")

    data = response.json()["data"]
    assert data["movie"] == {"id": movie.id, "title": "Arrival"}
    assert data["user"]["name"] == "Ann"


def test_get_missing_comment_returns_404(client):
    response = client.get("/api/comments/999")

    assert response.status_code == 404
    assert response.json()["message"] == "Comment not found"


def test_author_can_edit_comment(client, ann, db_session):
    movie = create_movie(db_session, ann)
    comment = create_comment(db_session, ann, movie)

    response = client.put(f"/api/comments/{comment.id}", json={"content": "Even better"}, headers=auth_headers(ann))

    assert response.status_code == 200
    assert response.json()["data"]["content"] == "Even better"


def test_other_user_cannot_edit_or_delete_comment(client, ann, bob, db_session):
    movie = create_movie(db_session, ann)
    comment = create_comment(db_session, ann, movie)

    update = client.put(f"/api/comments/{comment.id}", json={"content": "Hijacked"}, headers=auth_headers(bob))
    delete = client.delete(f"/api/comments/{comment.id}", headers=auth_headers(bob))

    assert update.status_code == 403
    assert update.json()["message"] == "Not authorized to update this comment"
    assert delete.status_code == 403
    assert delete.json()["message"] == "Not authorized to delete this comment"


def test_non_author_is_forbidden_before_body_is_validated(client, ann, bob, db_session):
    movie = create_movie(db_session, ann)
    comment = create_comment(db_session, ann, movie)

    response = client.put(f"/api/comments/{comment.id}", json={"content": ""}, headers=auth_headers(bob))

    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to update this comment"


def test_anonymous_comment_with_invalid_body_is_unauthorized(client, ann, db_session):
    movie = create_movie(db_session, ann)

    response = client.post(f"/api/comments/movies/{movie.id}", json={"content": ""})

    assert response.status_code == 401


def test_list_comments_with_unparseable_page_uses_defaults(client, ann, db_session):
    movie = create_movie(db_session, ann)
    create_comment(db_session, ann, movie)

    response = client.get(f"/api/comments/movies/{movie.id}", params={"page": "abc", "limit": "x"})

    assert response.status_code == 200
    assert response.json()["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}


def test_admin_can_delete_any_comment(client, ann, admin_user, db_session):
    movie = create_movie(db_session, ann)
    comment = create_comment(db_session, ann, movie)

    response = client.delete(f"/api/comments/{comment.id}", headers=auth_headers(admin_user))

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Comment deleted successfully"}
    db_session.expire_all()
    assert db_session.query(Comment).count() == 0
