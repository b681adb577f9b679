"""Tests for like/dislike endpoints."""

from fastapi import status

TOGGLE_URL = "/api/v1/likes/toggle"
REACTIONS_URL = "/api/v1/likes/reactions"


def test_toggle_like_twice(auth_client, test_post) -> None:
    first = auth_client.post(TOGGLE_URL, json={"post_id": test_post.id, "type": "like"})
    second = auth_client.post(TOGGLE_URL, json={"post_id": test_post.id, "type": "like"})

    assert first.json() == {"likes": 1, "dislikes": 0, "state": "like"}
    assert second.json() == {"likes": 0, "dislikes": 0, "state": "none"}


def test_like_then_dislike(auth_client, client, test_post) -> None:
    auth_client.post(TOGGLE_URL, json={"post_id": test_post.id, "type": "like"})
    response = auth_client.post(TOGGLE_URL, json={"post_id": test_post.id, "type": "dislike"})

    assert response.json() == {"likes": 0, "dislikes": 1, "state": "dislike"}
    counts = client.get(REACTIONS_URL, params={"post_id": test_post.id})
    assert counts.json() == {"likes": 0, "dislikes": 1}


def test_comment_reactions(auth_client, other_auth_client, client, test_comment) -> None:
    auth_client.post(TOGGLE_URL, json={"comment_id": test_comment.id, "type": "like"})
    other_auth_client.post(TOGGLE_URL, json={"comment_id": test_comment.id, "type": "like"})

    counts = client.get(REACTIONS_URL, params={"comment_id": test_comment.id})
    assert counts.json() == {"likes": 2, "dislikes": 0}


def test_toggle_requires_auth(client, test_post) -> None:
    response = client.post(TOGGLE_URL, json={"post_id": test_post.id, "type": "like"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_toggle_validation(auth_client, test_post, test_comment) -> None:
    both = auth_client.post(
        TOGGLE_URL,
        json={"post_id": test_post.id, "comment_id": test_comment.id, "type": "like"},
    )
    neither = auth_client.post(TOGGLE_URL, json={"type": "like"})
    bad_type = auth_client.post(TOGGLE_URL, json={"post_id": test_post.id, "type": "love"})
    missing = auth_client.post(TOGGLE_URL, json={"post_id": 424242, "type": "like"})

    assert both.status_code == status.HTTP_400_BAD_REQUEST
    assert neither.status_code == status.HTTP_400_BAD_REQUEST
    assert bad_type.status_code == status.HTTP_400_BAD_REQUEST
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_reaction_counts_need_one_target(client) -> None:
    assert client.get(REACTIONS_URL).status_code == status.HTTP_400_BAD_REQUEST
    assert (
        client.get(REACTIONS_URL, params={"post_id": 1, "comment_id": 1}).status_code
        == status.HTTP_400_BAD_REQUEST
    )


def test_deleting_post_drops_its_reactions(auth_client, client, test_post) -> None:
    auth_client.post(TOGGLE_URL, json={"post_id": test_post.id, "type": "like"})
    auth_client.delete(f"/api/v1/posts/{test_post.id}")

    counts = client.get(REACTIONS_URL, params={"post_id": test_post.id})
    assert counts.json() == {"likes": 0, "dislikes": 0}
