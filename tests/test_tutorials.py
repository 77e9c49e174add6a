"""Tutorial browse, detail, create, update and delete through the HTTP API."""

from app.modules.tutorials.service import search_filter
from tests.conftest import TUTORIAL_ID, USER_A, profile_row, tutorial_row, api_error

BASE = "/api/v1/tutorials"

VALID_TUTORIAL = {
    "title": "Intro to Watercolor",
    "description": "Learn the basics of watercolor painting step by step.",
    "category": "art",
    "difficulty": "beginner",
}

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_browse_applies_filters_search_and_sort(api, fake_supabase):
    fake_supabase.queue("tutorials", [tutorial_row(profiles=profile_row())])

    response = api.get(BASE, params={
        "category": "art",
        "difficulty": "all",
        "search": "water",
        "sort": "popular",
    })

    assert response.status_code == 200
    body = response.json()
    assert body[0]["id"] == TUTORIAL_ID
    assert body[0]["author"]["full_name"] == "Ada Lovelace"

    query = fake_supabase.queries_for("tutorials")[0]
    assert query.args_of("select") == ("*, profiles(*)",)
    assert query.all_args_of("eq") == [("category", "art")]
    assert query.args_of("or_") == (search_filter("water"),)
    assert query.args_of("order") == ("likes_count",)
    assert query.kwargs_of("order") == {"desc": True}


def test_browse_defaults_to_newest_first(api, fake_supabase):
    response = api.get(BASE)

    assert response.status_code == 200
    assert response.json() == []
    query = fake_supabase.queries_for("tutorials")[0]
    assert query.args_of("order") == ("created_at",)
    assert query.args_of("or_") is None
    assert query.args_of("limit") == (20,)


def test_browse_by_enrollments(api, fake_supabase):
    api.get(BASE, params={"sort": "enrolled", "difficulty": "advanced"})

    query = fake_supabase.queries_for("tutorials")[0]
    assert query.args_of("order") == ("enrollments_count",)
    assert query.all_args_of("eq") == [("difficulty", "advanced")]


def test_browse_rejects_unknown_category(api, fake_supabase):
    response = api.get(BASE, params={"category": "knitting"})

    assert response.status_code == 422
    assert fake_supabase.queries == []


def test_search_filter_quotes_reserved_characters():
    assert search_filter('  a,b "c" ') == 'title.ilike."%a,b \\"c\\"%",description.ilike."%a,b \\"c\\"%"'


def test_featured_returns_three_most_liked(api, fake_supabase):
    fake_supabase.queue("tutorials", [tutorial_row(likes_count=9, profiles=profile_row())])

    response = api.get(f"{BASE}/featured")

    assert response.status_code == 200
    query = fake_supabase.queries_for("tutorials")[0]
    assert query.args_of("order") == ("likes_count",)
    assert query.args_of("limit") == (3,)


def test_get_tutorial_includes_author(api, fake_supabase):
    fake_supabase.queue("tutorials", [tutorial_row(profiles=profile_row())])

    response = api.get(f"{BASE}/{TUTORIAL_ID}")

    assert response.status_code == 200
    assert response.json()["author"]["id"] == USER_A


def test_get_missing_tutorial_is_404(api, fake_supabase):
    fake_supabase.queue("tutorials", [])

    response = api.get(f"{BASE}/{TUTORIAL_ID}")

    assert response.status_code == 404


def test_malformed_tutorial_id_is_404(api, fake_supabase):
    fake_supabase.queue("tutorials", api_error("22P02", "invalid input syntax for type uuid"))

    response = api.get(f"{BASE}/not-a-uuid")

    assert response.status_code == 404


def test_create_requires_sign_in(api, fake_supabase):
    response = api.post(BASE, json=VALID_TUTORIAL)

    assert response.status_code == 401
    assert fake_supabase.queries == []


def test_create_sets_owner_and_leaves_counters_to_the_database(api, fake_supabase, caller_a):
    fake_supabase.queue("tutorials", [tutorial_row()])

    response = api.act_as(caller_a).post(BASE, json={
        **VALID_TUTORIAL,
        "video_url": "",
        "resources": [{"title": "Palette guide", "url": "https://example.com/palette"}],
    })

    assert response.status_code == 201
    body = response.json()
    assert (body["likes_count"], body["comments_count"], body["enrollments_count"]) == (0, 0, 0)

    payload = fake_supabase.queries_for("tutorials", "insert")[0].args_of("insert")[0]
    assert payload["user_id"] == USER_A
    assert payload["video_url"] is None
    assert payload["resources"] == [{"title": "Palette guide", "url": "https://example.com/palette", "kind": "link"}]
    assert not any(key.endswith("_count") for key in payload)


def test_create_validates_title_and_description_length(api, fake_supabase, caller_a):
    response = api.act_as(caller_a).post(BASE, json={**VALID_TUTORIAL, "title": "Hey", "description": "too short"})

    assert response.status_code == 422
    assert fake_supabase.queries == []


def test_create_rejects_unknown_difficulty(api, caller_a):
    response = api.act_as(caller_a).post(BASE, json={**VALID_TUTORIAL, "difficulty": "expert"})

    assert response.status_code == 422


def test_my_tutorials_are_filtered_by_caller(api, fake_supabase, caller_a):
    fake_supabase.queue("tutorials", [tutorial_row()])

    response = api.act_as(caller_a).get(f"{BASE}/mine")

    assert response.status_code == 200
    query = fake_supabase.queries_for("tutorials")[0]
    assert query.all_args_of("eq") == [("user_id", USER_A)]
    assert query.args_of("order") == ("created_at",)


def test_update_by_non_owner_is_rejected_before_writing(api, fake_supabase, caller_b):
    fake_supabase.queue("tutorials", [{"user_id": USER_A}])

    response = api.act_as(caller_b).put(f"{BASE}/{TUTORIAL_ID}", json={"title": "A new better title"})

    assert response.status_code == 403
    assert fake_supabase.queries_for("tutorials", "update") == []


def test_update_sends_only_changed_fields(api, fake_supabase, caller_a):
    fake_supabase.queue("tutorials", [{"user_id": USER_A}], [tutorial_row(difficulty="advanced")])

    response = api.act_as(caller_a).put(f"{BASE}/{TUTORIAL_ID}", json={"difficulty": "advanced", "video_url": None})

    assert response.status_code == 200
    assert response.json()["difficulty"] == "advanced"
    update = fake_supabase.queries_for("tutorials", "update")[0]
    assert update.args_of("update") == ({"difficulty": "advanced", "video_url": None},)
    assert update.all_args_of("eq") == [("id", TUTORIAL_ID)]


def test_delete_other_users_tutorial_is_rejected(api, fake_supabase, caller_b):
    fake_supabase.queue("tutorials", [{"user_id": USER_A, "thumbnail_url": None}])

    response = api.act_as(caller_b).delete(f"{BASE}/{TUTORIAL_ID}")

    assert response.status_code == 403
    assert fake_supabase.queries_for("tutorials", "delete") == []


def test_delete_removes_row_and_owned_thumbnail(api, fake_supabase, caller_a):
    thumbnail = f"https://example.supabase.co/storage/v1/object/public/tutorial-media/{USER_A}/1700000000000.png"
    fake_supabase.queue(
        "tutorials",
        [{"user_id": USER_A, "thumbnail_url": thumbnail}],
        [tutorial_row()],
    )

    response = api.act_as(caller_a).delete(f"{BASE}/{TUTORIAL_ID}")

    assert response.status_code == 204
    assert len(fake_supabase.queries_for("tutorials", "delete")) == 1
    fake_supabase.bucket.remove.assert_called_once_with([f"{USER_A}/1700000000000.png"])


def test_delete_keeps_external_thumbnail(api, fake_supabase, caller_a):
    fake_supabase.queue(
        "tutorials",
        [{"user_id": USER_A, "thumbnail_url": "https://images.example.com/cover.png"}],
        [tutorial_row()],
    )

    response = api.act_as(caller_a).delete(f"{BASE}/{TUTORIAL_ID}")

    assert response.status_code == 204
    fake_supabase.bucket.remove.assert_not_called()


def test_create_with_thumbnail_uploads_into_owner_folder(api, fake_supabase, caller_a):
    fake_supabase.queue("tutorials", [tutorial_row(thumbnail_url="https://x/cover.png")])

    response = api.act_as(caller_a).post(
        f"{BASE}/with-thumbnail",
        data=VALID_TUTORIAL,
        files={"thumbnail": ("cover.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 201
    path, content, options = fake_supabase.bucket.upload.call_args.args
    assert path.startswith(f"{USER_A}/") and path.endswith(".png")
    assert content == PNG_BYTES
    assert options == {"content-type": "image/png"}
    payload = fake_supabase.queries_for("tutorials", "insert")[0].args_of("insert")[0]
    assert payload["thumbnail_url"].endswith(path)


def test_failed_upload_writes_no_tutorial(api, fake_supabase, caller_a):
    fake_supabase.bucket.upload.side_effect = RuntimeError("storage unavailable")

    response = api.act_as(caller_a).post(
        f"{BASE}/with-thumbnail",
        data=VALID_TUTORIAL,
        files={"thumbnail": ("cover.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 502
    assert fake_supabase.queries_for("tutorials", "insert") == []


def test_oversized_thumbnail_is_rejected_before_upload(api, fake_supabase, caller_a):
    too_big = b"\x00" * (5 * 1024 * 1024 + 1)

    response = api.act_as(caller_a).post(
        f"{BASE}/with-thumbnail",
        data=VALID_TUTORIAL,
        files={"thumbnail": ("cover.png", too_big, "image/png")},
    )

    assert response.status_code == 413
    fake_supabase.bucket.upload.assert_not_called()
    assert fake_supabase.queries_for("tutorials", "insert") == []


def test_invalid_form_is_rejected_before_upload(api, fake_supabase, caller_a):
    response = api.act_as(caller_a).post(
        f"{BASE}/with-thumbnail",
        data={**VALID_TUTORIAL, "category": "knitting"},
        files={"thumbnail": ("cover.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 422
    fake_supabase.bucket.upload.assert_not_called()


def test_failed_insert_removes_uploaded_thumbnail(api, fake_supabase, caller_a):
    fake_supabase.queue("tutorials", api_error("42501", "new row violates row-level security policy"))

    response = api.act_as(caller_a).post(
        f"{BASE}/with-thumbnail",
        data=VALID_TUTORIAL,
        files={"thumbnail": ("cover.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 403
    uploaded_path = fake_supabase.bucket.upload.call_args.args[0]
    fake_supabase.bucket.remove.assert_called_once_with([uploaded_path])


def test_status_reports_like_and_enrollment(api, fake_supabase, caller_b):
    fake_supabase.queue("tutorial_likes", [{"id": "like-1"}])
    fake_supabase.queue("enrollments", [])

    response = api.act_as(caller_b).get(f"{BASE}/{TUTORIAL_ID}/status")

    assert response.status_code == 200
    assert response.json() == {"tutorial_id": TUTORIAL_ID, "liked": True, "enrolled": False}
