import asyncio
import pytest
from httpx import AsyncClient

from scavhunt.config import settings
from scavhunt.routes import play


async def _setup(ac: AsyncClient, hdrs, activate=True):
    hunt = (await ac.post("/admin/hunts", headers=hdrs, json={"name": "Museum Hunt"})).json()
    cs = (await ac.post(f"/admin/hunts/{hunt['id']}/clue-sets", headers=hdrs, json={"name": "Lobby"})).json()
    first = (await ac.post(
        f"/admin/clue-sets/{cs['id']}/clues", headers=hdrs, json={"prompt": "Statue name?", "correct_answer": "David"},
    )).json()
    second = (await ac.post(
        f"/admin/clue-sets/{cs['id']}/clues", headers=hdrs, json={"prompt": "Selfie with the T-Rex", "allows_media": True},
    )).json()
    express = (await ac.post(
        f"/admin/clue-sets/{cs['id']}/clues", headers=hdrs,
        json={"clue_type": "EXPRESS_PASS", "prompt": "Gift shop riddle", "correct_answer": "postcard", "minutes": -5},
    )).json()
    team = (await ac.post(f"/admin/hunts/{hunt['id']}/teams", headers=hdrs, json={"name": "Raptors"})).json()
    if activate:
        await ac.patch(f"/admin/hunts/{hunt['id']}", headers=hdrs, json={"status": "active"})
    return hunt, team, first, second, express


async def _join(ac: AsyncClient, team) -> dict[str, str]:
    r = await ac.post("/teams/join", json={"join_code": f" {team['join_code'].lower()} "})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["team"]["id"] == team["id"]
    return {"Authorization": f"Bearer {body['access']}"}


@pytest.mark.asyncio
async def test_join_unknown_code(client):
    r = await client.post("/teams/join", json={"join_code": "ZZZZZZ"})
    assert r.status_code == 404
    assert r.json()["kind"] == "NotFound"


@pytest.mark.asyncio
async def test_join_draft_hunt_is_refused(client, admin_headers):
    _, team, *_ = await _setup(client, admin_headers, activate=False)
    r = await client.post("/teams/join", json={"join_code": team["join_code"]})
    assert r.status_code == 409
    assert r.json()["kind"] == "InvalidState"


@pytest.mark.asyncio
async def test_bad_token_is_unauthorized(client):
    r = await client.get("/play/progress", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_play_through(client, admin_headers):
    hunt, team, first, second, express = await _setup(client, admin_headers)
    hdrs = await _join(client, team)

    r = await client.get("/play/clue", headers=hdrs)
    clue = r.json()
    assert clue["id"] == first["id"]
    assert "correct_answer" not in clue
    assert clue["has_text_answer"] is True

    r = await client.post("/play/answers", headers=hdrs, json={"hunt_id": hunt["id"], "clue_id": first["id"], "answer": "Goliath"})
    assert r.status_code == 200
    assert r.json() == {"correct": False, "hunt_completed": False, "next_clue": None}

    r = await client.post("/play/answers", headers=hdrs, json={"hunt_id": hunt["id"], "clue_id": first["id"], "answer": " david "})
    body = r.json()
    assert body["correct"] is True
    assert body["next_clue"]["id"] == second["id"]

    r = await client.get("/play/express-passes", headers=hdrs)
    assert [c["id"] for c in r.json()] == [express["id"]]
    r = await client.post("/play/answers", headers=hdrs, json={"hunt_id": hunt["id"], "clue_id": express["id"], "answer": "Postcard"})
    assert r.json()["next_clue"]["id"] == second["id"]
    assert (await client.get("/play/time-adjustment", headers=hdrs)).json() == {"total_minutes": -5}

    r = await client.post("/play/answers", headers=hdrs, json={"hunt_id": hunt["id"], "clue_id": second["id"]})
    assert r.status_code == 422
    assert r.json()["kind"] == "ValidationFailed"

    r = await client.post(
        "/play/answers", headers=hdrs,
        json={"hunt_id": hunt["id"], "clue_id": second["id"], "media_urls": ["https://cdn.example/trex.jpg"]},
    )
    assert r.json() == {"correct": True, "hunt_completed": True, "next_clue": None}

    progress = (await client.get("/play/progress", headers=hdrs)).json()
    assert progress["completed_at"] is not None
    assert progress["current_clue_id"] is None
    assert progress["total_clue_count"] == 2
    assert progress["completed_required_clue_count"] == 2
    assert progress["time_adjustment_minutes"] == -5
    assert progress["effective_display"].endswith("sec")
    assert (await client.get("/play/clue", headers=hdrs)).json() is None

    subs = (await client.get("/play/submissions", headers=hdrs)).json()
    assert len(subs) == 4

    r = await client.get(f"/admin/hunts/{hunt['id']}/submissions", headers=admin_headers, params={"team_id": team["id"]})
    assert len(r.json()) == 4


@pytest.mark.asyncio
async def test_road_blocks_endpoint(client, admin_headers):
    hunt, team, first, *_ = await _setup(client, admin_headers)
    cs_id = first["clue_set_id"]
    block = (await client.post(
        f"/admin/clue-sets/{cs_id}/clues", headers=admin_headers,
        json={"clue_type": "ROAD_BLOCK", "prompt": "Sing the anthem", "correct_answer": "done"},
    )).json()
    hdrs = await _join(client, team)

    assert (await client.get("/play/road-blocks", headers=hdrs)).json() == []
    await client.put(f"/admin/teams/{team['id']}/road-blocks", headers=admin_headers, json={"clue_ids": [block["id"]]})
    assert [c["id"] for c in (await client.get("/play/road-blocks", headers=hdrs)).json()] == [block["id"]]


@pytest.mark.asyncio
async def test_slow_answer_save_is_a_retryable_store_failure(client, admin_headers, monkeypatch):
    hunt, team, first, *_ = await _setup(client, admin_headers)
    hdrs = await _join(client, team)

    async def stuck(*args, **kwargs):
        await asyncio.sleep(1)

    monkeypatch.setattr(play, "submit_answer", stuck)
    monkeypatch.setattr(settings, "store_timeout_seconds", 0.01)
    r = await client.post("/play/answers", headers=hdrs, json={"hunt_id": hunt["id"], "clue_id": first["id"], "answer": "David"})
    assert r.status_code == 503
    body = r.json()
    assert body["kind"] == "StoreFailure"
    assert body["retryable"] is True


@pytest.mark.asyncio
async def test_road_block_outside_the_required_path_is_refused(client, admin_headers):
    hunt, team, *_ = await _setup(client, admin_headers)
    side = (await client.post(f"/admin/hunts/{hunt['id']}/clue-sets", headers=admin_headers, json={"name": "Side only"})).json()
    block = (await client.post(
        f"/admin/clue-sets/{side['id']}/clues", headers=admin_headers,
        json={"clue_type": "ROAD_BLOCK", "prompt": "Sing the anthem", "correct_answer": "done"},
    )).json()

    r = await client.put(f"/admin/teams/{team['id']}/road-blocks", headers=admin_headers, json={"clue_ids": [block["id"]]})
    assert r.status_code == 422
    assert r.json()["kind"] == "ValidationFailed"
