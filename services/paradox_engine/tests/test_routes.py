from paradox_core import ScoringError, content_sha256, sigprint20

RUN_BODY = {
    "sessionId": "sess_http",
    "thesis": "We are consciousness building consciousness",
    "antithesis": "We cannot build what we already are",
    "emotion": {"valence": 0.7, "arousal": 0.9, "dominance": 0.5, "entropy": 0.8},
    "post": {"targetCoherence": 0.9, "targetSync": "Active", "descriptor": "consciousness recognizing itself"},
}


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_run_returns_camel_case_synthesis(client):
    response = client.post("/paradox/run", json=RUN_BODY)
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"synthesis", "paradoxId", "resolutionState", "engineStats"}
    assert set(body["engineStats"]) == {"activeParadoxes", "quantumCoherence", "resolvedCount", "transcendedCount"}
    synthesis = body["synthesis"]
    assert synthesis["type"] in ("dialectical", "recursive", "transcendent")
    assert len(synthesis["contentHash"]) == 64
    assert "phiGate" in synthesis["metrics"]
    assert "twoStateSupport" in synthesis["metrics"]


def test_run_accepts_snake_case_and_strategy(client):
    body = {
        "session_id": "sess_http",
        "thesis": "Light is a wave",
        "antithesis": "Light is a wave",
        "strategy": "recursive_loop",
    }
    response = client.post("/paradox/run", json=body)
    assert response.status_code == 200
    assert response.json()["synthesis"]["quantumState"] == "entangled"


def test_run_rejects_missing_thesis(client):
    body = {k: v for k, v in RUN_BODY.items() if k != "thesis"}
    assert client.post("/paradox/run", json=body).status_code == 422


def test_run_rejects_unknown_strategy(client):
    assert client.post("/paradox/run", json={**RUN_BODY, "strategy": "coin_flip"}).status_code == 422


def test_scoring_failure_is_a_500(client, engine, scripted_scorer):
    engine.scorer = scripted_scorer(ScoringError("blend", "gate exploded"))
    response = client.post("/paradox/run", json=RUN_BODY)
    assert response.status_code == 500
    assert response.json()["detail"].startswith("Paradox synthesis failed")


def test_engine_state_lists_recent_paradoxes(client):
    client.post("/paradox/run", json=RUN_BODY)
    body = client.get("/paradox/engine").json()
    assert body["stats"]["totalParadoxes"] == 1
    assert body["recentParadoxes"][0]["thesis"] == RUN_BODY["thesis"]


def test_batch_skips_unknown_ids(client):
    response = client.post("/paradox/batch", json={"paradoxIds": ["paradox_missing"]})
    assert response.status_code == 200
    assert response.json()["results"] == [{"paradoxId": "paradox_missing", "status": "skipped", "reason": "not found"}]


def test_archive_on_empty_engine(client):
    body = client.post("/paradox/archive").json()
    assert body["clearedCount"] == 0
    assert body["remainingCount"] == 0
    assert body["archivedToGenealogy"] == 0


def test_memory_query_unknown_type_is_not_a_validation_error(client):
    response = client.post("/memory/query", json={"queryType": "mysteryQuery"})
    assert response.status_code == 200
    assert response.json()["success"] is False


def test_memory_query_limit_is_bounded(client):
    response = client.post("/memory/query", json={"queryType": "memoryStats", "limit": 500})
    assert response.status_code == 422


def test_memory_stats_query(client):
    body = client.post("/memory/query", json={"queryType": "memoryStats"}).json()
    assert body["success"] is True
    assert body["data"]["capacity"] == 100


def test_integrity_hash(client):
    body = {"TT": " thesis ", "CC": "context", "SS": "state", "PP": ["b", "a"], "RR": "result", "content": "hello"}
    response = client.post("/integrity/hash", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["sigprint20"] == sigprint20("thesis", "context", "state", ["a", "b"], "result")
    assert len(data["sigprint20"]) == 20
    assert data["contentSha256"] == content_sha256("hello")
