# tests/test_grading_api.py

from core.database import SessionLocal
from models.grading_scale import GradingScale


def bands_payload(*ranges):
    return {
        "bands": [
            {"grade_label": label, "min_percentage": low, "max_percentage": high, "grade_points": points}
            for label, low, high, points in ranges
        ]
    }


def create_system(client, headers, name="KCSE 2026", system_type="8-4-4"):
    response = client.post("/api/grading/systems", json={"name": name, "system_type": system_type}, headers=headers)
    assert response.status_code == 201
    return response.json()


def test_cbc_system_is_seeded_with_default_bands(client, admin_headers):
    system = create_system(client, admin_headers, name="CBC Junior", system_type="CBC")

    scales = client.get(f"/api/grading/systems/{system['id']}/scales", headers=admin_headers).json()

    assert system["is_active"] is False
    assert [s["grade_label"] for s in scales] == ["EE", "ME", "AE", "BE"]
    assert scales[0]["remarks"] == "Exceeding Expectations"


def test_844_system_starts_empty(client, admin_headers):
    system = create_system(client, admin_headers)

    assert client.get(f"/api/grading/systems/{system['id']}/scales", headers=admin_headers).json() == []


def test_students_cannot_manage_systems(client, student_headers):
    response = client.post("/api/grading/systems", json={"name": "X"}, headers=student_headers)

    assert response.status_code == 403


def test_only_one_system_is_active(client, admin_headers):
    first = create_system(client, admin_headers, name="First")
    second = create_system(client, admin_headers, name="Second")

    client.post(f"/api/grading/systems/{first['id']}/activate", headers=admin_headers)
    activated = client.post(f"/api/grading/systems/{second['id']}/activate", headers=admin_headers)

    assert activated.json()["is_active"] is True
    systems = client.get("/api/grading/systems", headers=admin_headers).json()
    assert {s["name"]: s["is_active"] for s in systems} == {"First": False, "Second": True}


def test_activate_unknown_system_is_404(client, admin_headers):
    response = client.post(
        "/api/grading/systems/00000000-0000-0000-0000-000000000000/activate", headers=admin_headers
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "GRADING_SYSTEM_NOT_FOUND"


def test_save_scales_replaces_bands_and_warns_about_gaps(client, admin_headers):
    system = create_system(client, admin_headers)
    url = f"/api/grading/systems/{system['id']}/scales"
    client.put(url, json=bands_payload(("X", 0, 100, 1)), headers=admin_headers)

    response = client.put(url, json=bands_payload(("E", 0, 49, 1), ("A", 70, 100, 12)), headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert [b["grade_label"] for b in body["bands"]] == ["A", "E"]
    assert body["warnings"] == ["Scores 50-69 are not covered (between E and A)"]


def test_overlapping_scales_are_rejected_without_partial_save(client, admin_headers):
    system = create_system(client, admin_headers, system_type="CBC")
    url = f"/api/grading/systems/{system['id']}/scales"

    response = client.put(
        url, json=bands_payload(("E", 0, 49, 1), ("C", 50, 69, 6), ("A", 60, 100, 12)), headers=admin_headers
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "GRADE_BANDS_OVERLAP"
    assert detail["labels"] == ["C", "A"]
    assert detail["errors"] == ["Overlap detected between C and A"]

    db = SessionLocal()
    try:
        labels = {s.grade_label for s in db.query(GradingScale).all()}
    finally:
        db.close()
    assert labels == {"EE", "ME", "AE", "BE"}


def test_band_with_min_above_max_is_invalid_input(client, admin_headers):
    system = create_system(client, admin_headers)

    response = client.put(
        f"/api/grading/systems/{system['id']}/scales",
        json=bands_payload(("A", 90, 80, 12)),
        headers=admin_headers,
    )

    assert response.status_code == 422


def test_dry_run_validation(client, admin_headers):
    bad = client.post(
        "/api/grading/scales/validate",
        json=bands_payload(("B", 0, 50, 1), ("A", 50, 100, 2)),
        headers=admin_headers,
    ).json()
    good = client.post(
        "/api/grading/scales/validate",
        json=bands_payload(("B", 0, 40, 1), ("A", 50, 100, 2)),
        headers=admin_headers,
    ).json()

    assert bad["valid"] is False
    assert (bad["lower_label"], bad["upper_label"]) == ("B", "A")
    assert good["valid"] is True
    assert good["warnings"] == ["Scores 41-49 are not covered (between B and A)"]


def test_dry_run_rejects_blank_label_like_a_save(client, admin_headers):
    system = create_system(client, admin_headers)
    payload = bands_payload(("   ", 0, 49, 0), ("A", 50, 100, 12))

    dry_run = client.post("/api/grading/scales/validate", json=payload, headers=admin_headers)
    saved = client.put(f"/api/grading/systems/{system['id']}/scales", json=payload, headers=admin_headers)

    assert dry_run.status_code == 400
    assert dry_run.json()["detail"] == "INVALID_GRADE_LABEL"
    assert saved.status_code == 400


def test_grade_lookup_uses_legacy_scale_without_active_system(client, student_headers):
    response = client.get("/api/grading/grade?percentage=76", headers=student_headers)

    assert response.status_code == 200
    assert response.json() == {"percentage": 76.0, "grade_label": "B+", "grading_system_id": None}


def test_grade_lookup_uses_active_system(client, admin_headers, student_headers):
    system = create_system(client, admin_headers, system_type="CBC")
    client.post(f"/api/grading/systems/{system['id']}/activate", headers=admin_headers)

    body = client.get("/api/grading/grade?percentage=65", headers=student_headers).json()

    assert body["grade_label"] == "ME"
    assert body["grading_system_id"] == system["id"]


def test_grade_lookup_rejects_out_of_range(client, student_headers):
    assert client.get("/api/grading/grade?percentage=101", headers=student_headers).status_code == 422
