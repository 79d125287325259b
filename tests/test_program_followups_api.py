from __future__ import annotations

from datetime import date

import pytest
from sqlmodel import select

from templehub.models import ProgramFollowUp, ProgramSession, Role

DAY = "2025-03-02"
PARTICIPANTS = ["Mira", "kiran", "Leela", "Jaya", "Nanda", "Isha", "Hari"]


@pytest.fixture
def world(make):
    admin = make.admin("Radha")
    program = make.program(admin, "Bhagavad Gita Study")
    volunteers = [make.volunteer(n, program) for n in ("Asha", "Bala", "Chandra")]
    participants = [make.participant(program, n) for n in PARTICIPANTS]
    return {"admin": admin, "program": program, "volunteers": volunteers, "participants": participants}


def _create(client, headers, program, volunteers, day=DAY, **extra):
    body = {"program_id": program.id, "volunteer_ids": [v.id for v in volunteers], "follow_up_date": day, **extra}
    return client.post("/followups/create-for-date", json=body, headers=headers)


def _list(client, headers, program, day=DAY, **params):
    return client.get("/followups", params={"program": program.id, "date": day, **params}, headers=headers)


class TestListLifecycle:
    def test_create_conflict_delete_recreate(self, client, world, headers_for):
        h = headers_for(world["admin"])
        program, vols = world["program"], world["volunteers"]

        r = _create(client, h, program, vols)
        assert r.status_code == 201, r.text
        created = r.json()
        assert created["created_count"] == 7
        assert [d["count"] for d in created["distribution"]] == [3, 2, 2]
        assert created["session_id"] is not None

        r = _create(client, h, program, vols)
        assert r.status_code == 409

        sessions = client.get(f"/programs/{program.id}/sessions", headers=h).json()["sessions"]
        assert [s["id"] for s in sessions] == [created["session_id"]]

        r = client.delete("/followups/delete-for-date", params={"program": program.id, "date": DAY}, headers=h)
        assert r.status_code == 200
        assert r.json()["deleted_assignments"] == 7
        assert r.json()["deleted_sessions"] == 1

        # Deleted dates stay gone: the sessions read must not bring them back.
        assert client.get(f"/programs/{program.id}/sessions", headers=h).json()["sessions"] == []
        assert _list(client, h, program).json()["count"] == 0

        r = _create(client, h, program, vols)
        assert r.status_code == 201
        assert r.json()["created_count"] == 7
        assert r.json()["session_id"] != created["session_id"]

    def test_assignment_follows_member_creation_order(self, client, db, world, headers_for):
        vols, people = world["volunteers"], world["participants"]
        _create(client, headers_for(world["admin"]), world["program"], vols)

        rows = {r.user_id: r.assigned_volunteer_id for r in db.exec(select(ProgramFollowUp)).all()}
        expected = [vols[0]] * 3 + [vols[1]] * 2 + [vols[2]] * 2
        assert [rows[p.id] for p in people] == [v.id for v in expected]

    def test_session_topic_and_speaker(self, client, db, world, headers_for):
        r = _create(
            client, headers_for(world["admin"]), world["program"], world["volunteers"],
            session_topic="  Karma Yoga ", speaker_name="Swami Anand",
        )
        session = db.get(ProgramSession, r.json()["session_id"])
        assert session.topic == "Karma Yoga"
        assert session.speaker_name == "Swami Anand"

    def test_guest_list_shares_the_session(self, client, make, world, headers_for):
        h = headers_for(world["admin"])
        make.participant(world["program"], "Guest One", role=Role.GUEST)
        make.participant(world["program"], "Guest Two", role=Role.GUEST)

        first = _create(client, h, world["program"], world["volunteers"]).json()
        r = _create(client, h, world["program"], world["volunteers"][:1], user_type="guest", speaker_name="Visiting")

        assert r.status_code == 201
        assert r.json()["created_count"] == 2
        assert r.json()["session_id"] == first["session_id"]

        guests = _list(client, h, world["program"], user_type="guest").json()["followups"]
        assert [g["contact_name"] for g in guests] == ["Guest One", "Guest Two"]
        assert {g["user_type"] for g in guests} == {"guest"}

    def test_inactive_members_are_skipped(self, client, make, world, headers_for):
        make.participant(world["program"], "Dormant", is_active=False)
        r = _create(client, headers_for(world["admin"]), world["program"], world["volunteers"])
        assert r.json()["created_count"] == 7

    def test_unknown_program(self, client, world, headers_for):
        body = {"program_id": 999, "volunteer_ids": [world["volunteers"][0].id], "follow_up_date": DAY}
        r = client.post("/followups/create-for-date", json=body, headers=headers_for(world["admin"]))
        assert r.status_code == 404
        assert r.json()["detail"] == "Program not found"

    def test_only_admins_create(self, client, world, headers_for):
        r = _create(client, headers_for(world["volunteers"][0]), world["program"], world["volunteers"])
        assert r.status_code == 403


class TestListing:
    def test_sorted_by_name_case_insensitive(self, client, world, headers_for):
        h = headers_for(world["admin"])
        _create(client, h, world["program"], world["volunteers"])

        body = _list(client, headers_for(world["volunteers"][0]), world["program"]).json()

        assert body["count"] == 7
        assert [f["contact_name"] for f in body["followups"]] == sorted(PARTICIPANTS, key=str.lower)
        assert all(f["program_id"] == world["program"].id for f in body["followups"])

    def test_filter_by_volunteer(self, client, world, headers_for):
        h = headers_for(world["admin"])
        _create(client, h, world["program"], world["volunteers"])

        mine = _list(client, h, world["program"], volunteer_id=world["volunteers"][0].id).json()["followups"]
        assert sorted(f["contact_name"] for f in mine) == ["Leela", "Mira", "kiran"]
        assert {f["assigned_volunteer_name"] for f in mine} == {"Asha"}

    def test_rows_retired_upstream_are_hidden(self, client, make, world, headers_for):
        h = headers_for(world["admin"])
        row = make.program_followup(world["program"], world["participants"][0], date(2025, 3, 2), is_deleted=True)
        row_id = row.id

        assert _list(client, h, world["program"]).json()["count"] == 0
        r = client.patch(f"/followups/{row_id}/update", json={"status": "Coming"}, headers=h)
        assert r.status_code == 404

        stats = client.get("/followups/volunteers-stats", params={"program": world["program"].id}, headers=h)
        assert stats.json()["summary"]["total_followups"] == 0

    def test_participant_cannot_read(self, client, world, headers_for):
        r = _list(client, headers_for(world["participants"][0]), world["program"])
        assert r.status_code == 403


class TestRecordCall:
    def test_update_by_id(self, client, world, headers_for):
        h = headers_for(world["admin"])
        _create(client, h, world["program"], world["volunteers"])
        target = _list(client, h, world["program"]).json()["followups"][0]
        caller = world["volunteers"][1]

        r = client.patch(
            f"/followups/{target['id']}/update",
            json={"status": "Coming", "remarks": "with spouse"},
            headers=headers_for(caller),
        )

        assert r.status_code == 200
        f = r.json()["followup"]
        assert f["status"] == "Coming"
        assert f["remarks"] == "with spouse"
        assert f["called_by_name"] == "Bala"

        r = client.patch(f"/followups/{target['id']}/update", json={}, headers=headers_for(caller))
        assert r.json()["followup"]["status"] == "Coming"
        assert r.json()["followup"]["remarks"] == "with spouse"

    def test_missing_followup(self, client, world, headers_for):
        r = client.patch("/followups/4242/update", json={"status": "Coming"}, headers=headers_for(world["admin"]))
        assert r.status_code == 404

    def test_deleted_list_cannot_be_updated(self, client, world, headers_for):
        h = headers_for(world["admin"])
        _create(client, h, world["program"], world["volunteers"])
        fid = _list(client, h, world["program"]).json()["followups"][0]["id"]
        client.delete("/followups/delete-for-date", params={"program": world["program"].id, "date": DAY}, headers=h)

        r = client.patch(f"/followups/{fid}/update", json={"status": "Coming"}, headers=h)
        assert r.status_code == 404


class TestVolunteerStats:
    def test_workload_per_volunteer(self, client, make, world, headers_for):
        h = headers_for(world["admin"])
        asha, bala, chandra = world["volunteers"]
        idle = make.volunteer("Devi", world["program"])
        _create(client, h, world["program"], [asha, bala, chandra])

        for f in _list(client, h, world["program"], volunteer_id=asha.id).json()["followups"][:2]:
            client.patch(f"/followups/{f['id']}/update", json={"status": "Coming"}, headers=headers_for(asha))

        r = client.get("/followups/volunteers-stats", params={"program": world["program"].id}, headers=h)

        assert r.status_code == 200
        body = r.json()
        assert [d["name"] for d in body["data"]] == ["Bala", "Chandra", "Asha", "Devi"]

        by_name = {d["name"]: d for d in body["data"]}
        assert by_name["Asha"]["workload"]["total"] == 3
        assert by_name["Asha"]["workload"]["pending"] == 1
        assert by_name["Asha"]["workload"]["by_status"] == {"Not Called": 1, "Coming": 2}
        assert by_name["Asha"]["completion_rate"] == 67
        assert by_name["Devi"]["workload"]["total"] == 0
        assert by_name["Devi"]["volunteer_id"] == idle.id

        assert body["summary"] == {
            "total_volunteers": 4,
            "total_followups": 7,
            "total_pending": 5,
            "total_called": 2,
        }

    def test_date_filter(self, client, world, headers_for):
        h = headers_for(world["admin"])
        _create(client, h, world["program"], world["volunteers"])
        _create(client, h, world["program"], world["volunteers"], day="2025-03-09")

        all_days = client.get("/followups/volunteers-stats", params={"program": world["program"].id}, headers=h)
        one_day = client.get(
            "/followups/volunteers-stats",
            params={"program": world["program"].id, "date": DAY},
            headers=h,
        )

        assert all_days.json()["summary"]["total_followups"] == 14
        assert one_day.json()["summary"]["total_followups"] == 7
        assert one_day.json()["date"] == DAY

    def test_admin_only(self, client, world, headers_for):
        r = client.get(
            "/followups/volunteers-stats",
            params={"program": world["program"].id},
            headers=headers_for(world["volunteers"][0]),
        )
        assert r.status_code == 403
