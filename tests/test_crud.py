from datetime import datetime

import pytest

import gametasks.crud as crud
from gametasks.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from gametasks.schemas import TaskCreate, TaskUpdate


def _task_data(**overrides) -> TaskCreate:
    data = {
        "title": "Finals",
        "eventType": "Tournament",
        "gameType": "FPS",
        "startDate": "2024-01-01T10:00",
        "endDate": "2024-01-01T12:00",
    }
    data.update(overrides)
    return TaskCreate.model_validate(data)


def test_create_user_hashes_password(db):
    user = crud.create_user(db, "alice", "secret1")

    assert user.id is not None
    assert user.password != "secret1"
    assert user.created_at is not None


def test_create_user_duplicate_username(db):
    crud.create_user(db, "alice", "secret1")

    with pytest.raises(ConflictError):
        crud.create_user(db, "alice", "another-password")


def test_usernames_are_case_sensitive(db):
    crud.create_user(db, "alice", "secret1")
    assert crud.create_user(db, "Alice", "secret1").username == "Alice"


def test_authenticate_user(db):
    user = crud.create_user(db, "alice", "secret1")

    assert crud.authenticate_user(db, "alice", "secret1").id == user.id
    assert crud.authenticate_user(db, "alice", "wrong") is None
    assert crud.authenticate_user(db, "bob", "secret1") is None


def test_authenticate_unknown_user_still_runs_kdf(db, monkeypatch):
    calls = []
    real_verify = crud.verify_password

    def counting_verify(password, stored):
        calls.append(stored)
        return real_verify(password, stored)

    monkeypatch.setattr(crud, "verify_password", counting_verify)

    assert crud.authenticate_user(db, "nobody", "secret1") is None
    assert len(calls) == 1


def test_out_of_range_ids_are_missing(db):
    assert crud.get_task(db, 2**63) is None
    assert crud.get_task(db, 0) is None
    assert crud.delete_task(db, 10**30) is False


def test_aware_dates_are_stored_as_utc(db):
    user = crud.create_user(db, "alice", "secret1")
    task = crud.create_task(
        db,
        user.id,
        _task_data(startDate="2024-01-01T10:00:00+05:00", endDate="2024-01-01T12:00:00Z"),
    )

    assert task.start_date == datetime(2024, 1, 1, 5, 0)
    assert task.end_date == datetime(2024, 1, 1, 12, 0)

    updated = crud.update_task(
        db, task, TaskUpdate.model_validate({"startDate": "2024-01-01T11:00:00+01:00"})
    )
    assert updated.start_date == datetime(2024, 1, 1, 10, 0)


def test_create_task_sets_owner_and_defaults(db):
    user = crud.create_user(db, "alice", "secret1")
    task = crud.create_task(db, user.id, _task_data())

    assert task.user_id == user.id
    assert task.is_complete is False
    assert task.start_date == datetime(2024, 1, 1, 10, 0)


def test_tasks_ordered_by_start_date(db):
    user = crud.create_user(db, "alice", "secret1")
    for day in (3, 1, 2):
        crud.create_task(
            db,
            user.id,
            _task_data(
                title=f"day {day}",
                startDate=f"2024-01-0{day}T10:00",
                endDate=f"2024-01-0{day}T12:00",
            ),
        )

    titles = [task.title for task in crud.get_tasks_for_user(db, user.id)]
    assert titles == ["day 1", "day 2", "day 3"]


def test_get_task_ignores_owner(db):
    alice = crud.create_user(db, "alice", "secret1")
    task = crud.create_task(db, alice.id, _task_data())

    assert crud.get_task(db, task.id).id == task.id
    assert crud.get_task(db, task.id + 100) is None


def test_get_owned_task(db):
    alice = crud.create_user(db, "alice", "secret1")
    bob = crud.create_user(db, "bob", "secret1")
    task = crud.create_task(db, alice.id, _task_data())

    assert crud.get_owned_task(db, task.id, alice.id).id == task.id
    with pytest.raises(AuthorizationError):
        crud.get_owned_task(db, task.id, bob.id)
    with pytest.raises(NotFoundError):
        crud.get_owned_task(db, 12345, alice.id)


def test_update_applies_only_supplied_fields(db):
    user = crud.create_user(db, "alice", "secret1")
    task = crud.create_task(db, user.id, _task_data(description="bo5"))

    changes = TaskUpdate.model_validate({"isComplete": True, "endDate": "2024-01-01T13:30"})
    updated = crud.update_task(db, task, changes)

    assert updated.is_complete is True
    assert updated.end_date == datetime(2024, 1, 1, 13, 30)
    assert updated.title == "Finals"
    assert updated.description == "bo5"


def test_update_validates_merged_record(db):
    user = crud.create_user(db, "alice", "secret1")
    task = crud.create_task(db, user.id, _task_data())

    with pytest.raises(ValidationError) as excinfo:
        crud.update_task(db, task, TaskUpdate.model_validate({"title": ""}))
    assert "title" in excinfo.value.errors

    with pytest.raises(ValidationError) as excinfo:
        crud.update_task(db, task, TaskUpdate.model_validate({"endDate": "2023-12-31T00:00"}))
    assert "endDate" in excinfo.value.errors

    db.refresh(task)
    assert task.title == "Finals"


def test_delete_task(db):
    user = crud.create_user(db, "alice", "secret1")
    task = crud.create_task(db, user.id, _task_data())

    assert crud.delete_task(db, task.id) is True
    assert crud.delete_task(db, task.id) is False
