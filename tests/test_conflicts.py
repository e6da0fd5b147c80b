"""Tests for conflict detection."""

from core.conflicts import find_hash_conflicts


def test_no_conflicts(make_task):
    """Test distinct abbrlinks produce no groups."""
    tasks = [make_task("a", 1.0, assigned="aaaa"), make_task("b", 2.0, assigned="bbbb")]
    assert find_hash_conflicts(tasks) == []


def test_groups_shared_abbrlinks(make_task):
    """Test tasks sharing an abbrlink are grouped."""
    a = make_task("a", 1.0, assigned="aaaa")
    b = make_task("b", 2.0, assigned="aaaa")
    c = make_task("c", 3.0, assigned="cccc")
    d = make_task("d", 4.0, assigned="aaaa")

    conflicts = find_hash_conflicts([a, b, c, d])

    assert len(conflicts) == 1
    assert conflicts[0].abbrlink == "aaaa"
    assert conflicts[0].tasks == [a, b, d]
    assert conflicts[0].size == 3


def test_existing_abbrlink_counts(make_task):
    """Test existing abbrlinks take part when nothing is assigned."""
    pinned = make_task("old", 1.0, existing="aaaa")
    new = make_task("new", 2.0, assigned="aaaa")

    conflicts = find_hash_conflicts([new, pinned])

    assert [c.tasks for c in conflicts] == [[new, pinned]]


def test_ignores_tasks_without_abbrlink(make_task):
    """Test tasks with neither assigned nor existing abbrlink are skipped."""
    tasks = [make_task("a", 1.0), make_task("b", 2.0)]
    assert find_hash_conflicts(tasks) == []


def test_first_seen_order(make_task):
    """Test groups are ordered by first appearance."""
    tasks = [
        make_task("a", 1.0, assigned="bbbb"),
        make_task("b", 2.0, assigned="aaaa"),
        make_task("c", 3.0, assigned="aaaa"),
        make_task("d", 4.0, assigned="bbbb"),
    ]
    assert [c.abbrlink for c in find_hash_conflicts(tasks)] == ["bbbb", "aaaa"]


def test_to_dict(make_task):
    """Test conflict serialization."""
    tasks = [make_task("a", 1.0, assigned="aaaa"), make_task("b", 2.0, assigned="aaaa")]
    conflict = find_hash_conflicts(tasks)[0]

    assert conflict.to_dict() == {
        "abbrlink": "aaaa",
        "files": [str(tasks[0].document.file_path), str(tasks[1].document.file_path)],
    }
