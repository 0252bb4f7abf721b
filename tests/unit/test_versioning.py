"""Tests for diffing, patching and the version store."""

import threading

import pytest

from uigate.core import is_version_id
from uigate.versioning import FALLBACK_MESSAGE, DiffEngine, VersionStore, apply_patch, diff_units


# ============================================================================
# Diff
# ============================================================================

@pytest.mark.unit
def test_diff_added_element(diff_engine):
    """Scenario: appending a Button shows up as one added line and nothing else."""
    result = diff_engine.diff("<Card/>", "<Card/><Button/>")
    assert result.added == ["<Button/>"]
    assert result.removed == []
    assert result.modified == []
    assert result.summary == "Added 1 lines, removed 0 lines, modified 0 components"


@pytest.mark.unit
def test_diff_identical(diff_engine, sample_code):
    result = diff_engine.diff(sample_code, sample_code)
    assert (result.added, result.removed, result.modified) == ([], [], [])


@pytest.mark.unit
def test_diff_modified_component(diff_engine):
    result = diff_engine.diff('<Card title="A" />', '<Card title="B" />')
    assert result.added == ['<Card title="B" />']
    assert result.removed == ['<Card title="A" />']
    assert result.modified == ["Card"]


@pytest.mark.unit
def test_diff_is_presence_based(diff_engine):
    # duplicates collapse: dropping one of two identical lines is not a removal
    result = diff_engine.diff("<Divider />\n<Divider />", "<Divider />")
    assert result.removed == []
    assert result.added == []


@pytest.mark.unit
def test_diff_preview_limit():
    engine = DiffEngine(preview_limit=2)
    new_code = "\n".join(f"<Text content=\"{i}\" />" for i in range(5))
    result = engine.diff("", new_code)
    assert len(result.added) == 2
    assert result.summary.startswith("Added 5 lines")


@pytest.mark.unit
def test_diff_units():
    assert diff_units("<A/><B/>\n\n   <C/>  ") == ["<A/>", "<B/>", "<C/>"]
    assert diff_units("") == []


# ============================================================================
# Patch
# ============================================================================

@pytest.mark.unit
def test_patch_replaces_render_tree(sample_code):
    new_code = sample_code.replace('title="Dashboard"', 'title="Sales"')
    result = apply_patch(sample_code, new_code)
    assert result.incremental
    assert result.success
    assert result.code == new_code


@pytest.mark.unit
def test_patch_keeps_surrounding_text(diff_engine):
    old_code = "import React from 'react';\n// keep me\n<Card />\n"
    result = diff_engine.patch(old_code, "<Button>Go</Button>")
    assert result.incremental
    assert result.code == "import React from 'react';\n// keep me\n<Button>Go</Button>\n"


@pytest.mark.unit
def test_patch_falls_back_without_element():
    result = apply_patch("a + b", "<Card />")
    assert not result.incremental
    assert result.success
    assert result.code == "<Card />"
    assert result.message == FALLBACK_MESSAGE


@pytest.mark.unit
def test_patch_reports_parse_failure():
    result = apply_patch("<Card>", "<Card />")
    assert not result.incremental
    assert not result.success
    assert result.code == "<Card />"


@pytest.mark.unit
def test_patch_survives_deep_nesting(sample_code):
    deep = "<Card>" * 2000 + "</Card>" * 2000
    result = apply_patch(sample_code, deep)
    assert not result.incremental
    assert not result.success
    assert result.code == deep

    assert not apply_patch(deep, sample_code).success


# ============================================================================
# VersionStore
# ============================================================================

@pytest.mark.unit
def test_append_assigns_id(store, make_draft):
    draft = make_draft("hello world")
    version = store.append(draft)
    assert is_version_id(version.id)
    assert version.user_message == "hello world"
    assert version.plan == draft.plan
    assert store.get(version.id) == version
    assert version.id in store


@pytest.mark.unit
def test_capacity_evicts_oldest(make_draft):
    store = VersionStore(capacity=50)
    versions = [store.append(make_draft(f"message {i}")) for i in range(55)]

    assert len(store) == 50
    assert [v.user_message for v in store.list()] == [f"message {i}" for i in range(5, 55)]
    for evicted in versions[:5]:
        assert store.get(evicted.id) is None
        assert not store.exists(evicted.id)


@pytest.mark.unit
def test_list_limit(store, make_draft):
    for i in range(5):
        store.append(make_draft(f"m{i}"))
    assert [v.user_message for v in store.list(3)] == ["m2", "m3", "m4"]
    assert store.list(0) == []
    assert store.list(-2) == []
    assert len(store.list(100)) == 5


@pytest.mark.unit
def test_latest_and_adjacent(store, make_draft):
    assert store.latest() is None
    first, second, third = (store.append(make_draft(f"m{i}")) for i in range(3))

    assert store.latest() == third
    assert store.adjacent(second.id, "next") == third
    assert store.adjacent(second.id, "previous") == first
    assert store.adjacent(first.id, "previous") is None
    assert store.adjacent(third.id, "next") is None
    assert store.adjacent("ver_missing", "next") is None


@pytest.mark.unit
def test_delete_and_clear(store, make_draft):
    version = store.append(make_draft())
    store.append(make_draft())
    assert store.delete(version.id)
    assert not store.delete(version.id)
    assert store.count() == 1

    store.clear()
    assert store.count() == 0
    assert store.list() == []


@pytest.mark.unit
def test_stored_versions_cannot_be_changed_in_place(store, make_draft):
    draft = make_draft()
    version = store.append(draft)

    draft.plan.components[0].props["title"] = "from draft"
    version.plan.components[0].props["title"] = "from returned"
    store.get(version.id).plan.components[0].props["title"] = "from get"
    store.list()[0].plan.components[0].children.append("from list")
    store.latest().explanation.tradeoffs.append("from latest")

    stored = store.get(version.id)
    assert stored.plan.components[0].props == {}
    assert stored.plan.components[0].children == []
    assert stored.explanation.tradeoffs == []


@pytest.mark.unit
def test_invalid_capacity():
    with pytest.raises(ValueError):
        VersionStore(capacity=0)


@pytest.mark.unit
def test_concurrent_appends(make_draft):
    store = VersionStore(capacity=50)
    drafts = [make_draft(f"t{i}") for i in range(8)]

    def worker(index):
        for _ in range(25):
            store.append(drafts[index])

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    listed = store.list()
    assert len(listed) == 50
    assert len({v.id for v in listed}) == 50
    assert all(store.get(v.id) == v for v in listed)
